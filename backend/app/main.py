"""
KBS Tractors rental billing backend.

ARCHITECTURE:
- FastAPI Backend: billing rules, validation, persistence, exports
- SQLite DB (or any SQLAlchemy URL): source of truth for all records
- Two business lines: tractor rentals (/rentals) and JCB services (/services)

Totals, pending amounts and payment status are always computed server-side
by the billing engine. Clients never send a total.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import auth, rentals, services
from app.core.config import settings
from app.core.exceptions import BusinessError, UnknownEquipmentError
from app.core.logging_config import configure_logging
from app.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and create tables on startup."""
    configure_logging()
    logger.info("[*] Initializing database...")
    init_db()
    logger.info("[OK] Database initialized")
    yield


app = FastAPI(
    title="KBS Tractors Rental API",
    description="Tractor rental and JCB service billing: records, summaries and exports.",
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# SECURITY: Trust only specific hosts
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS,
)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Content-Disposition"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


def _as_json(exc) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    return _as_json(BusinessError.server_error(exc))


@app.exception_handler(UnknownEquipmentError)
async def unknown_equipment_handler(request: Request, exc: UnknownEquipmentError):
    return _as_json(BusinessError.server_error(exc))


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(rentals.router, prefix="/rentals", tags=["rentals"])
app.include_router(services.router, prefix="/services", tags=["services"])


@app.get("/health")
def health():
    return {"status": "ok", "business": settings.BUSINESS_NAME}
