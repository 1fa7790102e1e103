"""Application configuration.

Environment variables override all defaults.
SECRET_KEY must be set in .env for production - startup fails fast without it.
"""

import os
from pathlib import Path
from typing import List


# Load .env for local development (safe no-op if not installed)
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except ImportError:
    pass


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./rentals.db")

    # JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", None)
    if not SECRET_KEY:
        if ENVIRONMENT == "production":
            raise ValueError(
                "SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        import warnings
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env to a strong random value.",
            RuntimeWarning
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
        ).split(",")
        if origin.strip()
    ]

    # "testserver" is the host FastAPI's TestClient sends
    ALLOWED_HOSTS: List[str] = [
        host.strip()
        for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
        if host.strip()
    ]

    # Cookies
    AUTH_COOKIE_NAME: str = "rental_admin_token"
    SECURE_COOKIES: bool = ENVIRONMENT == "production"
    SAME_SITE_COOKIE: str = "strict"

    # First-start admin account (password is generated, never configured)
    DEFAULT_ADMIN_EMAIL: str = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@kbstractors.com").strip().lower()

    # Shown on exported reports
    BUSINESS_NAME: str = os.getenv("BUSINESS_NAME", "KBS Tractors")


settings = Settings()
