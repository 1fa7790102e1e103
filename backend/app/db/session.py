"""Database engine and session factory.

SQLite file for a single office machine; any SQLAlchemy URL (e.g. hosted
Postgres) in deployment.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # One connection per session; requests run in a thread pool
        return {"connect_args": {"check_same_thread": False}, "poolclass": NullPool}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
