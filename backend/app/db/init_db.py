"""Create all tables. Run on app startup.

SECURITY: The first admin gets a random password, logged once.
Change it after first login.
"""
import logging
import secrets

from app.core.config import settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.models import user, rental_record, service_record  # noqa: F401 - register models
from app.models.user import User

logger = logging.getLogger(__name__)


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if db.query(User).count() == 0:
            default_password = secrets.token_urlsafe(16)
            db.add(User(
                email=settings.DEFAULT_ADMIN_EMAIL,
                name="Admin",
                hashed_password=get_password_hash(default_password),
            ))
            db.commit()
            logger.warning(
                f"DEFAULT ADMIN USER CREATED - email: {settings.DEFAULT_ADMIN_EMAIL} "
                f"password: {default_password} (change it after first login)"
            )
    finally:
        db.close()
