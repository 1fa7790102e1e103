"""Logging setup. Called once from the application lifespan."""
import logging
from typing import Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
    )
    # SQL echo is far too noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
