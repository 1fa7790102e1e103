"""
Exception handling without information leakage.

Domain errors are raised by the billing and storage layers; routes translate
them into HTTP errors through BusinessError. Generic messages go out,
details go to the log.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class UnknownEquipmentError(KeyError):
    """An equipment tag with no rate entry reached the billing engine.

    This is a configuration error, not a user-recoverable one: input
    validation only admits known tags.
    """

    def __init__(self, tag):
        super().__init__(tag)
        self.tag = tag

    def __str__(self):
        return f"No rate configured for equipment type {self.tag!r}"


class RecordNotFoundError(LookupError):
    """No stored record has the given id."""

    def __init__(self, table: str, record_id: int):
        super().__init__(f"{table} #{record_id} not found")
        self.table = table
        self.record_id = record_id


class BusinessError:
    """HTTP exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        Generic 404.

        Example:
            if not record:
                raise BusinessError.not_found("Rental record")
        """
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resource not found",
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """
        Generic 401 for all authentication failures.

        Same response for wrong password, unknown user or a bad token.
        """
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs the actual error internally, hides it from the user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )
