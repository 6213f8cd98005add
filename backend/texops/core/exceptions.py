"""
Domain exceptions and safe HTTP error factories.

Services raise the domain exceptions below (or ValueError for bad input).
Routes translate them with BusinessError so that internal details are
logged, never returned to the client.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class TexOpsError(Exception):
    """Base exception for stock reconciliation failures."""
    pass


class ExtractionError(TexOpsError):
    """Document extractor failed or returned unusable content. Safe to retry."""
    pass


class StorageError(TexOpsError):
    """Durable storage rejected a write. Fatal for the current operation."""
    pass


class RestoreError(TexOpsError):
    """Backup file could not be parsed or has the wrong shape."""
    pass


class OrderStateError(TexOpsError):
    """Order is not in a state that allows the requested transition."""
    pass


class InsufficientStockError(TexOpsError):
    """Current inventory cannot cover an order's requirements."""

    def __init__(self, plan, message: str = "Insufficient stock for order"):
        super().__init__(message)
        self.plan = plan


class BusinessError:
    """HTTP exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        404 for ids that do not resolve in the store.

        Example:
            if not order:
                raise BusinessError.not_found("Order", f"id={order_id}")
        """
        if reason:
            logger.info(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation errors.

        OK to include specific details here since the user caused the issue.
        Examples: "Quantity cannot be negative", "Invalid backup file"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail, reason: str = "") -> HTTPException:
        """
        409 for state conflicts (order already completed, stock ran out).
        `detail` may be a dict carrying shortages for the client to display.
        """
        logger.info(f"Conflict: {reason or detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def payload_too_large(limit: int) -> HTTPException:
        logger.info(f"Upload rejected: larger than {limit} bytes")
        return HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {limit} bytes",
        )

    @staticmethod
    def extraction_failed(original_error: Exception = None) -> HTTPException:
        """
        503 - document analysis failed. Nothing was saved; the user may retry.
        """
        if original_error:
            logger.warning(f"Extraction failed: {type(original_error).__name__}: {original_error}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis failed. Please try again.",
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides from user.

        Storage failures end up here: there is no in-memory fallback, so the
        operation is reported as not having happened.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )
