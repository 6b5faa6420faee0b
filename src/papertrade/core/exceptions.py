"""Centralized exception hierarchy and handlers for the application.

Every failure a trade or a store call can produce maps to one of the classes
below. Services raise them, the FastAPI handler turns them into JSON
responses, and library callers can catch them by category.

Exception Hierarchy:
    AppException (base, 500)
    ├── ValidationError (400)
    ├── NotFoundError (404)
    ├── TradeRejectedError (422)
    │   ├── InsufficientFundsError
    │   ├── NoPositionError
    │   └── InsufficientSharesError
    ├── ConflictError (409)
    │   └── ConcurrencyError
    └── StoreUnavailableError (503, retryable)

Validation and trade rejections are raised before anything is written, so
the caller can correct the input and try again. ConcurrencyError means the
trade lost a compare-and-swap race even after retrying. StoreUnavailableError
means the store timed out or was unreachable; the trade did not happen.

Usage in Services:
    from papertrade.core.exceptions import InsufficientFundsError

    if total > portfolio.cash:
        raise InsufficientFundsError(f"Insufficient funds: need {total}, have {portfolio.cash}")
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Base exception class for all application errors.

    Attributes:
        status_code: HTTP status code for this error type
        detail: User-facing error message
        error_code: Machine-readable error code (optional)
        retryable: Whether the same request may succeed if simply repeated
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"
    error_code: str | None = None
    retryable: bool = False

    def __init__(
        self,
        detail: str | None = None,
        *,
        error_code: str | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            detail: Custom error message (overrides class default)
            error_code: Machine-readable error identifier
        """
        self.detail = detail or self.__class__.detail
        self.error_code = error_code or self.__class__.error_code
        super().__init__(self.detail)


class ValidationError(AppException):
    """
    Raised when input validation fails.

    Used for non-positive share counts or prices and malformed symbols.
    Maps to HTTP 400 Bad Request.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Validation error"
    error_code = "VALIDATION_ERROR"


class NotFoundError(AppException):
    """
    Raised when a requested resource is not found.

    Used for unknown users, missing portfolios and symbols without a quote.
    Maps to HTTP 404 Not Found.
    """

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    error_code = "NOT_FOUND"


class TradeRejectedError(AppException):
    """
    Base class for trades rejected against the current portfolio state.

    Maps to HTTP 422 Unprocessable Entity.
    """

    status_code = 422
    detail = "Trade rejected"
    error_code = "TRADE_REJECTED"


class InsufficientFundsError(TradeRejectedError):
    """Raised when a buy costs more than the available cash."""

    detail = "Insufficient funds"
    error_code = "INSUFFICIENT_FUNDS"


class NoPositionError(TradeRejectedError):
    """Raised when selling a symbol the user does not hold."""

    detail = "You do not own this stock"
    error_code = "NO_POSITION"


class InsufficientSharesError(TradeRejectedError):
    """Raised when selling more shares than the user holds."""

    detail = "Insufficient shares"
    error_code = "INSUFFICIENT_SHARES"


class ConflictError(AppException):
    """
    Raised when there's a conflict in the operation.

    Used for duplicate entries and state conflicts.
    Maps to HTTP 409 Conflict.
    """

    status_code = status.HTTP_409_CONFLICT
    detail = "Resource conflict"
    error_code = "CONFLICT"


class ConcurrencyError(ConflictError):
    """
    Raised when a conditional write finds the record changed since it was read.

    The trade engine retries once on this error before surfacing it.
    """

    detail = "Portfolio changed while the trade was being processed, please retry"
    error_code = "STALE_STATE"


class StoreUnavailableError(AppException):
    """
    Raised when the persistent store is unreachable or times out.

    Maps to HTTP 503 Service Unavailable.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Storage temporarily unavailable"
    error_code = "STORE_UNAVAILABLE"
    retryable = True


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """
    Handle application exceptions and convert to HTTP responses.

    Args:
        request: FastAPI request object
        exc: The exception instance

    Returns:
        JSONResponse with error details and HTTP status code

    Response Format:
        {
            "detail": "User-facing error message",
            "error_code": "MACHINE_READABLE_CODE",
            "retryable": true  # only for retryable errors
        }
    """
    if exc.status_code >= 500:
        logger.error(
            f"{exc.__class__.__name__}: {exc.detail}",
            exc_info=True,
            extra={
                "status_code": exc.status_code,
                "error_code": exc.error_code,
                "request_path": request.url.path,
            },
        )
    else:
        logger.warning(
            f"{exc.__class__.__name__}: {exc.detail}",
            extra={
                "status_code": exc.status_code,
                "error_code": exc.error_code,
                "request_path": request.url.path,
            },
        )

    response_body: dict[str, Any] = {"detail": exc.detail}
    if exc.error_code:
        response_body["error_code"] = exc.error_code
    if exc.retryable:
        response_body["retryable"] = True

    return JSONResponse(
        status_code=exc.status_code,
        content=response_body,
    )
