import enum
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorType(enum.Enum):
    NOT_FOUND = "not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    INVALID_REQUEST = "invalid_request"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorType.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
}


class CatalogError(Exception):
    """Base class for errors the catalog services raise on purpose."""
    error_type = ErrorType.INVALID_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ProductNotFoundError(CatalogError):
    """Raised when no product exists with the requested ID."""
    error_type = ErrorType.NOT_FOUND

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class InsufficientStockError(CatalogError):
    """Raised when a stock deduction exceeds the quantity on hand."""
    error_type = ErrorType.INSUFFICIENT_STOCK

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}"
        )

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "available": self.available,
            "requested": self.requested,
        }


class StockLimitExceededError(CatalogError):
    """Raised when a stock change would take stock past what the store can hold."""

    def __init__(self, product_id: int, available: int, requested: int, limit: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"Stock change out of range. Available: {available}, Requested: {requested}, Limit: {limit}"
        )

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "available": self.available,
            "requested": self.requested,
            "limit": self.limit,
        }


class InvalidSortFieldError(CatalogError):
    """Raised when a listing is sorted by a field that cannot be sorted on."""

    def __init__(self, field: str, allowed):
        self.field = field
        self.allowed = sorted(allowed)
        super().__init__(
            f"Cannot sort by '{field}'. Allowed fields: {', '.join(self.allowed)}"
        )


async def catalog_exception_handler(_request: Request, exc: CatalogError) -> JSONResponse:
    """Convert a CatalogError into its HTTP response."""
    status_code = ERROR_STATUS_MAP.get(exc.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions - returns 500."""
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )
