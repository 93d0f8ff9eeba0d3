"""Domain errors raised by the ticketing services.

Every error carries a code, a user-safe message and the HTTP status the API
boundary answers with. Internal details go to the log, never into `message`.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION = "VALIDATION"
    INVALID_CATEGORY = "INVALID_CATEGORY"
    SOLD_OUT = "SOLD_OUT"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    NOT_VERIFIED = "NOT_VERIFIED"
    STORAGE = "STORAGE"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    http_status: int = 400

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when purchase input is missing or malformed."""

    def __init__(self, message: str = "Missing required fields") -> None:
        super().__init__(code=ErrorCode.VALIDATION, message=message)


class InvalidCategoryError(DomainError):
    """Raised when a category name is not part of the event configuration."""

    def __init__(self, category: str) -> None:
        super().__init__(code=ErrorCode.INVALID_CATEGORY, message="Invalid ticket category")
        self.category = category


class SoldOutError(DomainError):
    """Raised when a category has nothing left."""

    def __init__(self, category: str) -> None:
        super().__init__(code=ErrorCode.SOLD_OUT, message="This ticket category is sold out")
        self.category = category


class InsufficientInventoryError(DomainError):
    """Raised when fewer tickets remain than were requested."""

    def __init__(self, category: str, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f"Only {remaining} ticket(s) remaining for this category",
        )
        self.category = category
        self.remaining = remaining


class InvalidRequestError(DomainError):
    def __init__(self, message: str = "No ticket code provided") -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class NotFoundError(DomainError):
    def __init__(self, message: str = "Ticket not found") -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message=message, http_status=404)


class NotVerifiedError(DomainError):
    """Raised when a ticket exists but has not been verified."""

    def __init__(self, status: str) -> None:
        super().__init__(code=ErrorCode.NOT_VERIFIED, message=f"Ticket is {status}")
        self.status = status


class StorageError(DomainError):
    """Raised when the blob store cannot persist a file."""

    def __init__(self, message: str = "Failed to process ticket purchase") -> None:
        super().__init__(code=ErrorCode.STORAGE, message=message, http_status=500)


class ConflictError(DomainError):
    """Raised when a concurrent write wins; the request can be retried."""

    def __init__(self, message: str = "Another purchase conflicted with this one, please try again") -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message, http_status=409)
