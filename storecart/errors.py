"""
Cart error types and common error messages.

Messages are kept as constants so the session, the API layer and the tests
share one wording.
"""
from enum import Enum


# Storage errors
ERROR_STORAGE_READ = "Failed to read from storage"
ERROR_STORAGE_WRITE = "Failed to write to storage"
ERROR_CART_SAVE = "Failed to save the cart"
ERROR_CART_CORRUPT = "Saved cart was unreadable and has been reset"

# Cart errors
ERROR_INVALID_INDEX = "No cart item at this position"

# Checkout errors
ERROR_EMPTY_CART = "Your cart is empty!"
ERROR_MISSING_NAME = "Please enter your full name"
ERROR_MISSING_PHONE = "Please enter your phone number"
ERROR_MISSING_ADDRESS = "Please enter your detailed address"
ERROR_INVALID_PHONE = "Phone number must be 11 digits and start with 01"


class CartError(Exception):
    """Base class for all cart errors."""


class StorageFailure(CartError):
    """Read or write against the persistent store failed."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class CorruptCartData(CartError):
    """Persisted cart could not be parsed."""


class InvalidIndex(CartError, IndexError):
    """Caller passed a cart position that does not exist."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"{ERROR_INVALID_INDEX}: {index} (cart has {size} items)")
        self.index = index
        self.size = size


class ValidationKind(str, Enum):
    """Checkout validation failures, in the order they are checked."""
    EMPTY_CART = "empty_cart"
    MISSING_NAME = "missing_name"
    MISSING_PHONE = "missing_phone"
    MISSING_ADDRESS = "missing_address"
    INVALID_PHONE_FORMAT = "invalid_phone_format"


VALIDATION_MESSAGES = {
    ValidationKind.EMPTY_CART: ERROR_EMPTY_CART,
    ValidationKind.MISSING_NAME: ERROR_MISSING_NAME,
    ValidationKind.MISSING_PHONE: ERROR_MISSING_PHONE,
    ValidationKind.MISSING_ADDRESS: ERROR_MISSING_ADDRESS,
    ValidationKind.INVALID_PHONE_FORMAT: ERROR_INVALID_PHONE,
}

# Form field the UI should focus for each failure
VALIDATION_FIELDS = {
    ValidationKind.EMPTY_CART: None,
    ValidationKind.MISSING_NAME: "full_name",
    ValidationKind.MISSING_PHONE: "phone",
    ValidationKind.MISSING_ADDRESS: "address",
    ValidationKind.INVALID_PHONE_FORMAT: "phone",
}


class CheckoutValidationError(CartError, ValueError):
    """Customer data or cart state does not allow checkout."""

    def __init__(self, kind: ValidationKind) -> None:
        super().__init__(VALIDATION_MESSAGES[kind])
        self.kind = kind
        self.field = VALIDATION_FIELDS[kind]

    @property
    def message(self) -> str:
        return VALIDATION_MESSAGES[self.kind]
