"""Checkout form validation."""
from typing import Optional, Sequence

from storecart.cart.models import LineItem
from storecart.errors import CheckoutValidationError, ValidationKind
from .models import NO_NOTES, CustomerInfo

PHONE_LENGTH = 11
PHONE_PREFIX = "01"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def is_valid_phone(phone: str) -> bool:
    """Local mobile number: exactly 11 characters starting with 01."""
    return len(phone) == PHONE_LENGTH and phone.startswith(PHONE_PREFIX)


def validate_checkout(
    items: Sequence[LineItem],
    full_name: Optional[str],
    phone: Optional[str],
    address: Optional[str],
    notes: Optional[str] = "",
) -> CustomerInfo:
    """
    Validate raw checkout fields against the current cart.

    Rules are checked in order and the first failure wins: empty cart,
    missing name, missing phone, missing address, malformed phone.

    Args:
        items: Current cart line items
        full_name: Raw name field
        phone: Raw phone field
        address: Raw address field
        notes: Raw notes field; blank becomes "no notes"

    Returns:
        CustomerInfo with trimmed values

    Raises:
        CheckoutValidationError: kind and field of the first failing rule
    """
    if not items:
        raise CheckoutValidationError(ValidationKind.EMPTY_CART)

    name = _clean(full_name)
    phone_number = _clean(phone)
    address_text = _clean(address)

    if not name:
        raise CheckoutValidationError(ValidationKind.MISSING_NAME)
    if not phone_number:
        raise CheckoutValidationError(ValidationKind.MISSING_PHONE)
    if not address_text:
        raise CheckoutValidationError(ValidationKind.MISSING_ADDRESS)
    if not is_valid_phone(phone_number):
        raise CheckoutValidationError(ValidationKind.INVALID_PHONE_FORMAT)

    return CustomerInfo(
        full_name=name,
        phone=phone_number,
        address=address_text,
        notes=_clean(notes) or NO_NOTES,
    )
