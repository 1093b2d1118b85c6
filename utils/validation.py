"""
utils/validation.py
-------------------
Input cleaning shared by the services. Each helper returns the normalized
value or raises ValidationError with a machine-readable code.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TypeVar

from utils.dates import as_date
from utils.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("10000000000")  # NUMERIC(12,2) upper bound


def require_owner(owner_id: str) -> str:
    if not owner_id:
        raise ValidationError("Owner ID is required", code="INVALID_USER_ID")
    return owner_id


def clean_category(category: str) -> str:
    if not category or not category.strip():
        raise ValidationError("Category is required", code="INVALID_CATEGORY")
    return category.strip()


def clean_amount(amount, label: str = "Amount") -> Decimal:
    """
    Positive, finite Decimal with at most two decimal places, returned
    quantized to cents as the NUMERIC(12,2) columns store it.
    Floats go through ``str`` to avoid binary noise.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {label.lower()}: {amount!r}", code="INVALID_AMOUNT")
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"{label} must be greater than 0", code="INVALID_AMOUNT")
    if value >= MAX_AMOUNT:
        raise ValidationError(f"{label} must be below {MAX_AMOUNT}", code="INVALID_AMOUNT")
    cents = value.quantize(CENT)
    if cents != value:
        raise ValidationError(f"{label} must have at most two decimal places", code="INVALID_AMOUNT")
    return cents


def clean_choice(enum_cls: type[E], value, code: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid value {value!r}; expected one of: {allowed}", code=code)


def clean_date(value, name: str = "date") -> date:
    """Accept a date, datetime or ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return as_date(value)
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {name} is required (YYYY-MM-DD)", code="INVALID_DATE")
