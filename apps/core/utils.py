"""
Utility functions shared by the storefront apps
"""
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal('0.01')


def to_money(value: Any) -> Decimal:
    """
    Coerce a number to a Decimal rounded half-up to two decimal places.
    Floats go through str() so 0.1 stays 0.1.
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """
    Parse a UUID from a string or UUID, returning None when malformed.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None
