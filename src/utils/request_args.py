"""Query-string parsing shared by the list endpoints."""

from typing import Optional

from src.services.errors import ValidationError


def bool_arg(args, name: str) -> Optional[bool]:
    """Read "true"/"false" from the query string; anything else means no filter."""
    value = args.get(name)
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    return None


def int_arg(args, name: str) -> Optional[int]:
    value = args.get(name)
    if value in (None, "", "all"):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
