from __future__ import annotations

from ..errors import InvalidInputError


def require_positive(name: str, value: int | None) -> int:
    """Return ``value`` if it is a positive integer, otherwise raise."""
    if value is None:
        raise InvalidInputError(f"No {name} provided")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"Invalid {name}: {value}. Must be greater than 0")
    return value
