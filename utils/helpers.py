# -*- coding: utf-8 -*-
"""
Utility helper functions.
"""

from typing import Any, Optional


def get_field(entity: Any, path: str, default: Any = None) -> Any:
    """
    Read a (possibly dotted) field from a dict-like or attribute-style entity.

    Args:
        entity: Dict, dataclass or any object
        path: Field name, e.g. "status" or "user.name"
        default: Returned when any segment is missing

    Returns:
        Field value or default
    """
    current = entity
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, dict):
            if part not in current:
                return default
            current = current[part]
        else:
            current = getattr(current, part, default)
    return current


def to_number(value: Any) -> Optional[float]:
    """
    Parse a form value as a number.

    Returns None for empty values and for text that is not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def is_blank(value: Any) -> bool:
    """True for None, empty strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False
