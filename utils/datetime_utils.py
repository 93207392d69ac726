# -*- coding: utf-8 -*-
"""
Date helpers for form values.

Wizard date fields arrive as ``date``/``datetime`` objects from a date
picker or as ISO strings from prefilled values; these helpers accept both.
"""

from datetime import datetime, date
from typing import Union, Optional

DateLike = Union[str, datetime, date, None]


def parse_date(value: DateLike) -> Optional[date]:
    """
    Convert a form value to a date.

    Examples:
        >>> parse_date('2024-01-15T10:30:00')
        date(2024, 1, 15)
        >>> parse_date('')
        None
        >>> parse_date('15/01/2024')
        None
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            if 'T' in text:
                return datetime.fromisoformat(text).date()
            return date.fromisoformat(text)
        except ValueError:
            return None

    return None


def to_date_isoformat(value: DateLike) -> Optional[str]:
    """
    Serialize a date field for the API (YYYY-MM-DD).

    Empty or unparseable values become None so the backend applies its
    own default.
    """
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def today_isoformat() -> str:
    """Current date in ISO format."""
    return datetime.now().date().isoformat()
