# -*- coding: utf-8 -*-
"""
Asset Console Utility Module
"""

from .logger import get_logger, setup_logger
from .helpers import get_field, is_blank, to_number
from .datetime_utils import parse_date, to_date_isoformat, today_isoformat

__all__ = [
    "get_logger",
    "setup_logger",
    "get_field",
    "is_blank",
    "to_number",
    "parse_date",
    "to_date_isoformat",
    "today_isoformat",
]
