# -*- coding: utf-8 -*-
"""
Field checks shared by the workflow step validators.

Each check adds at most one message to ``errors`` and never overwrites a
message an earlier check already recorded for the same field.
"""

from typing import Any, Dict, Mapping

from utils.datetime_utils import parse_date
from utils.helpers import is_blank, to_number

Errors = Dict[str, str]


def _add(errors: Errors, field: str, message: str):
    errors.setdefault(field, message)


def require(values: Mapping[str, Any], errors: Errors, field: str, message: str = ""):
    if is_blank(values.get(field)):
        _add(errors, field, message or f"{field.replace('_', ' ').capitalize()} is required")


def require_email(values: Mapping[str, Any], errors: Errors, field: str = "email"):
    require(values, errors, field, "Email is required")
    if "@" not in str(values.get(field) or ""):
        _add(errors, field, "Valid email is required")


def non_negative_number(values: Mapping[str, Any], errors: Errors, field: str, message: str):
    """Optional numeric field: blank passes, otherwise it must be >= 0."""
    value = values.get(field)
    if is_blank(value):
        return
    number = to_number(value)
    if number is None or number < 0:
        _add(errors, field, message)


def positive_number(values: Mapping[str, Any], errors: Errors, field: str, message: str):
    number = to_number(values.get(field))
    if number is None or number <= 0:
        _add(errors, field, message)


def valid_date(values: Mapping[str, Any], errors: Errors, field: str, message: str = "Invalid date"):
    value = values.get(field)
    if not is_blank(value) and parse_date(value) is None:
        _add(errors, field, message)


def not_before(values: Mapping[str, Any], errors: Errors, field: str, earlier_field: str, message: str):
    """``field`` may not be earlier than ``earlier_field`` (skipped if either is blank)."""
    later = parse_date(values.get(field))
    earlier = parse_date(values.get(earlier_field))
    if later and earlier and later < earlier:
        _add(errors, field, message)
