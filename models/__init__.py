# -*- coding: utf-8 -*-
"""
Asset Console Data Models
"""

from .list_query import ListQuery
from .order_line_item import OrderLineItem
from .page import Page

__all__ = [
    "ListQuery",
    "OrderLineItem",
    "Page",
]
