# -*- coding: utf-8 -*-
"""
Page model - one page of a server collection.
"""

from dataclasses import dataclass, field
from typing import Any, List


@dataclass
class Page:
    """A page of entities as returned by a fetch function."""

    items: List[Any] = field(default_factory=list)
    total: int = 0
    page: int = 0  # zero-based
    page_size: int = 0

    def __post_init__(self):
        if not self.total:
            self.total = len(self.items)
        if not self.page_size:
            self.page_size = len(self.items)

    def __len__(self) -> int:
        return len(self.items)
