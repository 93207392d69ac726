# -*- coding: utf-8 -*-
"""
List query model - search, facet filters, sorting and pagination of a registry.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional


@dataclass(frozen=True)
class ListQuery:
    """
    Query state of a registry page.

    ``filters`` maps a facet name to the set of selected values; a facet with
    an empty set applies no filter.
    """

    search_text: str = ""
    filters: Dict[str, FrozenSet[Any]] = field(default_factory=dict)
    page: int = 0
    page_size: int = 10
    sort_by: Optional[str] = None
    sort_descending: bool = False

    def __post_init__(self):
        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")
        if self.page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {self.page_size}")

    def with_changes(self, **changes) -> "ListQuery":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @property
    def active_filters(self) -> Dict[str, FrozenSet[Any]]:
        """Facets that actually restrict the result set."""
        return {facet: values for facet, values in self.filters.items() if values}

    def to_params(self) -> Dict[str, Any]:
        """
        Convert to API query parameters.

        Pages are 1-based on the wire; facet selections are comma-joined.
        """
        params: Dict[str, Any] = {
            "page": self.page + 1,
            "limit": self.page_size,
        }
        if self.search_text:
            params["search"] = self.search_text
        for facet, values in sorted(self.active_filters.items()):
            params[facet] = ",".join(sorted(str(v) for v in values))
        if self.sort_by:
            params["sortBy"] = self.sort_by
            params["sortOrder"] = "desc" if self.sort_descending else "asc"
        return params
