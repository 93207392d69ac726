# -*- coding: utf-8 -*-
"""
Purchase order line item.
"""

from dataclasses import dataclass, field
from typing import Any, Dict
import uuid


@dataclass(frozen=True)
class OrderLineItem:
    """One line of a purchase order."""

    description: str
    quantity: float = 1
    unit_price: float = 0.0
    item_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API payload shape."""
        return {
            "id": self.item_id,
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total": self.total,
        }
