# -*- coding: utf-8 -*-
"""
Purchase order wizard.

Totals are derived fields:

    items -> subtotal -> tax -> total

so adding or removing a line item recomputes all three in one update.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from app.config import Config
from controllers.field_dependency_engine import FieldDependencyRule
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from controllers.wizard_controller import StepSpec, WizardController
from models.order_line_item import OrderLineItem
from services.data_api import ResourceGateway
from services.exceptions import ValidationException
from services.notification_service import NotificationSink
from utils.datetime_utils import to_date_isoformat
from utils.helpers import get_field, is_blank, to_number
from utils.logger import get_logger
from wizards import validators

logger = get_logger(__name__)

PAYMENT_TERMS = ("Net 15", "Net 30", "Net 45", "Net 60", "Due on Receipt")
PRIORITIES = ("Low", "Normal", "High", "Urgent")


def initial_values() -> Dict[str, Any]:
    return {
        "vendor": "",
        "delivery_date": "",
        "priority": "Normal",
        "terms": Config.DEFAULT_PAYMENT_TERMS,
        "notes": "",
        "items": [],
        "subtotal": 0.0,
        "tax": 0.0,
        "total": 0.0,
    }


def validate_order(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "vendor", "Please select a vendor")
    validators.require(values, errors, "terms", "Payment terms are required")
    validators.valid_date(values, errors, "delivery_date")
    return errors


def validate_items(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if is_blank(values.get("items")):
        errors["items"] = "Please add at least one item"
    return errors


STEPS = (
    StepSpec(
        id="order",
        title="Order Details",
        fields=frozenset({"vendor", "delivery_date", "priority", "terms", "notes"}),
        validate=validate_order,
    ),
    StepSpec(
        id="items",
        title="Line Items",
        fields=frozenset({"items", "subtotal", "tax", "total"}),
        validate=validate_items,
    ),
)


def line_total(item: Any) -> float:
    quantity = to_number(get_field(item, "quantity")) or 0.0
    unit_price = to_number(get_field(item, "unit_price")) or 0.0
    return quantity * unit_price


def _subtotal(values: Mapping[str, Any]) -> Dict[str, Any]:
    items: Iterable[Any] = values.get("items") or []
    return {"subtotal": round(sum(line_total(item) for item in items), 2)}


def make_rules(tax_rate: float = None):
    """items -> subtotal -> tax -> total at ``tax_rate`` (Config default)."""
    rate = Config.PURCHASE_TAX_RATE if tax_rate is None else tax_rate

    def tax(values: Mapping[str, Any]) -> Dict[str, Any]:
        return {"tax": round((values.get("subtotal") or 0.0) * rate, 2)}

    def total(values: Mapping[str, Any]) -> Dict[str, Any]:
        return {"total": round((values.get("subtotal") or 0.0) + (values.get("tax") or 0.0), 2)}

    return (
        FieldDependencyRule("items", ("subtotal",), _subtotal),
        FieldDependencyRule("subtotal", ("tax",), tax),
        FieldDependencyRule("tax", ("total",), total),
    )


def add_line_item(
    wizard: WizardController,
    description: str,
    quantity: float = 1,
    unit_price: float = 0.0
) -> OrderLineItem:
    """
    Append a line item to the wizard's ``items``.

    Raises:
        ValidationException: blank description, non-positive quantity or
            negative unit price
    """
    description = (description or "").strip()
    if not description:
        raise ValidationException("Please enter item description", field="description")
    qty = to_number(quantity)
    if qty is None or qty <= 0:
        raise ValidationException("Quantity must be greater than zero", field="quantity")
    price = to_number(unit_price)
    if price is None or price < 0:
        raise ValidationException("Unit price cannot be negative", field="unit_price")

    item = OrderLineItem(description=description, quantity=qty, unit_price=price)
    wizard.update_field("items", list(wizard.values.get("items") or []) + [item])
    logger.debug(f"Added line item '{description}' ({qty} x {price})")
    return item


def remove_line_item(wizard: WizardController, item_id: str) -> bool:
    items = list(wizard.values.get("items") or [])
    remaining = [item for item in items if get_field(item, "item_id") != item_id]
    if len(remaining) == len(items):
        return False
    wizard.update_field("items", remaining)
    return True


def build_payload(values: Mapping[str, Any]) -> Dict[str, Any]:
    items = [
        item.to_dict() if isinstance(item, OrderLineItem) else dict(item)
        for item in values.get("items") or []
    ]
    return {
        "vendor": values.get("vendor"),
        "delivery_date": to_date_isoformat(values.get("delivery_date")),
        "priority": values.get("priority"),
        "terms": values.get("terms"),
        "notes": values.get("notes"),
        "items": items,
        "subtotal": values.get("subtotal"),
        "tax": values.get("tax"),
        "total": values.get("total"),
        "status": "Pending Approval",
    }


def make_commit(gateway: ResourceGateway):
    async def commit(values: Dict[str, Any]):
        return await gateway.create(build_payload(values))
    return commit


def create_wizard(
    gateway: Optional[ResourceGateway] = None,
    coordinator: Optional[OptimisticMutationCoordinator] = None,
    notifier: Optional[NotificationSink] = None,
    tax_rate: float = None,
) -> WizardController:
    gateway = gateway or ResourceGateway(Config.PURCHASE_ORDERS_PATH)
    return WizardController(
        STEPS,
        initial_values(),
        rules=make_rules(tax_rate),
        commit=make_commit(gateway),
        coordinator=coordinator,
        notifier=notifier,
        title="Purchase order",
        success_message="Purchase order created successfully",
        failure_message="Failed to create purchase order",
    )
