# -*- coding: utf-8 -*-
"""
Maintenance scheduling wizard.
"""

from typing import Any, Dict, List, Mapping, Optional

from app.config import Config
from controllers.field_dependency_engine import FieldDependencyRule
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from controllers.wizard_controller import StepSpec, WizardController
from services.data_api import ResourceGateway
from services.notification_service import NotificationSink
from utils.datetime_utils import to_date_isoformat
from utils.helpers import to_number
from wizards import validators

MAINTENANCE_TYPES = ("Preventive", "Corrective", "Predictive", "Emergency", "Inspection")
PRIORITIES = ("Low", "Medium", "High", "Critical")
FREQUENCIES = ("Weekly", "Monthly", "Quarterly", "Half-Yearly", "Yearly")
DEFAULT_FREQUENCY = "Monthly"

INITIAL_VALUES: Dict[str, Any] = {
    "asset_id": "",
    "maintenance_type": "",
    "priority": "Medium",
    "scheduled_date": "",
    "estimated_hours": 1,
    "technician": "",
    "description": "",
    "required_parts": [],
    "cost_estimate": "",
    "is_recurring": False,
    "recurring_frequency": None,
    "notes": "",
}


def validate_asset(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "asset_id", "Please select an asset")
    validators.require(values, errors, "maintenance_type", "Maintenance type is required")
    return errors


def validate_schedule(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "scheduled_date", "Scheduled date is required")
    validators.valid_date(values, errors, "scheduled_date")
    validators.positive_number(
        values, errors, "estimated_hours", "Estimated hours must be greater than zero"
    )
    return errors


def validate_parts(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.non_negative_number(
        values, errors, "cost_estimate", "Cost estimate must be a non-negative number"
    )
    if values.get("is_recurring"):
        validators.require(
            values, errors, "recurring_frequency", "Select how often the maintenance recurs"
        )
    return errors


STEPS = (
    StepSpec(
        id="asset",
        title="Asset & Type",
        fields=frozenset({"asset_id", "maintenance_type", "priority"}),
        validate=validate_asset,
    ),
    StepSpec(
        id="schedule",
        title="Schedule",
        fields=frozenset({"scheduled_date", "estimated_hours", "technician", "description"}),
        validate=validate_schedule,
    ),
    StepSpec(
        id="parts",
        title="Parts & Cost",
        fields=frozenset({
            "required_parts", "cost_estimate", "is_recurring", "recurring_frequency", "notes",
        }),
        validate=validate_parts,
    ),
)


def _recurrence(values: Mapping[str, Any]) -> Dict[str, Any]:
    if not values.get("is_recurring"):
        return {"recurring_frequency": None}
    return {"recurring_frequency": values.get("recurring_frequency") or DEFAULT_FREQUENCY}


RULES = (
    FieldDependencyRule("is_recurring", ("recurring_frequency",), _recurrence),
)


def add_part(parts: List[str], part: str) -> List[str]:
    """Return ``parts`` with ``part`` appended unless blank or already listed."""
    part = (part or "").strip()
    if not part or part in parts:
        return list(parts)
    return list(parts) + [part]


def remove_part(parts: List[str], part: str) -> List[str]:
    return [p for p in parts if p != part]


def build_payload(values: Mapping[str, Any]) -> Dict[str, Any]:
    payload = dict(values)
    payload["scheduled_date"] = to_date_isoformat(values.get("scheduled_date"))
    payload["estimated_hours"] = to_number(values.get("estimated_hours"))
    payload["cost_estimate"] = to_number(values.get("cost_estimate"))
    payload["status"] = "Scheduled"
    return payload


def make_commit(gateway: ResourceGateway):
    async def commit(values: Dict[str, Any]):
        return await gateway.create(build_payload(values))
    return commit


def create_wizard(
    gateway: Optional[ResourceGateway] = None,
    coordinator: Optional[OptimisticMutationCoordinator] = None,
    notifier: Optional[NotificationSink] = None,
    initial_values: Optional[Mapping[str, Any]] = None,
) -> WizardController:
    gateway = gateway or ResourceGateway(Config.MAINTENANCE_PATH)
    return WizardController(
        STEPS,
        {**INITIAL_VALUES, **(initial_values or {})},
        rules=RULES,
        commit=make_commit(gateway),
        coordinator=coordinator,
        notifier=notifier,
        title="Maintenance",
        success_message="Maintenance scheduled successfully",
        failure_message="Failed to schedule maintenance",
    )
