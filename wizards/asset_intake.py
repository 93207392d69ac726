# -*- coding: utf-8 -*-
"""
Asset intake wizard: register a new asset in three steps.
"""

from typing import Any, Dict, Mapping, Optional

from app.config import Config
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from controllers.wizard_controller import StepSpec, WizardController
from services.data_api import ResourceGateway
from services.notification_service import NotificationSink
from utils.datetime_utils import to_date_isoformat
from utils.helpers import to_number
from wizards import validators

CATEGORIES = (
    "IT Equipment", "Furniture", "Vehicles", "Machinery",
    "Office Equipment", "Electronics", "Tools",
)
CONDITIONS = ("Excellent", "Good", "Fair", "Poor", "Damaged")

INITIAL_VALUES: Dict[str, Any] = {
    "name": "",
    "category": "",
    "manufacturer": "",
    "model": "",
    "serial_number": "",
    "location": "",
    "assigned_user": "",
    "condition": "Good",
    "purchase_date": "",
    "purchase_value": "",
    "warranty_expiry": "",
    "description": "",
}


def validate_basic(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "name", "Asset name is required")
    validators.require(values, errors, "category", "Category is required")
    validators.require(values, errors, "manufacturer", "Manufacturer is required")
    return errors


def validate_details(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "location", "Location is required")
    validators.non_negative_number(
        values, errors, "purchase_value", "Purchase value must be a non-negative number"
    )
    validators.valid_date(values, errors, "purchase_date")
    validators.valid_date(values, errors, "warranty_expiry")
    validators.not_before(
        values, errors, "warranty_expiry", "purchase_date",
        "Warranty expiry cannot be before the purchase date"
    )
    return errors


STEPS = (
    StepSpec(
        id="basic",
        title="Basic Information",
        fields=frozenset({"name", "category", "manufacturer", "model", "serial_number"}),
        validate=validate_basic,
    ),
    StepSpec(
        id="details",
        title="Details & Location",
        fields=frozenset({
            "location", "assigned_user", "condition", "purchase_date",
            "purchase_value", "warranty_expiry", "description",
        }),
        validate=validate_details,
    ),
    StepSpec(id="confirm", title="Confirmation", fields=frozenset()),
)


def build_payload(values: Mapping[str, Any]) -> Dict[str, Any]:
    payload = {key: values.get(key) for key in INITIAL_VALUES}
    payload["purchase_value"] = to_number(values.get("purchase_value"))
    payload["purchase_date"] = to_date_isoformat(values.get("purchase_date"))
    payload["warranty_expiry"] = to_date_isoformat(values.get("warranty_expiry"))
    payload["status"] = "Active"
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
    gateway = gateway or ResourceGateway(Config.ASSETS_PATH)
    return WizardController(
        STEPS,
        {**INITIAL_VALUES, **(initial_values or {})},
        commit=make_commit(gateway),
        coordinator=coordinator,
        notifier=notifier,
        title="Asset",
        success_message="Asset registered successfully",
        failure_message="Failed to register asset",
    )
