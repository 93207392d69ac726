# -*- coding: utf-8 -*-
"""
Asset transfer wizard.

Selecting an asset fills ``from_location`` and ``from_user`` from the asset
catalog (the registry snapshot the host page already loaded). Both are
overwritten on every re-selection, including after a manual edit.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from app.config import Config
from controllers.field_dependency_engine import FieldDependencyRule
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from controllers.wizard_controller import StepSpec, WizardController
from services.data_api import ResourceGateway
from services.notification_service import NotificationSink
from utils.datetime_utils import to_date_isoformat, today_isoformat
from utils.helpers import get_field
from wizards import validators

TRANSFER_REASONS = (
    "Employee Transfer",
    "Department Relocation",
    "Equipment Upgrade",
    "Maintenance Required",
    "Temporary Assignment",
    "Project Requirement",
    "Office Reorganization",
    "Asset Retirement",
    "Other",
)

UNASSIGNED = "Unassigned"


def initial_values() -> Dict[str, Any]:
    return {
        "asset_id": "",
        "from_location": "",
        "from_user": "",
        "to_location": "",
        "to_user": "",
        "transfer_reason": "",
        "transfer_date": today_isoformat(),
        "notes": "",
        "requires_approval": False,
        "condition_before": "Good",
        "condition_after": "Good",
    }


def validate_asset(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "asset_id", "Please select an asset to transfer")
    return errors


def validate_transfer(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "to_location", "Destination location is required")
    validators.require(values, errors, "transfer_reason", "Transfer reason is required")
    if values.get("to_location") and values.get("to_location") == values.get("from_location"):
        errors.setdefault("to_location", "Destination must differ from the current location")
    validators.valid_date(values, errors, "transfer_date")
    return errors


STEPS = (
    StepSpec(
        id="asset",
        title="Select Asset",
        fields=frozenset({"asset_id", "from_location", "from_user", "condition_before"}),
        validate=validate_asset,
    ),
    StepSpec(
        id="transfer",
        title="Transfer Details",
        fields=frozenset({
            "to_location", "to_user", "transfer_reason", "transfer_date",
            "requires_approval", "condition_after", "notes",
        }),
        validate=validate_transfer,
    ),
    StepSpec(id="confirm", title="Confirmation", fields=frozenset()),
)


def index_catalog(assets: Iterable[Any], id_field: str = "id") -> Dict[Any, Any]:
    return {get_field(asset, id_field): asset for asset in assets}


def source_rule(catalog: Mapping[Any, Any]) -> FieldDependencyRule:
    """asset_id -> from_location, from_user."""
    def compute(values: Mapping[str, Any]) -> Dict[str, Any]:
        asset = catalog.get(values.get("asset_id"))
        if asset is None:
            return {}
        return {
            "from_location": get_field(asset, "location"),
            "from_user": get_field(asset, "assigned_user") or UNASSIGNED,
        }

    return FieldDependencyRule("asset_id", ("from_location", "from_user"), compute)


def build_payload(values: Mapping[str, Any]) -> Dict[str, Any]:
    payload = dict(values)
    payload["transfer_date"] = to_date_isoformat(values.get("transfer_date"))
    payload["status"] = "pending_approval" if values.get("requires_approval") else "completed"
    return payload


def make_commit(gateway: ResourceGateway):
    async def commit(values: Dict[str, Any]):
        return await gateway.create(build_payload(values))
    return commit


def create_wizard(
    assets: Iterable[Any] = (),
    gateway: Optional[ResourceGateway] = None,
    coordinator: Optional[OptimisticMutationCoordinator] = None,
    notifier: Optional[NotificationSink] = None,
) -> WizardController:
    """
    Args:
        assets: Asset catalog used to fill the transfer source
    """
    gateway = gateway or ResourceGateway(Config.TRANSFERS_PATH)
    return WizardController(
        STEPS,
        initial_values(),
        rules=[source_rule(index_catalog(assets))],
        commit=make_commit(gateway),
        coordinator=coordinator,
        notifier=notifier,
        title="Asset transfer",
        success_message="Asset transfer recorded successfully",
        failure_message="Failed to process asset transfer",
    )
