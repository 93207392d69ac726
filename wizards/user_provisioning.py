# -*- coding: utf-8 -*-
"""
User provisioning wizard.

Choosing a role resets ``permissions`` to that role's template; the
template can then be customised on the last step.
"""

import copy
from typing import Any, Dict, Mapping, Optional

from app.config import Config
from controllers.field_dependency_engine import FieldDependencyRule
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from controllers.wizard_controller import StepSpec, WizardController
from services.data_api import ResourceGateway
from services.notification_service import NotificationSink
from wizards import validators

ROLES = ("Admin", "Inventory_Manager", "Auditor", "Employee", "Vendor")
MODULES = ("assets", "users", "reports", "settings")


def _grant(read: bool, write: bool, delete: bool) -> Dict[str, bool]:
    return {"read": read, "write": write, "delete": delete}


PERMISSION_TEMPLATES: Dict[str, Dict[str, Dict[str, bool]]] = {
    "Admin": {module: _grant(True, True, True) for module in MODULES},
    "Inventory_Manager": {
        "assets": _grant(True, True, False),
        "users": _grant(True, False, False),
        "reports": _grant(True, True, False),
        "settings": _grant(True, False, False),
    },
    "Auditor": {module: _grant(True, False, False) for module in MODULES},
}

DEFAULT_PERMISSIONS = {
    "assets": _grant(True, False, False),
    "users": _grant(False, False, False),
    "reports": _grant(True, False, False),
    "settings": _grant(False, False, False),
}


def permissions_for(role: str) -> Dict[str, Dict[str, bool]]:
    return copy.deepcopy(PERMISSION_TEMPLATES.get(role, DEFAULT_PERMISSIONS))


def initial_values() -> Dict[str, Any]:
    return {
        "name": "",
        "email": "",
        "phone": "",
        "employee_id": "",
        "role": "Auditor",
        "department": "",
        "location": "",
        "manager": "",
        "is_active": True,
        "permissions": permissions_for("Auditor"),
    }


def validate_basic(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "name", "Name is required")
    validators.require_email(values, errors, "email")
    return errors


def validate_role(values: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    validators.require(values, errors, "department", "Department is required")
    validators.require(values, errors, "role", "Role is required")
    return errors


STEPS = (
    StepSpec(
        id="basic",
        title="Basic Information",
        fields=frozenset({"name", "email", "phone", "employee_id"}),
        validate=validate_basic,
    ),
    StepSpec(
        id="role",
        title="Role & Department",
        fields=frozenset({"role", "department", "location", "manager"}),
        validate=validate_role,
    ),
    StepSpec(
        id="permissions",
        title="Permissions & Access",
        fields=frozenset({"permissions", "is_active"}),
    ),
)

RULES = (
    FieldDependencyRule(
        "role", ("permissions",), lambda values: {"permissions": permissions_for(values.get("role"))}
    ),
)


def set_permission(wizard: WizardController, module: str, action: str, granted: bool):
    """Customise one permission of the current template."""
    permissions = copy.deepcopy(wizard.values.get("permissions") or {})
    permissions.setdefault(module, _grant(False, False, False))[action] = granted
    wizard.update_field("permissions", permissions)


def build_payload(values: Mapping[str, Any]) -> Dict[str, Any]:
    payload = {
        key: values.get(key)
        for key in ("name", "email", "phone", "role", "department", "location",
                    "manager", "is_active", "permissions")
    }
    # Blank employee id lets the backend generate one
    if values.get("employee_id"):
        payload["employee_id"] = values["employee_id"]
    return payload


def make_commit(gateway: ResourceGateway):
    async def commit(values: Dict[str, Any]):
        return await gateway.create(build_payload(values))
    return commit


def create_wizard(
    gateway: Optional[ResourceGateway] = None,
    coordinator: Optional[OptimisticMutationCoordinator] = None,
    notifier: Optional[NotificationSink] = None,
) -> WizardController:
    gateway = gateway or ResourceGateway(Config.USERS_PATH)
    return WizardController(
        STEPS,
        initial_values(),
        rules=RULES,
        commit=make_commit(gateway),
        coordinator=coordinator,
        notifier=notifier,
        title="User",
        success_message="User created successfully",
        failure_message="Failed to create user",
    )
