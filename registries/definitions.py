# -*- coding: utf-8 -*-
"""
Registry definitions.

A registry page differs from the others only in its endpoint, the fields
its search box looks at, its facet filters and the bulk actions offered on
the selection.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Sequence, Tuple

from app.config import Config
from controllers.list_view_controller import BulkAction
from services.data_api import BulkOperationsGateway, ResourceGateway

BulkActionsFactory = Callable[[ResourceGateway, BulkOperationsGateway], Sequence[BulkAction]]


@dataclass(frozen=True)
class RegistrySpec:
    name: str
    title: str
    path: str
    searchable_fields: Tuple[str, ...]
    facets: Tuple[str, ...] = ()
    bulk_actions: BulkActionsFactory = lambda gateway, bulk: ()
    id_field: str = "id"


def asset_actions(gateway: ResourceGateway, bulk: BulkOperationsGateway) -> Sequence[BulkAction]:
    async def update_status(ids: Iterable[str], status: str, notes: str = ""):
        return await bulk.update_asset_status(ids, status, notes)

    async def assign(ids: Iterable[str], user_id: str, department: str = "", notes: str = ""):
        return await bulk.assign_assets(ids, user_id, department, notes)

    async def delete(ids: Iterable[str], reason: str = "", permanent: bool = False):
        return await bulk.delete_assets(ids, reason, permanent)

    return (
        BulkAction("update_status", "Update Status", update_status,
                   success_message="Status updated for {count} asset(s)",
                   failure_message="Failed to update asset status"),
        BulkAction("assign", "Assign", assign,
                   success_message="{count} asset(s) assigned",
                   failure_message="Failed to assign assets"),
        BulkAction("delete", "Delete", delete,
                   success_message="{count} asset(s) deleted",
                   failure_message="Failed to delete asset(s)"),
    )


def user_actions(gateway: ResourceGateway, bulk: BulkOperationsGateway) -> Sequence[BulkAction]:
    async def activate(ids: Iterable[str]):
        return await bulk.update_user_status(ids, "active")

    async def deactivate(ids: Iterable[str]):
        return await bulk.update_user_status(ids, "inactive")

    # no batch route for user deletion
    async def delete(ids: Iterable[str]):
        return await gateway.remove_many(ids)

    return (
        BulkAction("activate", "Activate", activate,
                   success_message="{count} user(s) activated",
                   failure_message="Failed to update user status"),
        BulkAction("deactivate", "Deactivate", deactivate,
                   success_message="{count} user(s) deactivated",
                   failure_message="Failed to update user status"),
        BulkAction("delete", "Delete", delete,
                   success_message="{count} user(s) deleted",
                   failure_message="Failed to delete user(s)"),
    )


ASSETS = RegistrySpec(
    name="assets",
    title="Assets",
    path=Config.ASSETS_PATH,
    searchable_fields=("id", "name", "serial_number", "category", "location", "assigned_user"),
    facets=("status", "category", "location", "condition"),
    bulk_actions=asset_actions,
)

USERS = RegistrySpec(
    name="users",
    title="Users",
    path=Config.USERS_PATH,
    searchable_fields=("id", "name", "email", "employee_id", "department"),
    facets=("role", "department", "is_active"),
    bulk_actions=user_actions,
)

TRANSACTIONS = RegistrySpec(
    name="transactions",
    title="Transactions",
    path=Config.TRANSACTIONS_PATH,
    searchable_fields=("id", "asset_id", "asset_name", "user.name", "description"),
    facets=("type", "status"),
)

AUDIT_LOGS = RegistrySpec(
    name="audit_logs",
    title="Audit Logs",
    path=Config.AUDIT_LOGS_PATH,
    searchable_fields=("id", "action", "user.name", "entity_type", "details"),
    facets=("action", "severity", "entity_type"),
)

DOCUMENTS = RegistrySpec(
    name="documents",
    title="Documents",
    path=Config.DOCUMENTS_PATH,
    searchable_fields=("id", "name", "asset_id", "uploaded_by.name", "tags"),
    facets=("type", "category"),
)

REGISTRIES: Dict[str, RegistrySpec] = {
    registry.name: registry for registry in (ASSETS, USERS, TRANSACTIONS, AUDIT_LOGS, DOCUMENTS)
}
