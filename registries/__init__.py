# -*- coding: utf-8 -*-
"""
Asset Console Registries
========================
Paginated, filterable resource lists.

Usage:
    from registries import build_registry

    assets = build_registry("assets", notifier=sink)
    await assets.load()
"""

from typing import Optional

from controllers.list_view_controller import ListViewController
from controllers.mutation_coordinator import OptimisticMutationCoordinator
from registries.definitions import REGISTRIES, RegistrySpec
from services.data_api import BulkOperationsGateway, ResourceGateway
from services.exceptions import ConfigurationError
from services.notification_service import NotificationSink
from utils.logger import get_logger

logger = get_logger(__name__)


def get_registry(name: str) -> RegistrySpec:
    registry = REGISTRIES.get(name)
    if registry is None:
        raise ConfigurationError(f"Unknown registry: {name}")
    return registry


def build_coordinator(
    name: str,
    gateway: Optional[ResourceGateway] = None,
    notifier: Optional[NotificationSink] = None
) -> OptimisticMutationCoordinator:
    """Coordinator for a registry's collection, to share between views and wizards."""
    registry = get_registry(name)
    gateway = gateway or ResourceGateway(registry.path)
    return OptimisticMutationCoordinator(fetch=gateway.list_all, notifier=notifier)


def build_registry(
    name: str,
    gateway: Optional[ResourceGateway] = None,
    coordinator: Optional[OptimisticMutationCoordinator] = None,
    notifier: Optional[NotificationSink] = None,
    page_size: Optional[int] = None,
    bulk: Optional[BulkOperationsGateway] = None
) -> ListViewController:
    """
    Build the ListViewController of a registry page.

    Args:
        name: Registry name (see REGISTRIES)
        gateway: Resource gateway (defaults to one on the registry's path)
        coordinator: Shared coordinator; a new one is built when omitted
        notifier: Notification sink
        page_size: Rows per page
        bulk: Batch endpoints used by the bulk actions
    """
    registry = get_registry(name)
    gateway = gateway or ResourceGateway(registry.path)
    bulk = bulk or BulkOperationsGateway()
    coordinator = coordinator or OptimisticMutationCoordinator(
        fetch=gateway.list_all, notifier=notifier
    )
    logger.debug(f"Building registry '{name}' on {registry.path}")
    return ListViewController(
        coordinator=coordinator,
        searchable_fields=registry.searchable_fields,
        facets=registry.facets,
        id_field=registry.id_field,
        page_size=page_size,
        bulk_actions=registry.bulk_actions(gateway, bulk),
        notifier=notifier,
    )


__all__ = ["REGISTRIES", "RegistrySpec", "build_coordinator", "build_registry", "get_registry"]
