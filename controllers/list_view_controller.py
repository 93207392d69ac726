# -*- coding: utf-8 -*-
"""
List View Controller
====================
Search, facet filters, sorting, pagination and selection over one registry.

The server collection comes from an OptimisticMutationCoordinator (shared
between every view of the same resource). Everything else is derived
locally from that snapshot:

    snapshot --filter/search--> filtered --sort--> ordered --slice--> visible

Selection is always interpreted against the filtered set: whenever the
filtered set changes, selected ids that dropped out of it are removed.
"""

import functools
import math
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from PyQt5.QtCore import pyqtSignal

from app.config import Config
from controllers.base_controller import BaseController, OperationResult
from controllers.mutation_coordinator import FetchFn, OptimisticMutationCoordinator
from models.list_query import ListQuery
from services.exceptions import ConfigurationError
from services.notification_service import NotificationSink
from utils.helpers import get_field
from utils.logger import get_logger

logger = get_logger(__name__)

BulkActionFn = Callable[[List[Any]], Awaitable[Any]]


class SelectionState(str, Enum):
    """Tri-state of the select-all checkbox, relative to the filtered set."""
    NONE = "none"
    SOME = "some"
    ALL = "all"


@dataclass(frozen=True)
class BulkAction:
    """A registry action applied to the selected ids."""
    id: str
    label: str
    run: BulkActionFn
    success_message: str = "{count} item(s) updated"
    failure_message: str = "Bulk action failed"


@dataclass(frozen=True)
class FilterPreset:
    """Saved search/filter/sort combination (kept for the page lifetime only)."""
    name: str
    search_text: str
    filters: Dict[str, FrozenSet[Any]]
    sort_by: Optional[str]
    sort_descending: bool


def _facet_matches(value: Any, allowed: FrozenSet[Any]) -> bool:
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(v in allowed for v in value)
    return value in allowed


def _sort_key(value: Any):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, str(value).lower())


class ListViewController(BaseController):
    """
    Controller for a paginated, filterable registry page.

    Usage:
        view = ListViewController(
            fetch=assets.list_all,
            searchable_fields=("id", "name", "serial_number"),
            facets=("status", "category"),
        )
        await view.load()
        view.set_search("laptop")
        view.set_filter("status", {"Active"})
        rows = view.visible_items
    """

    query_changed = pyqtSignal(object)  # ListQuery
    items_changed = pyqtSignal(object)  # visible page (list)
    selection_changed = pyqtSignal(object)  # frozenset of ids

    def __init__(
        self,
        coordinator: Optional[OptimisticMutationCoordinator] = None,
        fetch: Optional[FetchFn] = None,
        searchable_fields: Sequence[str] = ("id",),
        facets: Sequence[str] = (),
        id_field: str = "id",
        page_size: Optional[int] = None,
        bulk_actions: Sequence[BulkAction] = (),
        notifier: Optional[NotificationSink] = None,
        parent=None
    ):
        """
        Args:
            coordinator: Shared coordinator of the resource collection
            fetch: Fetch function; used to build a private coordinator
                when no coordinator is given
            searchable_fields: Fields searched by ``set_search`` (dotted
                paths allowed)
            facets: Facet fields offered as filters
            id_field: Field holding the entity identifier
            page_size: Rows per page (Config.DEFAULT_PAGE_SIZE by default)
            bulk_actions: Actions available on the selection
        """
        super().__init__(notifier=notifier, parent=parent)
        if coordinator is not None and fetch is not None:
            raise ConfigurationError("Pass either a coordinator or a fetch function, not both")
        if coordinator is None:
            coordinator = OptimisticMutationCoordinator(fetch=fetch, notifier=self.notifier)

        self._coordinator = coordinator
        self._searchable_fields = tuple(searchable_fields)
        self._facets = tuple(facets)
        self._id_field = id_field
        self._bulk_actions: Dict[str, BulkAction] = {}
        for action in bulk_actions:
            if action.id in self._bulk_actions:
                raise ConfigurationError(f"Duplicate bulk action id: {action.id}")
            self._bulk_actions[action.id] = action

        self._query = ListQuery(page_size=page_size or Config.DEFAULT_PAGE_SIZE)
        self._selection: Set[Any] = set()
        self._filtered: List[Any] = []
        self._presets: Dict[str, FilterPreset] = {}
        self._bulk_pending = False

        self._coordinator.snapshot_changed.connect(self._on_snapshot_changed)
        self._refilter()

    # ==================== Properties ====================

    @property
    def coordinator(self) -> OptimisticMutationCoordinator:
        return self._coordinator

    @property
    def query(self) -> ListQuery:
        return self._query

    @property
    def facets(self) -> Sequence[str]:
        return self._facets

    @property
    def bulk_actions(self) -> List[BulkAction]:
        return list(self._bulk_actions.values())

    @property
    def items(self) -> List[Any]:
        """The full server snapshot."""
        return self._coordinator.snapshot

    @property
    def filtered_items(self) -> List[Any]:
        return list(self._filtered)

    @property
    def filtered_count(self) -> int:
        return len(self._filtered)

    @property
    def visible_items(self) -> List[Any]:
        start = self._query.page * self._query.page_size
        return self._filtered[start:start + self._query.page_size]

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self._filtered) / self._query.page_size))

    @property
    def selected_ids(self) -> FrozenSet[Any]:
        return frozenset(self._selection)

    @property
    def selection_state(self) -> SelectionState:
        if not self._selection:
            return SelectionState.NONE
        if self._selection == self._filtered_ids():
            return SelectionState.ALL
        return SelectionState.SOME

    @property
    def presets(self) -> List[str]:
        return list(self._presets)

    @property
    def is_bulk_pending(self) -> bool:
        return self._bulk_pending

    def entity_id(self, entity: Any) -> Any:
        return get_field(entity, self._id_field)

    # ==================== Derivation ====================

    def _matches(self, entity: Any) -> bool:
        for facet, allowed in self._query.active_filters.items():
            if not _facet_matches(get_field(entity, facet), allowed):
                return False

        text = self._query.search_text.lower()
        if not text:
            return True
        for path in self._searchable_fields:
            value = get_field(entity, path)
            if value is not None and text in str(value).lower():
                return True
        return False

    def _ordered(self, entities: List[Any]) -> List[Any]:
        sort_by = self._query.sort_by
        if not sort_by:
            return entities
        present = [e for e in entities if get_field(e, sort_by) is not None]
        missing = [e for e in entities if get_field(e, sort_by) is None]
        present.sort(key=lambda e: _sort_key(get_field(e, sort_by)),
                     reverse=self._query.sort_descending)
        return present + missing

    def _filtered_ids(self) -> Set[Any]:
        return {self.entity_id(e) for e in self._filtered}

    def _refilter(self):
        """Recompute the filtered set, prune the selection and publish."""
        self._filtered = self._ordered(
            [e for e in self._coordinator.snapshot if self._matches(e)]
        )

        last_page = self.total_pages - 1
        if self._query.page > last_page:
            self._query = self._query.with_changes(page=last_page)
            self.query_changed.emit(self._query)

        visible_ids = self._filtered_ids()
        pruned = self._selection & visible_ids
        if pruned != self._selection:
            logger.debug(f"Pruned {len(self._selection) - len(pruned)} ids from selection")
            self._selection = pruned
            self.selection_changed.emit(self.selected_ids)

        self.items_changed.emit(self.visible_items)

    def _set_query(self, query: ListQuery, refilter: bool = True):
        self._query = query
        self.query_changed.emit(query)
        if refilter:
            self._refilter()
        else:
            self.items_changed.emit(self.visible_items)

    def _on_snapshot_changed(self, snapshot):
        if not self.is_active:
            return
        self._refilter()

    # ==================== Query ====================

    def set_search(self, text: str):
        self._set_query(self._query.with_changes(search_text=text or "", page=0))

    def set_filter(self, facet: str, values: Iterable[Any]):
        """Restrict ``facet`` to ``values``; an empty collection removes the filter."""
        filters = dict(self._query.filters)
        filters[facet] = frozenset(values or ())
        self._set_query(self._query.with_changes(filters=filters, page=0))

    def clear_filters(self):
        self._set_query(self._query.with_changes(search_text="", filters={}, page=0))

    def set_sort(self, field: Optional[str], descending: bool = False):
        self._set_query(
            self._query.with_changes(sort_by=field, sort_descending=descending, page=0)
        )

    def set_page_size(self, page_size: int):
        self._set_query(self._query.with_changes(page_size=page_size, page=0), refilter=False)

    def set_page(self, page: int):
        """Go to ``page``, clamped to the available range."""
        clamped = min(max(0, page), self.total_pages - 1)
        if clamped != page:
            logger.debug(f"Page {page} clamped to {clamped}")
        self._set_query(self._query.with_changes(page=clamped), refilter=False)

    def next_page(self):
        self.set_page(self._query.page + 1)

    def previous_page(self):
        self.set_page(self._query.page - 1)

    # ==================== Presets ====================

    def save_preset(self, name: str):
        self._presets[name] = FilterPreset(
            name=name,
            search_text=self._query.search_text,
            filters=dict(self._query.filters),
            sort_by=self._query.sort_by,
            sort_descending=self._query.sort_descending,
        )
        logger.info(f"Saved filter preset '{name}'")

    def apply_preset(self, name: str) -> bool:
        preset = self._presets.get(name)
        if preset is None:
            logger.warning(f"Unknown filter preset '{name}'")
            return False
        self._set_query(self._query.with_changes(
            search_text=preset.search_text,
            filters=dict(preset.filters),
            sort_by=preset.sort_by,
            sort_descending=preset.sort_descending,
            page=0,
        ))
        return True

    def delete_preset(self, name: str):
        self._presets.pop(name, None)

    # ==================== Summaries ====================

    def facet_counts(self, facet: str) -> Dict[Any, int]:
        """Count of entities per facet value over the full snapshot."""
        return dict(Counter(get_field(e, facet) for e in self._coordinator.snapshot))

    def selected_or_filtered(self) -> List[Any]:
        """Rows an export covers: the selection if any, else the filtered set."""
        if not self._selection:
            return list(self._filtered)
        return [e for e in self._filtered if self.entity_id(e) in self._selection]

    # ==================== Selection ====================

    def toggle_select(self, entity_id: Any):
        if entity_id in self._selection:
            self._selection.discard(entity_id)
        elif entity_id in self._filtered_ids():
            self._selection.add(entity_id)
        else:
            logger.debug(f"Ignoring selection of {entity_id!r}: not in the filtered set")
            return
        self.selection_changed.emit(self.selected_ids)

    def select_all(self):
        """Select every item of the filtered set (across all pages)."""
        self._selection = self._filtered_ids()
        self.selection_changed.emit(self.selected_ids)

    def clear_selection(self):
        if self._selection:
            self._selection = set()
            self.selection_changed.emit(self.selected_ids)

    def toggle_select_all(self):
        if self.selection_state == SelectionState.ALL:
            self.clear_selection()
        else:
            self.select_all()

    # ==================== Data ====================

    async def load(self) -> bool:
        """Fetch the whole collection; filtering and paging happen locally."""
        return await self._coordinator.refetch()

    async def refresh(self) -> bool:
        return await self.load()

    async def apply_bulk_action(
        self,
        action_id: str,
        selected_ids: Optional[Iterable[Any]] = None,
        **params
    ) -> Optional[OperationResult]:
        """
        Run a bulk action through the coordinator.

        ``params`` are passed to the action (e.g. ``status="In Repair"``).
        Local entities are never touched; the selection is cleared only
        after the refetch. While an action is pending further calls are
        no-ops returning None.
        """
        if self._bulk_pending:
            logger.debug(f"Bulk action '{action_id}' ignored: another one is pending")
            return None

        action = self._bulk_actions.get(action_id)
        if action is None:
            return OperationResult.fail(message=f"Unknown bulk action: {action_id}")

        ids = set(selected_ids) if selected_ids is not None else set(self._selection)
        if not ids:
            return OperationResult.fail(message="No items selected")

        failures = []
        self._bulk_pending = True
        self._emit_started(action_id)
        try:
            applied = await self._coordinator.commit_bulk(
                functools.partial(action.run, **params),
                ids,
                on_success=lambda result: self.clear_selection(),
                on_failure=failures.append,
                owner=self,
                success_message=action.success_message.format(count=len(ids)),
                failure_message=action.failure_message,
            )
        finally:
            self._bulk_pending = False

        if not self.is_active:
            return None
        if failures:
            self._emit_error(action_id, failures[0].message)
            return OperationResult.fail(message=failures[0].message)

        self._emit_completed(action_id, applied)
        if not applied:
            return OperationResult.fail(message="Changes saved but the list could not be refreshed")
        self._log_operation("apply_bulk_action", action=action_id, count=len(ids))
        return OperationResult.ok(data=sorted(ids, key=str))

    def dispose(self):
        if not self.is_active:
            return
        super().dispose()
        self._coordinator.snapshot_changed.disconnect(self._on_snapshot_changed)
