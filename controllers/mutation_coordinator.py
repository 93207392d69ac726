# -*- coding: utf-8 -*-
"""
Optimistic Mutation Coordinator
===============================
Sequences a mutation against the authoritative collection.

Every mutation (a wizard commit or a registry bulk action) is followed by a
full refetch; local entities are never patched in place. The fetched
collection is kept in a ReconciliationState that any number of
ListViewControllers observing the same resource share through the
``snapshot_changed`` signal.

Each fetch is tagged with a generation number. A response that arrives
after a newer fetch was issued is dropped, and so is any response that
arrives after the coordinator (or the owner of a mutation) was disposed.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from PyQt5.QtCore import pyqtSignal

from controllers.base_controller import BaseController
from models.list_query import ListQuery
from models.page import Page
from services.data_api import to_page
from services.error_mapper import map_exception
from services.exceptions import CommitError, FetchError
from services.notification_service import NotificationSink
from utils.logger import get_logger

logger = get_logger(__name__)

FetchFn = Callable[[Optional[ListQuery]], Awaitable[Any]]


@dataclass
class ReconciliationState:
    """Last applied server collection and the newest fetch generation."""
    server_snapshot: List[Any] = field(default_factory=list)
    pending_request_generation: int = 0
    total: int = 0


class OptimisticMutationCoordinator(BaseController):
    """
    Mutation-then-reconcile for one resource collection.

    Usage:
        coordinator = OptimisticMutationCoordinator(fetch=assets.list_all)
        await coordinator.refetch(ListQuery())
        await coordinator.commit_bulk(assets.remove_many, ["AST-1", "AST-2"])
    """

    snapshot_changed = pyqtSignal(object)  # list of entities
    fetch_failed = pyqtSignal(object)  # FetchError

    def __init__(
        self,
        fetch: Optional[FetchFn] = None,
        notifier: Optional[NotificationSink] = None,
        parent=None
    ):
        super().__init__(notifier=notifier, parent=parent)
        self._fetch = fetch
        self._query: Optional[ListQuery] = None
        self.state = ReconciliationState()

    # ==================== Properties ====================

    @property
    def snapshot(self) -> List[Any]:
        return list(self.state.server_snapshot)

    @property
    def total(self) -> int:
        return self.state.total

    @property
    def generation(self) -> int:
        return self.state.pending_request_generation

    @property
    def has_fetch(self) -> bool:
        return self._fetch is not None

    # ==================== Fetching ====================

    async def refetch(self, query: Optional[ListQuery] = None) -> bool:
        """
        Fetch the authoritative collection and replace the snapshot wholesale.

        Args:
            query: Query to send; the last one is reused when omitted

        Returns:
            True if this fetch's result was applied. False when it failed,
            was superseded by a newer fetch or arrived after dispose. A
            coordinator without a fetch function has nothing to reconcile
            and returns True.
        """
        if self._fetch is None:
            return True
        if query is not None:
            self._query = query

        self.state.pending_request_generation += 1
        generation = self.state.pending_request_generation
        self._emit_started("fetch")

        try:
            payload = await self._fetch(self._query)
        except Exception as e:
            if not self._is_current(generation):
                return self._drop_fetch(generation)
            error = FetchError(map_exception(e, "fetch"), e)
            logger.error(f"Fetch (generation {generation}) failed: {e}", exc_info=True)
            self.notifier.error(error.message)
            self._emit_error("fetch", error.message)
            self.fetch_failed.emit(error)
            return False

        if not self._is_current(generation):
            return self._drop_fetch(generation)

        page = payload if isinstance(payload, Page) else to_page(payload, self._query)
        self.state.server_snapshot = list(page.items)
        self.state.total = page.total
        logger.debug(f"Applied fetch generation {generation}: {len(page.items)} items")
        self._emit_completed("fetch", True)
        self.snapshot_changed.emit(self.snapshot)
        return True

    def _is_current(self, generation: int) -> bool:
        if not self.is_active:
            logger.debug(f"Dropping fetch generation {generation}: coordinator disposed")
            return False
        if generation != self.state.pending_request_generation:
            logger.debug(
                f"Dropping stale fetch generation {generation} "
                f"(latest is {self.state.pending_request_generation})"
            )
            return False
        return True

    def _drop_fetch(self, generation: int) -> bool:
        # A superseded fetch leaves loading to the newer one; the newest
        # fetch is only dropped after dispose, when nothing may be emitted.
        if generation == self.state.pending_request_generation:
            self._is_loading = False
        return False

    # ==================== Mutations ====================

    async def commit_single(
        self,
        commit_fn: Callable[[], Awaitable[Any]],
        on_success: Optional[Callable[[Any], None]] = None,
        on_failure: Optional[Callable[[CommitError], None]] = None,
        owner: Optional[BaseController] = None,
        success_message: str = "",
        failure_message: str = ""
    ) -> bool:
        """
        Run one mutation, then refetch.

        On failure nothing is mutated; the error is notified and handed to
        ``on_failure`` wrapped in a CommitError. A successful mutation is
        always followed by the refetch, since other views share the
        snapshot; only the owner's notification and callbacks are skipped
        if the owner was disposed while the request was in flight.

        Returns:
            True if the mutation succeeded
        """
        try:
            result = await commit_fn()
        except Exception as e:
            self._handle_commit_failure(e, on_failure, owner, failure_message)
            return False

        if success_message and self._owner_active(owner):
            self.notifier.success(success_message)
        await self.refetch()

        if on_success is not None and self._owner_active(owner):
            on_success(result)
        return True

    async def commit_bulk(
        self,
        action_fn: Callable[[List[Any]], Awaitable[Any]],
        ids: Iterable[Any],
        on_success: Optional[Callable[[Any], None]] = None,
        on_failure: Optional[Callable[[CommitError], None]] = None,
        owner: Optional[BaseController] = None,
        success_message: str = "",
        failure_message: str = ""
    ) -> bool:
        """
        Run a batch mutation over ``ids``, then refetch.

        ``on_success`` (which clears the caller's selection) only runs once
        the refetch has been applied, never optimistically.

        Returns:
            True if the mutation succeeded, the refetch was applied and the
            owner is still active
        """
        id_list = sorted(ids, key=str)
        logger.info(f"Bulk action over {len(id_list)} items")
        try:
            result = await action_fn(id_list)
        except Exception as e:
            self._handle_commit_failure(e, on_failure, owner, failure_message)
            return False

        if success_message and self._owner_active(owner):
            self.notifier.success(success_message)
        if not await self.refetch():
            logger.warning("Bulk action succeeded but the refetch was not applied")
            return False

        if not self._owner_active(owner):
            return False
        if on_success is not None:
            on_success(result)
        return True

    def _handle_commit_failure(self, error, on_failure, owner, failure_message: str):
        detail = map_exception(error, "commit")
        message = f"{failure_message}: {detail}" if failure_message else detail
        commit_error = CommitError(message, error)
        logger.error(f"Commit failed: {error}", exc_info=True)

        if not self._owner_active(owner):
            return
        self.notifier.error(message)
        if on_failure is not None:
            on_failure(commit_error)

    def _owner_active(self, owner: Optional[BaseController]) -> bool:
        if owner is not None and not owner.is_active:
            logger.debug(f"Dropping result: {owner.__class__.__name__} was disposed")
            return False
        return True
