# -*- coding: utf-8 -*-
"""
Data API gateway.

Async request/response functions per resource type. Every response passes
through ``unwrap_envelope`` so controllers never branch on transport shape:
the backend answers with ``{data: T}``, ``{data: {items: [...]}}``,
``{items: [...]}``, ``{success, data: [...], pagination: {...}}`` or a bare
value depending on the endpoint.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

from app.config import Config
from models.list_query import ListQuery
from models.page import Page
from services.api_client import ApiClient, get_api_client
from utils.logger import get_logger

logger = get_logger(__name__)

_COLLECTION_KEYS = ("items", "results", "records", "rows")
_TOTAL_KEYS = ("total", "totalCount", "total_count", "count")


def unwrap_envelope(payload: Any) -> Any:
    """
    Strip transport envelopes and return the bare value or collection.

    Examples:
        {"data": {"id": 1}}                  -> {"id": 1}
        {"data": {"items": [a, b]}}          -> [a, b]
        {"success": True, "data": [a, b]}    -> [a, b]
        {"items": [a, b], "total": 2}        -> [a, b]
        [a, b]                               -> [a, b]
    """
    value = payload
    if isinstance(value, dict) and "data" in value:
        value = value["data"]
    if isinstance(value, dict):
        for key in _COLLECTION_KEYS:
            if isinstance(value.get(key), list):
                return value[key]
    return value


def _find_total(payload: Any) -> Optional[int]:
    """Look for a total count in the envelope layers."""
    layers = []
    if isinstance(payload, dict):
        layers.append(payload.get("pagination") or {})
        layers.append(payload)
        data = payload.get("data")
        if isinstance(data, dict):
            layers.append(data.get("pagination") or {})
            layers.append(data)
    for layer in layers:
        if not isinstance(layer, dict):
            continue
        for key in _TOTAL_KEYS:
            total = layer.get(key)
            if isinstance(total, int) and not isinstance(total, bool):
                return total
    return None


def to_page(payload: Any, query: Optional[ListQuery] = None) -> Page:
    """Build a Page from any supported response shape."""
    items = unwrap_envelope(payload)
    if items is None:
        items = []
    elif not isinstance(items, list):
        items = [items]

    total = _find_total(payload)
    return Page(
        items=items,
        total=total if total is not None else len(items),
        page=query.page if query else 0,
        page_size=query.page_size if query else len(items),
    )


class ResourceGateway:
    """
    Async CRUD access to one backend resource collection.

    The underlying ApiClient is blocking; each call runs in a worker thread
    so the console's event loop is never blocked.
    """

    def __init__(self, path: str, client: Optional[ApiClient] = None):
        self.path = path.rstrip("/")
        self._client = client

    @property
    def client(self) -> ApiClient:
        if self._client is None:
            self._client = get_api_client()
        return self._client

    async def _call(self, method: str, *args) -> Any:
        func = getattr(self.client, method)
        return await asyncio.to_thread(func, *args)

    async def list(self, query: Optional[ListQuery] = None) -> Page:
        params = query.to_params() if query else None
        payload = await self._call("get", self.path, params)
        page = to_page(payload, query)
        logger.debug(f"Fetched {len(page.items)} of {page.total} from {self.path}")
        return page

    async def list_all(self, query: Optional[ListQuery] = None) -> Page:
        """
        Fetch every page of the collection.

        The backend applies a default limit when none is sent, so the
        collection is requested page by page until ``total`` items arrived.
        Search and filters of ``query`` are forwarded; its paging is not.
        """
        base = (query or ListQuery()).with_changes(page=0, page_size=Config.FETCH_PAGE_SIZE)
        items: List[Any] = []
        total = 0
        page_number = 0
        while True:
            page = await self.list(base.with_changes(page=page_number))
            items.extend(page.items)
            total = page.total
            if not page.items or len(items) >= total:
                break
            page_number += 1
        logger.debug(f"Fetched all {len(items)} of {total} from {self.path} "
                     f"in {page_number + 1} request(s)")
        return Page(items=items, total=max(total, len(items)))

    async def get(self, entity_id: str) -> Any:
        return unwrap_envelope(await self._call("get", f"{self.path}/{entity_id}"))

    async def create(self, payload: Dict[str, Any]) -> Any:
        return unwrap_envelope(await self._call("post", self.path, payload))

    async def update(self, entity_id: str, payload: Dict[str, Any]) -> Any:
        return unwrap_envelope(await self._call("put", f"{self.path}/{entity_id}", payload))

    async def remove(self, entity_id: str) -> None:
        await self._call("delete", f"{self.path}/{entity_id}")

    async def remove_many(self, ids: Iterable[str]) -> None:
        """Delete one by one; stops at the first failure."""
        for entity_id in ids:
            await self.remove(entity_id)


class BulkOperationsGateway:
    """
    Batch endpoints of the backend.

    Asset batches go through ``/bulk/<operation>`` with an ``asset_ids``
    body; user status changes through ``PATCH /admin/users/bulk-status``.
    """

    def __init__(self, client: Optional[ApiClient] = None):
        self._client = client

    @property
    def client(self) -> ApiClient:
        if self._client is None:
            self._client = get_api_client()
        return self._client

    async def _call(self, method: str, *args) -> Any:
        func = getattr(self.client, method)
        return unwrap_envelope(await asyncio.to_thread(func, *args))

    async def update_asset_status(self, ids: Iterable[str], status: str, notes: str = "") -> Any:
        body = {"asset_ids": list(ids), "status": status, "notes": notes}
        return await self._call("post", f"{Config.BULK_PATH}/update-status", body)

    async def assign_assets(self, ids: Iterable[str], user_id: str,
                            department: str = "", notes: str = "") -> Any:
        body = {"asset_ids": list(ids), "user_id": user_id,
                "department": department, "notes": notes}
        return await self._call("post", f"{Config.BULK_PATH}/assign", body)

    async def delete_assets(self, ids: Iterable[str], reason: str = "",
                            permanent: bool = False) -> Any:
        body = {"asset_ids": list(ids), "reason": reason, "permanent": permanent}
        return await self._call("post", f"{Config.BULK_PATH}/delete", body)

    async def update_user_status(self, ids: Iterable[str], status: str) -> Any:
        body = {"user_ids": list(ids), "status": status}
        return await self._call("patch", f"{Config.ADMIN_USERS_PATH}/bulk-status", body)
