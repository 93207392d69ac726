# -*- coding: utf-8 -*-
"""
Shared fixtures.
"""

import pytest
from PyQt5.QtCore import QCoreApplication

from models.page import Page
from services.notification_service import NotificationKind, NotificationSink


@pytest.fixture(scope="session")
def qapp_cls():
    """Controllers only need the Qt core; no display is required."""
    return QCoreApplication


class RecordingNotificationSink(NotificationSink):
    """Keeps every notification for assertions."""

    def __init__(self):
        self.calls = []

    def notify(self, kind, message):
        self.calls.append((NotificationKind(kind), message))

    def messages(self, kind):
        return [message for k, message in self.calls if k == kind]


class FakeCollection:
    """
    In-memory resource collection with a fetch function and bulk actions.

    ``gate`` (an asyncio.Event) can hold fetches open to simulate slow
    responses; ``fail_next_fetch`` makes the next fetch raise.
    """

    def __init__(self, items):
        self.items = [dict(item) for item in items]
        self.fetch_calls = []
        self.gate = None
        self.fail_next_fetch = None
        self.bulk_calls = []

    async def fetch(self, query=None):
        self.fetch_calls.append(query)
        snapshot = [dict(item) for item in self.items]
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_next_fetch is not None:
            error, self.fail_next_fetch = self.fail_next_fetch, None
            raise error
        return Page(items=snapshot)

    async def bulk_remove(self, ids):
        self.bulk_calls.append(("remove", list(ids)))
        self.items = [item for item in self.items if item["id"] not in set(ids)]

    async def bulk_update(self, ids, **patch):
        self.bulk_calls.append(("update", list(ids), patch))
        for item in self.items:
            if item["id"] in set(ids):
                item.update(patch)

    async def failing_action(self, ids):
        self.bulk_calls.append(("fail", list(ids)))
        raise RuntimeError("backend unavailable")


def make_assets(count):
    statuses = ("Active", "In Repair", "Retired")
    return [
        {
            "id": f"AST-{1001 + i}",
            "name": f"Asset {i}",
            "status": statuses[i % 3],
            "category": "IT Equipment" if i % 2 == 0 else "Furniture",
            "user": {"name": "Priya Singh" if i == 0 else "Unassigned"},
        }
        for i in range(count)
    ]


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def assets():
    return FakeCollection(make_assets(25))


@pytest.fixture
def make_collection():
    """Factory for collections with custom items."""
    return FakeCollection
