# -*- coding: utf-8 -*-
"""
Asset Console Service Layer
"""

from .api_client import ApiClient, ApiConfig, get_api_client, reset_api_client
from .data_api import BulkOperationsGateway, ResourceGateway, to_page, unwrap_envelope
from .notification_service import (
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    QtNotificationSink,
)

__all__ = [
    "ApiClient",
    "ApiConfig",
    "get_api_client",
    "reset_api_client",
    "BulkOperationsGateway",
    "ResourceGateway",
    "to_page",
    "unwrap_envelope",
    "LoggingNotificationSink",
    "NotificationKind",
    "NotificationSink",
    "QtNotificationSink",
]
