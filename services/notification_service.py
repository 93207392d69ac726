# -*- coding: utf-8 -*-
"""
User notifications.

Controllers talk to an injected NotificationSink instead of showing toasts
themselves. ``notify`` is fire-and-forget: it never blocks and is never
awaited.
"""

from abc import ABC, abstractmethod
from enum import Enum

from PyQt5.QtCore import QObject, pyqtSignal

from utils.logger import get_logger

logger = get_logger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class NotificationSink(ABC):
    """Receives user-facing notifications."""

    @abstractmethod
    def notify(self, kind: NotificationKind, message: str) -> None:
        pass

    def success(self, message: str):
        self.notify(NotificationKind.SUCCESS, message)

    def error(self, message: str):
        self.notify(NotificationKind.ERROR, message)

    def info(self, message: str):
        self.notify(NotificationKind.INFO, message)


class LoggingNotificationSink(NotificationSink):
    """Writes notifications to the application log (headless runs)."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind == NotificationKind.ERROR:
            logger.warning(f"[notify:{kind.value}] {message}")
        else:
            logger.info(f"[notify:{kind.value}] {message}")


class _NotificationEmitter(QObject):
    notification = pyqtSignal(str, str)  # kind, message


class QtNotificationSink(NotificationSink):
    """
    Re-emits notifications as a Qt signal so a toast widget can show them.

    Usage:
        sink = QtNotificationSink()
        sink.notification.connect(lambda kind, msg: Toast.show(window, msg, kind))
    """

    def __init__(self):
        self._emitter = _NotificationEmitter()

    @property
    def notification(self):
        return self._emitter.notification

    def notify(self, kind: NotificationKind, message: str) -> None:
        self._emitter.notification.emit(NotificationKind(kind).value, message)
