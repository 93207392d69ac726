# -*- coding: utf-8 -*-
"""
Smoke tests to ensure application doesn't break after changes.
These tests verify basic functionality works.
"""
import pytest


def test_imports():
    """Test that all main modules can be imported."""
    try:
        from app import Config
        from controllers import ListViewController, WizardController
        from registries import build_registry
        from services.data_api import ResourceGateway
        from wizards import create_wizard
        assert True
    except ImportError as e:
        pytest.fail(f"Import failed: {e}")


def test_config_defaults():
    """Test configuration values used by the controllers."""
    from app.config import Config

    assert Config.DEFAULT_PAGE_SIZE > 0
    assert Config.DEFAULT_PAGE_SIZE in Config.PAGE_SIZE_OPTIONS
    assert 0 <= Config.PURCHASE_TAX_RATE < 1
    assert Config.ASSETS_PATH.startswith("/")


def test_logger_writes_under_app_logger():
    """Test module loggers are children of the application logger."""
    from utils.logger import get_logger

    logger = get_logger("controllers.sample")
    assert logger.name == "asset_console.controllers.sample"


def test_notification_sinks(qapp):
    """Test both notification sinks accept notifications."""
    from services.notification_service import (
        LoggingNotificationSink, NotificationKind, QtNotificationSink
    )

    LoggingNotificationSink().error("Failed to load assets")

    received = []
    sink = QtNotificationSink()
    sink.notification.connect(lambda kind, message: received.append((kind, message)))
    sink.notify(NotificationKind.SUCCESS, "Asset saved")

    assert received == [("success", "Asset saved")]


def test_main_rejects_unknown_registry():
    """Test the entry point validates its argument."""
    from main import main

    with pytest.raises(SystemExit):
        main(["vendors"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
