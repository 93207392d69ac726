# -*- coding: utf-8 -*-
"""
Application configuration.

Settings are read from environment variables; a ``.env`` file in the
project root is loaded first so each developer can point the console at
their own backend.

Example .env:
    API_BASE_URL=http://localhost:5000/api/v1
    API_TIMEOUT=30
    DEFAULT_PAGE_SIZE=25
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Tuple
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


# ============================================================================
# Read settings from environment variables (from .env or system)
# ============================================================================
_API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api/v1")
_API_TIMEOUT = int(os.getenv("API_TIMEOUT", "30"))
_API_VERIFY_SSL = _env_bool("API_VERIFY_SSL", "true")
_API_TOKEN = os.getenv("API_TOKEN", None)

_DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
_PURCHASE_TAX_RATE = float(os.getenv("PURCHASE_TAX_RATE", "0.18"))


@dataclass
class Config:
    """Application configuration."""

    # Application Info
    APP_NAME: str = "Asset Console"
    APP_TITLE: str = "Asset Management Console"
    VERSION: str = "1.0.0"

    # HTTP API Backend Settings
    API_BASE_URL: str = _API_BASE_URL
    API_TIMEOUT: int = _API_TIMEOUT
    API_VERIFY_SSL: bool = _API_VERIFY_SSL
    API_TOKEN: str = _API_TOKEN  # issued by the auth layer, may be None

    # Resource endpoints (relative to API_BASE_URL)
    ASSETS_PATH: str = "/assets"
    USERS_PATH: str = "/users"
    TRANSACTIONS_PATH: str = "/transactions"
    AUDIT_LOGS_PATH: str = "/audit-logs"
    DOCUMENTS_PATH: str = "/documents"
    MAINTENANCE_PATH: str = "/maintenance"
    TRANSFERS_PATH: str = "/asset-transfers"
    PURCHASE_ORDERS_PATH: str = "/purchase-management/purchase-orders"
    BULK_PATH: str = "/bulk"
    ADMIN_USERS_PATH: str = "/admin/users"

    # Registries
    DEFAULT_PAGE_SIZE: int = _DEFAULT_PAGE_SIZE
    PAGE_SIZE_OPTIONS: Tuple[int, ...] = (5, 10, 25)
    FETCH_PAGE_SIZE: int = 100  # largest limit the backend accepts

    # Purchase orders
    PURCHASE_TAX_RATE: float = _PURCHASE_TAX_RATE  # 18% GST
    DEFAULT_PAYMENT_TERMS: str = "Net 30"

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Logging
    LOG_FILE: str = "app.log"
    LOG_PATH: Path = LOGS_DIR / LOG_FILE
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    LOG_BACKUP_COUNT: int = 3
