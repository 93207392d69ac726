# -*- coding: utf-8 -*-
"""
Asset Console API Client
========================

Thin HTTP layer over the console backend. Authentication is owned by the
host application: it hands over a bearer token via ``set_access_token``.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
import urllib3

from services.exceptions import ApiException, NetworkException
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ApiConfig:
    """
    API connection settings.

    Values left as None are loaded from Config (which reads .env).
    """
    base_url: str = None
    timeout: int = None
    verify_ssl: bool = None
    token: Optional[str] = None

    def __post_init__(self):
        from app.config import Config

        if self.base_url is None:
            self.base_url = Config.API_BASE_URL
        if self.timeout is None:
            self.timeout = Config.API_TIMEOUT
        if self.verify_ssl is None:
            self.verify_ssl = Config.API_VERIFY_SSL
        if self.token is None:
            self.token = Config.API_TOKEN


class ApiClient:
    """
    HTTP client for the console backend.

    Usage:
        client = ApiClient(ApiConfig(base_url="http://localhost:5000/api/v1"))
        assets = client.get("/assets", params={"page": 1, "limit": 10})
    """

    def __init__(self, config: ApiConfig):
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.access_token: Optional[str] = config.token

        if not config.verify_ssl:
            # Self-signed certificates in development
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def set_access_token(self, token: Optional[str]):
        """Set (or clear) the bearer token used for every request."""
        self.access_token = token
        logger.debug("Access token updated externally")

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Any] = None,
        params: Optional[Dict] = None
    ) -> Any:
        """
        Execute an HTTP request with error handling.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: API endpoint (e.g., "/assets")
            json_data: JSON payload
            params: Query parameters

        Returns:
            Response JSON data, or None for an empty body
        """
        url = f"{self.base_url}{endpoint}"

        logger.info(f"[API REQ] {method} {endpoint}")
        if params:
            logger.debug(f"[API REQ] Params: {params}")
        if json_data is not None:
            logger.debug(f"[API REQ] Body: {json.dumps(json_data, ensure_ascii=False, default=str)}")

        try:
            response = requests.request(
                method=method,
                url=url,
                json=json_data,
                params=params,
                headers=self._headers(),
                timeout=self.config.timeout,
                verify=self.config.verify_ssl
            )
            response.raise_for_status()

            result = None
            if response.text:
                result = response.json()

            logger.info(f"[API RES] {response.status_code} {endpoint}")
            return result

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 0
            response_data = {}
            try:
                response_data = e.response.json() if e.response is not None else {}
            except (ValueError, AttributeError):
                pass
            logger.error(f"[API ERR] {status_code} {method} {endpoint} | Response: {response_data}")
            message = response_data.get("message") if isinstance(response_data, dict) else None
            raise ApiException(
                message=message or str(e),
                status_code=status_code,
                response_data=response_data if isinstance(response_data, dict) else {}
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.error(f"Network error: {endpoint} - {e}")
            raise NetworkException(message=str(e), original_error=e)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {endpoint} - {e}")
            raise NetworkException(message=str(e), original_error=e)

    def get(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        return self._request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self._request("POST", endpoint, json_data=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self._request("PUT", endpoint, json_data=data)

    def patch(self, endpoint: str, data: Any = None) -> Any:
        return self._request("PATCH", endpoint, json_data=data)

    def delete(self, endpoint: str, data: Any = None) -> Any:
        return self._request("DELETE", endpoint, json_data=data)


# ==================== Singleton Instance ====================

_api_client_instance: Optional[ApiClient] = None


def get_api_client(config: Optional[ApiConfig] = None) -> ApiClient:
    """
    Get the shared ApiClient instance.

    Args:
        config: API settings (only used on first call)
    """
    global _api_client_instance

    if _api_client_instance is None:
        if config is None:
            config = ApiConfig()
        _api_client_instance = ApiClient(config)

    return _api_client_instance


def reset_api_client():
    """Reset the shared client (for tests)."""
    global _api_client_instance
    _api_client_instance = None
