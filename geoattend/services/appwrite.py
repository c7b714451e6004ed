from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from geoattend.core.config import settings

logger = logging.getLogger(__name__)


class AppwriteError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _base_url() -> str:
    base_url = str(settings.APPWRITE_ENDPOINT or "").strip().rstrip("/")
    if not base_url:
        raise AppwriteError("APPWRITE_ENDPOINT is not configured")
    return base_url


def _project_headers() -> dict[str, str]:
    project_id = str(settings.APPWRITE_PROJECT_ID or "").strip()
    if not project_id:
        raise AppwriteError("APPWRITE_PROJECT_ID is not configured")
    return {"X-Appwrite-Project": project_id, "Content-Type": "application/json"}


def _server_headers() -> dict[str, str]:
    api_key = str(settings.APPWRITE_API_KEY or "").strip()
    if not api_key:
        raise AppwriteError("APPWRITE_API_KEY is not configured")
    headers = _project_headers()
    headers["X-Appwrite-Key"] = api_key
    return headers


def _session_headers(jwt: str) -> dict[str, str]:
    token = str(jwt or "").strip()
    if not token:
        raise AppwriteError("Missing session token", status_code=401)
    headers = _project_headers()
    headers["X-Appwrite-JWT"] = token
    return headers


def query_string(method: str, *values: Any) -> str:
    return json.dumps({"method": method, "values": list(values)}, separators=(",", ":"))


def _request(method: str, path: str, *, headers: dict[str, str], params=None, payload=None) -> dict[str, Any]:
    url = f"{_base_url()}{path}"
    try:
        with httpx.Client(timeout=float(settings.APPWRITE_TIMEOUT_SECONDS)) as client:
            response = client.request(method, url, headers=headers, params=params, json=payload)
    except httpx.HTTPError as exc:
        logger.warning("appwrite request failed: %s %s error=%s", method, path, exc)
        raise AppwriteError(f"Appwrite request failed: {exc}") from exc

    try:
        data = response.json() if response.content else {}
    except ValueError:
        data = {}
    if response.status_code >= 400:
        message = str((data or {}).get("message") or f"HTTP {response.status_code}")
        logger.warning("appwrite error: %s %s status=%s message=%s", method, path, response.status_code, message)
        raise AppwriteError(message, status_code=response.status_code)
    return data if isinstance(data, dict) else {}


def list_users(*, limit: int, offset: int) -> dict[str, Any]:
    params = [("queries[]", query_string("limit", int(limit))), ("queries[]", query_string("offset", int(offset)))]
    return _request("GET", "/users", headers=_server_headers(), params=params)


def get_account(jwt: str) -> dict[str, Any]:
    return _request("GET", "/account", headers=_session_headers(jwt))


def update_account_prefs(jwt: str, prefs: dict[str, Any]) -> dict[str, Any]:
    return _request("PATCH", "/account/prefs", headers=_session_headers(jwt), payload={"prefs": prefs})


def update_account_name(jwt: str, name: str) -> dict[str, Any]:
    return _request("PATCH", "/account/name", headers=_session_headers(jwt), payload={"name": name})
