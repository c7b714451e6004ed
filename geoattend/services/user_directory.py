from __future__ import annotations

import logging
from typing import Any

from geoattend.core.config import settings
from geoattend.services import appwrite

logger = logging.getLogger(__name__)

MAX_SOURCE_LIMIT = 100


def _labels(raw: dict[str, Any]) -> list[str]:
    labels = raw.get("labels")
    if not isinstance(labels, list):
        return []
    return [str(label) for label in labels]


def _optional_text(value: Any) -> str | None:
    text = str(value or "").strip()
    return text or None


def map_provider_user(raw: dict[str, Any]) -> dict[str, Any]:
    """Flatten an Appwrite user (with its prefs blob) into a users table row."""
    prefs = raw.get("prefs") if isinstance(raw.get("prefs"), dict) else {}
    labels = _labels(raw)
    user_id = str(raw.get("$id") or "")
    created_at = raw.get("$createdAt") or raw.get("createdAt")
    updated_at = raw.get("$updatedAt") or raw.get("updatedAt")
    return {
        "key": user_id,
        "id": user_id,
        "name": _optional_text(raw.get("name")) or "No Name",
        "email": _optional_text(raw.get("email")),
        "phone": _optional_text(raw.get("phone")),
        "status": "Active" if raw.get("status") else "Inactive",
        "verification": bool(raw.get("emailVerification")),
        "role": "Admin" if settings.ADMIN_LABEL in labels else "User",
        "labels": ", ".join(labels) or None,
        "lastActive": raw.get("accessedAt") or updated_at or created_at,
        "joined": created_at,
        "department": _optional_text(prefs.get("department")),
        "level": _optional_text(prefs.get("level")),
        "matricNumber": _optional_text(prefs.get("matricNumber")),
        "profileCompleted": bool(prefs.get("profileCompleted")),
    }


def _source_limit(limit: int | None) -> int:
    value = int(limit or settings.USER_DIRECTORY_PAGE_LIMIT)
    return min(max(value, 1), MAX_SOURCE_LIMIT)


def fetch_users_page(page: int = 1, limit: int = 50) -> dict[str, Any]:
    page = max(int(page or 1), 1)
    limit = _source_limit(limit)
    data = appwrite.list_users(limit=limit, offset=(page - 1) * limit)
    raw_users = data.get("users") or []
    return {
        "users": [map_provider_user(u) for u in raw_users if isinstance(u, dict)],
        "total": int(data.get("total") or 0),
        "page": page,
        "limit": limit,
    }


def fetch_all_users() -> list[dict[str, Any]]:
    """Walk the whole directory in provider-sized blocks."""
    block = _source_limit(settings.USER_DIRECTORY_PAGE_LIMIT)
    cap = max(int(settings.USER_DIRECTORY_MAX_USERS), 0)
    users: list[dict[str, Any]] = []
    offset = 0
    while len(users) < cap:
        data = appwrite.list_users(limit=block, offset=offset)
        raw_users = [u for u in (data.get("users") or []) if isinstance(u, dict)]
        if not raw_users:
            break
        users.extend(map_provider_user(u) for u in raw_users)
        offset += len(raw_users)
        total = int(data.get("total") or 0)
        if offset >= total:
            break
    if len(users) > cap:
        logger.warning("user directory truncated at %s users", cap)
        users = users[:cap]
    return users
