from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from geoattend.schemas.profile import ProfileOut, ProfileUpdate
from geoattend.services import appwrite

REQUIRED_PROFILE_FIELDS = ("fullName", "phoneNumber", "matricNumber")


def is_profile_complete(prefs: dict[str, Any] | None) -> bool:
    prefs = prefs or {}
    if not prefs.get("profileCompleted"):
        return False
    return all(str(prefs.get(field) or "").strip() for field in REQUIRED_PROFILE_FIELDS)


def build_profile_prefs(existing: dict[str, Any] | None, update: ProfileUpdate, *, now: datetime | None = None) -> dict[str, Any]:
    # Appwrite replaces the whole prefs blob, so unrelated keys are carried over.
    prefs = dict(existing or {})
    prefs.update(
        {
            "fullName": update.full_name,
            "phoneNumber": update.phone_number,
            "matricNumber": update.matric_number,
            "department": update.department,
            "level": update.level,
            "profileCompleted": True,
            "updatedAt": (now or datetime.now(timezone.utc)).isoformat(),
        }
    )
    return prefs


def profile_from_account(account: dict[str, Any]) -> ProfileOut:
    prefs = account.get("prefs") if isinstance(account.get("prefs"), dict) else {}
    return ProfileOut(
        id=str(account.get("$id") or ""),
        email=account.get("email") or None,
        full_name=prefs.get("fullName") or account.get("name") or None,
        phone_number=prefs.get("phoneNumber") or None,
        matric_number=prefs.get("matricNumber") or None,
        department=prefs.get("department") or None,
        level=prefs.get("level") or None,
        profile_completed=is_profile_complete(prefs),
    )


def save_profile(jwt: str, account: dict[str, Any], update: ProfileUpdate) -> ProfileOut:
    existing = account.get("prefs") if isinstance(account.get("prefs"), dict) else {}
    prefs = build_profile_prefs(existing, update)
    appwrite.update_account_prefs(jwt, prefs)
    if update.full_name != account.get("name"):
        appwrite.update_account_name(jwt, update.full_name)
    return profile_from_account({**account, "name": update.full_name, "prefs": prefs})
