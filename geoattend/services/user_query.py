from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from geoattend.schemas.users import Aggregates, UserQuery, UserQueryResult

DATE_FIELDS = frozenset({"joined", "lastActive"})
DEFAULT_ROLE = "User"
ACTIVE_STATUS = "Active"
ADMIN_ROLE = "Admin"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")

# Sort key ranks: missing values first, then instants, then text.
_RANK_MISSING = 0
_RANK_INSTANT = 1
_RANK_TEXT = 2


class InvalidArgument(ValueError):
    pass


def _plain_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(_plain_text(item) for item in value)
    return str(value)


def _date_text(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            return _plain_text(value)
    return _plain_text(value)


def _verification_text(value: Any) -> str:
    if value is True:
        return "Verified"
    if isinstance(value, str) and value.strip().lower() == "verified":
        return "Verified"
    return "Unverified"


def _role_text(value: Any) -> str:
    return _plain_text(value).strip() or DEFAULT_ROLE


FIELD_FORMATTERS = {
    "verification": _verification_text,
    "role": _role_text,
    "joined": _date_text,
    "lastActive": _date_text,
}


def format_value(field: str, value: Any) -> str:
    """Render one field value the way the users table shows it."""
    formatter = FIELD_FORMATTERS.get(field, _plain_text)
    return formatter(value)


def format_field(record: Mapping[str, Any], field: str) -> str:
    return format_value(field, record.get(field))


def parse_instant(value: Any) -> float | None:
    """Return epoch seconds for a timestamp-like value, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        return float(value)
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    elif isinstance(value, str):
        text = value.strip()
        if not _ISO_DATE_RE.match(text):
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _as_record(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


def _matches_search(record: Mapping[str, Any], needle: str) -> bool:
    for field, value in record.items():
        if value is None:
            continue
        if needle in format_value(field, value).lower():
            return True
    return False


def _active_filters(column_filters: Mapping[str, Any]) -> list[tuple[str, str]]:
    active = []
    for field, required in (column_filters or {}).items():
        text = str(required or "")
        if not text.strip():
            continue
        active.append((field, text.lower()))
    return active


def _sort_key(record: Mapping[str, Any], column: str) -> tuple:
    raw = record.get(column)
    if column in DATE_FIELDS:
        instant = parse_instant(raw)
        if instant is None:
            return (_RANK_MISSING, 0.0, "")
        return (_RANK_INSTANT, instant, "")
    if isinstance(raw, (str, datetime, date)):
        instant = parse_instant(raw)
        if instant is not None:
            return (_RANK_INSTANT, instant, "")
    text = format_value(column, raw)
    if not text:
        return (_RANK_MISSING, 0.0, "")
    return (_RANK_TEXT, 0.0, text)


def select(users: Iterable[Any], query: UserQuery) -> list[Mapping[str, Any]]:
    """Apply search, column filters and sort; no pagination."""
    records = [_as_record(raw) for raw in (users or [])]

    needle = str(query.search_text or "").lower()
    if needle:
        records = [r for r in records if _matches_search(r, needle)]

    for field, required in _active_filters(query.column_filters):
        records = [r for r in records if format_field(r, field).lower() == required]

    column = query.sort.column if query.sort else None
    if column:
        # sorted() is stable, and reverse=True keeps ties in input order too.
        records = sorted(
            records,
            key=lambda r: _sort_key(r, column),
            reverse=query.sort.direction == "descending",
        )
    return records


def aggregate(records: Sequence[Mapping[str, Any]]) -> Aggregates:
    return Aggregates(
        total_users=len(records),
        active_users=sum(1 for r in records if r.get("status") == ACTIVE_STATUS),
        total_admins=sum(1 for r in records if r.get("role") == ADMIN_ROLE),
    )


def page_count_for(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size))


def evaluate(users: Iterable[Any], query: UserQuery) -> UserQueryResult:
    """Filter, sort and paginate an already fetched list of user records.

    Records are never mutated: returned items are shallow copies. Aggregates
    are computed over the filtered set, before pagination. A non-positive
    page size raises InvalidArgument; any page number is clamped into range.
    """
    page_size = int(query.page_size)
    if page_size <= 0:
        raise InvalidArgument(f"pageSize must be a positive integer, got {query.page_size}")

    matched = select(users, query)
    aggregates = aggregate(matched)
    page_count = page_count_for(len(matched), page_size)
    page = min(max(int(query.page), 1), page_count)

    start = (page - 1) * page_size
    items = [dict(r) for r in matched[start:start + page_size]]
    return UserQueryResult(
        items=items,
        total_matched=len(matched),
        page_count=page_count,
        page=page,
        page_size=page_size,
        aggregates=aggregates,
    )
