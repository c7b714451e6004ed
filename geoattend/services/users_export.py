from __future__ import annotations

import csv
import io
from datetime import date
from typing import Any, Iterable, Mapping, Sequence

from geoattend.services.user_query import format_field

DEFAULT_EXPORT_COLUMNS = [
    "name",
    "email",
    "phone",
    "matricNumber",
    "department",
    "level",
    "role",
    "status",
    "verification",
    "joined",
    "lastActive",
]

COLUMN_LABELS = {
    "key": "ID",
    "id": "ID",
    "name": "Name",
    "email": "Email",
    "phone": "Phone",
    "matricNumber": "Matric Number",
    "department": "Department",
    "level": "Level",
    "role": "Role",
    "status": "Status",
    "verification": "Verification",
    "labels": "Labels",
    "profileCompleted": "Profile Completed",
    "joined": "Joined",
    "lastActive": "Last Active",
}


def column_label(column: str) -> str:
    return COLUMN_LABELS.get(column, column)


def build_users_csv(records: Iterable[Mapping[str, Any]], columns: Sequence[str] | None = None) -> str:
    """Render records as CSV text: every field quoted, rows joined by newline."""
    cols = DEFAULT_EXPORT_COLUMNS if columns is None else list(columns)
    if not cols:
        return ""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([column_label(c) for c in cols])
    for record in records:
        writer.writerow([format_field(record, c) for c in cols])
    return buffer.getvalue().rstrip("\n")


def export_filename(day: date | None = None) -> str:
    return f"users_export_{(day or date.today()).isoformat()}.csv"
