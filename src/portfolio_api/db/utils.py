from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_changes(row: Any, changes: Mapping[str, Any]) -> Any:
    """Copy the supplied fields onto an ORM row and bump its timestamp."""
    for field, value in changes.items():
        setattr(row, field, value)
    row.updated_at = utcnow()
    return row
