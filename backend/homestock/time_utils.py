# Overview: UTC timestamps for model columns, soft delete stamps and JSON output.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC, the form every DateTime column in homestock stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(value: Optional[datetime]) -> Optional[str]:
    """created_at / deactivated_at as "2026-10-18T09:30:00Z"; naive values are UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")
