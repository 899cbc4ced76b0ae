from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

__all__ = [
    'now_utc',
    'ensure_utc',
]

def now_utc() -> datetime:
    """Current UTC time, timezone-aware. Every stored timestamp comes from here."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach / convert to UTC.

    pymongo hands back naive datetimes that are already UTC, so naive values
    only get tzinfo attached; aware values are converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
