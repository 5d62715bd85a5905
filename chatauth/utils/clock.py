"""Timezone-aware time helpers shared by entities and services."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Returns the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
