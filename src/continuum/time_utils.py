"""Helpers for dealing with timezone-aware datetimes."""
from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def get_timezone(tz_name: str) -> ZoneInfo:
    """Return ZoneInfo instance with graceful fallback to UTC."""

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def get_now(tz: ZoneInfo) -> datetime:
    """Return the current instant in ``tz`` rounded down to the minute."""

    return datetime.now(tz).replace(second=0, microsecond=0)


__all__ = ["get_timezone", "get_now"]
