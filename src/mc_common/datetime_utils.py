"""UTC datetime utilities."""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(UTC)


def iso_or_none(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None
