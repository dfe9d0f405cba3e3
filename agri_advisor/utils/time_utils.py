"""
Time helpers shared by the engine and the store.

Key concepts:
  - Recency: newest-first ordering where a missing timestamp counts as the
    Unix epoch, so undated records always sort last.
  - Clock: the engine never reads the wall clock directly; it calls a
    ``Clock`` (``utcnow`` by default) so tests can pin time.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Optional, TypeVar

Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

T = TypeVar("T")


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def as_aware(ts: Optional[datetime]) -> datetime:
    """Return ``ts`` as a timezone-aware datetime; ``None`` becomes ``EPOCH``.

    Naive datetimes are assumed to be UTC.
    """
    if ts is None:
        return EPOCH
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def sort_by_recency(
    records: Iterable[T],
    key: Callable[[T], Optional[datetime]] = lambda r: r.created_at,  # type: ignore[attr-defined]
) -> list[T]:
    """Return ``records`` sorted newest first by ``key``.

    The sort is stable: records with equal timestamps keep their input order.
    Records whose timestamp is ``None`` sort last.

    Args:
        records: Any iterable of timestamped records.
        key: Extracts the timestamp; defaults to ``record.created_at``.

    Returns:
        A new list.
    """
    return sorted(records, key=lambda r: as_aware(key(r)), reverse=True)


def epoch_millis(ts: datetime) -> int:
    """Milliseconds since the Unix epoch, used for synthetic candidate ids."""
    return int(as_aware(ts).timestamp() * 1000)


def to_iso(ts: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC text for storage, or ``None``.

    Always normalised to UTC so stored timestamps order correctly as text.
    """
    if ts is None:
        return None
    return as_aware(ts).astimezone(timezone.utc).isoformat()


def from_iso(text: Optional[str]) -> Optional[datetime]:
    """Parse stored ISO-8601 text; ``None``/empty → ``None``.

    Accepts the trailing ``Z`` form written by SQLite ``strftime`` defaults.
    """
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_aware(datetime.fromisoformat(text))
