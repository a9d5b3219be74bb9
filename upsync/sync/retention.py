# Upsync Retention Scheduler
# Grandfather-father-son selection of snapshots to keep

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetentionPolicy:
    """How many daily, weekly and monthly snapshots to keep."""

    days: int = 30
    weeks: int = 5
    months: int = 3


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """Anything with an identity and a timestamp that can be retained."""

    key: str
    timestamp: datetime
    item: T


def _start_of(day: date, now: datetime) -> datetime:
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)


def _shift_months(day: date, months: int) -> date:
    """Move a first-of-month date back by a number of months."""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def time_boundaries(policy: RetentionPolicy, now: datetime) -> list[datetime]:
    """
    Generate inclusive lower bounds of the retention windows.

    Days start at midnight, weeks on Monday, months on the 1st, all in
    the timezone of ``now``. The lists are concatenated days first; the
    same instant may appear more than once.

    Args:
        policy: Retention counts.
        now: Current time (timezone aware).

    Returns:
        List of boundaries.
    """
    today = now.date()
    boundaries: list[datetime] = []

    for i in range(policy.days):
        boundaries.append(_start_of(today - timedelta(days=i), now))

    week_start = today - timedelta(days=today.weekday())
    for i in range(policy.weeks):
        boundaries.append(_start_of(week_start - timedelta(weeks=i), now))

    month_start = today.replace(day=1)
    for i in range(policy.months):
        boundaries.append(_start_of(_shift_months(month_start, i), now))

    return boundaries


def select_kept(
    boundaries: Iterable[datetime],
    candidates: Iterable[Candidate[T]],
) -> dict[datetime, Candidate[T]]:
    """
    Pick the immediate successor of each boundary.

    For every boundary the candidate with the smallest timestamp at or
    after it is kept: the version that was current from that moment on.
    Equal timestamps are resolved by ascending key. Boundaries with no
    candidate at or after them are absent from the result.

    Args:
        boundaries: Inclusive lower bounds.
        candidates: Candidates to choose from.

    Returns:
        Dict of boundary to kept candidate.
    """
    ordered = sorted(candidates, key=lambda c: (c.timestamp, c.key))
    kept: dict[datetime, Candidate[T]] = {}

    for boundary in boundaries:
        successor = _first_at_or_after(ordered, boundary)
        if successor is not None:
            kept[boundary] = successor

    return kept


def _first_at_or_after(ordered: list[Candidate[T]], boundary: datetime) -> Optional[Candidate[T]]:
    for candidate in ordered:
        if candidate.timestamp >= boundary:
            return candidate
    return None


def kept_keys(
    policy: RetentionPolicy,
    now: datetime,
    items: Iterable[T],
    key: Callable[[T], str],
    timestamp: Callable[[T], datetime],
) -> set[str]:
    """
    Keys of the items that survive a retention policy.

    Args:
        policy: Retention counts.
        now: Current time (timezone aware).
        items: Local files or remote objects.
        key: Returns an item's identity.
        timestamp: Returns an item's timestamp.

    Returns:
        Set of kept keys.
    """
    candidates = [Candidate(key=key(i), timestamp=timestamp(i), item=i) for i in items]
    kept = select_kept(time_boundaries(policy, now), candidates)
    return {c.key for c in kept.values()}
