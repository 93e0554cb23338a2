"""Date range filters for listing rows.

All bounds are epoch milliseconds, inclusive on both ends, matching the
``time`` field the row store stamps on every row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

_DAY = timedelta(days=1)
_END_OF_DAY = timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)

RANGE_NAMES = ("today", "yesterday", "thisWeek", "lastWeek", "thisMonth", "lastMonth")


@dataclass(frozen=True)
class RowFilter:
    """Options passed to ``RowStore.list``."""

    gte: int | None = None
    lte: int | None = None
    query: str | None = None

    def matches(self, timestamp: int) -> bool:
        if self.gte is not None and timestamp < self.gte:
            return False
        if self.lte is not None and timestamp > self.lte:
            return False
        return True


def _ms(moment: datetime) -> int:
    # whole seconds first, float timestamps lose the last millisecond
    seconds = int(moment.replace(microsecond=0).timestamp())
    return seconds * 1000 + moment.microsecond // 1000


def _span(start: datetime, end: datetime) -> RowFilter:
    return RowFilter(gte=_ms(start), lte=_ms(end))


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _next_month_start(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def get_date_ranges(now: datetime | None = None) -> dict[str, RowFilter]:
    """Named ranges relative to ``now`` (local time when not given).

    Weeks run Monday to Sunday.
    """
    now = now or datetime.now()
    tz = now.tzinfo

    def at(day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=tz)

    today = now.date()
    yesterday = today - _DAY
    week_start = today - timedelta(days=today.weekday())
    last_week_start = week_start - timedelta(days=7)
    month_start = _month_start(today)
    last_month_start = _month_start(month_start - _DAY)

    return {
        "today": _span(at(today), at(today) + _END_OF_DAY),
        "yesterday": _span(at(yesterday), at(yesterday) + _END_OF_DAY),
        "thisWeek": _span(at(week_start), at(week_start + timedelta(days=6)) + _END_OF_DAY),
        "lastWeek": _span(at(last_week_start), at(week_start) - timedelta(milliseconds=1)),
        "thisMonth": _span(
            at(month_start), at(_next_month_start(today)) - timedelta(milliseconds=1)
        ),
        "lastMonth": _span(at(last_month_start), at(month_start) - timedelta(milliseconds=1)),
    }


def custom_range(start: str, end: str) -> RowFilter:
    """Build a range from ``YYYY-MM-DD`` strings, both days included (UTC).

    Raises ValueError for malformed dates or a start after the end.
    """
    start_day = date.fromisoformat(start.strip())
    end_day = date.fromisoformat(end.strip())
    if start_day > end_day:
        raise ValueError("Start date must be before or equal to end date")
    return _span(
        datetime.combine(start_day, time.min, tzinfo=timezone.utc),
        datetime.combine(end_day, time.min, tzinfo=timezone.utc) + _END_OF_DAY,
    )


def format_date_range(filter_type: str, gte: int, lte: int) -> str:
    """Label such as ``thisWeek (2026-10-12 - 2026-10-18)``."""
    label = "Custom" if filter_type == "custom" else filter_type
    start = datetime.fromtimestamp(gte / 1000).date().isoformat()
    end = datetime.fromtimestamp(lte / 1000).date().isoformat()
    return f"{label} ({start} - {end})"
