"""
Timeline range: month-aligned date window for a set of projects.

The range is recomputed on every layout from the entities passed in; it is
never cached so it always matches the current entity set.
"""

import calendar
from datetime import date, timedelta
from typing import Any, Iterable

from roadmap_timeline.errors import EmptyTimelineError
from roadmap_timeline.models import TimelineEntity, TimelineRange


def _month_start(d: date) -> date:
    return d.replace(day=1)


def _month_end(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def _next_month(d: date) -> date:
    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


def compute_range(entities: Iterable[TimelineEntity]) -> TimelineRange:
    """
    Earliest start rounded down to the 1st of its month, latest end rounded up to
    the last day of its month. Entities missing a date do not contribute.
    Raises EmptyTimelineError when nothing is dated; callers render an empty state.
    """
    dated = [e for e in entities if e.has_dates]
    if not dated:
        raise EmptyTimelineError("No dated entities to build a timeline from")

    min_date = _month_start(min(min(e.start_date, e.end_date) for e in dated))
    max_date = _month_end(max(max(e.start_date, e.end_date) for e in dated))

    # Step whole calendar months so boundaries hold for 28-31 day months
    months: list[date] = []
    current = min_date
    while current <= max_date:
        months.append(current)
        current = _next_month(current)

    return TimelineRange(
        min_date=min_date,
        max_date=max_date,
        months=tuple(months),
        total_days=(max_date - min_date).days,
    )


def month_headers(rng: TimelineRange) -> list[dict[str, Any]]:
    """Header cell per month; width is the month's share of the shared day denominator."""
    headers = []
    for m in rng.months:
        days = calendar.monthrange(m.year, m.month)[1]
        headers.append({
            "month": m.isoformat(),
            "label": m.strftime("%b %Y"),
            "days": days,
            "width": days / rng.total_days * 100,
        })
    return headers


def day_cells(rng: TimelineRange) -> list[dict[str, Any]]:
    """One cell per calendar day of every month in the range (weekends flagged for shading)."""
    width = 1 / rng.total_days * 100
    cells = []
    for m in rng.months:
        d = m
        end = _month_end(m)
        while d <= end:
            cells.append({
                "date": d.isoformat(),
                "day": d.day,
                "is_weekend": d.weekday() >= 5,
                "width": width,
            })
            d += timedelta(days=1)
    return cells
