"""
Position mapper: entity [start, end] -> {left, width} percentages over a TimelineRange.

Pure functions; the only input besides the entity and range is the configured
minimum width for sub-entities.
"""

import logging
import math
from datetime import date
from typing import Optional

from roadmap_timeline.config import get_settings
from roadmap_timeline.models import Position, TimelineEntity, TimelineRange

logger = logging.getLogger(__name__)


def _days_between(start: date, end: date) -> int:
    return math.ceil((end - start).total_seconds() / 86400)


def position(
    entity: TimelineEntity,
    rng: TimelineRange,
    *,
    sub_entity: bool = False,
    min_width: Optional[float] = None,
) -> Optional[Position]:
    """
    Place an entity on the range. Returns None when either date is missing so the
    caller skips the bar. Sub-entities (tasks, subtasks, milestones) get a minimum
    width, trimmed where it would overflow the last day; projects keep their true
    duration. An end date before the start date
    clamps the duration to zero and marks the position inverted.
    """
    if entity.start_date is None or entity.end_date is None:
        return None

    start_days = _days_between(rng.min_date, entity.start_date)
    duration = _days_between(entity.start_date, entity.end_date)
    inverted = duration < 0
    if inverted:
        logger.warning(
            "Entity %s ends before it starts (%s < %s); width clamped to 0",
            entity.id, entity.end_date, entity.start_date,
        )
        duration = 0

    left = start_days / rng.total_days * 100
    width = duration / rng.total_days * 100
    if sub_entity:
        floor = get_settings().min_task_width_percent if min_width is None else min_width
        if floor > width:
            # Floor padding never runs past the right edge of the chart
            width = max(width, min(floor, 100 - left))

    return Position(
        left=left,
        width=width,
        marker="diamond" if entity.is_milestone else "bar",
        inverted=inverted,
    )


def project_position(entity: TimelineEntity, rng: TimelineRange) -> Optional[Position]:
    return position(entity, rng)


def task_position(entity: TimelineEntity, rng: TimelineRange, min_width: Optional[float] = None) -> Optional[Position]:
    return position(entity, rng, sub_entity=True, min_width=min_width)
