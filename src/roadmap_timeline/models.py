"""
Timeline models: entities placed on the Gantt chart and the derived layout values.

Projects and tasks share one entity type; the API accepts the camelCase
shape of the project/task listing (startDate, dueDate, parentId, ...).
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from roadmap_timeline.config import get_settings

logger = logging.getLogger(__name__)


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if "T" in s or " " in s:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        return date.fromisoformat(s)
    raise ValueError(f"Not a date: {value!r}")


class TimelineEntity(BaseModel):
    """A project, task, subtask or milestone positioned on the shared timeline."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = Field(default="", validation_alias=AliasChoices("title", "name"))
    status: Optional[str] = None
    start_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("start_date", "startDate"),
        serialization_alias="startDate",
    )
    end_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("end_date", "endDate", "dueDate", "due_date"),
        serialization_alias="endDate",
    )
    progress: int = Field(default=0, ge=0, le=100)
    parent_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parent_id", "parentId"),
        serialization_alias="parentId",
    )
    tags: tuple[str, ...] = ()
    # Project-only fields
    code: Optional[str] = None
    rag_status: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("rag_status", "ragStatus"),
        serialization_alias="ragStatus",
    )
    assignee: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("assignee", "assigneeName", "personName"),
        serialization_alias="assigneeName",
    )

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # Listing APIs may hand back integer keys
        return str(v) if isinstance(v, int) else v

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> Optional[date]:
        return _to_date(v)

    @field_validator("progress", mode="before")
    @classmethod
    def _default_progress(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(t.strip() for t in v.split(",") if t.strip())
        return tuple(v)

    @property
    def is_milestone(self) -> bool:
        tag = get_settings().milestone_tag.lower()
        return any(t.lower() == tag for t in self.tags)

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _clamp_progress(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if isinstance(value, float) and math.isnan(value):
        return None
    return max(0, min(100, round(value)))


def listing_row(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Loosen a task listing row before validation: progress is only drawn as an
    overlay, so out-of-range values are clamped into [0, 100], and a nested
    assignee object is reduced to its first name.
    """
    row = dict(raw)
    if "progress" in row:
        row["progress"] = _clamp_progress(row["progress"])
    assignee = row.get("assignee")
    if isinstance(assignee, dict):
        # {"assignee": {"firstName": ..., "name": ...}}
        row["assignee"] = assignee.get("firstName") or assignee.get("name")
    return row


def entities_from_rows(rows: Iterable[Any]) -> list[TimelineEntity]:
    """Parse task listing rows one by one; a row that still fails validation is logged and skipped."""
    out: list[TimelineEntity] = []
    for raw in rows:
        if not isinstance(raw, dict):
            logger.warning("Skipping task row that is not an object: %r", raw)
            continue
        try:
            out.append(TimelineEntity.model_validate(listing_row(raw)))
        except ValidationError as e:
            logger.warning("Skipping invalid task row %s: %s", raw.get("id"), e)
    return out


class TimelineRange(BaseModel):
    """Month-aligned window shared by every bar in one render pass."""

    model_config = ConfigDict(frozen=True)

    min_date: date
    max_date: date
    months: tuple[date, ...]
    total_days: int

    def to_api(self) -> dict[str, Any]:
        return {
            "minDate": self.min_date.isoformat(),
            "maxDate": self.max_date.isoformat(),
            "months": [m.isoformat() for m in self.months],
            "totalDays": self.total_days,
        }


class Position(BaseModel):
    """Percentage placement of a bar (or milestone diamond) over a TimelineRange."""

    model_config = ConfigDict(frozen=True)

    left: float
    width: float
    marker: Literal["bar", "diamond"] = "bar"
    # end_date before start_date; width was clamped
    inverted: bool = False

    def as_css(self) -> dict[str, str]:
        return {"left": f"{self.left}%", "width": f"{self.width}%"}

    def to_api(self) -> dict[str, Any]:
        return {**self.model_dump(), "style": self.as_css()}


class TaskPartition(BaseModel):
    """Loaded project tasks split for rendering."""

    model_config = ConfigDict(frozen=True)

    top_level: tuple[TimelineEntity, ...] = ()
    subtasks: tuple[TimelineEntity, ...] = ()
    milestones: tuple[TimelineEntity, ...] = ()

    def subtasks_of(self, task_id: str) -> list[TimelineEntity]:
        return [s for s in self.subtasks if s.parent_id == task_id]
