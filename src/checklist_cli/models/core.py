"""Checklist domain models."""

from __future__ import annotations

from datetime import date, datetime, time
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

# Group key for tasks without a category.
UNCATEGORIZED = "uncategorized"


class RecurrencePattern(StrEnum):
    """Recurrence kind of a task."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"


def validate_time_block(start_time: time | None, end_time: time | None) -> None:
    if end_time is None:
        return
    if start_time is None:
        raise ValueError("end_time requires start_time")
    if end_time <= start_time:
        raise ValueError("End time must be after start time")


class Category(BaseModel):
    """Category model, the grouping key for task ordering.

    Attributes:
        id: Unique identifier for the category
        name: Category name (e.g., "Work", "Home")
        color: Optional hex color code for display
        created_at: Creation timestamp
    """

    id: str
    name: str
    color: str | None = None
    created_at: datetime | None = None


class CategoryCreate(BaseModel):
    """Model for creating a new category."""

    name: str = Field(min_length=1)
    color: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class CategoryUpdate(BaseModel):
    """Model for updating a category. Only provided fields are changed."""

    name: str | None = None
    color: str | None = None


class Recurrence(BaseModel):
    """Recurrence attached to a task (zero or one per task).

    Attributes:
        id: Unique identifier for the recurrence row
        task_id: Owning task
        pattern: none, daily or weekly
        weekly_day: Day of week for weekly tasks (Sunday=0 .. Saturday=6);
            None means "every day"
        created_at: Creation timestamp
    """

    id: str | None = None
    task_id: str | None = None
    pattern: RecurrencePattern = RecurrencePattern.NONE
    weekly_day: int | None = Field(default=None, ge=0, le=6)
    created_at: datetime | None = None


class Task(BaseModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Unique identifier for the task
        category_id: Optional reference to its category
        title: Task title
        notes: Optional free-form notes
        due_date: Optional local calendar date
        due_time: Optional local time of day (meaningful with due_date)
        start_time: Optional start of a calendar time block
        end_time: Optional end of the time block (after start_time)
        completed_at: Completion instant; presence means completed
        sort_order: Dense position within the category group
        created_at: Creation timestamp
        updated_at: Last update timestamp
        recurrence: Joined recurrence row, if any
        category: Joined category row, if any
    """

    id: str
    category_id: str | None = None
    title: str
    notes: str | None = None
    due_date: date | None = None
    due_time: time | None = None
    start_time: time | None = None
    end_time: time | None = None
    completed_at: datetime | None = None
    sort_order: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime | None = None
    recurrence: Recurrence | None = None
    category: Category | None = None

    @property
    def pattern(self) -> RecurrencePattern:
        if self.recurrence is None:
            return RecurrencePattern.NONE
        return self.recurrence.pattern

    @property
    def weekly_day(self) -> int | None:
        if self.recurrence is None:
            return None
        return self.recurrence.weekly_day

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def group_key(self) -> str:
        return self.category_id or UNCATEGORIZED


class TaskCreate(BaseModel):
    """Model for creating a new task.

    ``sort_order`` is normally left unset: the task service appends the task
    to the end of its category group.
    """

    title: str = Field(min_length=1)
    notes: str | None = None
    category_id: str | None = None
    due_date: date | None = None
    due_time: time | None = None
    start_time: time | None = None
    end_time: time | None = None
    sort_order: int | None = Field(default=None, ge=0)
    pattern: RecurrencePattern = RecurrencePattern.NONE
    weekly_day: int | None = Field(default=None, ge=0, le=6)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def check_schedule(self) -> TaskCreate:
        validate_time_block(self.start_time, self.end_time)
        if self.pattern != RecurrencePattern.WEEKLY:
            self.weekly_day = None
        return self


class TaskUpdate(BaseModel):
    """Patch for one or many tasks.

    Only fields that were explicitly set are written; setting a field to
    None clears it (e.g. ``TaskUpdate(completed_at=None)`` reopens a task).
    """

    title: str | None = None
    notes: str | None = None
    category_id: str | None = None
    due_date: date | None = None
    due_time: time | None = None
    start_time: time | None = None
    end_time: time | None = None
    completed_at: datetime | None = None
    sort_order: int | None = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip() if v is not None else v

    @model_validator(mode="after")
    def check_schedule(self) -> TaskUpdate:
        if "end_time" in self.model_fields_set and "start_time" in self.model_fields_set:
            validate_time_block(self.start_time, self.end_time)
        return self

    def changes(self) -> dict:
        """Explicitly set fields, None values included."""
        return self.model_dump(exclude_unset=True)


class TaskFilters(BaseModel):
    """Filters for querying tasks.

    Attributes:
        status: Filter by status ("active", "completed", "all")
        category_id: Filter by category ID
        search: Case-insensitive search over title and notes
    """

    status: str | None = Field(default=None, pattern="^(active|completed|all)$")
    category_id: str | None = None
    search: str | None = None


class SortUpdate(BaseModel):
    """One row of a batch reorder: final position and group of a task."""

    id: str
    sort_order: int = Field(ge=0)
    category_id: str | None = None


class Session(BaseModel):
    """Authenticated session for the active storage context."""

    user_id: str
    token: str | None = None
    context_name: str
