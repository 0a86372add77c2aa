"""Checklist CLI domain models.

This package contains Pydantic models that represent the core domain entities
of the checklist: tasks, their recurrence, categories and reorder payloads.
"""

from .config_models import AppConfig, Context
from .core import (
    UNCATEGORIZED,
    Category,
    CategoryCreate,
    CategoryUpdate,
    Recurrence,
    RecurrencePattern,
    Session,
    SortUpdate,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "SortUpdate",
    "Recurrence",
    "RecurrencePattern",
    "UNCATEGORIZED",
    # Category models
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    # Auth
    "Session",
    # Config models
    "AppConfig",
    "Context",
]
