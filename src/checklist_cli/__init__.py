"""Checklist CLI - categorized task checklist with daily/weekly recurrence."""

__version__ = "0.3.0"
