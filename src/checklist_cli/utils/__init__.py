"""Shared helpers: time, recurrence rules, ordering and console output."""
