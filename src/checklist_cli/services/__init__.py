"""Service layer for Checklist CLI."""
