"""Command modules for Checklist CLI."""
