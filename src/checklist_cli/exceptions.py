"""Application exceptions for Checklist CLI.

Every error raised across a service boundary derives from ``ChecklistError``
and carries the exit code the CLI should terminate with.
"""

from __future__ import annotations

from checklist_cli.utils import exit_codes


class ChecklistError(Exception):
    """Base application error with exit code."""

    exit_code: int = exit_codes.ERROR_GENERAL

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(ChecklistError):
    """Domain data violates a data-model rule (e.g. empty title)."""

    exit_code = exit_codes.ERROR_INVALID_ARGS


class NotFoundError(ChecklistError):
    """Requested task or category does not exist."""

    exit_code = exit_codes.ERROR_NOT_FOUND


class NotAuthenticatedError(ChecklistError):
    """A mutation was attempted without an authenticated session."""

    exit_code = exit_codes.ERROR_AUTH_FAILURE


class StoreError(ChecklistError):
    """The task store rejected or failed a read/write."""

    exit_code = exit_codes.ERROR_NETWORK


class ReorderFailedError(StoreError):
    """A batch reorder was not persisted; local order was rolled back."""
