"""Repository interfaces for the Checklist CLI.

This package contains abstract base classes (ABCs) that define the contracts
for data persistence operations. These are the "Ports" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- checklist_cli.adapters.sqlite (local storage)
- checklist_cli.adapters.rest_api (remote API)
"""

from .repository import CategoryRepository, TaskRepository

__all__ = [
    "TaskRepository",
    "CategoryRepository",
]
