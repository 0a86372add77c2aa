"""Database schema definitions for the local SQLite checklist store.

Column names follow the hosted store (tasks, categories, task_recurrence) so a
row fetched from either backend maps onto the same pydantic models.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

# Users table - local user profile
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    name TEXT,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

# Categories table - grouping key for task ordering
CREATE_CATEGORIES_TABLE = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    color TEXT,
    user_id TEXT NOT NULL,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
)
"""

# Tasks table - main task entity
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    notes TEXT,
    category_id TEXT,
    due_date TEXT,
    due_time TEXT,
    start_time TEXT,
    end_time TEXT,
    completed_at DATETIME,
    sort_order INTEGER NOT NULL DEFAULT 0 CHECK (sort_order >= 0),
    user_id TEXT NOT NULL,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
)
"""

# Recurrence table - zero or one row per task
CREATE_TASK_RECURRENCE_TABLE = """
CREATE TABLE IF NOT EXISTS task_recurrence (
    id TEXT PRIMARY KEY,
    task_id TEXT NOT NULL UNIQUE,
    pattern TEXT NOT NULL CHECK (pattern IN ('none', 'daily', 'weekly')),
    weekly_day INTEGER CHECK (weekly_day IS NULL OR weekly_day BETWEEN 0 AND 6),
    created_at DATETIME NOT NULL,
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

CREATE_TASKS_USER_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id)"
)
CREATE_TASKS_GROUP_ORDER_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_tasks_group_order "
    "ON tasks(user_id, category_id, sort_order)"
)
CREATE_TASKS_COMPLETED_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(user_id, completed_at)"
)
CREATE_CATEGORIES_USER_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_categories_user ON categories(user_id)"
)

ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_CATEGORIES_TABLE,
    CREATE_TASKS_TABLE,
    CREATE_TASK_RECURRENCE_TABLE,
]

ALL_INDEXES = [
    CREATE_TASKS_USER_INDEX,
    CREATE_TASKS_GROUP_ORDER_INDEX,
    CREATE_TASKS_COMPLETED_INDEX,
    CREATE_CATEGORIES_USER_INDEX,
]
