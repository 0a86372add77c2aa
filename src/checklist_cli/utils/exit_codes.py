"""
Exit codes for Checklist CLI.

Semantic exit codes so scripts wrapping the CLI can tell what happened
and react accordingly.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (no session for a mutation)
ERROR_AUTH_FAILURE = 3

# Store error (SQLite failure, remote store unreachable or rejecting)
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5
