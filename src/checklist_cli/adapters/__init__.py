"""Storage adapters (local SQLite and remote REST) for the repository ports."""
