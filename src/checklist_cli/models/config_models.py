"""Configuration models for the context system.

A context selects the task store: a local SQLite file or a remote
PostgREST-style endpoint.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """HTTP settings for remote contexts."""

    timeout: float = Field(default=30, gt=0)


class OutputConfig(BaseModel):
    """Defaults for 'checklist tasks list'."""

    format: Literal["pretty", "json", "yaml"] = "pretty"
    compact: bool = False


class UIConfig(BaseModel):
    """Calendar settings for recurrence and due dates."""

    # None means the machine's local zone.
    timezone: str | None = Field(default=None)


class MaintenanceConfig(BaseModel):
    """Background maintenance (daily reset + purge of old one-off tasks)."""

    enabled: bool = Field(default=True)
    interval_seconds: float = Field(default=300, gt=0)
    foreground_debounce_seconds: float = Field(default=5, ge=0)


class Context(BaseModel):
    """Named task store: a SQLite file (``local``) or a REST endpoint (``remote``)."""

    name: str = Field(..., description="Context name used by 'checklist config use'")
    type: Literal["local", "remote"] = Field(..., description="Store kind")
    source: str = Field(..., description="SQLite file path, or base URL of the REST store")
    api_key: str | None = Field(default=None, description="Public API key (remote only)")
    description: str = Field(default="", description="Shown by 'checklist config contexts'")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("source must not be blank")
        return v.strip()


class AppConfig(BaseModel):
    """Contents of ``config.json``."""

    current_context_name: str = Field(default="local", description="Active context")
    contexts: list[Context] = Field(default_factory=list, description="Known stores")

    api: APIConfig = Field(default_factory=APIConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    maintenance: MaintenanceConfig = Field(default_factory=MaintenanceConfig)

    def get_context(self, name: str) -> Context:
        """Look up a context.

        Raises:
            ValueError: If no context has that name
        """
        found = next((ctx for ctx in self.contexts if ctx.name == name), None)
        if found is None:
            raise ValueError(f"Unknown context '{name}'")
        return found

    def get_current_context(self) -> Context:
        return self.get_context(self.current_context_name)

    def add_context(self, context: Context) -> None:
        """Register a context; names are unique.

        Raises:
            ValueError: If the name is taken
        """
        if any(ctx.name == context.name for ctx in self.contexts):
            raise ValueError(f"Context '{context.name}' already exists; remove it first")
        self.contexts.append(context)

    def remove_context(self, name: str) -> None:
        """Drop a context.

        Raises:
            ValueError: If no context has that name
        """
        self.contexts.remove(self.get_context(name))
