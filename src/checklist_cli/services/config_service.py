"""Configuration service for managing Checklist CLI configuration.

This module provides the ConfigService class, which is the single source of truth
for all configuration management in Checklist CLI. It handles:

- Loading and saving config.json
- Context management (list, add, remove, switch)
- Credential storage for remote contexts
- Building the storage strategy and clock for the active context
"""

from __future__ import annotations

import json
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError as PydanticValidationError

from checklist_cli.exceptions import ChecklistError, ValidationError
from checklist_cli.models.config_models import AppConfig, Context
from checklist_cli.models.storage_strategy import (
    LocalStorageStrategy,
    RemoteStorageStrategy,
    StorageStrategyContext,
)
from checklist_cli.utils.clock import SystemClock
from checklist_cli.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CLOUD_URL = "https://checklist.example.com/rest/v1"


class ConfigService:
    """Service for managing application configuration.

    Loads ``config.json`` from the platform config directory, creating a default
    one (``local`` and ``cloud`` contexts) on first run.
    """

    def __init__(self):
        self.config_dir = Path(user_config_dir("checklist_cli"))
        self.config_path = self.config_dir / "config.json"
        self.credentials_dir = self.config_dir / "credentials"
        self.data_dir = Path(user_data_dir("checklist_cli"))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._storage_strategy_context: StorageStrategyContext | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, writing defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            logger.info("No config at %s, writing defaults", self.config_path)
            self._config = self.create_default_config()
        except (PydanticValidationError, OSError) as e:
            raise ChecklistError(f"Failed to load config {self.config_path}: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to disk (owner-only permissions)."""
        if self._config is None:
            raise ChecklistError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise ChecklistError(f"Failed to save config: {e}") from e

    def create_default_config(self) -> AppConfig:
        """Create a default configuration with the local context active."""
        local_context = Context(
            name="local",
            type="local",
            source=str(self.data_dir / "checklist.db"),
            description="Local SQLite storage",
        )
        cloud_context = Context(
            name="cloud",
            type="remote",
            source=DEFAULT_CLOUD_URL,
            description="Hosted checklist (requires login)",
        )

        self._config = AppConfig(
            current_context_name=local_context.name,
            contexts=[local_context, cloud_context],
        )
        self.save_config()
        return self._config

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults and forget all credentials."""
        self._config = None
        self._storage_strategy_context = None
        if self.config_path.exists():
            self.config_path.unlink()
        for cred_file in self.credentials_dir.glob("*.json"):
            cred_file.unlink()
        return self.create_default_config()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_value(self, key: str) -> Any:
        """Read a dotted setting such as ``maintenance.interval_seconds``."""
        node: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                raise ValidationError(f"Unknown configuration key '{key}'")
            node = node[part]
        return node

    def set_value(self, key: str, value: Any) -> Any:
        """Set a dotted setting; the whole config is re-validated before saving.

        Returns:
            The value as stored after validation
        """
        data = self.config.model_dump()
        parts = key.split(".")
        node = data
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                raise ValidationError(f"Unknown configuration key '{key}'")
            node = node[part]
        if parts[-1] not in node or isinstance(node[parts[-1]], (dict, list)):
            raise ValidationError(f"Unknown configuration key '{key}'")
        node[parts[-1]] = value

        try:
            self._config = AppConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid value for '{key}': {e.errors()[0]['msg']}") from e

        self._storage_strategy_context = None
        self.save_config()
        return self.get_value(key)

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def list_contexts(self) -> list[Context]:
        """List all available contexts."""
        return self.config.contexts

    def get_current_context(self) -> Context:
        """Get the currently active context.

        Raises:
            ValueError: If the current context is not configured
        """
        return self.config.get_current_context()

    def use_context(self, name: str) -> Context:
        """Set the current context by name."""
        try:
            context = self.config.get_context(name)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.config.current_context_name = context.name
        self._storage_strategy_context = None
        self.save_config()
        return context

    def add_context(self, context: Context) -> None:
        """Add a new context to the configuration."""
        try:
            self.config.add_context(context)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.save_config()

    def remove_context(self, name: str) -> None:
        """Remove a context and its stored credentials."""
        if name == self.config.current_context_name:
            raise ValidationError(f"Cannot remove the active context '{name}'")
        try:
            self.config.remove_context(name)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.save_config()
        self.clear_credentials(name)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def _credentials_path(self, context_name: str) -> Path:
        return self.credentials_dir / f"{context_name}.json"

    def load_context_credentials(self, context_name: str | None = None) -> dict | None:
        """Load credentials for a context (defaults to the current one).

        Returns:
            dict with ``token`` and ``user_id``, or None if not stored
        """
        if context_name is None:
            context_name = self.config.current_context_name
        cred_path = self._credentials_path(context_name)
        if not cred_path.exists():
            return None

        try:
            with open(cred_path, encoding="utf-8") as f:
                return json.load(f)
        except JSONDecodeError:
            logger.warning("Ignoring unreadable credentials file %s", cred_path)
            return None

    def save_credentials(
        self,
        token: str,
        user_id: str,
        context_name: str | None = None,
    ) -> None:
        """Save credentials for a context (defaults to the current one)."""
        if context_name is None:
            context_name = self.config.current_context_name

        cred_path = self._credentials_path(context_name)
        cred_path.parent.mkdir(parents=True, exist_ok=True)
        with open(cred_path, "w", encoding="utf-8") as f:
            json.dump({"token": token, "user_id": user_id}, f, indent=2)
        cred_path.chmod(0o600)

        if context_name == self.config.current_context_name:
            self._storage_strategy_context = None

    def clear_credentials(self, context_name: str | None = None) -> bool:
        """Remove stored credentials. Returns True if a file was removed."""
        if context_name is None:
            context_name = self.config.current_context_name
        cred_path = self._credentials_path(context_name)
        if not cred_path.exists():
            return False
        cred_path.unlink()
        if context_name == self.config.current_context_name:
            self._storage_strategy_context = None
        return True

    # ------------------------------------------------------------------
    # Runtime wiring
    # ------------------------------------------------------------------

    @property
    def storage_strategy_context(self) -> StorageStrategyContext:
        """Repositories for the active context, built on first use."""
        if self._storage_strategy_context is None:
            context = self.get_current_context()
            if context.type == "remote":
                credentials = self.load_context_credentials(context.name) or {}
                strategy = RemoteStorageStrategy(
                    context.source,
                    api_key=context.api_key,
                    token=credentials.get("token"),
                    user_id=credentials.get("user_id"),
                    timeout=self.config.api.timeout,
                )
            else:
                strategy = LocalStorageStrategy(db_path=context.source)
            logger.debug("Using %s storage for context '%s'", strategy.storage_type, context.name)
            self._storage_strategy_context = StorageStrategyContext(strategy)
        return self._storage_strategy_context

    async def close_storage(self) -> None:
        """Release the active store (HTTP client), if it was opened."""
        if self._storage_strategy_context is not None:
            await self._storage_strategy_context.close()

    def get_clock(self) -> SystemClock:
        """Clock in the configured zone (machine zone when unset)."""
        return SystemClock(self.config.ui.timezone)


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service


def get_storage_strategy_context() -> StorageStrategyContext:
    """Get a StorageStrategyContext based on the current configuration."""
    return get_config_service().storage_strategy_context


async def close_storage_strategy_context() -> None:
    """Close the cached service's store; no-op when none was created."""
    if get_config_service.cache_info().currsize:
        await get_config_service().close_storage()
