"""Service for handling authentication-related operations.

Local contexts are always signed in as the local user. Remote contexts need a
token and user id saved by ``checklist auth login``.
"""

from __future__ import annotations

from checklist_cli.exceptions import NotAuthenticatedError, ValidationError
from checklist_cli.models import Session
from checklist_cli.services.config_service import ConfigService, get_config_service
from checklist_cli.utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:
    """Resolve the session for the active context."""

    def __init__(self, config_service: ConfigService):
        self.config_service = config_service

    def current_session(self) -> Session | None:
        """Session for the active context, or None if signed out."""
        context = self.config_service.get_current_context()

        if context.type == "local":
            from checklist_cli.adapters.sqlite.connection import get_connection
            from checklist_cli.adapters.sqlite.user_manager import (
                get_or_create_local_user,
            )

            user_id = get_or_create_local_user(get_connection(context.source))
            return Session(user_id=user_id, context_name=context.name)

        credentials = self.config_service.load_context_credentials(context.name)
        if not credentials or not credentials.get("token") or not credentials.get("user_id"):
            return None
        return Session(
            user_id=credentials["user_id"],
            token=credentials["token"],
            context_name=context.name,
        )

    def is_authenticated(self) -> bool:
        """Check if the user is authenticated."""
        return self.current_session() is not None

    def require_session(self) -> Session:
        """Session for the active context.

        Raises:
            NotAuthenticatedError: If the active remote context has no credentials
        """
        session = self.current_session()
        if session is None:
            context_name = self.config_service.config.current_context_name
            logger.info("Mutation refused: context '%s' is signed out", context_name)
            raise NotAuthenticatedError(
                f"Not logged in to '{context_name}'. Use 'checklist auth login' to authenticate."
            )
        return session

    def login(self, token: str, user_id: str) -> Session:
        """Store credentials for the active remote context."""
        context = self.config_service.get_current_context()
        if context.type == "local":
            raise ValidationError(
                f"Context '{context.name}' is local and needs no login"
            )
        if not token.strip() or not user_id.strip():
            raise ValidationError("Both token and user id are required")

        self.config_service.save_credentials(token.strip(), user_id.strip(), context.name)
        logger.info("Stored credentials for context '%s'", context.name)
        return Session(user_id=user_id.strip(), token=token.strip(), context_name=context.name)

    def logout(self) -> bool:
        """Forget credentials for the active context."""
        return self.config_service.clear_credentials()


def get_auth_service() -> AuthService:
    """Factory function to get an AuthService for the cached configuration."""
    return AuthService(get_config_service())
