"""Unit tests for AuthService session resolution."""

from __future__ import annotations

import pytest

from checklist_cli.exceptions import NotAuthenticatedError, ValidationError
from checklist_cli.services.auth_service import AuthService


@pytest.fixture()
def auth(tmp_config):
    return AuthService(tmp_config)


@pytest.fixture()
def cloud_auth(tmp_config):
    tmp_config.use_context("cloud")
    return AuthService(tmp_config)


class TestLocalContext:
    def test_always_signed_in(self, auth):
        session = auth.require_session()
        assert session.context_name == "local"
        assert session.user_id
        assert session.token is None

    def test_local_user_is_stable(self, auth):
        assert auth.require_session().user_id == auth.require_session().user_id

    def test_login_rejected(self, auth):
        with pytest.raises(ValidationError):
            auth.login("tok", "user-1")


class TestRemoteContext:
    def test_signed_out_without_credentials(self, cloud_auth):
        assert cloud_auth.current_session() is None
        assert cloud_auth.is_authenticated() is False
        with pytest.raises(NotAuthenticatedError, match="checklist auth login"):
            cloud_auth.require_session()

    def test_login_then_logout(self, cloud_auth):
        session = cloud_auth.login(" tok ", " user-1 ")

        assert (session.token, session.user_id) == ("tok", "user-1")
        assert cloud_auth.require_session().user_id == "user-1"

        assert cloud_auth.logout() is True
        assert cloud_auth.is_authenticated() is False
        assert cloud_auth.logout() is False

    def test_partial_credentials_are_signed_out(self, cloud_auth, tmp_config):
        tmp_config.save_credentials("", "user-1", "cloud")
        assert cloud_auth.current_session() is None

    @pytest.mark.parametrize("token,user_id", [("", "u"), ("t", "  ")])
    def test_login_requires_both_values(self, cloud_auth, token, user_id):
        with pytest.raises(ValidationError):
            cloud_auth.login(token, user_id)
