# tests/unit/test_session.py
"""
Unit tests for SessionHolder and resolve_session.
"""

import httpx
import pytest
from supabase import AuthApiError

from src.datafix.auth.session import SessionHolder, UserSession, is_auth_rejection, resolve_session
from src.datafix.core.errors import AuthenticationError, BackendError
from src.datafix.repositories.users import SupabaseUserRepository


@pytest.fixture
def users(seeded_supabase, test_config):
    return SupabaseUserRepository(client=seeded_supabase, config=test_config)


class TestSessionHolderLifecycle:
    """Tests for start/close and the auth-state subscription."""

    def test_start_without_session(self, seeded_supabase, users):
        holder = SessionHolder(seeded_supabase, users).start()
        assert holder.user is None
        assert holder.profile is None
        assert holder.loading is False
        assert holder.is_subscribed

    def test_start_restores_existing_session(self, seeded_supabase, users):
        seeded_supabase.auth.sign_in_with_password({"email": "ana@example.com", "password": "secret"})
        holder = SessionHolder(seeded_supabase, users).start()
        assert holder.user.id == "user-admin"
        assert holder.is_admin
        assert holder.snapshot().access_token == "token-admin"

    def test_context_manager_releases_subscription(self, seeded_supabase, users):
        with SessionHolder(seeded_supabase, users) as holder:
            subscription = seeded_supabase.auth.subscriptions[-1]
            assert subscription.active
        assert not subscription.active
        assert not holder.is_subscribed

    def test_missing_client(self, users):
        from unittest.mock import patch

        with patch("src.datafix.infrastructure.supabase_client.get_supabase_client", return_value=None):
            holder = SessionHolder(users=users)
            with pytest.raises(BackendError):
                holder.start()
            assert holder.loading is False


class TestSignInOut:
    """Tests for sign_in and sign_out."""

    def test_sign_in_loads_profile(self, seeded_supabase, users):
        with SessionHolder(seeded_supabase, users) as holder:
            result = holder.sign_in("rina@example.com", "secret")

            assert result.ok
            assert result.session.user_id == "user-requester"
            assert result.session.is_requester
            assert result.session.display_name == "Rina Requester"
            assert holder.is_requester

    def test_wrong_password(self, seeded_supabase, users):
        with SessionHolder(seeded_supabase, users) as holder:
            result = holder.sign_in("rina@example.com", "nope")
            assert not result.ok
            assert "Invalid login credentials" in result.error
            assert holder.user is None

    def test_sign_out_clears_state(self, seeded_supabase, users):
        with SessionHolder(seeded_supabase, users) as holder:
            holder.sign_in("ana@example.com", "secret")
            holder.sign_out()
            assert holder.user is None
            assert holder.profile is None
            assert holder.snapshot() is None

    def test_profile_load_failure_leaves_profile_unset(self, seeded_supabase, users):
        seeded_supabase.auth.add_user("user-new", "new@example.com")
        with SessionHolder(seeded_supabase, users) as holder:
            result = holder.sign_in("new@example.com", "secret")
            assert result.ok
            assert holder.profile is None
            assert not holder.is_admin
            assert result.session.permissions.can_create_ticket is False

    def test_auth_change_after_close_is_ignored(self, seeded_supabase, users):
        holder = SessionHolder(seeded_supabase, users).start()
        holder.close()
        seeded_supabase.auth.sign_in_with_password({"email": "ana@example.com", "password": "secret"})
        assert holder.user is None


class TestResolveSession:
    """Tests for bearer-token resolution."""

    def test_valid_token(self, seeded_supabase, users):
        session = resolve_session("token-admin", client=seeded_supabase, users=users)
        assert isinstance(session, UserSession)
        assert session.is_admin
        assert session.permissions.can_manage_users

    def test_missing_token(self, seeded_supabase):
        with pytest.raises(AuthenticationError):
            resolve_session(None, client=seeded_supabase)

    def test_unknown_token(self, seeded_supabase, users):
        with pytest.raises(AuthenticationError):
            resolve_session("forged", client=seeded_supabase, users=users)

    def test_user_without_profile(self, seeded_supabase, users):
        token = seeded_supabase.auth.add_user("user-new", "new@example.com")
        session = resolve_session(token, client=seeded_supabase, users=users)
        assert session.profile is None
        assert session.display_name == "new@example.com"


class TestAuthServiceFailures:
    """An unreachable or failing auth service is a backend error, not a bad credential."""

    @staticmethod
    def _refuse_connection(*args, **kwargs):
        raise httpx.ConnectError("connection refused")

    def test_token_lookup_outage(self, seeded_supabase, users, monkeypatch):
        monkeypatch.setattr(seeded_supabase.auth, "get_user", self._refuse_connection)
        with pytest.raises(BackendError):
            resolve_session("token-admin", client=seeded_supabase, users=users)

    def test_auth_server_error(self, seeded_supabase, users, monkeypatch):
        def server_error(jwt):
            raise AuthApiError("upstream timeout", 504, "unexpected_failure")

        monkeypatch.setattr(seeded_supabase.auth, "get_user", server_error)
        with pytest.raises(BackendError):
            resolve_session("token-admin", client=seeded_supabase, users=users)

    def test_sign_in_outage(self, seeded_supabase, users, monkeypatch):
        monkeypatch.setattr(seeded_supabase.auth, "sign_in_with_password", self._refuse_connection)
        with SessionHolder(seeded_supabase, users) as holder:
            with pytest.raises(BackendError):
                holder.sign_in("rina@example.com", "secret")
            assert holder.user is None

    def test_rejections_are_recognised(self):
        assert is_auth_rejection(AuthApiError("Invalid login credentials", 400, "invalid_credentials"))
        assert not is_auth_rejection(AuthApiError("upstream timeout", 504, "unexpected_failure"))
        assert not is_auth_rejection(httpx.ConnectError("connection refused"))
