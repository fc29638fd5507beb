# src/datafix/auth/session.py
"""
Session and profile state.

``SessionHolder`` owns one Supabase auth client for its lifetime: it restores
an existing session, subscribes to auth-state changes, keeps the matching
profile loaded and releases the subscription on ``close()``. Views never read
it directly; they receive the immutable ``UserSession`` snapshot it produces
(or that ``resolve_session`` builds from a bearer token in the API).

Usage:
    with SessionHolder(create_supabase_client()) as holder:
        result = holder.sign_in("ana@example.com", "secret")
        if result.ok:
            view = DashboardView(result.session)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from supabase import AuthApiError, AuthInvalidCredentialsError, AuthSessionMissingError

from ..core.errors import AuthenticationError, BackendError, DataFixError
from ..core.models import Profile
from .permissions import Capability, ViewPermissions, can

logger = logging.getLogger(__name__)


def is_auth_rejection(error: Exception) -> bool:
    """True when Supabase Auth answered and refused the credentials or token."""
    if isinstance(error, (AuthInvalidCredentialsError, AuthSessionMissingError)):
        return True
    if isinstance(error, AuthApiError):
        status = getattr(error, "status", None)
        return not (isinstance(status, int) and status >= 500)
    return False


@dataclass(frozen=True)
class UserSession:
    """Signed-in identity plus profile, passed explicitly into every view."""
    user_id: str
    email: Optional[str] = None
    profile: Optional[Profile] = None
    access_token: Optional[str] = None
    permissions: ViewPermissions = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "permissions", ViewPermissions.for_profile(self.profile))

    @property
    def is_admin(self) -> bool:
        return bool(self.profile and self.profile.is_admin)

    @property
    def is_requester(self) -> bool:
        return bool(self.profile and self.profile.is_requester)

    @property
    def display_name(self) -> str:
        if self.profile:
            return self.profile.greeting_name
        return self.email or "User"

    def can(self, capability: Capability) -> bool:
        return can(self, capability)

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
            "profile": self.profile.to_dict() if self.profile else None,
            "is_admin": self.is_admin,
            "is_requester": self.is_requester,
            "permissions": self.permissions.to_dict(),
        }


@dataclass
class SignInResult:
    """Outcome of a sign-in attempt."""
    error: Optional[str] = None
    session: Optional[UserSession] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionHolder:
    """
    Lifecycle owner for one auth client's session and profile.

    Attributes:
        user: the Supabase auth user, or None
        profile: the matching Profile, or None (unset while loading or on failure)
        loading: True until the session and profile have been resolved
    """

    def __init__(self, client=None, users=None):
        self._client = client
        self._users = users
        self._subscription = None
        self._access_token: Optional[str] = None
        self.user: Optional[Any] = None
        self.profile: Optional[Profile] = None
        self.loading = True

    @property
    def client(self):
        if self._client is None:
            from ..infrastructure.supabase_client import get_supabase_client
            self._client = get_supabase_client()
        return self._client

    @property
    def users(self):
        if self._users is None:
            from ..repositories.users import SupabaseUserRepository
            self._users = SupabaseUserRepository(self._client)
        return self._users

    @property
    def is_admin(self) -> bool:
        return bool(self.profile and self.profile.is_admin)

    @property
    def is_requester(self) -> bool:
        return bool(self.profile and self.profile.is_requester)

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> "SessionHolder":
        """Restore any existing session and subscribe to auth changes."""
        if not self.client:
            self.loading = False
            raise BackendError("Supabase not available")

        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"Could not restore session: {e}")
            session = None
        self._apply_session(session)

        if self._subscription is None:
            self._subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)
        return self

    def close(self):
        """Release the auth-state subscription."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> "SessionHolder":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # -------------------------------------------------------------------------
    # Auth actions
    # -------------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> SignInResult:
        """
        Email/password sign-in.

        Rejected credentials come back in the result.

        Raises:
            BackendError: Supabase not configured or unreachable
        """
        if not self.client:
            raise BackendError("Supabase not available")

        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            if not is_auth_rejection(e):
                logger.error(f"Sign-in request failed for {email}: {e}")
                raise BackendError("Authentication service unavailable", detail=str(e)) from e
            logger.warning(f"Sign-in failed for {email}: {e}")
            return SignInResult(error=str(e) or "Sign-in failed")

        session = getattr(response, "session", None)
        user = getattr(response, "user", None) or getattr(session, "user", None)
        if user is None:
            return SignInResult(error="Sign-in failed")

        # The SIGNED_IN notification normally loads the profile already.
        if self.user is None or self.user.id != user.id or self.profile is None:
            self._apply_session(session, user=user)
        elif session is not None:
            self._access_token = getattr(session, "access_token", None)

        return SignInResult(session=self.snapshot())

    def sign_out(self):
        """Sign out and clear user and profile."""
        try:
            if self.client:
                self.client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign-out request failed: {e}")
        finally:
            self.user = None
            self.profile = None
            self._access_token = None

    def snapshot(self) -> Optional[UserSession]:
        """Immutable view of the current session, or None when signed out."""
        if self.user is None:
            return None
        return UserSession(
            user_id=self.user.id,
            email=getattr(self.user, "email", None),
            profile=self.profile,
            access_token=self._access_token,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _on_auth_state_change(self, event, session):
        logger.debug(f"Auth state change: {event}")
        self._apply_session(session)

    def _apply_session(self, session, user=None):
        user = user or getattr(session, "user", None)
        self.user = user
        self._access_token = getattr(session, "access_token", None) if session else None

        if user is None:
            self.profile = None
            self.loading = False
            return
        self._load_profile(user.id)

    def _load_profile(self, user_id: str):
        self.loading = True
        try:
            self.profile = self.users.get_profile(user_id)
        except DataFixError as e:
            # Signed in but without a profile; the session stays valid.
            logger.error(f"Error loading profile for {user_id}: {e.message}")
            self.profile = None
        finally:
            self.loading = False


def resolve_session(access_token: Optional[str], client=None, users=None) -> UserSession:
    """
    Build a UserSession from a bearer access token.

    Raises:
        AuthenticationError: missing, invalid or expired token
        BackendError: Supabase not configured or unreachable
    """
    if not access_token:
        raise AuthenticationError()

    if client is None:
        from ..infrastructure.supabase_client import get_supabase_client
        client = get_supabase_client()
    if not client:
        raise BackendError("Supabase not available")

    try:
        response = client.auth.get_user(access_token)
    except Exception as e:
        if not is_auth_rejection(e):
            logger.error(f"Token lookup failed: {e}")
            raise BackendError("Authentication service unavailable", detail=str(e)) from e
        logger.info(f"Rejected access token: {e}")
        raise AuthenticationError("Invalid or expired session") from e

    user = getattr(response, "user", None)
    if user is None:
        raise AuthenticationError("Invalid or expired session")

    if users is None:
        from ..repositories.users import SupabaseUserRepository
        users = SupabaseUserRepository(client)

    try:
        profile = users.get_profile(user.id)
    except DataFixError as e:
        logger.error(f"Error loading profile for {user.id}: {e.message}")
        profile = None

    return UserSession(
        user_id=user.id,
        email=getattr(user, "email", None),
        profile=profile,
        access_token=access_token,
    )
