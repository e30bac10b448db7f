"""Supabase Auth implementation of the identity provider."""

import logging
from dataclasses import dataclass

from supabase import AuthApiError, AuthError, Client

from calories_ai.domain.users import AuthSession, UserRecord
from calories_ai.errors import AuthenticationFailed
from calories_ai.services.auth import IdentityProvider

logger = logging.getLogger(__name__)

_CODE_MAP = {
    "user_not_found": "user-not-found",
    "invalid_credentials": "invalid-credentials",
    "email_address_invalid": "invalid-credentials",
    "validation_failed": "invalid-credentials",
    "email_exists": "email-already-in-use",
    "user_already_exists": "email-already-in-use",
}
_MESSAGES = {
    "user-not-found": "User not found",
    "invalid-credentials": "Invalid email or password",
    "email-already-in-use": "Email is already in use",
}


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider backed by Supabase Auth.

    ``client`` must be dedicated to auth calls: Supabase rewrites a client's
    database headers when a user signs in through it.
    """

    client: Client

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise _map_auth_error(exc) from exc
        return _to_session(response)

    def sign_in_with_id_token(self, provider: str, id_token: str) -> AuthSession:
        """Sign in with a federated ID token."""
        try:
            response = self.client.auth.sign_in_with_id_token(
                {"provider": provider, "token": id_token}
            )
        except AuthError as exc:
            raise _map_auth_error(exc) from exc
        return _to_session(response)

    def sign_up(self, email: str, password: str) -> AuthSession:
        """Create a new account."""
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except AuthError as exc:
            raise _map_auth_error(exc) from exc
        return _to_session(response)

    def update_display_name(self, user_id: str, display_name: str) -> UserRecord:
        """Store the display name in the user's metadata."""
        try:
            response = self.client.auth.admin.update_user_by_id(
                user_id, {"user_metadata": {"display_name": display_name}}
            )
        except AuthError as exc:
            raise _map_auth_error(exc) from exc
        return _to_user(response.user)

    def sign_out(self, access_token: str) -> None:
        """Revoke all sessions for the token's user."""
        try:
            self.client.auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise AuthenticationFailed(
                exc.message or "Failed to sign out", code="sign-out-failed"
            ) from exc

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user for an access token."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError as exc:
            logger.info("Rejected access token", extra={"status": exc.status})
            return None
        except AuthError as exc:
            raise _map_auth_error(exc) from exc
        if response is None or response.user is None:
            return None
        return _to_user(response.user)

    def send_password_reset(self, email: str, redirect_to: str | None) -> None:
        """Send a password reset email."""
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            self.client.auth.reset_password_for_email(email, options)
        except AuthError as exc:
            raise _map_auth_error(exc) from exc


def _to_session(response) -> AuthSession:  # type: ignore[no-untyped-def]
    if response.user is None:
        raise AuthenticationFailed("Operation failed")
    session = response.session
    return AuthSession(
        user=_to_user(response.user),
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
    )


def _to_user(user) -> UserRecord:  # type: ignore[no-untyped-def]
    metadata = user.user_metadata or {}
    return UserRecord(
        id=str(user.id),
        email=user.email or "",
        display_name=(
            metadata.get("display_name")
            or metadata.get("full_name")
            or metadata.get("name")
        ),
        avatar_url=metadata.get("avatar_url") or metadata.get("picture"),
    )


def _map_auth_error(exc: AuthError) -> AuthenticationFailed:
    """Translate a Supabase auth error into a stable error code."""
    code = _CODE_MAP.get(getattr(exc, "code", None) or "")
    if code is None:
        text = (exc.message or "").lower()
        if "invalid login credentials" in text:
            code = "invalid-credentials"
        elif "already registered" in text:
            code = "email-already-in-use"
        else:
            code = "operation-failed"
    message = _MESSAGES.get(code) or exc.message or "Operation failed"
    return AuthenticationFailed(message, code=code)
