"""Authentication flows delegated to the identity provider."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from calories_ai.domain.users import AuthSession, UserRecord
from calories_ai.errors import AuthenticationFailed, Unauthenticated

logger = logging.getLogger(__name__)

NO_USER_MESSAGE = "No user is currently signed in"


class IdentityProvider(Protocol):
    """Interface for the hosted identity provider."""

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""

    def sign_in_with_id_token(self, provider: str, id_token: str) -> AuthSession:
        """Sign in with an ID token issued by a federated provider."""

    def sign_up(self, email: str, password: str) -> AuthSession:
        """Create an account and return its (possibly token-less) session."""

    def update_display_name(self, user_id: str, display_name: str) -> UserRecord:
        """Set the display name on an existing account."""

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning an access token, if it is valid."""

    def send_password_reset(self, email: str, redirect_to: str | None) -> None:
        """Send a password reset email."""


@dataclass
class AuthService:
    """Application service for sign-in, sign-up and session lookup."""

    provider: IdentityProvider
    session_wait_seconds: float = 10.0
    password_reset_redirect_url: str | None = None

    async def login(self, email: str, password: str) -> AuthSession:
        """Sign in with email credentials."""
        return await asyncio.to_thread(
            self.provider.sign_in_with_password, email, password
        )

    async def login_with_id_token(self, provider: str, id_token: str) -> AuthSession:
        """Sign in with a federated provider token."""
        return await asyncio.to_thread(
            self.provider.sign_in_with_id_token, provider, id_token
        )

    async def register(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        """Create an account, then set its display name when one is given."""
        session = await asyncio.to_thread(self.provider.sign_up, email, password)
        if not display_name:
            return session
        try:
            user = await asyncio.to_thread(
                self.provider.update_display_name, session.user.id, display_name
            )
        except Exception:
            logger.exception(
                "Failed to update user profile", extra={"user_id": session.user.id}
            )
            return session
        return AuthSession(
            user=user,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )

    async def logout(self, access_token: str | None) -> None:
        """Sign out the session behind ``access_token``."""
        if not access_token:
            raise Unauthenticated(NO_USER_MESSAGE)
        try:
            await asyncio.to_thread(self.provider.sign_out, access_token)
        except AuthenticationFailed as exc:
            raise AuthenticationFailed(exc.message, code="sign-out-failed") from exc

    async def require_user(self, access_token: str | None) -> UserRecord:
        """Resolve the current user once, bounded by ``session_wait_seconds``."""
        if not access_token:
            raise Unauthenticated(NO_USER_MESSAGE)
        try:
            user = await asyncio.wait_for(
                asyncio.to_thread(self.provider.get_user, access_token),
                timeout=self.session_wait_seconds,
            )
        except TimeoutError:
            logger.warning("Timed out resolving the current session")
            raise Unauthenticated(NO_USER_MESSAGE) from None
        except AuthenticationFailed as exc:
            raise Unauthenticated(NO_USER_MESSAGE) from exc
        if user is None:
            raise Unauthenticated(NO_USER_MESSAGE)
        return user

    async def send_password_reset(self, email: str) -> None:
        """Send a password reset email."""
        await asyncio.to_thread(
            self.provider.send_password_reset,
            email,
            self.password_reset_redirect_url,
        )
