"""Authentication endpoints backed by the identity provider."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from calories_ai.api.dependencies import bearer_token, get_container, require_user
from calories_ai.api.models import (
    IdTokenBody,
    LoginBody,
    PasswordResetBody,
    RegisterBody,
    session_payload,
    user_payload,
)
from calories_ai.domain.users import UserRecord  # noqa: TC001

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginBody, request: Request) -> dict[str, object]:
    """Sign in with email and password."""
    container = get_container(request)
    session = await container.auth_service.login(body.email, body.password)
    return session_payload(session)


@router.post("/login/id-token")
async def login_with_id_token(body: IdTokenBody, request: Request) -> dict[str, object]:
    """Sign in with a federated provider ID token."""
    container = get_container(request)
    session = await container.auth_service.login_with_id_token(
        body.provider, body.id_token
    )
    return session_payload(session)


@router.post("/register")
async def register(body: RegisterBody, request: Request) -> dict[str, object]:
    """Create an account."""
    container = get_container(request)
    session = await container.auth_service.register(
        body.email, body.password, body.display_name
    )
    return session_payload(session)


@router.post("/logout")
async def logout(
    request: Request, token: str | None = Depends(bearer_token)
) -> dict[str, str]:
    """Sign out the current session."""
    container = get_container(request)
    await container.auth_service.logout(token)
    return {"status": "ok"}


@router.post("/password-reset")
async def password_reset(body: PasswordResetBody, request: Request) -> dict[str, str]:
    """Send a password reset email."""
    container = get_container(request)
    await container.auth_service.send_password_reset(body.email)
    return {"status": "ok"}


@router.get("/session")
async def current_session(
    user: UserRecord = Depends(require_user),
) -> dict[str, object]:
    """Return the signed-in user."""
    return {"user": user_payload(user)}
