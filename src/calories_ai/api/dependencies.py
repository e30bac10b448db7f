"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, Request

from calories_ai.domain.users import UserRecord  # noqa: TC001
from calories_ai.errors import Unauthenticated

if TYPE_CHECKING:
    from calories_ai.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Extract the bearer token from the Authorization header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_user(
    request: Request, token: str | None = Depends(bearer_token)
) -> UserRecord:
    """Resolve the caller or fail with ``Unauthenticated``."""
    container = get_container(request)
    return await container.auth_service.require_user(token)


async def optional_user(
    request: Request, token: str | None = Depends(bearer_token)
) -> UserRecord | None:
    """Resolve the caller, or return None when there is no valid session."""
    if token is None:
        return None
    container = get_container(request)
    try:
        return await container.auth_service.require_user(token)
    except Unauthenticated:
        return None
