"""Identity models projected from the identity provider."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserRecord:
    """Represents the signed-in user as reported by the identity provider."""

    id: str
    email: str
    display_name: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True)
class AuthSession:
    """Signed-in user plus the bearer tokens issued for them."""

    user: UserRecord
    access_token: str | None = None
    refresh_token: str | None = None
