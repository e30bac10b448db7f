"""Request and response bodies for the HTTP API."""

from dataclasses import asdict

from pydantic import BaseModel, Field

from calories_ai.domain.users import AuthSession, UserRecord


class LoginBody(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class IdTokenBody(BaseModel):
    provider: str = "google"
    id_token: str = Field(min_length=1)


class RegisterBody(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=6)
    display_name: str | None = None


class PasswordResetBody(BaseModel):
    email: str = Field(min_length=1)


def user_payload(user: UserRecord) -> dict[str, object]:
    return asdict(user)


def session_payload(session: AuthSession) -> dict[str, object]:
    return {
        "user": user_payload(session.user),
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
    }
