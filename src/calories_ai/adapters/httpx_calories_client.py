"""HTTP client for the Calories AI API."""

import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from calories_ai.domain.meals import (
    AnalysisRequest,
    MealDraft,
    MealRecord,
    NutritionResult,
)
from calories_ai.domain.users import UserRecord
from calories_ai.errors import (
    AnalysisFailed,
    AuthenticationFailed,
    CaloriesAIError,
    InvalidArgument,
    PersistenceFailed,
    Unauthenticated,
    error_from_payload,
)
from calories_ai.services.analysis import ANALYSIS_FAILED_MESSAGE
from calories_ai.services.auth import NO_USER_MESSAGE
from calories_ai.services.composer import MealGateway
from calories_ai.services.meals import SAVE_FAILED_MESSAGE

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/rpc/analyzeMealNutrition"


@dataclass
class HttpxCaloriesClient(MealGateway):
    """Signed-in API session implemented with httpx.

    Holds at most one bearer token; sign-in calls replace it and ``logout``
    clears it.
    """

    base_url: str
    http_client: httpx.AsyncClient
    access_token: str | None = None
    timeout: float = 600.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 600.0) -> "HttpxCaloriesClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def login(self, email: str, password: str) -> UserRecord:
        """Sign in with email credentials."""
        body = await self._call(
            "POST",
            "/auth/login",
            {"email": email, "password": password},
            fallback=AuthenticationFailed,
            fallback_message="Operation failed",
        )
        return self._store_session(body)

    async def login_with_id_token(self, provider: str, id_token: str) -> UserRecord:
        """Sign in with a federated provider ID token."""
        body = await self._call(
            "POST",
            "/auth/login/id-token",
            {"provider": provider, "id_token": id_token},
            fallback=AuthenticationFailed,
            fallback_message="Operation failed",
        )
        return self._store_session(body)

    async def register(
        self, email: str, password: str, display_name: str | None = None
    ) -> UserRecord:
        """Create an account and keep its session when one is issued."""
        body = await self._call(
            "POST",
            "/auth/register",
            {"email": email, "password": password, "display_name": display_name},
            fallback=AuthenticationFailed,
            fallback_message="Operation failed",
        )
        return self._store_session(body)

    async def logout(self) -> None:
        """Sign out and forget the bearer token."""
        await self._call(
            "POST",
            "/auth/logout",
            None,
            fallback=AuthenticationFailed,
            fallback_message="Failed to sign out",
            authenticated=True,
        )
        self.access_token = None

    async def current_user(self) -> UserRecord:
        """Return the signed-in user or raise ``Unauthenticated``."""
        body = await self._call(
            "GET",
            "/auth/session",
            None,
            fallback=Unauthenticated,
            fallback_message=NO_USER_MESSAGE,
            authenticated=True,
        )
        return _parse_user(body.get("user"))

    async def send_password_reset(self, email: str) -> None:
        """Ask the server to email a password reset link."""
        await self._call(
            "POST",
            "/auth/password-reset",
            {"email": email},
            fallback=AuthenticationFailed,
            fallback_message="Operation failed",
        )

    async def analyze(self, request: AnalysisRequest) -> NutritionResult:
        """Run one remote analysis; no retry on failure."""
        if not request.description and not request.image_base64:
            raise InvalidArgument(
                "Either meal description or image must be provided",
                code="invalid-input",
            )
        body = await self._call(
            "POST",
            ANALYZE_PATH,
            {"data": request.to_wire()},
            fallback=AnalysisFailed,
            fallback_message=ANALYSIS_FAILED_MESSAGE,
            authenticated=True,
        )
        try:
            return NutritionResult.model_validate(body.get("result"))
        except ValidationError as exc:
            logger.error("Malformed analysis response")
            raise AnalysisFailed(ANALYSIS_FAILED_MESSAGE) from exc

    async def add_meal(self, draft: MealDraft) -> MealRecord:
        """Persist a meal to the signed-in user's log."""
        body = await self._call(
            "POST",
            "/meals",
            draft.model_dump(),
            fallback=PersistenceFailed,
            fallback_message=SAVE_FAILED_MESSAGE,
            authenticated=True,
        )
        try:
            return MealRecord.model_validate(body)
        except ValidationError as exc:
            raise PersistenceFailed(SAVE_FAILED_MESSAGE) from exc

    async def list_meals(self, limit: int = 50) -> list[MealRecord]:
        """Return the signed-in user's most recent meals."""
        body = await self._call(
            "GET",
            f"/meals?limit={limit}",
            None,
            fallback=PersistenceFailed,
            fallback_message="Failed to load meals",
            authenticated=True,
        )
        try:
            return [MealRecord.model_validate(row) for row in body.get("meals", [])]
        except ValidationError as exc:
            raise PersistenceFailed("Failed to load meals") from exc

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _call(  # noqa: PLR0913
        self,
        method: str,
        path: str,
        payload: dict[str, object] | None,
        *,
        fallback: type[CaloriesAIError],
        fallback_message: str,
        authenticated: bool = False,
    ) -> dict[str, object]:
        headers: dict[str, str] = {}
        if authenticated:
            if not self.access_token:
                raise Unauthenticated(NO_USER_MESSAGE)
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            logger.exception("Request failed", extra={"path": path})
            raise fallback(fallback_message) from exc
        try:
            body = response.json()
        except ValueError as exc:
            logger.error(
                "Non-JSON response",
                extra={"path": path, "status": response.status_code},
            )
            raise fallback(fallback_message) from exc
        if not isinstance(body, dict):
            raise fallback(fallback_message)
        if response.is_error or "error" in body:
            raise error_from_payload(body.get("error"), fallback, fallback_message)
        return body

    def _store_session(self, body: dict[str, object]) -> UserRecord:
        token = body.get("access_token")
        if isinstance(token, str) and token:
            self.access_token = token
        return _parse_user(body.get("user"))


def _parse_user(raw: object) -> UserRecord:
    if not isinstance(raw, dict) or not raw.get("id"):
        raise Unauthenticated(NO_USER_MESSAGE)
    return UserRecord(
        id=str(raw["id"]),
        email=str(raw.get("email") or ""),
        display_name=raw.get("display_name"),
        avatar_url=raw.get("avatar_url"),
    )
