"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calories_ai.adapters.openai_nutrition_client import OpenAINutritionClient
from calories_ai.adapters.supabase_identity_provider import SupabaseIdentityProvider
from calories_ai.adapters.supabase_meal_repository import SupabaseMealRepository
from calories_ai.config import Settings, parse_allowed_user_ids
from calories_ai.services.analysis import AnalysisService, allow_listed
from calories_ai.services.auth import AuthService
from calories_ai.services.meals import MealLogService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    analysis_service: AnalysisService
    meal_log_service: MealLogService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    database_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_service = AuthService(
        provider=SupabaseIdentityProvider(auth_client),
        session_wait_seconds=resolved_settings.session_wait_seconds,
        password_reset_redirect_url=resolved_settings.password_reset_redirect_url,
    )
    openai_client = OpenAINutritionClient.create(resolved_settings.openai_api_key)
    analysis_service = AnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        max_tokens=resolved_settings.openai_max_tokens,
        timeout_seconds=resolved_settings.analysis_timeout_seconds,
        max_image_bytes=resolved_settings.max_image_bytes,
        authorize=allow_listed(
            parse_allowed_user_ids(resolved_settings.allowed_user_ids)
        ),
    )
    meal_log_service = MealLogService(
        SupabaseMealRepository(database_client, table=resolved_settings.meals_table)
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        analysis_service=analysis_service,
        meal_log_service=meal_log_service,
        close_resources=close_resources,
    )
