"""Meal log persistence service."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calories_ai.domain.meals import MealDraft, MealRecord
from calories_ai.domain.users import UserRecord
from calories_ai.errors import InvalidArgument, PermissionDenied, PersistenceFailed

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save meal"


class MealRepository(Protocol):
    """Persistence interface for meal records."""

    def create_meal(self, draft: MealDraft) -> MealRecord:
        """Insert a meal and return it with its store-assigned id."""

    def list_meals(self, owner_id: str, limit: int) -> list[MealRecord]:
        """Return an owner's meals, newest first."""


@dataclass
class MealLogService:
    """Writes and reads the signed-in user's meal log."""

    repository: MealRepository

    async def add_meal(self, caller: UserRecord, payload: object) -> MealRecord:
        """Validate a meal draft for ``caller`` and persist it."""
        try:
            draft = MealDraft.model_validate(payload)
        except ValidationError as exc:
            raise InvalidArgument(
                "Invalid meal",
                details=exc.errors(include_url=False, include_context=False),
            ) from exc
        if draft.owner_id != caller.id:
            raise PermissionDenied("Meals can only be saved to your own log")
        try:
            record = await asyncio.to_thread(self.repository.create_meal, draft)
        except Exception as exc:
            logger.exception("Failed to save meal", extra={"user_id": caller.id})
            raise PersistenceFailed(SAVE_FAILED_MESSAGE) from exc
        logger.info("Meal saved", extra={"user_id": caller.id, "meal_id": record.id})
        return record

    async def list_meals(self, caller: UserRecord, limit: int = 50) -> list[MealRecord]:
        """Return the caller's most recent meals."""
        try:
            return await asyncio.to_thread(
                self.repository.list_meals, caller.id, limit
            )
        except Exception as exc:
            logger.exception("Failed to load meals", extra={"user_id": caller.id})
            raise PersistenceFailed("Failed to load meals") from exc
