"""Analyze-edit-save flow behind the meal entry screen."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from calories_ai.domain.meals import (
    IMAGE_ONLY_DESCRIPTION,
    MAX_IMAGE_BYTES,
    AnalysisRequest,
    MealDraft,
    MealRecord,
    NutritionResult,
)
from calories_ai.domain.nutrition import derive_calories
from calories_ai.domain.users import UserRecord
from calories_ai.errors import CaloriesAIError, InvalidArgument, PersistenceFailed
from calories_ai.services.images import encode_image_file
from calories_ai.services.meals import SAVE_FAILED_MESSAGE
from calories_ai.services.submission import validate_submission

logger = logging.getLogger(__name__)

ANALYZE_FAILED_MESSAGE = "Failed to analyze meal"


class MealGateway(Protocol):
    """Remote operations the composer depends on."""

    async def analyze(self, request: AnalysisRequest) -> NutritionResult:
        """Return a nutrition estimate for the request."""

    async def add_meal(self, draft: MealDraft) -> MealRecord:
        """Persist a meal and return the stored record."""


@dataclass
class MealComposer:
    """In-memory state of one user's meal entry form.

    Only one analysis or save runs at a time; ``busy`` is set for its duration.
    """

    gateway: MealGateway
    user: UserRecord
    max_image_bytes: int = MAX_IMAGE_BYTES
    description: str = ""
    image_path: Path | None = None
    result: NutritionResult | None = None
    editing: bool = False
    busy: bool = False
    error: str | None = None

    async def submit(self) -> NutritionResult:
        """Validate the form, encode the image and request an analysis."""
        self._ensure_idle()
        try:
            validate_submission(self.description, self.image_path)
        except InvalidArgument as exc:
            self.error = exc.message
            raise
        self.error = None
        self.result = None
        self.editing = False
        self.busy = True
        try:
            image = (
                encode_image_file(self.image_path, self.max_image_bytes)
                if self.image_path
                else None
            )
            request = AnalysisRequest(
                description=self.description.strip() or None, image_base64=image
            )
            result = await self.gateway.analyze(request)
        except CaloriesAIError:
            logger.exception("Meal analysis failed", extra={"user_id": self.user.id})
            self.error = ANALYZE_FAILED_MESSAGE
            raise
        finally:
            self.busy = False
        self.result = result
        return result

    def start_editing(self) -> None:
        """Switch the result view to edit mode."""
        self._require_result()
        self.editing = True

    def stop_editing(self) -> None:
        """Leave edit mode, keeping any edits."""
        self.editing = False

    def update_macros(
        self,
        *,
        protein: float | None = None,
        carbs: float | None = None,
        fat: float | None = None,
    ) -> NutritionResult:
        """Overwrite edited macros and recompute calories from them.

        Only allowed in edit mode. Calories always follow the macros and cannot
        be set directly.
        """
        current = self._require_result()
        if not self.editing:
            raise InvalidArgument("Start editing before changing macros")
        protein = current.protein if protein is None else protein
        carbs = current.carbs if carbs is None else carbs
        fat = current.fat if fat is None else fat
        values = (protein, carbs, fat)
        if not all(math.isfinite(value) for value in values):
            raise InvalidArgument("Macros must be finite numbers")
        if min(values) < 0:
            raise InvalidArgument("Macros cannot be negative")
        try:
            calories = derive_calories(protein, carbs, fat)
        except OverflowError as exc:
            raise InvalidArgument("Macros are too large") from exc
        self.result = NutritionResult(
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
        )
        return self.result

    async def save(self) -> MealRecord:
        """Write the current result to the meal log and reset the form."""
        self._ensure_idle()
        result = self._require_result()
        draft = MealDraft(
            owner_id=self.user.id,
            description=self.description.strip() or IMAGE_ONLY_DESCRIPTION,
            calories=result.calories,
            protein=result.protein,
            carbs=result.carbs,
            fat=result.fat,
            created_at=datetime.now(tz=UTC).isoformat(),
        )
        self.busy = True
        try:
            record = await self.gateway.add_meal(draft)
        except CaloriesAIError as exc:
            logger.exception("Failed to save meal", extra={"user_id": self.user.id})
            self.error = SAVE_FAILED_MESSAGE
            if isinstance(exc, PersistenceFailed):
                raise
            raise PersistenceFailed(SAVE_FAILED_MESSAGE) from exc
        finally:
            self.busy = False
        self._reset()
        return record

    def cancel(self) -> None:
        """Discard the analysis result without saving anything."""
        self._reset()

    def _reset(self) -> None:
        self.description = ""
        self.image_path = None
        self.result = None
        self.editing = False
        self.error = None

    def _ensure_idle(self) -> None:
        if self.busy:
            raise InvalidArgument("A request is already in progress")

    def _require_result(self) -> NutritionResult:
        if self.result is None:
            raise InvalidArgument("Analyze a meal first")
        return self.result
