"""Meal nutrition analysis using a chat model."""

import asyncio
import json
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calories_ai.domain.meals import MAX_IMAGE_BYTES, AnalysisRequest, NutritionResult
from calories_ai.domain.users import UserRecord
from calories_ai.errors import (
    AnalysisFailed,
    InvalidArgument,
    PermissionDenied,
    Unauthenticated,
)
from calories_ai.services.images import to_data_url

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a nutritional analysis expert. Analyze the provided meal description "
    "and/or image and return the nutritional information in a structured JSON "
    "format with the following fields: calories (total calories), protein (grams), "
    "carbs (grams), and fat (grams). Provide your best estimate based on the "
    "visible food items."
)
IMAGE_INSTRUCTION = "Please analyze the nutritional content of this meal image."
ANALYSIS_FAILED_MESSAGE = "Failed to analyze meal nutrition. Please try again."
NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fat")


class NutritionModelClient(Protocol):
    """Interface for the chat model that estimates nutrition."""

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        max_tokens: int,
    ) -> str | None:
        """Return the model's JSON object response as text."""


def allow_authenticated(user: UserRecord) -> bool:
    """Accept any authenticated principal."""
    return bool(user.id)


def allow_listed(allowed_ids: set[str] | None) -> Callable[[UserRecord], bool]:
    """Build a predicate restricting analysis to the given user ids."""
    if allowed_ids is None:
        return allow_authenticated

    def _predicate(user: UserRecord) -> bool:
        return user.id in allowed_ids

    return _predicate


@dataclass
class AnalysisService:
    """Validates analysis requests, prompts the model and normalizes results."""

    client: NutritionModelClient
    model: str
    max_tokens: int = 1000
    timeout_seconds: float = 540.0
    max_image_bytes: int = MAX_IMAGE_BYTES
    authorize: Callable[[UserRecord], bool] = allow_authenticated

    async def analyze(
        self, caller: UserRecord | None, payload: object
    ) -> NutritionResult:
        """Run one analysis for ``caller`` and return the normalized result."""
        logger.info("Analyzing meal nutrition")
        if caller is None:
            raise Unauthenticated("User must be authenticated to analyze meals")
        if not self.authorize(caller):
            raise PermissionDenied("User is not authorized")
        request = self._parse_request(payload)
        try:
            result = await asyncio.wait_for(
                self._estimate(request), timeout=self.timeout_seconds
            )
        except TimeoutError:
            logger.error(
                "Meal analysis timed out",
                extra={"user_id": caller.id, "timeout_seconds": self.timeout_seconds},
            )
            raise AnalysisFailed(ANALYSIS_FAILED_MESSAGE) from None
        logger.info(
            "Meal analysis result",
            extra={
                "user_id": caller.id,
                "had_image": request.image_base64 is not None,
                "had_description": request.description is not None,
            },
        )
        return result

    def _parse_request(self, payload: object) -> AnalysisRequest:
        try:
            return AnalysisRequest.model_validate(
                payload, context={"max_image_bytes": self.max_image_bytes}
            )
        except ValidationError as exc:
            details = exc.errors(
                include_url=False, include_context=False, include_input=False
            )
            logger.error("Invalid analysis payload", extra={"errors": details})
            raise InvalidArgument("Invalid data", details=details) from exc

    async def _estimate(self, request: AnalysisRequest) -> NutritionResult:
        try:
            content = await self.client.complete(
                model=self.model,
                messages=build_messages(request),
                max_tokens=self.max_tokens,
            )
        except Exception as exc:
            logger.exception("Error analyzing meal")
            raise AnalysisFailed(ANALYSIS_FAILED_MESSAGE) from exc
        return parse_nutrition(content)


def build_messages(request: AnalysisRequest) -> list[dict[str, object]]:
    """Build the chat messages for a request, one user turn per input."""
    messages: list[dict[str, object]] = [
        {"role": "system", "content": SYSTEM_INSTRUCTION}
    ]
    if request.description:
        messages.append(
            {
                "role": "user",
                "content": f"Please analyze this meal: {request.description}",
            }
        )
    if request.image_base64:
        messages.append(
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": to_data_url(request.image_base64)},
                    },
                    {"type": "text", "text": IMAGE_INSTRUCTION},
                ],
            }
        )
    return messages


def parse_nutrition(content: str | None) -> NutritionResult:
    """Parse model output into a result, zero-filling unusable fields."""
    if not content or not content.strip():
        logger.error("Model returned an empty response")
        raise AnalysisFailed(ANALYSIS_FAILED_MESSAGE)
    try:
        raw = json.loads(content)
    except ValueError as exc:
        logger.error("Model returned invalid JSON")
        raise AnalysisFailed(ANALYSIS_FAILED_MESSAGE) from exc
    if not isinstance(raw, dict):
        logger.error("Model returned a non-object response")
        raise AnalysisFailed(ANALYSIS_FAILED_MESSAGE)
    return NutritionResult(
        **{name: coerce_nutrient(raw.get(name)) for name in NUTRIENT_FIELDS}
    )


def coerce_nutrient(value: object) -> float:
    """Coerce a model-supplied value to a non-negative number, else 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if not isinstance(value, int | float | str):
        return 0.0
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number
