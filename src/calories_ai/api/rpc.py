"""Callable RPC endpoints.

Requests carry their arguments as ``{"data": ...}`` and successful responses
wrap the return value as ``{"result": ...}``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from calories_ai.api.dependencies import get_container, optional_user
from calories_ai.domain.users import UserRecord  # noqa: TC001

router = APIRouter(prefix="/rpc", tags=["rpc"])


@router.post("/analyzeMealNutrition")
async def analyze_meal_nutrition(
    request: Request,
    caller: UserRecord | None = Depends(optional_user),
) -> dict[str, object]:
    """Estimate nutrition for a meal description and/or image."""
    container = get_container(request)
    result = await container.analysis_service.analyze(
        caller, await _read_data(request)
    )
    return {"result": result.model_dump()}


async def _read_data(request: Request) -> object:
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    return body.get("data")
