"""Meal log endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request

from calories_ai.api.dependencies import get_container, require_user
from calories_ai.domain.users import UserRecord  # noqa: TC001

router = APIRouter(prefix="/meals", tags=["meals"])


@router.post("")
async def add_meal(
    request: Request,
    payload: dict[str, Any] = Body(...),
    user: UserRecord = Depends(require_user),
) -> dict[str, object]:
    """Save a meal to the caller's log."""
    container = get_container(request)
    record = await container.meal_log_service.add_meal(user, payload)
    return record.model_dump()


@router.get("")
async def list_meals(
    request: Request,
    limit: int = Query(default=50, ge=1, le=200),
    user: UserRecord = Depends(require_user),
) -> dict[str, object]:
    """Return the caller's most recent meals."""
    container = get_container(request)
    meals = await container.meal_log_service.list_meals(user, limit)
    return {"meals": [meal.model_dump() for meal in meals]}
