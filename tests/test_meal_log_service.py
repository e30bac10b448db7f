"""Tests for the meal log service."""

import asyncio
import threading
from dataclasses import dataclass, field

import pytest

from calories_ai.domain.meals import MealDraft, MealRecord
from calories_ai.domain.users import UserRecord
from calories_ai.errors import InvalidArgument, PermissionDenied, PersistenceFailed
from calories_ai.services.meals import MealLogService
from tests.conftest import InMemoryMealRepository

OWNER = UserRecord(id="user-1", email="ana@example.com")


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "owner_id": OWNER.id,
        "description": "grilled chicken salad",
        "calories": 350,
        "protein": 30,
        "carbs": 10,
        "fat": 15,
        "created_at": "2026-10-16T12:30:00+00:00",
    }
    payload.update(overrides)
    return payload


def test_add_meal_assigns_store_id() -> None:
    repository = InMemoryMealRepository()
    service = MealLogService(repository)

    record = asyncio.run(service.add_meal(OWNER, _payload()))

    assert record.id
    assert record.owner_id == OWNER.id
    assert repository.meals == [record]


def test_add_meal_for_another_owner_is_denied() -> None:
    repository = InMemoryMealRepository()
    service = MealLogService(repository)

    with pytest.raises(PermissionDenied):
        asyncio.run(service.add_meal(OWNER, _payload(owner_id="user-2")))

    assert repository.meals == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"calories": -1},
        {"description": ""},
        {"created_at": "yesterday"},
        {"fat": "lots"},
    ],
)
def test_add_meal_rejects_invalid_records(overrides: dict[str, object]) -> None:
    service = MealLogService(InMemoryMealRepository())

    with pytest.raises(InvalidArgument):
        asyncio.run(service.add_meal(OWNER, _payload(**overrides)))


def test_add_meal_store_failure_is_persistence_failure() -> None:
    service = MealLogService(InMemoryMealRepository(fail=True))

    with pytest.raises(PersistenceFailed):
        asyncio.run(service.add_meal(OWNER, _payload()))


def test_list_meals_returns_owner_meals_newest_first() -> None:
    service = MealLogService(InMemoryMealRepository())
    other = UserRecord(id="user-2", email="bo@example.com")
    asyncio.run(service.add_meal(OWNER, _payload(created_at="2026-10-15T08:00:00")))
    asyncio.run(service.add_meal(OWNER, _payload(created_at="2026-10-16T08:00:00")))
    asyncio.run(service.add_meal(other, _payload(owner_id=other.id)))

    meals = asyncio.run(service.list_meals(OWNER))

    assert [meal.created_at for meal in meals] == [
        "2026-10-16T08:00:00",
        "2026-10-15T08:00:00",
    ]


@dataclass
class _ThreadRecordingRepository(InMemoryMealRepository):
    threads: list[int] = field(default_factory=list)

    def create_meal(self, draft: MealDraft) -> MealRecord:
        self.threads.append(threading.get_ident())
        return super().create_meal(draft)

    def list_meals(self, owner_id: str, limit: int) -> list[MealRecord]:
        self.threads.append(threading.get_ident())
        return super().list_meals(owner_id, limit)


def test_store_calls_run_off_the_event_loop_thread() -> None:
    repository = _ThreadRecordingRepository()
    service = MealLogService(repository)

    async def scenario() -> None:
        await service.add_meal(OWNER, _payload())
        await service.list_meals(OWNER)

    asyncio.run(scenario())

    assert len(repository.threads) == 2
    assert threading.get_ident() not in repository.threads
