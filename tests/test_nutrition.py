"""Tests for macronutrient energy rules."""

import pytest

from calories_ai.domain.nutrition import derive_calories


def test_derive_calories_uses_energy_factors() -> None:
    assert derive_calories(protein=20, carbs=30, fat=10) == 290


@pytest.mark.parametrize(
    ("protein", "carbs", "fat", "expected"),
    [
        (0.125, 0, 0, 1),
        (0, 0.375, 0, 2),
        (10.1, 0, 0, 40),
        (0, 0, 0, 0),
        (31.5, 12.25, 7.7, 244),
    ],
)
def test_derive_calories_rounds_half_up(
    protein: float, carbs: float, fat: float, expected: int
) -> None:
    assert derive_calories(protein, carbs, fat) == expected


def test_derive_calories_is_idempotent() -> None:
    first = derive_calories(12.5, 40.25, 3.3)
    second = derive_calories(12.5, 40.25, 3.3)

    assert first == second
