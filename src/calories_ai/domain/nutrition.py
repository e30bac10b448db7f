"""Macronutrient energy rules."""

import math

PROTEIN_KCAL_PER_GRAM = 4
CARBS_KCAL_PER_GRAM = 4
FAT_KCAL_PER_GRAM = 9


def derive_calories(protein: float, carbs: float, fat: float) -> int:
    """Return calories from macros, rounded half up to a whole kcal."""
    energy = (
        protein * PROTEIN_KCAL_PER_GRAM
        + carbs * CARBS_KCAL_PER_GRAM
        + fat * FAT_KCAL_PER_GRAM
    )
    return math.floor(energy + 0.5)
