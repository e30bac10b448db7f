"""Tests for the pre-submit input check."""

from pathlib import Path

import pytest

from calories_ai.errors import InvalidArgument
from calories_ai.services.submission import MISSING_INPUT_MESSAGE, validate_submission


@pytest.mark.parametrize("description", [None, "", "   "])
def test_validate_submission_rejects_missing_input(description: str | None) -> None:
    with pytest.raises(InvalidArgument) as excinfo:
        validate_submission(description, None)

    assert excinfo.value.message == MISSING_INPUT_MESSAGE


def test_validate_submission_accepts_either_input(tmp_path: Path) -> None:
    validate_submission("oatmeal with berries", None)
    validate_submission("", tmp_path / "meal.jpg")
    validate_submission("oatmeal", tmp_path / "meal.jpg")
