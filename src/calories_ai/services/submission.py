"""Form-level checks run before an analysis request is sent."""

from pathlib import Path

from calories_ai.errors import InvalidArgument

MISSING_INPUT_MESSAGE = "Please provide either a meal description or upload an image"


def validate_submission(description: str | None, image: str | Path | None) -> None:
    """Reject a submission with neither a description nor an attached image."""
    has_description = bool(description and description.strip())
    if not has_description and not image:
        raise InvalidArgument(MISSING_INPUT_MESSAGE)
