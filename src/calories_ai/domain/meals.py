"""Meal analysis and meal log models."""

import base64
import binascii
from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

MAX_IMAGE_BYTES = 5 * 1024 * 1024
IMAGE_ONLY_DESCRIPTION = "Image-based meal entry"
_DATA_URI_MARKER = ";base64,"


def strip_data_uri_prefix(value: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix from encoded image text."""
    if value.startswith("data:") and _DATA_URI_MARKER in value:
        return value.split(_DATA_URI_MARKER, maxsplit=1)[1]
    return value


def decoded_size(encoded: str) -> int:
    """Return the byte length of a base64 payload without decoding it."""
    padding = encoded[-2:].count("=")
    return len(encoded) * 3 // 4 - padding


class AnalysisRequest(BaseModel):
    """Text and/or image submitted for nutrition estimation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    description: str | None = None
    image_base64: str | None = Field(default=None, alias="imageBase64")

    @field_validator("description", mode="after")
    @classmethod
    def _blank_description_is_missing(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("image_base64", mode="after")
    @classmethod
    def _check_image(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None:
            return None
        encoded = "".join(strip_data_uri_prefix(value.strip()).split())
        if not encoded:
            return None
        try:
            base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Image must be base64 encoded") from exc
        limit = MAX_IMAGE_BYTES
        if info.context and "max_image_bytes" in info.context:
            limit = int(info.context["max_image_bytes"])
        if decoded_size(encoded) > limit:
            raise ValueError(f"Image must not exceed {limit} bytes")
        return encoded

    @model_validator(mode="after")
    def _require_input(self) -> "AnalysisRequest":
        if self.description is None and self.image_base64 is None:
            raise ValueError("Either meal description or image must be provided")
        return self

    def to_wire(self) -> dict[str, object]:
        """Serialize using the field names the analysis endpoint expects."""
        return self.model_dump(by_alias=True, exclude_none=True)


class NutritionResult(BaseModel):
    """Estimated nutrition for a single meal."""

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)


class MealDraft(BaseModel):
    """Meal log entry before the store assigns an id."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    owner_id: str = Field(min_length=1)
    description: str = Field(min_length=1)
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    created_at: str

    @field_validator("created_at")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        try:
            datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValueError("created_at must be an ISO-8601 timestamp") from exc
        return value


class MealRecord(MealDraft):
    """Persisted meal log entry."""

    id: str = Field(min_length=1)
