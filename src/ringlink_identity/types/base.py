"""Reusable, strict base models for identity records and settings."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """A strict, immutable pydantic base model."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_default=True,
    )


class RecordModel(StrictBaseModel):
    """
    A strict model for records received from peers.

    Unknown fields are ignored rather than rejected, so newer peers can add
    fields without breaking older readers.
    """

    model_config = StrictBaseModel.model_config | {"extra": "ignore"}
