"""Shared pydantic base models."""

from pydantic import BaseModel, ConfigDict


class AppBaseModel(BaseModel):
    """Base model for request/response schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class RecordModel(BaseModel):
    """Base model for stored records.

    Records are immutable: changes go through ``model_copy(update=...)``.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)
