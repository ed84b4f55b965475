from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Service(BaseModel):
    """A single treatment offered by the clinic."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Display name, also used for direct matching")
    description: str | None = None
    problems_treated: list[str] = Field(default_factory=list)
    enhancements: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value

    @field_validator("problems_treated", "enhancements", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value
