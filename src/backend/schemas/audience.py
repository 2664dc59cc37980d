"""
Target filter schema shared by notifications and polls.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from services.audience_filter import TargetFilter


class TargetFiltersSchema(BaseModel):
    """
    Demographic targeting for a notification or poll.

    Empty lists and missing bounds place no restriction.
    """

    states: list[str] = Field(default_factory=list, max_length=100)
    constituencies: list[str] = Field(default_factory=list, max_length=500)
    genders: list[str] = Field(
        default_factory=list,
        max_length=10,
        validation_alias=AliasChoices("genders", "gender"),
    )
    age_min: Optional[int] = Field(None, ge=0, le=150)
    age_max: Optional[int] = Field(None, ge=0, le=150)

    @field_validator("states", "constituencies", "genders")
    @classmethod
    def clean_values(cls, values: list[str]) -> list[str]:
        """Strip whitespace, drop blanks and duplicates (keeping first occurrence)."""
        cleaned: list[str] = []
        for value in values:
            value = value.strip()
            if value and value not in cleaned:
                cleaned.append(value)
        return cleaned

    @model_validator(mode="after")
    def check_age_range(self) -> "TargetFiltersSchema":
        if self.age_min is not None and self.age_max is not None and self.age_min > self.age_max:
            raise ValueError("age_min must be less than or equal to age_max")
        return self

    def to_target_filter(self) -> TargetFilter:
        return TargetFilter(
            states=frozenset(self.states),
            constituencies=frozenset(self.constituencies),
            genders=frozenset(self.genders),
            age_min=self.age_min,
            age_max=self.age_max,
        )

    def to_storage(self) -> Optional[dict[str, Any]]:
        """JSON value to persist; None when the filter restricts nothing."""
        target = self.to_target_filter()
        if target.is_empty:
            return None
        return self.model_dump()
