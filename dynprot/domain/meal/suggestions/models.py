"""Quantity suggestion models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuantitySuggestion(BaseModel):
    """
    One quantity choice offered to the user.

    Attributes:
        label: Button text ("1 biscuit (~20g)")
        value: Text sent back as the quantity answer ("1 biscuit")
        weight_grams: Equivalent weight
        is_default: Preselected choice
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)
    weight_grams: float = Field(..., gt=0)
    is_default: bool = False


class SuggestionPreset(BaseModel):
    """
    Curated suggestions for a family of foods.

    Validated on load: at least one option and exactly one default.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    keywords: List[str] = Field(default_factory=list)
    options: List[QuantitySuggestion] = Field(..., min_length=1)

    @field_validator("keywords")
    @classmethod
    def lowercase_keywords(cls, v: List[str]) -> List[str]:
        return [keyword.lower() for keyword in v]

    @field_validator("options")
    @classmethod
    def exactly_one_default(cls, v: List[QuantitySuggestion]) -> List[QuantitySuggestion]:
        defaults = sum(1 for option in v if option.is_default)
        if defaults != 1:
            raise ValueError(f"Preset must have exactly one default option, got {defaults}")
        return v
