"""
Analysis backend wire models.

Request and response bodies of ``POST /meals/analyze``.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalyzeMealRequest(BaseModel):
    """
    Analysis request body.

    Example:
        >>> request = AnalyzeMealRequest(input_text="poulet grillé", input_type="text")
        >>> request.model_dump(exclude_none=True)
        {'input_text': 'poulet grillé', 'input_type': 'text'}
    """

    model_config = ConfigDict(frozen=True)

    input_text: Optional[str] = Field(None, max_length=2000, description="Meal description")
    input_type: Literal["text", "image", "voice"] = Field(..., description="Input channel")
    photo_data: Optional[str] = Field(None, description="Image as a base64 data URL")


class BackendAnalysis(BaseModel):
    """Analysis record returned by the backend (unknown fields ignored)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    detected_foods: List[str] = Field(default_factory=list)
    confidence_score: float = 0.0
    estimated_protein: Optional[float] = None
    estimated_calories: Optional[float] = None
    estimated_weight: Optional[float] = None
    estimated_carbs: Optional[float] = None
    estimated_fat: Optional[float] = None
    estimated_fiber: Optional[float] = None
    explanation: Optional[str] = None
    source: Optional[str] = None

    @field_validator("detected_foods", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or []

    @field_validator("confidence_score", mode="before")
    @classmethod
    def none_as_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v


class AnalysisResponseData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    analysis: Optional[BackendAnalysis] = None


class AnalyzeMealResponse(BaseModel):
    """
    Response envelope: ``{success, data: {analysis}, message}``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    success: bool = False
    data: Optional[AnalysisResponseData] = None
    message: Optional[str] = None

    @property
    def analysis(self) -> Optional[BackendAnalysis]:
        """Analysis record, if the call succeeded."""
        if not self.success or self.data is None:
            return None
        return self.data.analysis
