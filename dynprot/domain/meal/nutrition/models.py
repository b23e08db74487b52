"""
Nutrition domain models.

Raw estimates coming from the analysis backend or the product database,
and the final, rounded record shown to the user.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

BASELINE_GRAMS = 100.0

# source_hint values that mean "per-100g packaged-product database data"
PACKAGED_SOURCE_HINT = "OpenFoodFacts"
PACKAGED_SOURCE_TAGS = frozenset({"openfoodfacts", "barcode_scan"})


class SourceKind(str, Enum):
    """
    Provenance of a raw estimate.

    Only changes the description of the final record; all three kinds
    are scaled the same way once per-100g.
    """

    PACKAGED_PRODUCT = "PACKAGED_PRODUCT"  # OpenFoodFacts / barcode data
    UNIT_COUNTED_FOOD = "UNIT_COUNTED_FOOD"  # Eggs, fruits, biscuits by the unit
    OTHER = "OTHER"  # Dishes, portions, grams of cooked food


class RawMealEstimate(BaseModel):
    """
    Raw nutrition estimate from an external collaborator.

    Owned by one conversation turn, or parked in the pending-analysis
    slot while the engine asks for a quantity.

    Attributes:
        detected_foods: Food names detected (first one is the main food)
        estimated_protein: Protein in g for estimated_weight_grams
        estimated_calories: Energy in kcal (optional)
        estimated_carbs: Carbohydrates in g (optional)
        estimated_fat: Fat in g (optional)
        estimated_fiber: Fiber in g (optional)
        estimated_weight_grams: Reference weight the values describe
        confidence: Estimate confidence (0.0 - 1.0)
        source_hint: Provenance tag ("OpenFoodFacts", "barcode_scan"...)
        explanation: Backend explanation text
        brand: Product brand (packaged products)
        correction_applied: Keyword of the protein correction already applied

    Example:
        >>> estimate = RawMealEstimate(
        ...     detected_foods=["poulet grillé"],
        ...     estimated_protein=31.0,
        ...     estimated_calories=165.0,
        ...     confidence=0.85,
        ... )
        >>> assert estimate.primary_food == "poulet grillé"
        >>> assert estimate.is_per_100g()
    """

    model_config = ConfigDict(frozen=True)

    detected_foods: List[str] = Field(default_factory=list, description="Detected food names")
    estimated_protein: float = Field(0.0, ge=0, description="Protein in g")
    estimated_calories: Optional[float] = Field(None, ge=0, description="Energy in kcal")
    estimated_carbs: Optional[float] = Field(None, ge=0, description="Carbohydrates in g")
    estimated_fat: Optional[float] = Field(None, ge=0, description="Fat in g")
    estimated_fiber: Optional[float] = Field(None, ge=0, description="Fiber in g")
    estimated_weight_grams: float = Field(
        BASELINE_GRAMS, gt=0, description="Reference weight of the values"
    )
    confidence: float = Field(0.0, ge=0.0, le=1.0, description="Estimate confidence")
    source_hint: Optional[str] = Field(None, description="Provenance tag")
    explanation: Optional[str] = Field(None, description="Backend explanation")
    brand: Optional[str] = Field(None, description="Product brand")
    correction_applied: Optional[str] = Field(
        None, description="Protein correction keyword already applied"
    )

    @field_validator("detected_foods")
    @classmethod
    def drop_blank_foods(cls, v: List[str]) -> List[str]:
        """Strip names and drop empty ones."""
        return [name.strip() for name in v if name and name.strip()]

    @property
    def primary_food(self) -> Optional[str]:
        """Main detected food, if any."""
        return self.detected_foods[0] if self.detected_foods else None

    def is_per_100g(self) -> bool:
        """Check if values already describe the 100g baseline."""
        return self.estimated_weight_grams == BASELINE_GRAMS

    def has_packaged_source_tag(self) -> bool:
        """Check if the provenance tag names the packaged-product database."""
        return bool(self.source_hint) and self.source_hint.lower() in PACKAGED_SOURCE_TAGS


class NormalizedNutrition(BaseModel):
    """
    Final, user-facing nutrition record.

    Terminal value of a meal lifecycle: once produced, the pending
    estimate is cleared.

    Example:
        >>> record = NormalizedNutrition(
        ...     description="poulet grillé - 200g",
        ...     protein=46.0,
        ...     calories=330,
        ...     confidence=0.85,
        ...     estimated_weight_grams=200.0,
        ... )
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    description: str = Field(..., min_length=1, description="Meal description")
    protein: float = Field(..., ge=0, description="Protein in g")
    calories: int = Field(..., ge=0, description="Energy in kcal")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence (0-1)")
    estimated_weight_grams: float = Field(..., gt=0, description="Consumed weight in g")

    carbs: Optional[float] = Field(None, ge=0, description="Carbohydrates in g")
    fat: Optional[float] = Field(None, ge=0, description="Fat in g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g")
    source: SourceKind = Field(SourceKind.OTHER, description="Estimate provenance")

    @field_validator("confidence")
    @classmethod
    def round_confidence(cls, v: float) -> float:
        """Round confidence to 2 decimal places."""
        return round(v, 2)
