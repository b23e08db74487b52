"""
Domain models for quantity parsing.

A parsed quantity expresses "how much was eaten" as a multiplier of the
100g nutrition baseline.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UnitType(str, Enum):
    """Kind of unit recognised in a quantity expression."""

    PIECE = "piece"  # Counted items (2 biscuits, une pomme)
    WEIGHT = "weight"  # g, kg, oz, lb
    VOLUME = "volume"  # ml, l
    PORTION = "portion"  # Fractions and bare multipliers


class QuantityComponents(BaseModel):
    """
    Pieces extracted from a quantity expression.

    Attributes:
        number: Numeric value found (2, 0.5, 150...)
        text_number: Number word when spelled out ("deux", "some")
        unit_type: Kind of unit recognised
        food_type: Portion-table keyword found in the text
    """

    model_config = ConfigDict(frozen=True)

    number: Optional[float] = Field(None, description="Numeric value")
    text_number: Optional[str] = Field(None, description="Spelled-out number")
    unit_type: Optional[UnitType] = Field(None, description="Unit category")
    food_type: Optional[str] = Field(None, description="Portion-table keyword")


class ParsedQuantity(BaseModel):
    """
    Result of parsing a quantity expression.

    Immutable, produced fresh per call. A multiplier of exactly 1 means
    "treat as the 100g baseline, no rescale".

    Attributes:
        multiplier: Scaling factor relative to 100g (always > 0)
        unit: Canonical unit when a weight/volume unit was found
        confidence: How certain the parse is (0.0 - 1.0)
        original_text: Input text (trimmed)
        components: Extracted pieces

    Example:
        >>> parsed = ParsedQuantity(
        ...     multiplier=1.5,
        ...     unit="g",
        ...     confidence=0.9,
        ...     original_text="150g",
        ...     components=QuantityComponents(number=150, unit_type=UnitType.WEIGHT),
        ... )
        >>> assert parsed.grams == 150.0
    """

    model_config = ConfigDict(frozen=True)

    multiplier: float = Field(..., gt=0, description="Multiplier of the 100g baseline")
    unit: Optional[str] = Field(None, description="Canonical unit (g, kg, ml, l, oz, lb)")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Parse confidence")
    original_text: str = Field("", description="Trimmed input text")
    components: QuantityComponents = Field(
        default_factory=QuantityComponents, description="Extracted pieces"
    )

    @property
    def grams(self) -> float:
        """Equivalent weight in grams."""
        return self.multiplier * 100

    def is_unit_counted(self) -> bool:
        """Check if this is a count of known food units (2 biscuits)."""
        return (
            self.components.unit_type == UnitType.PIECE
            and self.components.food_type is not None
        )
