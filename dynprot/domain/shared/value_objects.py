"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field


class Barcode(BaseModel):
    """
    Product barcode value object.

    Validates barcode format (8-13 digits).
    Used for OpenFoodFacts lookups.

    Example:
        >>> barcode = Barcode(value="3017620422003")
        >>> assert len(barcode.value) == 13
        >>> assert Barcode.looks_like_barcode(" 3017620422003 ")
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d{8,13}$", description="Barcode digits")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    @staticmethod
    def looks_like_barcode(text: str) -> bool:
        """Check whether free text is a bare barcode."""
        return bool(re.fullmatch(r"\d{8,13}", text.strip()))

    @classmethod
    def from_string(cls, s: str) -> Barcode:
        """Create from string (surrounding whitespace ignored)."""
        return cls(value=s.strip())
