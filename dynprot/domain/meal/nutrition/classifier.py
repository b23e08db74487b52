"""
Source classifier.

Decides where a raw estimate comes from: packaged-product database,
unit-counted natural food, or anything else.
"""

from __future__ import annotations

from typing import Iterable, Optional

from dynprot.domain.meal.nutrition.models import (
    PACKAGED_SOURCE_HINT,
    RawMealEstimate,
    SourceKind,
)
from dynprot.domain.meal.quantity.models import ParsedQuantity
from dynprot.domain.meal.tables import PACKAGED_INDICATORS_FILE, load_table


class SourceClassifier:
    """
    Classifies the provenance of a raw estimate.

    Rules, in order:
    1. PACKAGED_PRODUCT: explicit provenance tag, explanation mentioning
       OpenFoodFacts, or a packaged-good keyword in the main food name
    2. UNIT_COUNTED_FOOD: quantity counted in known food units
    3. OTHER

    Example:
        >>> classifier = SourceClassifier()
        >>> estimate = RawMealEstimate(detected_foods=["Pringles Original"])
        >>> classifier.classify(estimate)
        <SourceKind.PACKAGED_PRODUCT: 'PACKAGED_PRODUCT'>
    """

    def __init__(self, packaged_indicators: Optional[Iterable[str]] = None) -> None:
        """
        Initialize classifier.

        Args:
            packaged_indicators: Keywords of packaged goods
                (defaults to the bundled list)
        """
        source = (
            packaged_indicators
            if packaged_indicators is not None
            else load_table(PACKAGED_INDICATORS_FILE)
        )
        self._indicators = tuple(keyword.lower() for keyword in source)

    def is_packaged_product_name(self, product_name: str) -> bool:
        """Check if a food name looks like a packaged good."""
        lowered = product_name.lower()
        return any(indicator in lowered for indicator in self._indicators)

    def is_packaged_product(self, estimate: RawMealEstimate) -> bool:
        """Check all packaged-product signals of an estimate."""
        if estimate.has_packaged_source_tag():
            return True
        explanation = (estimate.explanation or "").lower()
        if PACKAGED_SOURCE_HINT.lower() in explanation:
            return True
        return self.is_packaged_product_name(estimate.primary_food or "")

    def classify(
        self,
        estimate: RawMealEstimate,
        parsed: Optional[ParsedQuantity] = None,
    ) -> SourceKind:
        """
        Classify an estimate.

        Args:
            estimate: Raw (corrected) estimate
            parsed: Quantity paired with the estimate, if known

        Returns:
            SourceKind
        """
        if self.is_packaged_product(estimate):
            return SourceKind.PACKAGED_PRODUCT
        if parsed is not None and parsed.is_unit_counted():
            return SourceKind.UNIT_COUNTED_FOOD
        return SourceKind.OTHER
