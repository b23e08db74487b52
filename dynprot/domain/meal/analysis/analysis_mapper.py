"""
Analysis backend mapper.

Transforms backend analysis records into raw estimates.
"""

from typing import Optional

from dynprot.domain.meal.analysis.analysis_models import BackendAnalysis
from dynprot.domain.meal.nutrition.models import BASELINE_GRAMS, RawMealEstimate


def _non_negative(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return max(0.0, value)


class AnalysisMapper:
    """Maps analysis backend data to domain models."""

    @staticmethod
    def to_raw_estimate(analysis: BackendAnalysis) -> RawMealEstimate:
        """Convert a backend analysis to a raw estimate.

        Missing or non-positive weights fall back to the 100g baseline and
        confidence is clamped to [0, 1].

        Args:
            analysis: Backend analysis record

        Returns:
            RawMealEstimate

        Example:
            >>> analysis = BackendAnalysis(
            ...     detected_foods=["poulet grillé"],
            ...     confidence_score=0.85,
            ...     estimated_protein=62.0,
            ...     estimated_weight=200.0,
            ... )
            >>> estimate = AnalysisMapper.to_raw_estimate(analysis)
            >>> assert estimate.estimated_weight_grams == 200.0
        """
        weight = analysis.estimated_weight
        if weight is None or weight <= 0:
            weight = BASELINE_GRAMS

        return RawMealEstimate(
            detected_foods=analysis.detected_foods,
            estimated_protein=_non_negative(analysis.estimated_protein) or 0.0,
            estimated_calories=_non_negative(analysis.estimated_calories),
            estimated_carbs=_non_negative(analysis.estimated_carbs),
            estimated_fat=_non_negative(analysis.estimated_fat),
            estimated_fiber=_non_negative(analysis.estimated_fiber),
            estimated_weight_grams=weight,
            confidence=min(1.0, max(0.0, analysis.confidence_score)),
            source_hint=analysis.source,
            explanation=analysis.explanation,
        )
