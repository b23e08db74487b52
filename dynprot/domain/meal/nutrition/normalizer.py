"""
Nutrition normalizer.

Brings raw estimates to the 100g baseline and scales them to the
consumed quantity.
"""

from __future__ import annotations

from typing import Optional

import structlog

from dynprot.domain.meal.nutrition.classifier import SourceClassifier
from dynprot.domain.meal.nutrition.models import (
    BASELINE_GRAMS,
    NormalizedNutrition,
    RawMealEstimate,
    SourceKind,
)
from dynprot.domain.meal.nutrition.rounding import round_half_up
from dynprot.domain.meal.quantity.models import ParsedQuantity

logger = structlog.get_logger(__name__)

# Below this share of the original text, the analyzer only saw the food name
SHORTENED_DESCRIPTION_RATIO = 0.6

# Confidence floor when the upstream estimate already includes the quantity
PRESCALED_CONFIDENCE_FLOOR = 0.8
DEFAULT_CONFIDENCE = 0.8

DEFAULT_MEAL_NAME = "Repas"
MIN_WEIGHT_GRAMS = 0.1

SOURCE_LABELS: dict[SourceKind, Optional[str]] = {
    SourceKind.PACKAGED_PRODUCT: "produit emballé",
    SourceKind.UNIT_COUNTED_FOOD: "à l'unité",
    SourceKind.OTHER: None,
}


def should_apply_multiplier(sent_description: str, original_text: str) -> bool:
    """
    Guess whether the analyzer saw the quantity or only the food name.

    The analyzer does not say whether it used the quantity, so this only
    compares text lengths: a description much shorter than the original
    means the quantity was stripped and must still be applied.

    Args:
        sent_description: Text actually sent to the analyzer
        original_text: User text containing the quantity

    Returns:
        True if the multiplier must be applied to the estimate
    """
    return len(sent_description) < len(original_text) * SHORTENED_DESCRIPTION_RATIO


def _scale(value: Optional[float], ratio: float) -> Optional[float]:
    if value is None:
        return None
    return round_half_up(value * ratio, 1)


class NutritionNormalizer:
    """
    Produces final nutrition records.

    Example:
        >>> normalizer = NutritionNormalizer()
        >>> estimate = RawMealEstimate(
        ...     detected_foods=["Chips"],
        ...     estimated_protein=6.0,
        ...     estimated_calories=540.0,
        ...     estimated_weight_grams=30.0,
        ... )
        >>> normalizer.normalize_to_100g(estimate).estimated_protein
        20.0
    """

    def __init__(self, classifier: Optional[SourceClassifier] = None) -> None:
        self.classifier = classifier or SourceClassifier()

    def normalize_to_100g(self, estimate: RawMealEstimate) -> RawMealEstimate:
        """
        Rescale an estimate to the 100g baseline.

        Args:
            estimate: Estimate describing estimated_weight_grams of food

        Returns:
            Estimate describing 100g (same object if already per-100g)
        """
        if estimate.is_per_100g():
            return estimate

        ratio = BASELINE_GRAMS / estimate.estimated_weight_grams

        logger.debug(
            "Normalizing estimate to 100g",
            food=estimate.primary_food,
            from_grams=estimate.estimated_weight_grams,
            ratio=round(ratio, 4),
        )

        explanation = f"{estimate.explanation or ''} (normalisé pour 100g)".strip()
        calories = estimate.estimated_calories
        return estimate.model_copy(
            update={
                "estimated_protein": round_half_up(estimate.estimated_protein * ratio, 1),
                "estimated_calories": (
                    round_half_up(calories * ratio) if calories is not None else None
                ),
                "estimated_carbs": _scale(estimate.estimated_carbs, ratio),
                "estimated_fat": _scale(estimate.estimated_fat, ratio),
                "estimated_fiber": _scale(estimate.estimated_fiber, ratio),
                "estimated_weight_grams": BASELINE_GRAMS,
                "explanation": explanation,
            }
        )

    def normalize(
        self,
        estimate: RawMealEstimate,
        parsed: ParsedQuantity,
        should_scale: bool,
    ) -> NormalizedNutrition:
        """
        Combine an estimate and a quantity into the final record.

        Args:
            estimate: Corrected estimate (per-100g when should_scale)
            parsed: Consumed quantity
            should_scale: False when the estimate already reflects the quantity

        Returns:
            NormalizedNutrition
        """
        kind = self.classifier.classify(estimate, parsed)
        description = self.describe(estimate, parsed, kind)
        weight_grams = max(MIN_WEIGHT_GRAMS, round_half_up(parsed.multiplier * BASELINE_GRAMS, 1))

        if not should_scale:
            return NormalizedNutrition(
                description=description,
                protein=round_half_up(estimate.estimated_protein, 1),
                calories=int(round_half_up(estimate.estimated_calories or 0.0)),
                confidence=max(PRESCALED_CONFIDENCE_FLOOR, estimate.confidence),
                estimated_weight_grams=weight_grams,
                carbs=_scale(estimate.estimated_carbs, 1.0),
                fat=_scale(estimate.estimated_fat, 1.0),
                fiber=_scale(estimate.estimated_fiber, 1.0),
                source=kind,
            )

        # Same arithmetic for every source kind: the estimate is per-100g
        ratio = parsed.multiplier
        return NormalizedNutrition(
            description=description,
            protein=round_half_up(estimate.estimated_protein * ratio, 1),
            calories=int(round_half_up((estimate.estimated_calories or 0.0) * ratio)),
            confidence=estimate.confidence or DEFAULT_CONFIDENCE,
            estimated_weight_grams=weight_grams,
            carbs=_scale(estimate.estimated_carbs, ratio),
            fat=_scale(estimate.estimated_fat, ratio),
            fiber=_scale(estimate.estimated_fiber, ratio),
            source=kind,
        )

    @staticmethod
    def describe(estimate: RawMealEstimate, parsed: ParsedQuantity, kind: SourceKind) -> str:
        """Description text: food, quantity and provenance label."""
        food = estimate.primary_food or DEFAULT_MEAL_NAME
        description = f"{food} - {parsed.original_text}" if parsed.original_text else food
        label = SOURCE_LABELS[kind]
        return f"{description} ({label})" if label else description
