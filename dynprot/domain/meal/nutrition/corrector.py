"""
Protein bias correction.

The analysis backend systematically over-estimates protein for a few
common foods. Corrections are target/backend ratios applied once, before
any normalization.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import structlog

from dynprot.domain.meal.nutrition.models import RawMealEstimate
from dynprot.domain.meal.nutrition.rounding import round_half_up
from dynprot.domain.meal.tables import PROTEIN_CORRECTIONS_FILE, load_table

logger = structlog.get_logger(__name__)


class NutritionCorrector:
    """
    Applies the first matching protein correction to a raw estimate.

    At most one correction per estimate: the applied keyword is recorded
    on the estimate and a corrected estimate is returned unchanged.

    Example:
        >>> corrector = NutritionCorrector()
        >>> estimate = RawMealEstimate(detected_foods=["poulet"], estimated_protein=31.0)
        >>> corrector.correct(estimate, "poulet grillé").estimated_protein
        23.0
    """

    def __init__(self, corrections: Optional[Mapping[str, Sequence[float]]] = None) -> None:
        """
        Initialize corrector.

        Args:
            corrections: keyword → (target, backend) protein per 100g
                (defaults to the bundled table)
        """
        source = corrections if corrections is not None else load_table(PROTEIN_CORRECTIONS_FILE)
        self._ratios: dict[str, float] = {
            keyword.lower(): float(target) / float(backend)
            for keyword, (target, backend) in source.items()
        }

    def ratio_for(self, food_description: str) -> Optional[tuple[str, float]]:
        """First (keyword, ratio) whose keyword appears in the description."""
        food = food_description.lower()
        for keyword, ratio in self._ratios.items():
            if keyword in food:
                return keyword, ratio
        return None

    def correct(self, estimate: RawMealEstimate, food_description: str) -> RawMealEstimate:
        """
        Correct the protein value of an estimate.

        Args:
            estimate: Raw estimate from the analysis backend
            food_description: Food text that was sent to the backend

        Returns:
            Estimate with corrected protein, or the same estimate when no
            keyword matches or a correction was already applied
        """
        if estimate.correction_applied:
            return estimate

        match = self.ratio_for(food_description)
        if match is None:
            return estimate

        keyword, ratio = match
        corrected = round_half_up(estimate.estimated_protein * ratio, 1)

        logger.info(
            "Protein correction applied",
            keyword=keyword,
            backend_protein=estimate.estimated_protein,
            corrected_protein=corrected,
        )

        return estimate.model_copy(
            update={"estimated_protein": corrected, "correction_applied": keyword}
        )
