"""
Suggestion generator.

Proposes a short list of plausible quantities for a food while the
conversation waits for the user's answer.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence

from dynprot.domain.meal.nutrition.models import RawMealEstimate
from dynprot.domain.meal.suggestions.models import QuantitySuggestion, SuggestionPreset
from dynprot.domain.meal.tables import SUGGESTION_PRESETS_FILE, load_table


class SuggestionGenerator:
    """
    Keyword-driven quantity suggestions.

    The main detected food is matched against curated presets (pasta,
    salad, chips, biscuits); keywords match whole words with an optional
    plural ending. Unmatched foods get the generic fallback preset.

    Every list contains exactly one default.

    Example:
        >>> generator = SuggestionGenerator()
        >>> estimate = RawMealEstimate(detected_foods=["Pâtes bolognaise"])
        >>> [s.value for s in generator.suggest(estimate)]
        ['100g', '150g', '200g', '150g']
    """

    def __init__(
        self,
        presets: Optional[Sequence[SuggestionPreset]] = None,
        fallback: Optional[SuggestionPreset] = None,
    ) -> None:
        """
        Initialize generator.

        Args:
            presets: Curated presets, tried in order (defaults to bundled table)
            fallback: Preset used when no keyword matches
        """
        if presets is None or fallback is None:
            bundled = self.load_presets(load_table(SUGGESTION_PRESETS_FILE))
            presets = presets if presets is not None else bundled[0]
            fallback = fallback if fallback is not None else bundled[1]

        self.presets = tuple(presets)
        self.fallback = fallback
        self._patterns = tuple(
            (
                preset,
                tuple(
                    re.compile(r"\b" + re.escape(keyword) + r"(?:s|x)?\b")
                    for keyword in preset.keywords
                ),
            )
            for preset in self.presets
        )

    @staticmethod
    def load_presets(
        document: Mapping[str, Any],
    ) -> tuple[List[SuggestionPreset], SuggestionPreset]:
        """
        Validate a presets document.

        Raises:
            pydantic.ValidationError: If a preset has no or several defaults
        """
        presets = [SuggestionPreset.model_validate(raw) for raw in document["presets"]]
        fallback = SuggestionPreset.model_validate(document["fallback"])
        return presets, fallback

    def preset_for(self, food_name: str) -> SuggestionPreset:
        """First preset whose keyword appears in the food name."""
        lowered = food_name.lower()
        for preset, patterns in self._patterns:
            if any(pattern.search(lowered) for pattern in patterns):
                return preset
        return self.fallback

    def suggest(self, estimate: RawMealEstimate) -> List[QuantitySuggestion]:
        """
        Suggest quantities for an estimate awaiting a quantity.

        Args:
            estimate: Estimate normalized to 100g

        Returns:
            Ordered suggestions, exactly one flagged is_default
        """
        return list(self.preset_for(estimate.primary_food or "").options)
