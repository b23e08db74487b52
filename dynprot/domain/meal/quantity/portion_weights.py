"""
Portion weight table.

Maps food-type keywords to an assumed unit weight in grams, used to turn
counted or fractional quantities ("2 biscuits", "1/2 baguette") into
multipliers of the 100g baseline.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

from dynprot.domain.meal.tables import PORTION_WEIGHTS_FILE, load_table

DEFAULT_PORTION_GRAMS = 100.0

_WORD_CLEANUP = re.compile(r"[^a-zàâäéèêëîïôöùûüÿç-]")


class PortionWeightTable:
    """
    Keyword → grams lookup.

    Lookup is case-insensitive. An exact word match wins; otherwise the
    first keyword (in table order) contained in the text wins. Unknown
    foods weigh DEFAULT_PORTION_GRAMS.

    Example:
        >>> table = PortionWeightTable()
        >>> table.find_food_type("2 biscuits au chocolat")
        'biscuit'
        >>> table.weight_for("biscuit")
        20.0
        >>> table.weight_for(None)
        100.0
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None) -> None:
        """
        Initialize table.

        Args:
            weights: Keyword → grams mapping (defaults to the bundled table)
        """
        source = weights if weights is not None else load_table(PORTION_WEIGHTS_FILE)
        self._weights: dict[str, float] = {k.lower(): float(v) for k, v in source.items()}

    def find_food_type(self, text: str) -> Optional[str]:
        """
        Find the portion keyword mentioned in text.

        Args:
            text: Free text (quantity remainder or full input)

        Returns:
            Matching keyword, or None
        """
        lowered = text.lower()

        for word in lowered.split():
            clean_word = _WORD_CLEANUP.sub("", word)
            if clean_word in self._weights:
                return clean_word

        # Partial matches (plurals, compounds)
        for keyword in self._weights:
            if keyword in lowered:
                return keyword

        return None

    def weight_for(self, food_type: Optional[str]) -> float:
        """Unit weight in grams for a keyword (default 100g)."""
        if not food_type:
            return DEFAULT_PORTION_GRAMS
        return self._weights.get(food_type.lower(), DEFAULT_PORTION_GRAMS)

    def multiplier_for(self, count: float, food_type: Optional[str]) -> float:
        """Multiplier of the 100g baseline for `count` units of a food."""
        return count * (self.weight_for(food_type) / 100)
