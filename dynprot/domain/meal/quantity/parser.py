"""
Quantity parser.

Turns an arbitrarily phrased quantity ("150g", "2 biscuits", "une pomme",
"1/2 baguette") into a multiplier of the 100g nutrition baseline.

Strategies are tried in a fixed order and the first one whose confidence
exceeds its own floor wins, so explicit weights always beat vaguer signals.
"""

from __future__ import annotations

import math
import re
from typing import Callable, Optional

from dynprot.domain.meal.quantity.models import (
    ParsedQuantity,
    QuantityComponents,
    UnitType,
)
from dynprot.domain.meal.quantity.portion_weights import PortionWeightTable

FALLBACK_CONFIDENCE = 0.3

WEIGHT_FLOOR = 0.8
FRACTION_FLOOR = 0.7
NUMERIC_FLOOR = 0.6
TEXT_NUMBER_FLOOR = 0.5

WEIGHT_CONFIDENCE = 0.9
FRACTION_CONFIDENCE = 0.8
FOOD_COUNT_CONFIDENCE = 0.7
BARE_NUMBER_CONFIDENCE = 0.6
TEXT_NUMBER_CONFIDENCE = 0.7

# canonical unit -> (grams per unit, unit type)
UNIT_CONVERSIONS: dict[str, tuple[float, UnitType]] = {
    "g": (1.0, UnitType.WEIGHT),
    "kg": (1000.0, UnitType.WEIGHT),
    "ml": (1.0, UnitType.VOLUME),
    "l": (1000.0, UnitType.VOLUME),
    "oz": (28.35, UnitType.WEIGHT),
    "lb": (453.59, UnitType.WEIGHT),
}

UNIT_ALIASES: dict[str, str] = {
    "kilogrammes": "kg",
    "kilogramme": "kg",
    "kilograms": "kg",
    "kilogram": "kg",
    "kilos": "kg",
    "kilo": "kg",
    "kg": "kg",
    "grammes": "g",
    "gramme": "g",
    "grams": "g",
    "gram": "g",
    "gr": "g",
    "g": "g",
    "millilitres": "ml",
    "millilitre": "ml",
    "milliliters": "ml",
    "milliliter": "ml",
    "ml": "ml",
    "litres": "l",
    "litre": "l",
    "liters": "l",
    "liter": "l",
    "l": "l",
    "oz": "oz",
    "lbs": "lb",
    "lb": "lb",
}

_NUMBER = r"(\d+(?:[.,]\d+)?)"

# Longest aliases first so "grammes" is not read as "g" + "rammes"
_WEIGHT_PATTERN = re.compile(
    r"(?<![\d/.,])"
    + _NUMBER
    + r"\s*("
    + "|".join(sorted(UNIT_ALIASES, key=len, reverse=True))
    + r")(?![a-zà-ÿ])",
    re.IGNORECASE,
)

_NUMERIC_PATTERN = re.compile(_NUMBER + r"\s*(.*)")

FRACTIONS: tuple[tuple[str, float], ...] = (
    ("1/2", 0.5),
    ("½", 0.5),
    ("demi", 0.5),
    ("demie", 0.5),
    ("moitié", 0.5),
    ("half", 0.5),
    ("1/3", 0.33),
    ("⅓", 0.33),
    ("tiers", 0.33),
    ("third", 0.33),
    ("1/4", 0.25),
    ("¼", 0.25),
    ("quart", 0.25),
    ("quarter", 0.25),
    ("2/3", 0.67),
    ("⅔", 0.67),
    ("3/4", 0.75),
    ("¾", 0.75),
)

_FRACTION_PATTERNS = tuple(
    (re.compile(r"(?<![\w/])" + re.escape(token) + r"(?![\w/])"), value)
    for token, value in FRACTIONS
)

FRENCH_NUMBERS: dict[str, int] = {
    "un": 1,
    "une": 1,
    "deux": 2,
    "trois": 3,
    "quatre": 4,
    "cinq": 5,
    "six": 6,
    "sept": 7,
    "huit": 8,
    "neuf": 9,
    "dix": 10,
    "onze": 11,
    "douze": 12,
    "treize": 13,
    "quatorze": 14,
    "quinze": 15,
    "seize": 16,
    "dix-sept": 17,
    "dix-huit": 18,
    "dix-neuf": 19,
    "vingt": 20,
    "quelques": 3,
    "plusieurs": 4,
    "beaucoup": 8,
}

ENGLISH_NUMBERS: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
    "twenty": 20,
    "some": 3,
    "several": 4,
    "many": 8,
    "few": 2,
}

_WORD_PATTERN = re.compile(r"[a-zà-ÿ]+(?:-[a-zà-ÿ]+)*")

# Patterns removed by strip_quantity, applied in order
_QUANTITY_TOKEN_PATTERNS = (
    re.compile(
        _NUMBER
        + r"\s*(?:"
        + "|".join(sorted(UNIT_ALIASES, key=len, reverse=True))
        + r")(?![a-zà-ÿ])\s*",
        re.IGNORECASE,
    ),
    re.compile(_NUMBER + r"\s*portions?\b\s*", re.IGNORECASE),
    re.compile(
        r"\b(?:un|une|deux|trois|quatre|cinq|six|sept|huit|neuf|dix)\b\s*",
        re.IGNORECASE,
    ),
    re.compile(r"(\d+)\s*(?:assiettes?|bols?|tranches?|morceaux?)\b\s*", re.IGNORECASE),
)
_LEADING_PARTITIVE = re.compile(r"^(?:de\s+|du\s+|des\s+|d'\s*)", re.IGNORECASE)
_EDGE_PUNCTUATION = re.compile(r"^[,\s]+|[,\s]+$")

MIN_DESCRIPTION_LENGTH = 3


def _to_float(raw: str) -> float:
    return float(raw.replace(",", "."))


def _is_usable(value: float) -> bool:
    """Positive and finite (a 400-digit number overflows to inf)."""
    return value > 0 and math.isfinite(value)


class QuantityParser:
    """
    Multi-strategy quantity parser.

    Pure and deterministic: the same text always yields the same
    ParsedQuantity, and parsing never raises.

    Example:
        >>> parser = QuantityParser()
        >>> parser.parse("150g").multiplier
        1.5
        >>> parser.parse("2 biscuits").components.food_type
        'biscuit'
        >>> parser.parse("xyz").confidence
        0.3
    """

    def __init__(self, portion_table: Optional[PortionWeightTable] = None) -> None:
        """
        Initialize parser.

        Args:
            portion_table: Portion weights (defaults to the bundled table)
        """
        self.portion_table = portion_table or PortionWeightTable()
        self._strategies: tuple[
            tuple[Callable[[str, str], Optional[ParsedQuantity]], float], ...
        ] = (
            (self._parse_weight, WEIGHT_FLOOR),
            (self._parse_fraction, FRACTION_FLOOR),
            (self._parse_numeric, NUMERIC_FLOOR),
            (self._parse_text_number, TEXT_NUMBER_FLOOR),
        )

    def parse(self, text: str) -> ParsedQuantity:
        """
        Parse a quantity expression.

        Args:
            text: Raw quantity text (may be empty)

        Returns:
            ParsedQuantity; multiplier 1.0 / confidence 0.3 when nothing matches
        """
        original = (text or "").strip()
        normalized = original.lower()

        for strategy, floor in self._strategies:
            result = strategy(normalized, original)
            if result is not None and result.confidence > floor:
                return result

        return ParsedQuantity(
            multiplier=1.0,
            confidence=FALLBACK_CONFIDENCE,
            original_text=original,
        )

    # ───────────────────────────────────────────────────────
    # Strategies
    # ───────────────────────────────────────────────────────

    def _parse_weight(self, text: str, original: str) -> Optional[ParsedQuantity]:
        match = _WEIGHT_PATTERN.search(text)
        if not match:
            return None

        value = _to_float(match.group(1))
        if not _is_usable(value):
            return None

        unit = UNIT_ALIASES[match.group(2).lower()]
        grams_per_unit, unit_type = UNIT_CONVERSIONS[unit]
        multiplier = value * grams_per_unit / 100
        if not _is_usable(multiplier):
            return None

        return ParsedQuantity(
            multiplier=multiplier,
            unit=unit,
            confidence=WEIGHT_CONFIDENCE,
            original_text=original,
            components=QuantityComponents(number=value, unit_type=unit_type),
        )

    def _parse_fraction(self, text: str, original: str) -> Optional[ParsedQuantity]:
        for pattern, value in _FRACTION_PATTERNS:
            if pattern.search(text):
                food_type = self.portion_table.find_food_type(text)
                return ParsedQuantity(
                    multiplier=self.portion_table.multiplier_for(value, food_type),
                    confidence=FRACTION_CONFIDENCE,
                    original_text=original,
                    components=QuantityComponents(
                        number=value,
                        unit_type=UnitType.PORTION,
                        food_type=food_type,
                    ),
                )
        return None

    def _parse_numeric(self, text: str, original: str) -> Optional[ParsedQuantity]:
        match = _NUMERIC_PATTERN.search(text)
        if not match:
            return None

        number = _to_float(match.group(1))
        if not _is_usable(number):
            return None

        food_type = self.portion_table.find_food_type(match.group(2) or "")
        if food_type:
            multiplier = self.portion_table.multiplier_for(number, food_type)
            if not _is_usable(multiplier):
                return None
            return ParsedQuantity(
                multiplier=multiplier,
                confidence=FOOD_COUNT_CONFIDENCE,
                original_text=original,
                components=QuantityComponents(
                    number=number,
                    unit_type=UnitType.PIECE,
                    food_type=food_type,
                ),
            )

        # Bare number: multiple of the 100g baseline
        return ParsedQuantity(
            multiplier=number,
            confidence=BARE_NUMBER_CONFIDENCE,
            original_text=original,
            components=QuantityComponents(number=number, unit_type=UnitType.PORTION),
        )

    def _parse_text_number(self, text: str, original: str) -> Optional[ParsedQuantity]:
        words = _WORD_PATTERN.findall(text)

        for table in (FRENCH_NUMBERS, ENGLISH_NUMBERS):
            for word in words:
                value = table.get(word)
                if value is None:
                    continue

                food_type = self.portion_table.find_food_type(text)
                return ParsedQuantity(
                    multiplier=self.portion_table.multiplier_for(value, food_type),
                    confidence=TEXT_NUMBER_CONFIDENCE,
                    original_text=original,
                    components=QuantityComponents(
                        number=value,
                        text_number=word,
                        unit_type=UnitType.PIECE if food_type else UnitType.PORTION,
                        food_type=food_type,
                    ),
                )
        return None


def strip_quantity(text: str) -> str:
    """
    Remove quantity tokens from a meal description.

    Used to send only the food name to the analysis backend.

    Args:
        text: Meal description, e.g. "200g de poulet grillé"

    Returns:
        Food description ("poulet grillé"), or the input unchanged when
        nothing meaningful would remain

    Example:
        >>> strip_quantity("200g de poulet grillé")
        'poulet grillé'
        >>> strip_quantity("150g")
        '150g'
    """
    cleaned = text.strip()

    for pattern in _QUANTITY_TOKEN_PATTERNS:
        cleaned = pattern.sub("", cleaned).strip()

    cleaned = _LEADING_PARTITIVE.sub("", cleaned).strip()
    cleaned = _EDGE_PUNCTUATION.sub("", re.sub(r"\s+", " ", cleaned))

    if len(cleaned) < MIN_DESCRIPTION_LENGTH:
        return text
    return cleaned


_default_parser: Optional[QuantityParser] = None


def parse_quantity(text: str) -> ParsedQuantity:
    """
    Parse a quantity expression with the bundled portion table.

    Usable standalone, no conversation context required.

    Example:
        >>> parse_quantity("une pomme").multiplier
        1.5
    """
    global _default_parser
    if _default_parser is None:
        _default_parser = QuantityParser()
    return _default_parser.parse(text)
