"""
Structured command grammar.

Commands typed in the chat are parsed into a closed set of typed
variants, so the orchestrator can dispatch on them exhaustively:

    entrée manuelle: <description> [| protéines: <N>g] [| calories: <N>]
    entrée manuelle                 (body expected in the next message)
    aide | help
    annuler | cancel
"""

from __future__ import annotations

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from dynprot.domain.meal.nutrition.rounding import round_half_up
from dynprot.domain.shared.errors import ValidationError

MAX_PROTEIN_G = 500.0
MAX_CALORIES = 10000
MAX_DESCRIPTION_LENGTH = 200

MANUAL_ENTRY_PREFIXES = ("entrée manuelle", "entree manuelle", "manual entry")
HELP_WORDS = frozenset({"aide", "help"})
CANCEL_WORDS = frozenset({"annuler", "cancel"})

_MANUAL_ENTRY_PATTERN = re.compile(
    r"^(?:" + "|".join(re.escape(p) for p in MANUAL_ENTRY_PREFIXES) + r")\s*(?::\s*(?P<body>.*))?$",
    re.IGNORECASE | re.DOTALL,
)
_PROTEIN_FIELD = re.compile(
    r"^(?:prot[ée]ines?|proteins?)\s*:\s*(?P<value>-?\d+(?:[.,]\d+)?)\s*g?$", re.IGNORECASE
)
_CALORIES_FIELD = re.compile(
    r"^(?:calories?|kcal)\s*:\s*(?P<value>-?\d+(?:[.,]\d+)?)\s*(?:kcal)?$", re.IGNORECASE
)


class ManualEntryCommand(BaseModel):
    """Meal typed in directly, bypassing the analysis backend."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["manual_entry"] = "manual_entry"
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    protein_g: Optional[float] = Field(None, ge=0, le=MAX_PROTEIN_G)
    calories: Optional[int] = Field(None, ge=0, le=MAX_CALORIES)


class StartManualEntryCommand(BaseModel):
    """Manual-entry prefix without a body."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["start_manual_entry"] = "start_manual_entry"


class HelpCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["help"] = "help"


class CancelCommand(BaseModel):
    """Drops the pending analysis."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cancel"] = "cancel"


Command = Union[ManualEntryCommand, StartManualEntryCommand, HelpCommand, CancelCommand]


def _parse_number(raw: str) -> float:
    return float(raw.replace(",", "."))


def parse_manual_entry_body(body: str) -> ManualEntryCommand:
    """
    Parse "<description> [| protéines: Ng] [| calories: N]".

    Args:
        body: Text after the manual-entry prefix

    Returns:
        ManualEntryCommand

    Raises:
        ValidationError: If a segment is malformed or a value is out of range

    Example:
        >>> cmd = parse_manual_entry_body("salade | protéines: 30g | calories: 500")
        >>> (cmd.description, cmd.protein_g, cmd.calories)
        ('salade', 30.0, 500)
    """
    segments = [segment.strip() for segment in body.split("|")]
    description = segments[0]

    if not description:
        raise ValidationError(
            "La description du repas est vide. Exemple : "
            "'entrée manuelle : salade | protéines : 30g | calories : 500'",
            field="description",
        )
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"La description ne doit pas dépasser {MAX_DESCRIPTION_LENGTH} caractères.",
            field="description",
        )

    protein_g: Optional[float] = None
    calories: Optional[int] = None

    for segment in segments[1:]:
        protein_match = _PROTEIN_FIELD.match(segment)
        calories_match = _CALORIES_FIELD.match(segment)

        if protein_match:
            protein_g = _parse_number(protein_match.group("value"))
            if not 0 <= protein_g <= MAX_PROTEIN_G:
                raise ValidationError(
                    f"Les protéines doivent être comprises entre 0 et {MAX_PROTEIN_G:g} g.",
                    field="protein_g",
                )
        elif calories_match:
            value = _parse_number(calories_match.group("value"))
            if not 0 <= value <= MAX_CALORIES:
                raise ValidationError(
                    f"Les calories doivent être comprises entre 0 et {MAX_CALORIES}.",
                    field="calories",
                )
            calories = int(round_half_up(value))
        else:
            raise ValidationError(
                f"Champ non reconnu : '{segment}'. "
                "Utilisez 'protéines : 30g' ou 'calories : 500'.",
                field="segment",
            )

    return ManualEntryCommand(description=description, protein_g=protein_g, calories=calories)


def parse_command(text: str) -> Optional[Command]:
    """
    Recognise a structured command.

    Args:
        text: Raw user text

    Returns:
        Command variant, or None when the text is not a command

    Raises:
        ValidationError: If a manual entry is malformed
    """
    stripped = text.strip()
    lowered = stripped.lower()

    if lowered in HELP_WORDS:
        return HelpCommand()
    if lowered in CANCEL_WORDS:
        return CancelCommand()

    match = _MANUAL_ENTRY_PATTERN.match(stripped)
    if not match:
        return None

    body = (match.group("body") or "").strip()
    if not body:
        return StartManualEntryCommand()
    return parse_manual_entry_body(body)
