"""
Unit tests for the structured command grammar.
"""

import pytest

from dynprot.domain.conversation.commands import (
    CancelCommand,
    HelpCommand,
    ManualEntryCommand,
    StartManualEntryCommand,
    parse_command,
    parse_manual_entry_body,
)
from dynprot.domain.shared.errors import ValidationError


# ═══════════════════════════════════════════════════════════
# COMMAND RECOGNITION
# ═══════════════════════════════════════════════════════════


class TestParseCommand:
    """Command variants."""

    @pytest.mark.parametrize("text", ["aide", "help", "  AIDE "])
    def test_help(self, text: str) -> None:
        assert isinstance(parse_command(text), HelpCommand)

    @pytest.mark.parametrize("text", ["annuler", "Cancel"])
    def test_cancel(self, text: str) -> None:
        assert isinstance(parse_command(text), CancelCommand)

    @pytest.mark.parametrize(
        "text", ["entrée manuelle", "Entrée manuelle", "entree manuelle:", "manual entry :  "]
    )
    def test_start_manual_entry(self, text: str) -> None:
        """Prefix without a body waits for the next message."""
        assert isinstance(parse_command(text), StartManualEntryCommand)

    def test_full_manual_entry(self) -> None:
        command = parse_command("entrée manuelle: salade | protéines: 30g | calories: 500")

        assert command == ManualEntryCommand(description="salade", protein_g=30.0, calories=500)

    @pytest.mark.parametrize(
        "text", ["pâtes au poulet", "150g", "aide-moi", "entrée manuelles", "", "   "]
    )
    def test_not_a_command(self, text: str) -> None:
        assert parse_command(text) is None


# ═══════════════════════════════════════════════════════════
# MANUAL ENTRY BODY
# ═══════════════════════════════════════════════════════════


class TestManualEntryBody:
    """Manual entry fields and validation."""

    def test_description_only(self) -> None:
        command = parse_manual_entry_body("sandwich jambon beurre")

        assert command.description == "sandwich jambon beurre"
        assert command.protein_g is None
        assert command.calories is None

    def test_field_variants(self) -> None:
        """Accents, decimal commas and units are optional."""
        command = parse_manual_entry_body("pâtes | kcal: 650,4 | proteines : 12,5")

        assert command.protein_g == 12.5
        assert command.calories == 650

    @pytest.mark.parametrize("raw, expected", [("500.5", 501), ("499,5", 500), ("500.4", 500)])
    def test_calories_round_half_up(self, raw: str, expected: int) -> None:
        """Halves round up, like every other displayed value."""
        command = parse_manual_entry_body(f"salade | calories: {raw}")

        assert command.calories == expected

    def test_fields_in_any_order(self) -> None:
        command = parse_manual_entry_body("omelette | calories: 300 kcal | Protéines: 20g")

        assert command.protein_g == 20.0
        assert command.calories == 300

    def test_protein_out_of_range(self) -> None:
        with pytest.raises(ValidationError, match="entre 0 et 500 g") as exc_info:
            parse_manual_entry_body("steak | protéines: 600g")

        assert exc_info.value.field == "protein_g"

    def test_negative_protein(self) -> None:
        with pytest.raises(ValidationError):
            parse_manual_entry_body("steak | protéines: -5g")

    def test_calories_out_of_range(self) -> None:
        with pytest.raises(ValidationError, match="calories") as exc_info:
            parse_manual_entry_body("buffet | calories: 20000")

        assert exc_info.value.field == "calories"

    def test_empty_description(self) -> None:
        with pytest.raises(ValidationError, match="description"):
            parse_command("entrée manuelle: | protéines: 30g")

    def test_description_too_long(self) -> None:
        with pytest.raises(ValidationError, match="200 caractères"):
            parse_manual_entry_body("x" * 201)

    def test_unknown_field(self) -> None:
        with pytest.raises(ValidationError, match="Champ non reconnu : 'sucre: 5g'"):
            parse_manual_entry_body("gâteau | sucre: 5g")

    def test_boundaries_are_inclusive(self) -> None:
        command = parse_manual_entry_body("x | protéines: 500 | calories: 10000")

        assert command.protein_g == 500.0
        assert command.calories == 10000
