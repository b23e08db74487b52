"""
Static data tables.

Portion weights, protein corrections, packaged-product indicators and
suggestion presets live as JSON next to this module so they can be
reviewed and updated without touching parsing logic.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

DATA_DIR = Path(__file__).parent / "data"

PORTION_WEIGHTS_FILE = "portion_weights.json"
PROTEIN_CORRECTIONS_FILE = "protein_corrections.json"
PACKAGED_INDICATORS_FILE = "packaged_indicators.json"
SUGGESTION_PRESETS_FILE = "suggestion_presets.json"


@lru_cache(maxsize=None)
def load_table(filename: str) -> Any:
    """
    Load a JSON data table bundled with the package.

    Tables are read once per process; callers must not mutate the result.

    Args:
        filename: File name inside the data directory

    Returns:
        Decoded JSON document (key order preserved)

    Raises:
        FileNotFoundError: If the table does not exist
    """
    with open(DATA_DIR / filename, encoding="utf-8") as fh:
        return json.load(fh)
