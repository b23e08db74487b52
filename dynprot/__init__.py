"""
DynProt conversational meal engine.

This package resolves free-text meal descriptions and quantity answers
into final nutrition records, one conversation turn at a time.

Structure:
- domain/: Quantity parsing, nutrition correction/normalization, commands
- application/: Conversation orchestrator (per-turn state machine)
- infrastructure/: Analysis backend and OpenFoodFacts clients, config, logging
- tests/: Test suite (unit)
"""

__version__ = "1.0.0"
