"""
Shared fixtures for dynprot tests.
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from dynprot.application.conversation.orchestrator import ConversationOrchestrator
from dynprot.domain.conversation.models import ConversationContext
from dynprot.domain.conversation.ports import IMealAnalyzer, IProductLookup
from dynprot.domain.meal.nutrition.models import RawMealEstimate
from dynprot.domain.meal.quantity.parser import QuantityParser


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def parser() -> QuantityParser:
    """Parser with the bundled portion table."""
    return QuantityParser()


@pytest.fixture
def chicken_estimate() -> RawMealEstimate:
    """Backend estimate for 100g of grilled chicken (uncorrected)."""
    return RawMealEstimate(
        detected_foods=["poulet grillé"],
        estimated_protein=31.0,
        estimated_calories=165.0,
        estimated_weight_grams=100.0,
        confidence=0.85,
    )


@pytest.fixture
def pasta_estimate() -> RawMealEstimate:
    """Backend estimate for a 250g plate of pasta."""
    return RawMealEstimate(
        detected_foods=["pâtes bolognaise"],
        estimated_protein=20.0,
        estimated_calories=400.0,
        estimated_carbs=50.0,
        estimated_fat=12.5,
        estimated_weight_grams=250.0,
        confidence=0.8,
    )


@pytest.fixture
def nutella_product() -> RawMealEstimate:
    """Per-100g packaged product from the product database."""
    return RawMealEstimate(
        detected_foods=["Nutella"],
        estimated_protein=6.3,
        estimated_calories=539.0,
        estimated_carbs=57.5,
        estimated_fat=30.9,
        estimated_weight_grams=100.0,
        confidence=0.9,
        source_hint="OpenFoodFacts",
        brand="Ferrero",
    )


@pytest.fixture
def idle_context() -> ConversationContext:
    """Fresh conversation."""
    return ConversationContext()


# ═══════════════════════════════════════════════════════════
# PORT MOCKS
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def mock_analyzer() -> Any:
    """Mock analysis backend (interface-based)."""
    return AsyncMock(spec=IMealAnalyzer)


@pytest.fixture
def mock_product_lookup() -> Any:
    """Mock product database (interface-based)."""
    return AsyncMock(spec=IProductLookup)


@pytest.fixture
def orchestrator(mock_analyzer: Any, mock_product_lookup: Any) -> ConversationOrchestrator:
    """Orchestrator with mocked collaborators and bundled tables."""
    return ConversationOrchestrator(
        analyzer=mock_analyzer,
        product_lookup=mock_product_lookup,
        retry_delay_seconds=5,
    )
