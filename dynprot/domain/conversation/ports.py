"""
Ports (Interfaces) for Conversation Dependencies.

Defines the external collaborators used by the ConversationOrchestrator.
Timeouts and retries belong to the implementations, not to the engine.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Optional, Protocol, runtime_checkable

from dynprot.domain.meal.nutrition.models import RawMealEstimate


@runtime_checkable
class IMealAnalyzer(Protocol):
    """
    Port for the meal analysis backend.

    Returns a raw estimate for a text description or a photo. Values
    describe estimated_weight_grams of food, not necessarily 100g.
    """

    async def analyze_text(self, description: str) -> RawMealEstimate:
        """
        Analyze a meal description.

        Args:
            description: Food description (quantity usually stripped)

        Returns:
            RawMealEstimate

        Raises:
            AnalysisUnavailableError: If the backend answered without a result
            ExternalServiceError: If the call failed
        """
        ...

    async def analyze_image(
        self, photo: bytes, description: Optional[str] = None
    ) -> RawMealEstimate:
        """
        Analyze a meal photo.

        Args:
            photo: Image bytes (JPEG)
            description: Optional text accompanying the photo

        Returns:
            RawMealEstimate

        Raises:
            AnalysisUnavailableError: If the backend answered without a result
            ExternalServiceError: If the call failed
        """
        ...


@runtime_checkable
class IProductLookup(Protocol):
    """
    Port for the packaged-product database.

    Records are always per-100g.
    """

    async def lookup_product_by_barcode(self, code: str) -> Optional[RawMealEstimate]:
        """
        Look up a product by barcode.

        Args:
            code: EAN-8 / EAN-13 / UPC barcode

        Returns:
            Per-100g estimate, or None if the product is unknown

        Raises:
            ExternalServiceError: If the call failed
        """
        ...
