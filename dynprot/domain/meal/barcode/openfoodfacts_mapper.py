"""
OpenFoodFacts data mapper.

Transforms OpenFoodFacts API responses into per-100g raw estimates.
"""

from typing import Any

from dynprot.domain.meal.barcode.openfoodfacts_models import (
    OFFNutriments,
    OFFProduct,
    OFFSearchResult,
)
from dynprot.domain.meal.nutrition.models import (
    BASELINE_GRAMS,
    PACKAGED_SOURCE_HINT,
    RawMealEstimate,
)

# Confidence of a product record with no nutrient filled in
BASE_PRODUCT_CONFIDENCE = 0.5


class OpenFoodFactsMapper:
    """Maps OpenFoodFacts API data to domain models."""

    @staticmethod
    def parse_product_response(response_data: dict[str, Any]) -> OFFSearchResult:
        """Parse OpenFoodFacts product API response.

        Args:
            response_data: Raw API response JSON

        Returns:
            Parsed OFFSearchResult

        Example:
            >>> response = {
            ...     "status": 1,
            ...     "product": {
            ...         "code": "3017620422003",
            ...         "product_name": "Nutella",
            ...         "nutriments": {"proteins_100g": 6.3},
            ...     },
            ... }
            >>> result = OpenFoodFactsMapper.parse_product_response(response)
            >>> assert result.product.nutriments.proteins == 6.3
        """
        status = response_data.get("status", 0)

        if status == 0 or not response_data.get("product"):
            return OFFSearchResult(status=status, product=None)

        product_data = response_data["product"]
        nutriments_data = product_data.get("nutriments") or {}

        nutriments = OFFNutriments(
            energy_kcal=nutriments_data.get("energy-kcal_100g"),
            proteins=nutriments_data.get("proteins_100g"),
            carbohydrates=nutriments_data.get("carbohydrates_100g"),
            fat=nutriments_data.get("fat_100g"),
            fiber=nutriments_data.get("fiber_100g"),
        )

        product = OFFProduct(
            code=product_data.get("code") or response_data.get("code", ""),
            product_name=product_data.get("product_name") or None,
            generic_name=product_data.get("generic_name") or None,
            brands=product_data.get("brands") or None,
            nutriments=nutriments,
        )

        return OFFSearchResult(status=status, product=product)

    @staticmethod
    def calculate_completeness(product: OFFProduct) -> float:
        """Share of name and nutrient fields filled in (0-1)."""
        n = product.nutriments if product.nutriments else OFFNutriments()

        fields_to_check = [
            product.display_name,
            n.energy_kcal,
            n.proteins,
            n.carbohydrates,
            n.fat,
            n.fiber,
        ]

        filled = sum(1 for field in fields_to_check if field is not None)
        return round(filled / len(fields_to_check), 2)

    @staticmethod
    def to_raw_estimate(product: OFFProduct) -> RawMealEstimate:
        """Convert an OpenFoodFacts product to a per-100g estimate.

        Args:
            product: OpenFoodFacts product

        Returns:
            RawMealEstimate tagged as packaged-product data

        Example:
            >>> product = OFFProduct(
            ...     code="3017620422003",
            ...     product_name="Nutella",
            ...     brands="Ferrero",
            ...     nutriments=OFFNutriments(energy_kcal=539.0, proteins=6.3),
            ... )
            >>> estimate = OpenFoodFactsMapper.to_raw_estimate(product)
            >>> assert estimate.source_hint == "OpenFoodFacts"
            >>> assert estimate.brand == "Ferrero"
        """
        n = product.nutriments if product.nutriments else OFFNutriments()
        name = product.display_name or f"Produit {product.code}"
        completeness = OpenFoodFactsMapper.calculate_completeness(product)

        return RawMealEstimate(
            detected_foods=[name],
            estimated_protein=n.proteins or 0.0,
            estimated_calories=n.energy_kcal,
            estimated_carbs=n.carbohydrates,
            estimated_fat=n.fat,
            estimated_fiber=n.fiber,
            estimated_weight_grams=BASELINE_GRAMS,
            confidence=round(BASE_PRODUCT_CONFIDENCE + (1 - BASE_PRODUCT_CONFIDENCE) * completeness, 2),
            source_hint=PACKAGED_SOURCE_HINT,
            explanation=f"Valeurs pour 100g ({PACKAGED_SOURCE_HINT}, code {product.code})",
            brand=product.main_brand,
        )
