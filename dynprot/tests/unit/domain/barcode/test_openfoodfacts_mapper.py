"""
Unit tests for OpenFoodFacts mapper.
"""

from dynprot.domain.meal.barcode.openfoodfacts_mapper import OpenFoodFactsMapper
from dynprot.domain.meal.barcode.openfoodfacts_models import OFFNutriments, OFFProduct
from dynprot.domain.meal.nutrition.classifier import SourceClassifier


class TestOpenFoodFactsMapper:
    """Test OpenFoodFacts data mapper."""

    def test_parse_complete_product_response(self) -> None:
        """Should parse complete product response."""
        response = {
            "status": 1,
            "product": {
                "code": "3017620422003",
                "product_name": "Nutella",
                "brands": "Ferrero",
                "serving_size": "15g",
                "nutriments": {
                    "energy-kcal_100g": 539.0,
                    "proteins_100g": 6.3,
                    "carbohydrates_100g": 57.5,
                    "fat_100g": 30.9,
                    "fiber_100g": 0.0,
                    "sugars_100g": 56.3,
                },
            },
        }

        result = OpenFoodFactsMapper.parse_product_response(response)

        assert result.is_found()
        assert result.product is not None
        assert result.product.code == "3017620422003"
        assert result.product.nutriments is not None
        assert result.product.nutriments.energy_kcal == 539.0
        assert result.product.nutriments.fiber == 0.0

    def test_parse_minimal_product_response(self) -> None:
        """Should parse minimal product response."""
        response = {"status": 1, "code": "12345678", "product": {"nutriments": {}}}

        result = OpenFoodFactsMapper.parse_product_response(response)

        assert result.product is not None
        assert result.product.code == "12345678"
        assert result.product.product_name is None

    def test_parse_not_found_response(self) -> None:
        """Should handle not found response."""
        result = OpenFoodFactsMapper.parse_product_response({"status": 0})

        assert result.status == 0
        assert result.product is None
        assert not result.is_found()

    def test_completeness(self) -> None:
        """Name and nutrients count toward completeness; zero counts as filled."""
        product = OFFProduct(
            code="3017620422003",
            product_name="Nutella",
            nutriments=OFFNutriments(energy_kcal=539.0, proteins=0.0),
        )

        assert OpenFoodFactsMapper.calculate_completeness(product) == 0.5

    def test_to_raw_estimate(self) -> None:
        """Complete products are per-100g, tagged and fully confident."""
        product = OFFProduct(
            code="3017620422003",
            product_name="Nutella",
            brands="Ferrero, Nutella",
            nutriments=OFFNutriments(
                energy_kcal=539.0, proteins=6.3, carbohydrates=57.5, fat=30.9, fiber=0.0
            ),
        )

        estimate = OpenFoodFactsMapper.to_raw_estimate(product)

        assert estimate.detected_foods == ["Nutella"]
        assert estimate.estimated_protein == 6.3
        assert estimate.estimated_calories == 539.0
        assert estimate.estimated_weight_grams == 100.0
        assert estimate.is_per_100g()
        assert estimate.confidence == 1.0
        assert estimate.brand == "Ferrero"
        assert estimate.source_hint == "OpenFoodFacts"
        assert "3017620422003" in (estimate.explanation or "")
        assert SourceClassifier().is_packaged_product(estimate)

    def test_to_raw_estimate_sparse_product(self) -> None:
        """Unnamed products get a placeholder name and lower confidence."""
        product = OFFProduct(code="12345678", generic_name=None)

        estimate = OpenFoodFactsMapper.to_raw_estimate(product)

        assert estimate.primary_food == "Produit 12345678"
        assert estimate.estimated_protein == 0.0
        assert estimate.estimated_calories is None
        assert estimate.confidence == 0.5
        assert estimate.brand is None

    def test_generic_name_fallback(self) -> None:
        product = OFFProduct(code="12345678", generic_name="Pâte à tartiner")

        assert OpenFoodFactsMapper.to_raw_estimate(product).primary_food == "Pâte à tartiner"
