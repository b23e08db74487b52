"""
OpenFoodFacts models.

Subset of the OpenFoodFacts product API response used by the scan flow.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OFFNutriments(BaseModel):
    """OpenFoodFacts nutriments (per 100g).

    Example:
        >>> nutriments = OFFNutriments(energy_kcal=539.0, proteins=6.3)
        >>> assert nutriments.proteins == 6.3
    """

    model_config = ConfigDict(frozen=True)

    energy_kcal: Optional[float] = Field(None, ge=0, description="Energy in kcal per 100g")
    proteins: Optional[float] = Field(None, ge=0, description="Protein in g per 100g")
    carbohydrates: Optional[float] = Field(None, ge=0, description="Carbohydrates in g per 100g")
    fat: Optional[float] = Field(None, ge=0, description="Fat in g per 100g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g per 100g")


class OFFProduct(BaseModel):
    """OpenFoodFacts product.

    Example:
        >>> product = OFFProduct(
        ...     code="3017620422003",
        ...     product_name="Nutella",
        ...     brands="Ferrero",
        ... )
        >>> assert product.display_name == "Nutella"
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Product barcode")
    product_name: Optional[str] = Field(None, description="Product name")
    generic_name: Optional[str] = Field(None, description="Generic name")
    brands: Optional[str] = Field(None, description="Brand names, comma separated")
    nutriments: Optional[OFFNutriments] = Field(None, description="Nutritional values")

    @property
    def display_name(self) -> Optional[str]:
        """Product name, falling back to the generic name."""
        return self.product_name or self.generic_name

    @property
    def main_brand(self) -> Optional[str]:
        """First listed brand."""
        if not self.brands:
            return None
        return self.brands.split(",")[0].strip() or None


class OFFSearchResult(BaseModel):
    """OpenFoodFacts product lookup response."""

    model_config = ConfigDict(frozen=True)

    status: int = Field(..., description="API status (1=found, 0=not)")
    product: Optional[OFFProduct] = Field(None, description="Product data (if found)")

    def is_found(self) -> bool:
        """Check if product was found.

        Returns:
            True if product exists in database
        """
        return self.status == 1 and self.product is not None
