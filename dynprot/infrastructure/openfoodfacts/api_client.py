"""
OpenFoodFacts API client.

Implements the IProductLookup port over the OpenFoodFacts product API.
"""

import asyncio
from typing import Optional

import aiohttp
import structlog

from dynprot.domain.meal.barcode.openfoodfacts_mapper import OpenFoodFactsMapper
from dynprot.domain.meal.nutrition.models import RawMealEstimate
from dynprot.domain.shared.errors import ExternalServiceError, TimeoutError
from dynprot.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)


class OpenFoodFactsClient:
    """OpenFoodFacts API client."""

    BASE_URL = "https://world.openfoodfacts.org/api/v2"
    USER_AGENT = "DynProt/1.0"

    def __init__(self, timeout_seconds: float = 10) -> None:
        """Initialize API client.

        Args:
            timeout_seconds: Request timeout
        """
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "OpenFoodFactsClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self.USER_AGENT})
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()

    async def lookup_product_by_barcode(self, code: str) -> Optional[RawMealEstimate]:
        """Look up a packaged product.

        Args:
            code: Product barcode (8-13 digits)

        Returns:
            Per-100g estimate, or None if the product is unknown

        Raises:
            TimeoutError: If request times out
            ExternalServiceError: If API error

        Example:
            >>> async def test():
            ...     async with OpenFoodFactsClient() as client:
            ...         return await client.lookup_product_by_barcode("3017620422003")
        """
        if not self._session:
            raise ExternalServiceError("Client not initialized, use async with")

        barcode = Barcode.from_string(code)
        url = f"{self.BASE_URL}/product/{barcode.value}"

        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status == 404:
                    logger.info("Barcode not found in OFF", barcode=barcode.value)
                    return None

                if response.status >= 400:
                    raise ExternalServiceError(f"OpenFoodFacts API error: {response.status}")

                data = await response.json()

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"OpenFoodFacts API timeout after {self.timeout_seconds}s"
            ) from e

        except aiohttp.ClientError as e:
            raise ExternalServiceError(f"OpenFoodFacts API client error: {e}") from e

        result = OpenFoodFactsMapper.parse_product_response(data)
        if not result.is_found() or result.product is None:
            logger.info("Product not found in OFF", barcode=barcode.value)
            return None

        logger.info(
            "Product found in OFF",
            barcode=barcode.value,
            name=result.product.display_name,
        )
        return OpenFoodFactsMapper.to_raw_estimate(result.product)
