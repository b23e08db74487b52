"""
Analysis backend API client.

Implements the IMealAnalyzer port over ``POST /meals/analyze``.
"""

import asyncio
import base64
from typing import Optional

import aiohttp
import structlog
from pydantic import ValidationError as PydanticValidationError

from dynprot.domain.meal.analysis.analysis_mapper import AnalysisMapper
from dynprot.domain.meal.analysis.analysis_models import (
    AnalyzeMealRequest,
    AnalyzeMealResponse,
)
from dynprot.domain.meal.nutrition.models import RawMealEstimate
from dynprot.domain.shared.errors import (
    AnalysisUnavailableError,
    ExternalServiceError,
    TimeoutError,
)

logger = structlog.get_logger(__name__)


class AnalysisApiClient:
    """Analysis backend client.

    No retries: the caller decides whether to offer a new attempt.

    Example:
        >>> async def test():
        ...     async with AnalysisApiClient("http://localhost:3001/api", token="...") as client:
        ...         return await client.analyze_text("poulet grillé")
    """

    ANALYZE_PATH = "/meals/analyze"

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout_seconds: float = 30,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: Backend API root (e.g. http://localhost:3001/api)
            token: Bearer token
            timeout_seconds: Request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AnalysisApiClient":
        """Async context manager entry."""
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self._session = aiohttp.ClientSession(headers=headers)
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()

    async def analyze_text(self, description: str) -> RawMealEstimate:
        """Analyze a meal description.

        Args:
            description: Food description

        Returns:
            RawMealEstimate

        Raises:
            AnalysisUnavailableError: If the backend returned no analysis
            TimeoutError: If request times out
            ExternalServiceError: If API error
        """
        request = AnalyzeMealRequest(input_text=description.strip(), input_type="text")
        return await self._analyze(request)

    async def analyze_image(
        self, photo: bytes, description: Optional[str] = None
    ) -> RawMealEstimate:
        """Analyze a meal photo.

        Args:
            photo: JPEG bytes
            description: Optional text accompanying the photo

        Returns:
            RawMealEstimate

        Raises:
            AnalysisUnavailableError: If the backend returned no analysis
            TimeoutError: If request times out
            ExternalServiceError: If API error
        """
        encoded = base64.b64encode(photo).decode("ascii")
        request = AnalyzeMealRequest(
            input_text=description.strip() if description else None,
            input_type="image",
            photo_data=f"data:image/jpeg;base64,{encoded}",
        )
        return await self._analyze(request)

    async def _analyze(self, request: AnalyzeMealRequest) -> RawMealEstimate:
        if not self._session:
            raise ExternalServiceError("Client not initialized, use async with")

        url = f"{self.base_url}{self.ANALYZE_PATH}"

        try:
            async with self._session.post(
                url,
                json=request.model_dump(exclude_none=True),
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status >= 400:
                    raise ExternalServiceError(f"Analysis API error: {response.status}")

                data = await response.json()

        except asyncio.TimeoutError as e:
            raise TimeoutError(f"Analysis API timeout after {self.timeout_seconds}s") from e

        except aiohttp.ClientError as e:
            raise ExternalServiceError(f"Analysis API client error: {e}") from e

        try:
            envelope = AnalyzeMealResponse.model_validate(data)
        except PydanticValidationError as e:
            raise AnalysisUnavailableError(f"Malformed analysis response: {e}") from e

        analysis = envelope.analysis
        if analysis is None:
            raise AnalysisUnavailableError(
                envelope.message or "Analysis backend returned no analysis"
            )

        logger.info(
            "Meal analyzed",
            input_type=request.input_type,
            foods=analysis.detected_foods,
            confidence=analysis.confidence_score,
        )
        return AnalysisMapper.to_raw_estimate(analysis)
