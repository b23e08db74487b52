"""Orchestrator factory.

Builds a ConversationOrchestrator wired to the real adapters, configured
from the environment.

Usage:
    from dynprot.infrastructure.factory import create_orchestrator

    async with create_orchestrator() as orchestrator:
        response = await orchestrator.process_input(
            "pâtes bolognaise", InputKind.TEXT, ConversationContext()
        )
"""

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

import structlog

from dynprot.application.conversation.orchestrator import ConversationOrchestrator
from dynprot.infrastructure.analysis.api_client import AnalysisApiClient
from dynprot.infrastructure.config import (
    get_analysis_timeout_seconds,
    get_api_token,
    get_api_url,
    get_openfoodfacts_timeout_seconds,
    get_retry_delay_seconds,
    load_environment,
)
from dynprot.infrastructure.openfoodfacts.api_client import OpenFoodFactsClient

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def create_orchestrator() -> AsyncIterator[ConversationOrchestrator]:
    """Create an orchestrator whose HTTP sessions live for the context.

    Yields:
        ConversationOrchestrator using AnalysisApiClient and OpenFoodFactsClient
    """
    load_environment()
    api_url = get_api_url()

    async with AsyncExitStack() as stack:
        analyzer = await stack.enter_async_context(
            AnalysisApiClient(
                base_url=api_url,
                token=get_api_token(),
                timeout_seconds=get_analysis_timeout_seconds(),
            )
        )
        product_lookup = await stack.enter_async_context(
            OpenFoodFactsClient(timeout_seconds=get_openfoodfacts_timeout_seconds())
        )

        logger.info("Orchestrator ready", api_url=api_url)
        yield ConversationOrchestrator(
            analyzer=analyzer,
            product_lookup=product_lookup,
            retry_delay_seconds=get_retry_delay_seconds(),
        )
