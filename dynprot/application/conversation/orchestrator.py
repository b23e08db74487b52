"""
Conversation Orchestrator.

Runs one conversation turn: routes the input, talks to the analysis
backend or the product database, and returns the response together with
the context delta to persist.

Design Pattern: Service Layer + Dependency Injection + Ports & Adapters
"""

from __future__ import annotations

import re
from typing import Awaitable, Callable, Optional, Union

import structlog

from dynprot.domain.conversation import messages
from dynprot.domain.conversation.commands import (
    CancelCommand,
    Command,
    HelpCommand,
    ManualEntryCommand,
    StartManualEntryCommand,
    parse_command,
    parse_manual_entry_body,
)
from dynprot.domain.conversation.models import (
    Attachments,
    ChatAction,
    ContextUpdate,
    ConversationContext,
    InputKind,
    ProcessorResponse,
    TurnOutcome,
)
from dynprot.domain.conversation.ports import IMealAnalyzer, IProductLookup
from dynprot.domain.meal.nutrition.classifier import SourceClassifier
from dynprot.domain.meal.nutrition.corrector import NutritionCorrector
from dynprot.domain.meal.nutrition.models import (
    BASELINE_GRAMS,
    PACKAGED_SOURCE_HINT,
    NormalizedNutrition,
    RawMealEstimate,
)
from dynprot.domain.meal.nutrition.normalizer import (
    NutritionNormalizer,
    should_apply_multiplier,
)
from dynprot.domain.meal.nutrition.rounding import round_half_up
from dynprot.domain.meal.quantity.models import ParsedQuantity
from dynprot.domain.meal.quantity.parser import QuantityParser, strip_quantity
from dynprot.domain.meal.suggestions.generator import SuggestionGenerator
from dynprot.domain.shared.errors import UnknownInputKindError, ValidationError
from dynprot.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)

# Parse confidence above which text answers a pending analysis
QUANTITY_ROUTING_CONFIDENCE = 0.3
# Parse confidence below which a quantity answer is re-prompted
AMBIGUOUS_QUANTITY_CONFIDENCE = 0.5
# Parse confidence above which a meal description carries its own quantity
EMBEDDED_QUANTITY_CONFIDENCE = 0.5
# Analyses below this confidence are treated as unusable
MIN_ANALYSIS_CONFIDENCE = 0.3

DEFAULT_RETRY_DELAY_SECONDS = 5

# Keyword → factor applied to the previous quantity
MODIFICATION_FACTORS: dict[str, float] = {
    "plus": 1.25,
    "more": 1.25,
    "moins": 0.75,
    "less": 0.75,
    "double": 2.0,
    "moitié": 0.5,
    "half": 0.5,
    "triple": 3.0,
    "quart": 0.25,
    "quarter": 0.25,
}

_MODIFICATION_PATTERNS = tuple(
    (keyword, re.compile(r"\b" + re.escape(keyword) + r"\b"))
    for keyword in MODIFICATION_FACTORS
)

TurnHandler = Callable[
    [str, ConversationContext, Attachments], Awaitable[ProcessorResponse]
]


def find_modification(text: str) -> Optional[str]:
    """
    Find a quantity-modification keyword.

    Example:
        >>> find_modification("un peu plus")
        'plus'
        >>> find_modification("pâtes") is None
        True
    """
    lowered = text.lower()
    for keyword, pattern in _MODIFICATION_PATTERNS:
        if pattern.search(lowered):
            return keyword
    return None


class ConversationOrchestrator:
    """
    Per-turn conversation state machine.

    States (derived from the context):
    - IDLE: nothing pending
    - AWAITING_QUANTITY: a per-100g estimate waits for a quantity
    - AWAITING_MANUAL_ENTRY: the next text is a manual-entry body

    Stateless: the context comes in with each call and a ContextUpdate
    goes out. At most one external call is awaited per turn, and no
    failure escapes process_input.

    Dependencies (injected via Ports/Interfaces):
    - analyzer: IMealAnalyzer - Text / photo analysis backend
    - product_lookup: IProductLookup - Packaged-product database

    Example:
        >>> orchestrator = ConversationOrchestrator(
        ...     analyzer=analysis_client,
        ...     product_lookup=off_client,
        ... )
        >>> response = await orchestrator.process_input(
        ...     "pâtes bolognaise", InputKind.TEXT, ConversationContext()
        ... )
        >>> response.awaiting_quantity
        True
        >>> context = response.context_update.apply_to(ConversationContext())
        >>> response = await orchestrator.process_input("200g", InputKind.TEXT, context)
        >>> response.normalized.estimated_weight_grams
        200.0
    """

    def __init__(
        self,
        analyzer: IMealAnalyzer,
        product_lookup: IProductLookup,
        parser: Optional[QuantityParser] = None,
        corrector: Optional[NutritionCorrector] = None,
        normalizer: Optional[NutritionNormalizer] = None,
        suggestion_generator: Optional[SuggestionGenerator] = None,
        retry_delay_seconds: int = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        """
        Initialize orchestrator with dependencies.

        Args:
            analyzer: Meal analysis backend
            product_lookup: Product database
            parser: Quantity parser (bundled tables by default)
            corrector: Protein corrector (bundled tables by default)
            normalizer: Nutrition normalizer (bundled tables by default)
            suggestion_generator: Suggestion generator (bundled presets by default)
            retry_delay_seconds: Delay suggested after a failed analysis
        """
        self.analyzer = analyzer
        self.product_lookup = product_lookup
        self.parser = parser or QuantityParser()
        self.corrector = corrector or NutritionCorrector()
        self.normalizer = normalizer or NutritionNormalizer(SourceClassifier())
        self.suggestion_generator = suggestion_generator or SuggestionGenerator()
        self.retry_delay_seconds = retry_delay_seconds

    async def process_input(
        self,
        input: str,
        kind: Union[InputKind, str],
        context: ConversationContext,
        attachments: Optional[Attachments] = None,
    ) -> ProcessorResponse:
        """
        Process one conversation turn.

        Args:
            input: User text, transcript, barcode or quantity
            kind: Input channel
            context: Session context before the turn
            attachments: Photo bytes, transcript or pre-fetched product

        Returns:
            ProcessorResponse (never raises)
        """
        attachments = attachments or Attachments()
        text = input or ""

        try:
            input_kind = self._resolve_kind(kind)
        except UnknownInputKindError as e:
            logger.error("Unknown input kind", kind=str(kind), error=str(e))
            return self._error_response(context, TurnOutcome.UNKNOWN_INPUT_KIND)

        handlers: dict[InputKind, TurnHandler] = {
            InputKind.TEXT: self._handle_text,
            InputKind.VOICE: self._handle_voice,
            InputKind.PHOTO: self._handle_photo,
            InputKind.SCAN: self._handle_scan,
            InputKind.QUANTITY: self._handle_quantity,
            InputKind.COMMAND: self._handle_command,
        }

        try:
            response = await handlers[input_kind](text, context, attachments)
        except ValidationError as e:
            logger.info("Invalid command", field=e.field, error=e.message)
            response = ProcessorResponse(
                message=e.message,
                awaiting_quantity=context.pending_analysis is not None,
                outcome=TurnOutcome.VALIDATION_ERROR,
                context_update=ContextUpdate(last_action=input_kind),
            )
        except Exception:
            logger.exception("Conversation turn failed", kind=input_kind.value)
            return self._error_response(context, TurnOutcome.ANALYSIS_UNAVAILABLE)

        logger.info(
            "Conversation turn processed",
            kind=input_kind.value,
            outcome=response.outcome,
            awaiting_quantity=response.awaiting_quantity,
        )
        return response

    @staticmethod
    def _resolve_kind(kind: Union[InputKind, str]) -> InputKind:
        try:
            return InputKind(kind)
        except ValueError as e:
            raise UnknownInputKindError(f"Unsupported input kind: {kind!r}") from e

    # ═══════════════════════════════════════════════════════════
    # INPUT HANDLERS
    # ═══════════════════════════════════════════════════════════

    async def _handle_text(
        self,
        text: str,
        context: ConversationContext,
        attachments: Attachments,
        kind: InputKind = InputKind.TEXT,
    ) -> ProcessorResponse:
        text = text.strip()

        command = parse_command(text)
        if command is not None:
            return self._run_command(command, context, kind)

        if context.awaiting_manual_entry and text:
            return self._run_command(parse_manual_entry_body(text), context, kind)

        if not text:
            message = (
                messages.QUANTITY_NOT_UNDERSTOOD
                if context.pending_analysis is not None
                else messages.NO_PENDING_ANALYSIS
            )
            return self._info(message, context, kind)

        if context.pending_analysis is not None:
            parsed = self.parser.parse(text)
            if parsed.confidence > QUANTITY_ROUTING_CONFIDENCE:
                return self._resolve_quantity(parsed, context.pending_analysis, kind)

        modification = find_modification(text)
        if modification and context.last_quantity_text and context.last_analysis:
            return self._apply_modification(
                modification, context.last_quantity_text, context.last_analysis, kind
            )

        return await self._analyze_text(text, context, kind)

    async def _handle_voice(
        self, text: str, context: ConversationContext, attachments: Attachments
    ) -> ProcessorResponse:
        transcript = attachments.transcript or text
        return await self._handle_text(transcript, context, attachments, InputKind.VOICE)

    async def _handle_quantity(
        self, text: str, context: ConversationContext, attachments: Attachments
    ) -> ProcessorResponse:
        if context.pending_analysis is None:
            return self._info(messages.NO_PENDING_ANALYSIS, context, InputKind.QUANTITY)

        parsed = self.parser.parse(text)
        if parsed.confidence <= QUANTITY_ROUTING_CONFIDENCE:
            return self._ambiguous_quantity(context.pending_analysis, InputKind.QUANTITY)
        return self._resolve_quantity(parsed, context.pending_analysis, InputKind.QUANTITY)

    async def _handle_command(
        self, text: str, context: ConversationContext, attachments: Attachments
    ) -> ProcessorResponse:
        command = parse_command(text)
        if command is None:
            return self._info(messages.UNKNOWN_COMMAND, context, InputKind.COMMAND)
        return self._run_command(command, context, InputKind.COMMAND)

    async def _handle_photo(
        self, text: str, context: ConversationContext, attachments: Attachments
    ) -> ProcessorResponse:
        kind = InputKind.PHOTO
        photo_actions = [messages.RETRY_PHOTO, messages.DESCRIBE_MEAL]

        if not attachments.photo:
            return ProcessorResponse(
                message=messages.PHOTO_INVALID,
                awaiting_quantity=context.pending_analysis is not None,
                outcome=TurnOutcome.VALIDATION_ERROR,
                actions=[messages.RETRY_PHOTO],
                context_update=ContextUpdate(last_action=kind),
            )

        try:
            estimate = await self.analyzer.analyze_image(attachments.photo, text.strip() or None)
        except Exception as e:
            logger.warning("Photo analysis failed", error=str(e), error_type=type(e).__name__)
            return self._analysis_unavailable(
                messages.PHOTO_ANALYSIS_FAILED, context, kind, photo_actions
            )

        if not estimate.detected_foods:
            return self._analysis_unavailable(messages.PHOTO_NO_FOOD, context, kind, photo_actions)

        if estimate.confidence < MIN_ANALYSIS_CONFIDENCE:
            logger.info(
                "Photo analysis below confidence threshold",
                food=estimate.primary_food,
                confidence=estimate.confidence,
            )
            return self._analysis_unavailable(
                messages.low_confidence(estimate.primary_food or ""), context, kind, photo_actions
            )

        baseline = self.normalizer.normalize_to_100g(estimate)
        return self._awaiting_quantity(
            baseline, messages.quantity_question(baseline.primary_food or ""), kind
        )

    async def _handle_scan(
        self, text: str, context: ConversationContext, attachments: Attachments
    ) -> ProcessorResponse:
        kind = InputKind.SCAN
        scan_actions = [messages.RETRY_SCAN]
        product = attachments.product

        if product is None:
            code = text.strip()
            if not Barcode.looks_like_barcode(code):
                return self._analysis_unavailable(
                    messages.SCAN_NO_PRODUCT, context, kind, scan_actions
                )

            barcode = Barcode.from_string(code)
            try:
                product = await self.product_lookup.lookup_product_by_barcode(barcode.value)
            except Exception as e:
                logger.warning(
                    "Product lookup failed",
                    barcode=barcode.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return self._analysis_unavailable(
                    messages.SCAN_NO_PRODUCT, context, kind, scan_actions
                )

            if product is None:
                return self._analysis_unavailable(
                    messages.scan_not_found(barcode.value), context, kind, scan_actions
                )

        if not product.detected_foods:
            return self._analysis_unavailable(messages.SCAN_NO_PRODUCT, context, kind, scan_actions)

        # Product database records are per-100g packaged products
        baseline = product.model_copy(
            update={
                "source_hint": PACKAGED_SOURCE_HINT,
                "estimated_weight_grams": BASELINE_GRAMS,
            }
        )
        return self._awaiting_quantity(
            baseline,
            messages.scan_quantity_question(baseline.primary_food or "", baseline.brand),
            kind,
        )

    # ═══════════════════════════════════════════════════════════
    # ANALYSIS
    # ═══════════════════════════════════════════════════════════

    async def _analyze_text(
        self, text: str, context: ConversationContext, kind: InputKind
    ) -> ProcessorResponse:
        """
        Full analysis path for a meal description.

        When the text carries a quantity, only the food name is sent to
        the backend and the turn ends with a final record. Otherwise the
        per-100g estimate is parked until the user gives a quantity.
        """
        parsed = self.parser.parse(text)
        has_quantity = parsed.confidence > EMBEDDED_QUANTITY_CONFIDENCE
        description = strip_quantity(text) if has_quantity else text

        try:
            estimate = await self.analyzer.analyze_text(description)
        except Exception as e:
            logger.warning(
                "Text analysis failed",
                description=description,
                error=str(e),
                error_type=type(e).__name__,
            )
            return self._analysis_unavailable(
                messages.text_analysis_failed(text), context, kind, [messages.RETRY]
            )

        if not estimate.detected_foods or estimate.confidence < MIN_ANALYSIS_CONFIDENCE:
            logger.info(
                "Unusable text analysis",
                description=description,
                foods=len(estimate.detected_foods),
                confidence=estimate.confidence,
            )
            return self._analysis_unavailable(
                messages.text_analysis_failed(text), context, kind, [messages.RETRY]
            )

        corrected = self.corrector.correct(estimate, description)

        if not has_quantity:
            baseline = self.normalizer.normalize_to_100g(corrected)
            return self._awaiting_quantity(
                baseline, messages.quantity_question(baseline.primary_food or ""), kind
            )

        should_scale = should_apply_multiplier(description, parsed.original_text)
        logger.debug(
            "Embedded quantity detected",
            description=description,
            multiplier=parsed.multiplier,
            should_scale=should_scale,
        )

        if should_scale:
            baseline = self.normalizer.normalize_to_100g(corrected)
            normalized = self.normalizer.normalize(baseline, parsed, should_scale=True)
        else:
            normalized = self.normalizer.normalize(corrected, parsed, should_scale=False)
            # The estimate describes the stated quantity
            baseline = self.normalizer.normalize_to_100g(
                corrected.model_copy(update={"estimated_weight_grams": parsed.grams})
            )

        return self._completed(normalized, baseline, parsed.original_text, kind)

    # ═══════════════════════════════════════════════════════════
    # QUANTITIES
    # ═══════════════════════════════════════════════════════════

    def _resolve_quantity(
        self, parsed: ParsedQuantity, pending: RawMealEstimate, kind: InputKind
    ) -> ProcessorResponse:
        if parsed.confidence < AMBIGUOUS_QUANTITY_CONFIDENCE:
            return self._ambiguous_quantity(pending, kind)

        normalized = self.normalizer.normalize(pending, parsed, should_scale=True)
        return self._completed(normalized, pending, parsed.original_text, kind)

    def _apply_modification(
        self,
        modification: str,
        last_quantity_text: str,
        last_analysis: RawMealEstimate,
        kind: InputKind,
    ) -> ProcessorResponse:
        """Rescale the last finalized meal ("double", "moitié", "plus"...)."""
        previous = self.parser.parse(last_quantity_text)
        grams = max(1.0, round_half_up(previous.grams * MODIFICATION_FACTORS[modification]))
        quantity_text = f"{int(grams)}g"
        parsed = self.parser.parse(quantity_text)

        logger.info(
            "Quantity modification applied",
            modification=modification,
            previous_grams=previous.grams,
            new_grams=grams,
        )

        normalized = self.normalizer.normalize(last_analysis, parsed, should_scale=True)
        return self._completed(
            normalized,
            last_analysis,
            quantity_text,
            kind,
            message=messages.modification_applied(modification),
        )

    # ═══════════════════════════════════════════════════════════
    # COMMANDS
    # ═══════════════════════════════════════════════════════════

    def _run_command(
        self, command: Command, context: ConversationContext, kind: InputKind
    ) -> ProcessorResponse:
        if isinstance(command, ManualEntryCommand):
            return self._manual_entry(command, kind)

        if isinstance(command, StartManualEntryCommand):
            return ProcessorResponse(
                message=messages.MANUAL_ENTRY_PROMPT,
                outcome=TurnOutcome.AWAITING_MANUAL_ENTRY,
                actions=[messages.CANCEL],
                context_update=ContextUpdate(
                    pending_analysis=None,
                    awaiting_manual_entry=True,
                    last_action=kind,
                ),
            )

        if isinstance(command, HelpCommand):
            return self._info(messages.HELP, context, kind)

        if isinstance(command, CancelCommand):
            if context.pending_analysis is None and not context.awaiting_manual_entry:
                return self._info(messages.NOTHING_TO_CANCEL, context, kind)
            return ProcessorResponse(
                message=messages.CANCELLED,
                outcome=TurnOutcome.INFO,
                context_update=ContextUpdate(
                    pending_analysis=None,
                    current_product=None,
                    awaiting_manual_entry=False,
                    last_action=kind,
                ),
            )

        raise TypeError(f"Unhandled command: {command!r}")

    def _manual_entry(self, command: ManualEntryCommand, kind: InputKind) -> ProcessorResponse:
        normalized = NormalizedNutrition(
            description=command.description,
            protein=command.protein_g or 0.0,
            calories=command.calories or 0,
            confidence=1.0,
            estimated_weight_grams=BASELINE_GRAMS,
        )
        logger.info(
            "Manual entry recorded",
            description=command.description,
            protein=normalized.protein,
            calories=normalized.calories,
        )
        return ProcessorResponse(
            message=messages.MANUAL_ENTRY_SAVED,
            normalized=normalized,
            outcome=TurnOutcome.COMPLETED,
            actions=messages.COMPLETED_ACTIONS,
            context_update=ContextUpdate(
                pending_analysis=None,
                last_quantity_text=None,
                last_analysis=None,
                current_product=command.description,
                awaiting_manual_entry=False,
                last_action=kind,
            ),
        )

    # ═══════════════════════════════════════════════════════════
    # RESPONSES
    # ═══════════════════════════════════════════════════════════

    def _completed(
        self,
        normalized: NormalizedNutrition,
        baseline: RawMealEstimate,
        quantity_text: str,
        kind: InputKind,
        message: str = messages.MEAL_COMPLETED,
    ) -> ProcessorResponse:
        return ProcessorResponse(
            message=message,
            normalized=normalized,
            outcome=TurnOutcome.COMPLETED,
            actions=messages.COMPLETED_ACTIONS,
            context_update=ContextUpdate(
                pending_analysis=None,
                last_quantity_text=quantity_text,
                last_analysis=baseline,
                current_product=baseline.primary_food,
                awaiting_manual_entry=False,
                last_action=kind,
            ),
        )

    def _awaiting_quantity(
        self, baseline: RawMealEstimate, message: str, kind: InputKind
    ) -> ProcessorResponse:
        preview = self.normalizer.normalize(
            baseline,
            ParsedQuantity(multiplier=1.0, confidence=1.0),
            should_scale=True,
        )
        return ProcessorResponse(
            message=message,
            awaiting_quantity=True,
            suggestions=self.suggestion_generator.suggest(baseline),
            outcome=TurnOutcome.AWAITING_QUANTITY,
            preview=preview,
            actions=messages.AWAITING_QUANTITY_ACTIONS,
            context_update=ContextUpdate(
                pending_analysis=baseline,
                current_product=baseline.primary_food,
                awaiting_manual_entry=False,
                last_action=kind,
            ),
        )

    def _ambiguous_quantity(self, pending: RawMealEstimate, kind: InputKind) -> ProcessorResponse:
        return ProcessorResponse(
            message=messages.QUANTITY_NOT_UNDERSTOOD,
            awaiting_quantity=True,
            suggestions=self.suggestion_generator.suggest(pending),
            outcome=TurnOutcome.PARSE_AMBIGUOUS,
            actions=messages.AWAITING_QUANTITY_ACTIONS,
            context_update=ContextUpdate(last_action=kind),
        )

    def _analysis_unavailable(
        self,
        message: str,
        context: ConversationContext,
        kind: InputKind,
        actions: list[ChatAction],
    ) -> ProcessorResponse:
        """Scripted retry prompt; a pending analysis stays pending."""
        return ProcessorResponse(
            message=messages.with_retry_hint(message, self.retry_delay_seconds),
            awaiting_quantity=context.pending_analysis is not None,
            outcome=TurnOutcome.ANALYSIS_UNAVAILABLE,
            actions=actions,
            retry_after_seconds=self.retry_delay_seconds,
            context_update=ContextUpdate(last_action=kind),
        )

    @staticmethod
    def _info(message: str, context: ConversationContext, kind: InputKind) -> ProcessorResponse:
        return ProcessorResponse(
            message=message,
            awaiting_quantity=context.pending_analysis is not None,
            outcome=TurnOutcome.INFO,
            context_update=ContextUpdate(last_action=kind),
        )

    @staticmethod
    def _error_response(context: ConversationContext, outcome: TurnOutcome) -> ProcessorResponse:
        """Generic fallback; the context is left untouched."""
        return ProcessorResponse(
            message=messages.GENERIC_ERROR,
            awaiting_quantity=context.pending_analysis is not None,
            outcome=outcome,
            actions=[messages.RETRY],
        )
