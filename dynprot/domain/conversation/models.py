"""
Conversation domain models.

The engine is stateless: the session layer owns a ConversationContext,
passes it to every turn, and applies the returned ContextUpdate.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from dynprot.domain.meal.nutrition.models import NormalizedNutrition, RawMealEstimate
from dynprot.domain.meal.suggestions.models import QuantitySuggestion


class InputKind(str, Enum):
    """Channel a turn's input came from."""

    TEXT = "text"
    PHOTO = "photo"
    VOICE = "voice"
    SCAN = "scan"
    QUANTITY = "quantity"
    COMMAND = "command"


class ConversationState(str, Enum):
    """
    Conversation state.

    Derived from the context, never stored on its own.
    """

    IDLE = "IDLE"
    AWAITING_QUANTITY = "AWAITING_QUANTITY"  # pending_analysis is set
    AWAITING_MANUAL_ENTRY = "AWAITING_MANUAL_ENTRY"  # Bare manual-entry command seen


class TurnOutcome(str, Enum):
    """What a turn ended with, for callers that branch on it."""

    COMPLETED = "COMPLETED"
    AWAITING_QUANTITY = "AWAITING_QUANTITY"
    AWAITING_MANUAL_ENTRY = "AWAITING_MANUAL_ENTRY"
    PARSE_AMBIGUOUS = "PARSE_AMBIGUOUS"
    ANALYSIS_UNAVAILABLE = "ANALYSIS_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_INPUT_KIND = "UNKNOWN_INPUT_KIND"
    INFO = "INFO"


class ConversationContext(BaseModel):
    """
    Per-session conversation context.

    Attributes:
        pending_analysis: Per-100g estimate waiting for a quantity
        last_quantity_text: Quantity text of the last finalized meal
        current_product: Name of the food being discussed
        last_action: Kind of the last processed input
        last_analysis: Per-100g estimate of the last finalized meal
        awaiting_manual_entry: Next free text is a manual-entry body

    Example:
        >>> context = ConversationContext()
        >>> context.state
        <ConversationState.IDLE: 'IDLE'>
    """

    model_config = ConfigDict(frozen=True)

    pending_analysis: Optional[RawMealEstimate] = None
    last_quantity_text: Optional[str] = None
    current_product: Optional[str] = None
    last_action: Optional[InputKind] = None
    last_analysis: Optional[RawMealEstimate] = None
    awaiting_manual_entry: bool = False

    @property
    def state(self) -> ConversationState:
        """Current state of the conversation."""
        if self.awaiting_manual_entry:
            return ConversationState.AWAITING_MANUAL_ENTRY
        if self.pending_analysis is not None:
            return ConversationState.AWAITING_QUANTITY
        return ConversationState.IDLE


class ContextUpdate(BaseModel):
    """
    Partial update of a ConversationContext.

    Only fields passed explicitly are applied, so ``pending_analysis=None``
    clears the slot while an omitted field leaves it unchanged.

    Example:
        >>> update = ContextUpdate(pending_analysis=None, last_action=InputKind.TEXT)
        >>> sorted(update.changed_fields())
        ['last_action', 'pending_analysis']
    """

    model_config = ConfigDict(frozen=True)

    pending_analysis: Optional[RawMealEstimate] = None
    last_quantity_text: Optional[str] = None
    current_product: Optional[str] = None
    last_action: Optional[InputKind] = None
    last_analysis: Optional[RawMealEstimate] = None
    awaiting_manual_entry: bool = False

    def changed_fields(self) -> set[str]:
        """Names of the fields this update sets."""
        return set(self.model_fields_set)

    def apply_to(self, context: ConversationContext) -> ConversationContext:
        """
        Apply this update to a context.

        Args:
            context: Context before the turn

        Returns:
            New context (the input is not modified)
        """
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        return context.model_copy(update=changes)


class Attachments(BaseModel):
    """
    Payloads accompanying an input.

    Attributes:
        photo: Raw image bytes (photo input)
        transcript: Speech-to-text result (voice input)
        product: Pre-fetched product record (scan input)
    """

    model_config = ConfigDict(frozen=True)

    photo: Optional[bytes] = None
    transcript: Optional[str] = None
    product: Optional[RawMealEstimate] = None


class ChatAction(BaseModel):
    """Button offered with a response."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    type: Literal["modify", "save", "retry", "cancel"]
    variant: Optional[Literal["primary", "secondary", "danger"]] = None


class ProcessorResponse(BaseModel):
    """
    Result of one conversation turn.

    Attributes:
        message: Text shown to the user
        awaiting_quantity: True while an estimate waits for a quantity
        normalized: Final nutrition record (completed turns only)
        suggestions: Quantity choices (when asking for a quantity)
        context_update: Delta to apply to the session context
        outcome: How the turn ended
        preview: Per-100g record shown while asking for a quantity
        actions: Buttons offered with the message
        retry_after_seconds: Suggested delay before retrying a failed analysis
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    message: str
    awaiting_quantity: bool = False
    normalized: Optional[NormalizedNutrition] = None
    suggestions: Optional[List[QuantitySuggestion]] = None
    context_update: ContextUpdate = Field(default_factory=ContextUpdate)
    outcome: TurnOutcome = TurnOutcome.INFO
    preview: Optional[NormalizedNutrition] = None
    actions: List[ChatAction] = Field(default_factory=list)
    retry_after_seconds: Optional[int] = None
