"""
Domain exceptions.

Typed exceptions for the conversation engine. None of them crosses the
orchestrator boundary: every one is turned into a scripted response.
"""

from __future__ import annotations

from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# CONVERSATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(DomainError):
    """
    Malformed structured command or out-of-range manual values.

    The message is shown to the user as-is, so it must be specific
    and written in the conversation language.

    Example:
        >>> raise ValidationError(
        ...     "Les protéines doivent être comprises entre 0 et 500 g.",
        ...     field="protein_g",
        ... )
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class UnknownInputKindError(DomainError):
    """
    Caller passed an unsupported input kind.

    The only programming error of the engine: logged, then answered
    with the generic fallback message.

    Example:
        >>> raise UnknownInputKindError("Unsupported input kind: 'fax'")
    """

    pass


class AnalysisUnavailableError(DomainError):
    """
    Analysis backend could not produce a usable estimate.

    Raised when:
    - The backend call failed or timed out
    - No food was detected
    - The backend answered with an error payload

    Example:
        >>> raise AnalysisUnavailableError("Analysis backend returned success=false")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.

    Raised when:
    - API call fails
    - Network error
    - Service answered with an HTTP error

    Example:
        >>> raise ExternalServiceError("OpenFoodFacts API error: 503")
    """

    pass


class TimeoutError(ExternalServiceError):  # noqa: A001
    """
    API call timed out.

    Example:
        >>> raise TimeoutError("Analysis API timeout after 30s")
    """

    pass
