"""
Failure types for the OSM <-> RadSim translation.

Every failure carries a machine-readable ``kind`` (a FailureKind) and a
``context`` dict with the categories and tags involved, so callers can
branch on the kind instead of parsing messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class FailureKind(str, Enum):
    NO_RULE_FOR_TRANSITION = "no_rule_for_transition"
    STALL_DETECTED = "stall_detected"
    CYCLE_DETECTED = "cycle_detected"
    PRECONDITION_VIOLATED = "precondition_violated"
    UNKNOWN_CATEGORY = "unknown_category"


class TranslationError(Exception):
    """Base class for all translation failures."""

    kind = None  # type: Optional[FailureKind]

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
            "context": self.context,
        }


class NoRuleForTransition(TranslationError):
    """Raised when the rule matrix has no rule for a (from, to) pair."""

    kind = FailureKind.NO_RULE_FOR_TRANSITION


class StallDetected(TranslationError):
    """Raised when applying a rule leaves the segment in its source category."""

    kind = FailureKind.STALL_DETECTED


class CycleDetected(TranslationError):
    """Raised when back-mapping revisits a state or exceeds its hop budget."""

    kind = FailureKind.CYCLE_DETECTED


class PreconditionViolated(TranslationError):
    """Raised when input tags contradict the category they are declared to be in."""

    kind = FailureKind.PRECONDITION_VIOLATED


class UnknownCategory(TranslationError, ValueError):
    """Raised when a value does not name a known infrastructure category."""

    kind = FailureKind.UNKNOWN_CATEGORY
