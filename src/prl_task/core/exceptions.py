"""Warning categories for recoverable, degraded task conditions."""

from __future__ import annotations


class UrnRefillWarning(RuntimeWarning):
    """An urn ran out mid-session and was refilled with a fresh window."""


class DeckGenerationWarning(RuntimeWarning):
    """No den Ouden arrangement satisfied the run constraint within budget."""


class FeedbackFallbackWarning(RuntimeWarning):
    """No feedback source was available; truthful feedback was returned."""


class PhaseReconciliationWarning(RuntimeWarning):
    """Per-trial phase flags disagree with the reversal markers in the log."""


__all__ = [
    "DeckGenerationWarning",
    "FeedbackFallbackWarning",
    "PhaseReconciliationWarning",
    "UrnRefillWarning",
]
