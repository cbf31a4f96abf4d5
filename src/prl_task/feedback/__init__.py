"""Balanced feedback generators and the feedback provider."""

from .den_ouden import DenOudenDeck, generate_den_ouden_deck, max_run_length
from .provider import (
    DenOudenFeedbackSchedule,
    FeedbackProvider,
    FeedbackSchedule,
    UrnFeedbackSchedule,
    apply_congruence,
    create_feedback_provider,
)
from .urn import URN_WINDOW_SIZE, FeedbackUrn, create_feedback_urn, refill_window, round_half_up

__all__ = [
    "DenOudenDeck",
    "DenOudenFeedbackSchedule",
    "FeedbackProvider",
    "FeedbackSchedule",
    "FeedbackUrn",
    "URN_WINDOW_SIZE",
    "UrnFeedbackSchedule",
    "apply_congruence",
    "create_feedback_provider",
    "create_feedback_urn",
    "generate_den_ouden_deck",
    "max_run_length",
    "refill_window",
    "round_half_up",
]
