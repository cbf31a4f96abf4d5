"""Core data model, warning categories and settings-file helpers."""

from .config_files import CONFIG_SUFFIXES, check_keys, coerce_float, coerce_int, load_config_mapping
from .data import Option, Outcome, TrialRecord, valid_trials
from .exceptions import (
    DeckGenerationWarning,
    FeedbackFallbackWarning,
    PhaseReconciliationWarning,
    UrnRefillWarning,
)

__all__ = [
    "CONFIG_SUFFIXES",
    "DeckGenerationWarning",
    "FeedbackFallbackWarning",
    "Option",
    "Outcome",
    "PhaseReconciliationWarning",
    "TrialRecord",
    "UrnRefillWarning",
    "check_keys",
    "coerce_float",
    "coerce_int",
    "load_config_mapping",
    "valid_trials",
]
