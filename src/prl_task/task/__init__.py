"""Session configuration, state machine and response gate."""

from .config import (
    RANDOMIZATION_METHODS,
    REVERSAL_MODES,
    SessionConfig,
    load_session_config,
    session_config_from_mapping,
)
from .gate import ResponseGate
from .machine import TrialStateMachine
from .state import SessionState
from .transitions import (
    ChoiceClassification,
    apply_reversal,
    classify_choice,
    define_correct_option,
    initial_state,
    record_choice,
    record_omission,
    should_reverse,
)

__all__ = [
    "ChoiceClassification",
    "RANDOMIZATION_METHODS",
    "REVERSAL_MODES",
    "ResponseGate",
    "SessionConfig",
    "SessionState",
    "TrialStateMachine",
    "apply_reversal",
    "classify_choice",
    "define_correct_option",
    "initial_state",
    "load_session_config",
    "record_choice",
    "record_omission",
    "session_config_from_mapping",
    "should_reverse",
]
