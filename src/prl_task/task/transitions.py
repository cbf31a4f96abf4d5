"""Pure per-trial transitions over :class:`SessionState`.

Each function takes a state (and the session configuration where needed) and
returns a value or a new state; nothing here mutates its inputs or draws
feedback.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from prl_task.core.data import Option
from prl_task.task.config import SessionConfig
from prl_task.task.state import SessionState


@dataclass(frozen=True, slots=True)
class ChoiceClassification:
    """Objective correctness and error flags for one responded trial."""

    actually_correct: bool
    is_perseverative: bool
    is_regressive: bool


def initial_state(config: SessionConfig) -> SessionState:
    """Return the state at session start."""

    return SessionState(correct_option=config.initial_correct_option)


def define_correct_option(state: SessionState, choice: Option) -> SessionState:
    """Let the first responded choice define the correct option when unset."""

    if state.correct_option is not None:
        return state
    return replace(state, correct_option=choice)


def should_reverse(state: SessionState, config: SessionConfig, trial_index: int) -> bool:
    """Decide whether a reversal fires on ``trial_index``.

    In predetermined mode the single reversal fires on the configured trial,
    or on the first responded trial after it when that trial was omitted. In
    criterion mode a reversal fires on the trial after the criterion was met.
    """

    if config.reversal_mode == "predetermined":
        reversal_trial = config.reversal_trial
        return (
            reversal_trial is not None
            and not state.reversal_trials
            and trial_index >= reversal_trial
        )
    return state.criterion_reached


def apply_reversal(state: SessionState, trial_index: int) -> SessionState:
    """Flip the correct option and reset per-block tracking.

    Raises
    ------
    RuntimeError
        If no correct option has been defined yet.
    """

    if state.correct_option is None:
        raise RuntimeError(f"reversal on trial {trial_index} with no correct option defined")
    return replace(
        state,
        reversal_block=state.reversal_block + 1,
        previous_correct_option=state.correct_option,
        correct_option=state.correct_option.other(),
        is_reversal_phase=True,
        performance_window=(),
        block_correct_trials=frozenset(),
        criterion_reached=False,
        reversal_trials=state.reversal_trials + (int(trial_index),),
    )


def classify_choice(state: SessionState, choice: Option, *, is_reversal_trial: bool) -> ChoiceClassification:
    """Classify ``choice`` against the (post-reversal) state.

    A perseverative error repeats the previous block's correct option in the
    reversal phase, excluding the reversal-triggering trial. A regressive
    error is any incorrect choice after at least one correct choice in the
    current block.

    Raises
    ------
    RuntimeError
        If no correct option has been defined yet.
    """

    if state.correct_option is None:
        raise RuntimeError("cannot classify a choice with no correct option defined")
    actually_correct = choice is state.correct_option
    is_perseverative = (
        state.previous_correct_option is not None
        and state.is_reversal_phase
        and not is_reversal_trial
        and choice is state.previous_correct_option
    )
    is_regressive = (not actually_correct) and bool(state.block_correct_trials)
    return ChoiceClassification(
        actually_correct=actually_correct,
        is_perseverative=is_perseverative,
        is_regressive=is_regressive,
    )


def record_choice(
    state: SessionState,
    config: SessionConfig,
    trial_index: int,
    *,
    actually_correct: bool,
    is_reversal_trial: bool,
) -> SessionState:
    """Update block, window and criterion bookkeeping after a responded trial.

    The reversal-triggering trial counts as correct but is kept out of the
    performance window.
    """

    block_correct = state.block_correct_trials
    if actually_correct:
        block_correct = block_correct | {int(trial_index)}

    window = state.performance_window
    if not is_reversal_trial:
        window = (window + (bool(actually_correct),))[-config.window_size:]

    first_learning = state.first_learning_trial
    reversal_learning = state.reversal_learning_trial
    criterion_reached = state.criterion_reached
    met = len(window) == config.window_size and sum(window) >= config.accuracy_threshold
    if met:
        if first_learning is None:
            first_learning = int(trial_index)
        elif state.is_reversal_phase and reversal_learning is None:
            reversal_learning = int(trial_index)
        if config.reversal_mode == "criterion":
            criterion_reached = True

    return replace(
        state,
        trial_count=state.trial_count + 1,
        block_correct_trials=block_correct,
        performance_window=window,
        first_learning_trial=first_learning,
        reversal_learning_trial=reversal_learning,
        criterion_reached=criterion_reached,
    )


def record_omission(state: SessionState) -> SessionState:
    """Advance the trial counter without touching any other bookkeeping."""

    return replace(state, trial_count=state.trial_count + 1)


__all__ = [
    "ChoiceClassification",
    "apply_reversal",
    "classify_choice",
    "define_correct_option",
    "initial_state",
    "record_choice",
    "record_omission",
    "should_reverse",
]
