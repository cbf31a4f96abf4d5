"""Trial state machine for one reversal-learning session."""

from __future__ import annotations

import numpy as np

from prl_task.core.data import Option, TrialRecord
from prl_task.feedback.provider import FeedbackProvider, create_feedback_provider
from prl_task.task.config import SessionConfig
from prl_task.task.state import SessionState
from prl_task.task.transitions import (
    apply_reversal,
    classify_choice,
    define_correct_option,
    initial_state,
    record_choice,
    record_omission,
    should_reverse,
)


class TrialStateMachine:
    """Own the session state and append one record per trial.

    Parameters
    ----------
    config : SessionConfig | None, optional
        Session configuration. Defaults to :class:`SessionConfig`.
    provider : FeedbackProvider | None, optional
        Feedback provider. Built from ``config`` when omitted.
    rng : numpy.random.Generator | None, optional
        Random source used to build the default provider.

    Notes
    -----
    Per responded trial the machine (1) defines the correct option from the
    first choice when unset, (2) decides and applies a reversal, (3) classifies
    the choice, (4) draws feedback, (5) appends the record and (6) updates the
    performance window and criterion. Omissions only append a record.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        provider: FeedbackProvider | None = None,
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._config = config if config is not None else SessionConfig()
        if provider is None:
            generator = rng if rng is not None else np.random.default_rng()
            provider = create_feedback_provider(self._config, generator)
        self._provider = provider
        self._state = initial_state(self._config)
        self._trials: list[TrialRecord] = []

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def provider(self) -> FeedbackProvider:
        return self._provider

    @property
    def state(self) -> SessionState:
        """Current immutable state snapshot."""

        return self._state

    @property
    def trials(self) -> tuple[TrialRecord, ...]:
        """Trial log in order."""

        return tuple(self._trials)

    @property
    def is_complete(self) -> bool:
        return self._state.trial_count >= self._config.max_trials

    @property
    def remaining_trials(self) -> int:
        return max(0, self._config.max_trials - self._state.trial_count)

    def process_choice(self, choice: Option | str, reaction_time_ms: int) -> TrialRecord:
        """Process one responded trial.

        Parameters
        ----------
        choice : Option | str
            Chosen option (``"A"``/``"B"`` accepted).
        reaction_time_ms : int
            Response latency in milliseconds.

        Returns
        -------
        TrialRecord
            Appended record, including the feedback to display.

        Raises
        ------
        RuntimeError
            If the session is already complete.
        ValueError
            If ``choice`` is not an option or ``reaction_time_ms`` is negative.
        """

        self._ensure_open()
        option = Option.parse(choice)
        rt = int(reaction_time_ms)
        if rt < 0:
            raise ValueError(f"reaction_time_ms must be >= 0, got {reaction_time_ms}")

        state = define_correct_option(self._state, option)
        trial_index = state.next_trial_index
        is_reversal_trial = should_reverse(state, self._config, trial_index)
        if is_reversal_trial:
            state = apply_reversal(state, trial_index)

        classification = classify_choice(state, option, is_reversal_trial=is_reversal_trial)
        feedback = self._provider.get_feedback(
            classification.actually_correct,
            reversal_phase=state.is_reversal_phase,
            block_start=is_reversal_trial,
        )

        record = TrialRecord(
            trial_index=trial_index,
            choice=option,
            correct_option=state.correct_option,
            feedback_shown=feedback,
            actually_correct=classification.actually_correct,
            misleading=feedback != classification.actually_correct,
            reaction_time_ms=rt,
            is_omission=False,
            reversal_block=state.reversal_block,
            is_reversal_trial=is_reversal_trial,
            is_reversal_phase=state.is_reversal_phase,
            is_perseverative=classification.is_perseverative,
            is_regressive=classification.is_regressive,
        )
        self._trials.append(record)
        self._state = record_choice(
            state,
            self._config,
            trial_index,
            actually_correct=classification.actually_correct,
            is_reversal_trial=is_reversal_trial,
        )
        return record

    def handle_omission(self, reaction_time_ms: int | None = None) -> TrialRecord:
        """Log a trial whose response deadline elapsed.

        Parameters
        ----------
        reaction_time_ms : int | None, optional
            Recorded latency. Defaults to the configured deadline, or ``0``
            when no deadline is configured.

        Returns
        -------
        TrialRecord
            Appended omission record.

        Raises
        ------
        RuntimeError
            If the session is already complete.
        """

        self._ensure_open()
        if reaction_time_ms is None:
            deadline = self._config.response_deadline_ms
            rt = int(deadline) if deadline is not None else 0
        else:
            rt = int(reaction_time_ms)

        state = self._state
        record = TrialRecord(
            trial_index=state.next_trial_index,
            choice=None,
            correct_option=state.correct_option,
            feedback_shown=None,
            actually_correct=None,
            misleading=False,
            reaction_time_ms=rt,
            is_omission=True,
            reversal_block=state.reversal_block,
            is_reversal_trial=False,
            is_reversal_phase=state.is_reversal_phase,
        )
        self._trials.append(record)
        self._state = record_omission(state)
        return record

    def _ensure_open(self) -> None:
        if self.is_complete:
            raise RuntimeError(
                f"session is complete ({self._config.max_trials} trials); no further trials accepted"
            )


__all__ = ["TrialStateMachine"]
