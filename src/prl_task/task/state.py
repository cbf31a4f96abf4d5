"""Explicit session state owned by :class:`~prl_task.task.machine.TrialStateMachine`."""

from __future__ import annotations

from dataclasses import dataclass

from prl_task.core.data import Option


@dataclass(frozen=True, slots=True)
class SessionState:
    """Immutable snapshot of the task state between trials.

    Parameters
    ----------
    trial_count : int
        Number of records logged so far (omissions included).
    correct_option : Option | None
        Currently correct option; ``None`` until defined.
    previous_correct_option : Option | None
        Correct option of the block before the latest reversal.
    reversal_block : int
        Number of reversals fired.
    is_reversal_phase : bool
        Whether at least one reversal has fired.
    performance_window : tuple[bool, ...]
        Counted correctness of the most recent responded trials, oldest first.
    block_correct_trials : frozenset[int]
        Trial indices answered correctly in the current block.
    criterion_reached : bool
        Criterion met and a reversal is armed for the next responded trial.
    first_learning_trial : int | None
        Trial at which the accuracy criterion was first met.
    reversal_learning_trial : int | None
        Trial at which the criterion was first met in the reversal phase.
    reversal_trials : tuple[int, ...]
        Indices of every reversal-triggering trial.
    """

    trial_count: int = 0
    correct_option: Option | None = None
    previous_correct_option: Option | None = None
    reversal_block: int = 0
    is_reversal_phase: bool = False
    performance_window: tuple[bool, ...] = ()
    block_correct_trials: frozenset[int] = frozenset()
    criterion_reached: bool = False
    first_learning_trial: int | None = None
    reversal_learning_trial: int | None = None
    reversal_trials: tuple[int, ...] = ()

    @property
    def next_trial_index(self) -> int:
        return self.trial_count + 1

    @property
    def reversal_count(self) -> int:
        return len(self.reversal_trials)

    @property
    def first_reversal_trial(self) -> int | None:
        return self.reversal_trials[0] if self.reversal_trials else None

    @property
    def window_correct(self) -> int:
        """Number of counted-correct entries in the performance window."""

        return sum(1 for value in self.performance_window if value)


__all__ = ["SessionState"]
