"""Rebuild session bookkeeping from a finished trial log.

The live flags written by the state machine are authoritative. The
reconciliation pass only rebuilds block and phase membership from
``is_reversal_trial`` markers and reports where the two disagree. The
criterion replay recovers the learning trials for logs read back from disk.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from prl_task.core.data import TrialRecord


@dataclass(frozen=True, slots=True)
class PhaseDiscrepancy:
    """One disagreement between a logged flag and its reconstruction.

    Parameters
    ----------
    trial_index : int
        Trial where the disagreement occurs.
    field : str
        ``"reversal_block"`` or ``"is_reversal_phase"``.
    logged : int | bool
        Value written during the session.
    reconstructed : int | bool
        Value implied by the reversal markers.
    """

    trial_index: int
    field: str
    logged: int | bool
    reconstructed: int | bool


def reconcile_trial_log(trials: Sequence[TrialRecord]) -> tuple[PhaseDiscrepancy, ...]:
    """Compare logged block/phase flags with those implied by reversal markers."""

    discrepancies: list[PhaseDiscrepancy] = []
    block = 0
    for trial in trials:
        if trial.is_reversal_trial:
            block += 1
        in_phase = block > 0
        if trial.reversal_block != block:
            discrepancies.append(
                PhaseDiscrepancy(trial.trial_index, "reversal_block", trial.reversal_block, block)
            )
        if bool(trial.is_reversal_phase) != in_phase:
            discrepancies.append(
                PhaseDiscrepancy(trial.trial_index, "is_reversal_phase", bool(trial.is_reversal_phase), in_phase)
            )
    return tuple(discrepancies)


@dataclass(frozen=True, slots=True)
class CriterionTrials:
    """Trials at which the accuracy criterion was first met.

    Parameters
    ----------
    first_learning_trial : int | None
        First trial meeting the criterion in the session.
    reversal_learning_trial : int | None
        First later trial meeting it inside the reversal phase.
    """

    first_learning_trial: int | None
    reversal_learning_trial: int | None


def replay_criterion(
    trials: Sequence[TrialRecord],
    *,
    window_size: int,
    accuracy_threshold: int,
) -> CriterionTrials:
    """Replay the sliding accuracy window over a logged session.

    Omissions are skipped. A reversal-triggering trial clears the window and
    is not pushed into it, matching the live bookkeeping.

    Raises
    ------
    ValueError
        If ``window_size`` or ``accuracy_threshold`` is out of range.
    """

    if window_size <= 0:
        raise ValueError("window_size must be > 0")
    if not 0 < accuracy_threshold <= window_size:
        raise ValueError("accuracy_threshold must satisfy 0 < accuracy_threshold <= window_size")

    window: list[bool] = []
    first_learning: int | None = None
    reversal_learning: int | None = None
    for trial in trials:
        if trial.is_omission:
            continue
        if trial.is_reversal_trial:
            window = []
        else:
            window = (window + [bool(trial.actually_correct)])[-window_size:]
        if len(window) < window_size or sum(window) < accuracy_threshold:
            continue
        if first_learning is None:
            first_learning = trial.trial_index
        elif trial.is_reversal_phase and reversal_learning is None:
            reversal_learning = trial.trial_index
    return CriterionTrials(first_learning_trial=first_learning, reversal_learning_trial=reversal_learning)


__all__ = ["CriterionTrials", "PhaseDiscrepancy", "reconcile_trial_log", "replay_criterion"]
