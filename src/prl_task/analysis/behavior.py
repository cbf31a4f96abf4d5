"""Behavioural aggregates derived from a completed trial log.

Everything here is a pure function of the log. Objective correctness drives
accuracy and error metrics; shown feedback drives transition rates, score and
feedback verification.
"""

from __future__ import annotations

import warnings
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from prl_task.analysis.reconciliation import reconcile_trial_log
from prl_task.core.data import Option, TrialRecord, valid_trials
from prl_task.core.exceptions import PhaseReconciliationWarning

POINTS_PER_TRIAL = 5


@dataclass(frozen=True, slots=True)
class TransitionRates:
    """First-order choice transitions keyed on the previous trial.

    Rates are ``None`` when their denominator is zero.
    """

    n_after_win: int
    n_after_loss: int
    n_after_misleading: int
    n_after_invalid_loss: int
    win_stay: float | None
    win_switch: float | None
    lose_stay: float | None
    lose_shift: float | None
    probabilistic_switch: float | None
    invalid_loss_switch: float | None


@dataclass(frozen=True, slots=True)
class PhaseFeedbackCheck:
    """Observed feedback statistics for one phase.

    Parameters
    ----------
    n_trials : int
        Responded trials in the phase.
    n_rewarded : int
        Trials with positive shown feedback.
    reward_rate : float | None
        ``n_rewarded / n_trials``.
    correct_rewarded, correct_punished, incorrect_rewarded, incorrect_punished : int
        Objective correctness x shown feedback table.
    reward_probability_a, reward_probability_b : float | None
        Observed reward rate when choosing each option.
    """

    n_trials: int
    n_rewarded: int
    reward_rate: float | None
    correct_rewarded: int
    correct_punished: int
    incorrect_rewarded: int
    incorrect_punished: int
    reward_probability_a: float | None
    reward_probability_b: float | None


@dataclass(frozen=True, slots=True)
class ReversalEpisode:
    """Responded trials and errors from one reversal to the next."""

    reversal_number: int
    start_trial: int
    n_trials: int
    n_errors: int


@dataclass(frozen=True, slots=True)
class PerseverativeSequences:
    """Reversal-phase perseverative runs of length two or more.

    Parameters
    ----------
    flags : tuple[bool, ...]
        Per input trial, whether it belongs to a qualifying run.
    n_trials : int
        Trials belonging to qualifying runs.
    n_episodes : int
        Number of qualifying runs.
    n_repeats : int
        Trials from the second onward in each qualifying run, so a run of
        two counts once.
    """

    flags: tuple[bool, ...]
    n_trials: int
    n_episodes: int
    n_repeats: int


@dataclass(frozen=True, slots=True)
class BehavioralSummary:
    """Session-level behavioural aggregates."""

    n_trials: int
    n_valid: int
    n_omissions: int
    total_score: int
    accuracy: float | None
    accuracy_learning: float | None
    accuracy_reversal: float | None
    mean_rt: float | None
    mean_rt_learning: float | None
    mean_rt_reversal: float | None
    mean_rt_reversal_rewarded: float | None
    mean_rt_reversal_punished: float | None
    icv_global: float
    icv_learning: float
    icv_reversal: float
    transitions: TransitionRates
    perseverative_errors_total: int
    perseverative_errors_reversal: int
    regressive_errors_reversal: int
    perseverative_streak_trials: int
    perseverative_streak_repeats: int
    perseverative_episodes: int
    first_learning_trial: int | None
    reversal_learning_trial: int | None
    trials_to_reversal_criterion: int | None
    n_reversals: int
    reversal_episodes: tuple[ReversalEpisode, ...]
    mean_errors_per_reversal: float | None
    mean_trials_per_reversal: float | None
    feedback_learning: PhaseFeedbackCheck
    feedback_reversal: PhaseFeedbackCheck
    initial_correct_option: Option | None
    n_phase_discrepancies: int

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible nested mapping."""

        payload = asdict(self)
        if self.initial_correct_option is not None:
            payload["initial_correct_option"] = self.initial_correct_option.value
        return payload


def intra_subject_cv(values: Sequence[float]) -> float:
    """Coefficient of variation ``sd / mean`` with population ``sd``.

    Returns ``0.0`` for empty input or a non-positive mean.
    """

    if len(values) == 0:
        return 0.0
    array = np.asarray(values, dtype=float)
    mean = float(np.mean(array))
    if mean <= 0.0:
        return 0.0
    return float(np.std(array) / mean)


def transition_rates(trials: Sequence[TrialRecord]) -> TransitionRates:
    """Compute stay/switch rates over consecutive responded trials."""

    valid = valid_trials(trials)
    win_stay = win_total = 0
    lose_shift = lose_total = 0
    misleading_switch = misleading_total = 0
    invalid_loss_switch = invalid_loss_total = 0
    for previous, current in zip(valid[:-1], valid[1:], strict=True):
        switched = current.choice is not previous.choice
        if previous.feedback_shown:
            win_total += 1
            win_stay += int(not switched)
        else:
            lose_total += 1
            lose_shift += int(switched)
            if previous.misleading:
                invalid_loss_total += 1
                invalid_loss_switch += int(switched)
        if previous.misleading:
            misleading_total += 1
            misleading_switch += int(switched)

    return TransitionRates(
        n_after_win=win_total,
        n_after_loss=lose_total,
        n_after_misleading=misleading_total,
        n_after_invalid_loss=invalid_loss_total,
        win_stay=_rate(win_stay, win_total),
        win_switch=_rate(win_total - win_stay, win_total),
        lose_stay=_rate(lose_total - lose_shift, lose_total),
        lose_shift=_rate(lose_shift, lose_total),
        probabilistic_switch=_rate(misleading_switch, misleading_total),
        invalid_loss_switch=_rate(invalid_loss_switch, invalid_loss_total),
    )


def perseverative_sequences(trials: Sequence[TrialRecord]) -> PerseverativeSequences:
    """Find runs of at least two consecutive perseverative trials.

    Only responded reversal-phase trials (excluding reversal-triggering
    trials) take part. Omissions are skipped and do not break a run.
    """

    flags = [False] * len(trials)
    eligible = [
        position
        for position, trial in enumerate(trials)
        if not trial.is_omission and trial.is_reversal_phase and not trial.is_reversal_trial
    ]

    runs: list[list[int]] = []
    current: list[int] = []
    for position in eligible:
        if trials[position].is_perseverative:
            current.append(position)
        else:
            runs.append(current)
            current = []
    runs.append(current)

    qualifying = [run for run in runs if len(run) >= 2]
    for run in qualifying:
        for position in run:
            flags[position] = True
    return PerseverativeSequences(
        flags=tuple(flags),
        n_trials=sum(flags),
        n_episodes=len(qualifying),
        n_repeats=sum(len(run) - 1 for run in qualifying),
    )


def reversal_episodes(trials: Sequence[TrialRecord]) -> tuple[ReversalEpisode, ...]:
    """Split responded reversal-phase trials into one episode per reversal."""

    episodes: list[ReversalEpisode] = []
    start_trial: int | None = None
    n_trials = n_errors = 0
    for trial in trials:
        if trial.is_reversal_trial:
            if start_trial is not None:
                episodes.append(ReversalEpisode(len(episodes) + 1, start_trial, n_trials, n_errors))
            start_trial = trial.trial_index
            n_trials = n_errors = 0
        if start_trial is None or trial.is_omission:
            continue
        n_trials += 1
        n_errors += int(not trial.actually_correct)
    if start_trial is not None:
        episodes.append(ReversalEpisode(len(episodes) + 1, start_trial, n_trials, n_errors))
    return tuple(episodes)


def feedback_check(trials: Sequence[TrialRecord]) -> PhaseFeedbackCheck:
    """Tabulate shown feedback against objective correctness."""

    valid = valid_trials(trials)
    table = {(True, True): 0, (True, False): 0, (False, True): 0, (False, False): 0}
    for trial in valid:
        table[(bool(trial.actually_correct), bool(trial.feedback_shown))] += 1
    n_rewarded = sum(1 for trial in valid if trial.feedback_shown)

    def option_rate(option: Option) -> float | None:
        chosen = [trial for trial in valid if trial.choice is option]
        return _rate(sum(1 for trial in chosen if trial.feedback_shown), len(chosen))

    return PhaseFeedbackCheck(
        n_trials=len(valid),
        n_rewarded=n_rewarded,
        reward_rate=_rate(n_rewarded, len(valid)),
        correct_rewarded=table[(True, True)],
        correct_punished=table[(True, False)],
        incorrect_rewarded=table[(False, True)],
        incorrect_punished=table[(False, False)],
        reward_probability_a=option_rate(Option.A),
        reward_probability_b=option_rate(Option.B),
    )


def summarize_session(
    trials: Sequence[TrialRecord],
    *,
    first_learning_trial: int | None = None,
    reversal_learning_trial: int | None = None,
) -> BehavioralSummary:
    """Aggregate a completed trial log.

    Parameters
    ----------
    trials : Sequence[TrialRecord]
        Complete trial log, omissions included.
    first_learning_trial : int | None, optional
        Trial at which the accuracy criterion was first met.
    reversal_learning_trial : int | None, optional
        Trial at which the criterion was first met in the reversal phase.

    Returns
    -------
    BehavioralSummary
        Aggregates. Phase membership follows the logged per-trial flags.

    Notes
    -----
    The log is reconciled once against its reversal markers; disagreements
    raise a :class:`~prl_task.core.exceptions.PhaseReconciliationWarning`
    but never override the logged flags.
    """

    discrepancies = reconcile_trial_log(trials)
    if discrepancies:
        first = discrepancies[0]
        warnings.warn(
            f"{len(discrepancies)} phase flag(s) disagree with reversal markers; first at trial "
            f"{first.trial_index} ({first.field}: logged {first.logged}, reconstructed {first.reconstructed})",
            PhaseReconciliationWarning,
            stacklevel=2,
        )

    valid = valid_trials(trials)
    learning = tuple(trial for trial in valid if not trial.is_reversal_phase)
    reversal = tuple(trial for trial in valid if trial.is_reversal_phase)
    sequences = perseverative_sequences(trials)
    episodes = reversal_episodes(trials)

    first_reversal_trial = next((trial.trial_index for trial in trials if trial.is_reversal_trial), None)
    trials_to_reversal_criterion = None
    if reversal_learning_trial is not None and first_reversal_trial is not None:
        trials_to_reversal_criterion = reversal_learning_trial - first_reversal_trial + 1

    n_rewarded = sum(1 for trial in valid if trial.feedback_shown)
    initial_correct = next((trial.correct_option for trial in trials if trial.correct_option is not None), None)

    return BehavioralSummary(
        n_trials=len(trials),
        n_valid=len(valid),
        n_omissions=len(trials) - len(valid),
        total_score=POINTS_PER_TRIAL * (2 * n_rewarded - len(valid)),
        accuracy=_accuracy(valid),
        accuracy_learning=_accuracy(learning),
        accuracy_reversal=_accuracy(reversal),
        mean_rt=_mean_rt(valid),
        mean_rt_learning=_mean_rt(learning),
        mean_rt_reversal=_mean_rt(reversal),
        mean_rt_reversal_rewarded=_mean_rt([trial for trial in reversal if trial.feedback_shown]),
        mean_rt_reversal_punished=_mean_rt([trial for trial in reversal if not trial.feedback_shown]),
        icv_global=intra_subject_cv([trial.reaction_time_ms for trial in valid]),
        icv_learning=intra_subject_cv([trial.reaction_time_ms for trial in learning]),
        icv_reversal=intra_subject_cv([trial.reaction_time_ms for trial in reversal]),
        transitions=transition_rates(trials),
        perseverative_errors_total=sum(1 for trial in valid if trial.is_perseverative),
        perseverative_errors_reversal=sum(1 for trial in reversal if trial.is_perseverative),
        regressive_errors_reversal=sum(1 for trial in reversal if trial.is_regressive),
        perseverative_streak_trials=sequences.n_trials,
        perseverative_streak_repeats=sequences.n_repeats,
        perseverative_episodes=sequences.n_episodes,
        first_learning_trial=first_learning_trial,
        reversal_learning_trial=reversal_learning_trial,
        trials_to_reversal_criterion=trials_to_reversal_criterion,
        n_reversals=sum(1 for trial in trials if trial.is_reversal_trial),
        reversal_episodes=episodes,
        mean_errors_per_reversal=_mean([episode.n_errors for episode in episodes]),
        mean_trials_per_reversal=_mean([episode.n_trials for episode in episodes]),
        feedback_learning=feedback_check(learning),
        feedback_reversal=feedback_check(reversal),
        initial_correct_option=initial_correct,
        n_phase_discrepancies=len(discrepancies),
    )


def _rate(numerator: int, denominator: int) -> float | None:
    if denominator <= 0:
        return None
    return float(numerator) / float(denominator)


def _mean(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return float(np.mean(np.asarray(values, dtype=float)))


def _accuracy(trials: Sequence[TrialRecord]) -> float | None:
    return _rate(sum(1 for trial in trials if trial.actually_correct), len(trials))


def _mean_rt(trials: Sequence[TrialRecord]) -> float | None:
    return _mean([trial.reaction_time_ms for trial in trials])


__all__ = [
    "BehavioralSummary",
    "POINTS_PER_TRIAL",
    "PerseverativeSequences",
    "PhaseFeedbackCheck",
    "ReversalEpisode",
    "TransitionRates",
    "feedback_check",
    "intra_subject_cv",
    "perseverative_sequences",
    "reversal_episodes",
    "summarize_session",
    "transition_rates",
]
