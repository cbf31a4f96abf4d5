"""Vectorised choice likelihoods for two-option learning models.

Each kernel evaluates the negative log-likelihood of one observed choice
sequence for a whole array of parameter candidates at once: parameters are
broadcast against each other, values carry a leading option axis of length 2,
and the loop runs over trials only.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy.special import logsumexp

from prl_task.core.data import Option, Outcome, TrialRecord

PROBABILITY_FLOOR = 1e-9
LOG_PROBABILITY_FLOOR = float(np.log(PROBABILITY_FLOOR))

REWARD_ENCODINGS: tuple[str, ...] = ("zero_one", "plus_minus_one")


@dataclass(frozen=True, slots=True)
class EncodedTrials:
    """Choice/outcome arrays for model fitting.

    Parameters
    ----------
    choices : numpy.ndarray
        Option indices (``0`` for A, ``1`` for B), shape ``(n_trials,)``.
    rewarded : numpy.ndarray
        Shown feedback as booleans, shape ``(n_trials,)``.
    """

    choices: np.ndarray
    rewarded: np.ndarray

    def __post_init__(self) -> None:
        choices = np.asarray(self.choices, dtype=int)
        rewarded = np.asarray(self.rewarded, dtype=bool)
        if choices.ndim != 1 or rewarded.ndim != 1:
            raise ValueError("choices and rewarded must be one-dimensional")
        if choices.shape != rewarded.shape:
            raise ValueError("choices and rewarded must have the same length")
        if np.any((choices != 0) & (choices != 1)):
            raise ValueError("choices must be coded as 0 or 1")
        object.__setattr__(self, "choices", choices)
        object.__setattr__(self, "rewarded", rewarded)

    @property
    def n_trials(self) -> int:
        return int(self.choices.shape[0])

    def outcomes(self) -> tuple[Outcome, ...]:
        return tuple(Outcome(rewarded=bool(value)) for value in self.rewarded)

    def rewards(self, encoding: str) -> np.ndarray:
        """Return rewards in ``"zero_one"`` or ``"plus_minus_one"`` coding."""

        if encoding == "zero_one":
            return np.asarray([outcome.as_zero_one() for outcome in self.outcomes()], dtype=float)
        if encoding == "plus_minus_one":
            return np.asarray([outcome.as_plus_minus_one() for outcome in self.outcomes()], dtype=float)
        raise ValueError(f"unknown reward encoding {encoding!r}; expected one of {list(REWARD_ENCODINGS)}")


def encode_trials(trials: Sequence[TrialRecord]) -> EncodedTrials:
    """Encode responded trials for fitting; omissions are dropped.

    Models learn from the *shown* feedback, including misleading trials.
    """

    choices: list[int] = []
    rewarded: list[bool] = []
    for trial in trials:
        if trial.is_omission or trial.choice is None or trial.feedback_shown is None:
            continue
        choices.append(trial.choice.index)
        rewarded.append(bool(trial.feedback_shown))
    return EncodedTrials(choices=np.asarray(choices, dtype=int), rewarded=np.asarray(rewarded, dtype=bool))


def encode_sequences(
    choices: Sequence[Option | int | str],
    outcomes: Sequence[Outcome | bool | int],
) -> EncodedTrials:
    """Encode raw choice and outcome sequences.

    ``choices`` accepts options, ``"A"``/``"B"`` labels or ``0``/``1`` indices.
    ``outcomes`` accepts :class:`Outcome` values or truthy reward flags.
    """

    choice_indices: list[int] = []
    for choice in choices:
        if isinstance(choice, (int, np.integer)) and not isinstance(choice, bool):
            choice_indices.append(int(choice))
        else:
            choice_indices.append(Option.parse(choice).index)
    rewarded = [
        outcome.rewarded if isinstance(outcome, Outcome) else bool(outcome)
        for outcome in outcomes
    ]
    return EncodedTrials(choices=np.asarray(choice_indices, dtype=int), rewarded=np.asarray(rewarded, dtype=bool))


def chosen_log_probability(logits: np.ndarray, choice: int) -> np.ndarray:
    """Floored softmax log-probability of ``choice`` along the option axis."""

    log_normalizer = logsumexp(logits, axis=0)
    return np.maximum(logits[choice] - log_normalizer, LOG_PROBABILITY_FLOOR)


def delta_rule_nll(
    choices: np.ndarray,
    rewards: np.ndarray,
    rewarded: np.ndarray,
    *,
    alpha_win: np.ndarray | float,
    alpha_loss: np.ndarray | float,
    beta: np.ndarray | float,
    tau: np.ndarray | float = 0.0,
    initial_value: float = 0.0,
) -> np.ndarray:
    """Negative log-likelihood of a softmax delta-rule learner.

    Parameters
    ----------
    choices : numpy.ndarray
        Option indices per trial.
    rewards : numpy.ndarray
        Encoded reward per trial.
    rewarded : numpy.ndarray
        Whether each trial's shown feedback was positive.
    alpha_win, alpha_loss : numpy.ndarray | float
        Effective step sizes after rewarded and punished trials.
    beta : numpy.ndarray | float
        Inverse temperature.
    tau : numpy.ndarray | float, optional
        Bonus added to the logit of the previously chosen option.
    initial_value : float, optional
        Initial value of both options.

    Returns
    -------
    numpy.ndarray
        NLL per candidate, shaped like the broadcast parameters.

    Notes
    -----
    Only the chosen option is updated:
    ``Q[c] <- Q[c] + alpha * (r - Q[c])``.
    """

    alpha_win, alpha_loss, beta, tau = np.broadcast_arrays(
        np.asarray(alpha_win, dtype=float),
        np.asarray(alpha_loss, dtype=float),
        np.asarray(beta, dtype=float),
        np.asarray(tau, dtype=float),
    )
    shape = alpha_win.shape
    values = np.full((2,) + shape, float(initial_value))
    nll = np.zeros(shape)
    previous: int | None = None
    for choice, reward, win in zip(choices, rewards, rewarded, strict=True):
        choice = int(choice)
        logits = beta * values
        if previous is not None:
            logits[previous] = logits[previous] + tau
        nll -= chosen_log_probability(logits, choice)
        alpha = alpha_win if win else alpha_loss
        values[choice] = values[choice] + alpha * (float(reward) - values[choice])
        previous = choice
    return nll


def ewa_nll(
    choices: np.ndarray,
    rewards: np.ndarray,
    *,
    phi: np.ndarray | float,
    rho: np.ndarray | float,
    beta: np.ndarray | float,
) -> np.ndarray:
    """Negative log-likelihood of an experience-weighted attraction learner.

    Notes
    -----
    With experience weight ``N`` (``N0 = 1``) and attractions ``V`` (``V0 = 0``)::

        N' = rho * N + 1
        V'[c] = (phi * N * V[c] + r) / N'
        V'[u] = (phi * N * V[u]) / N'
    """

    phi, rho, beta = np.broadcast_arrays(
        np.asarray(phi, dtype=float),
        np.asarray(rho, dtype=float),
        np.asarray(beta, dtype=float),
    )
    shape = phi.shape
    values = np.zeros((2,) + shape)
    experience = np.ones(shape)
    nll = np.zeros(shape)
    for choice, reward in zip(choices, rewards, strict=True):
        choice = int(choice)
        nll -= chosen_log_probability(beta * values, choice)
        next_experience = rho * experience + 1.0
        decayed = phi * experience * values
        decayed[choice] = decayed[choice] + float(reward)
        values = decayed / next_experience
        experience = next_experience
    return nll


__all__ = [
    "EncodedTrials",
    "LOG_PROBABILITY_FLOOR",
    "PROBABILITY_FLOOR",
    "REWARD_ENCODINGS",
    "chosen_log_probability",
    "delta_rule_nll",
    "encode_sequences",
    "encode_trials",
    "ewa_nll",
]
