"""Simulated participants driving the real trial state machine."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from prl_task.core.data import Option, Outcome, TrialRecord
from prl_task.inference.likelihood import REWARD_ENCODINGS
from prl_task.task.config import SessionConfig
from prl_task.task.machine import TrialStateMachine


@dataclass(frozen=True, slots=True)
class QLearningAgentConfig:
    """Configuration for :class:`QLearningAgent`.

    Parameters
    ----------
    alpha : float
        Learning rate in ``[0, 1]``.
    beta : float
        Softmax inverse temperature. ``beta=0`` implies uniform choice.
    initial_value : float
        Initial value of both options.
    reward_encoding : str
        ``"zero_one"`` or ``"plus_minus_one"`` coding of shown feedback.

    Raises
    ------
    ValueError
        If ``alpha`` is outside ``[0, 1]``, ``beta`` is negative or the
        encoding is unknown.
    """

    alpha: float = 0.3
    beta: float = 5.0
    initial_value: float = 0.5
    reward_encoding: str = "zero_one"

    def __post_init__(self) -> None:
        if self.alpha < 0.0 or self.alpha > 1.0:
            raise ValueError("alpha must be in [0, 1]")
        if self.beta < 0.0:
            raise ValueError("beta must be >= 0")
        if self.reward_encoding not in REWARD_ENCODINGS:
            raise ValueError(f"reward_encoding must be one of {list(REWARD_ENCODINGS)}")


class QLearningAgent:
    """Softmax Q-learning participant learning from shown feedback.

    Model Contract
    --------------
    Decision Rule
        ``P(a) = softmax(beta * Q[a])`` over options A and B.
    Update Rule
        After choosing ``a`` and seeing reward ``r``:
        ``Q[a] <- Q[a] + alpha * (r - Q[a])``. Only the chosen value moves.

    Parameters
    ----------
    config : QLearningAgentConfig | None, optional
        Hyperparameters. Defaults are used when ``None``.
    """

    def __init__(self, config: QLearningAgentConfig | None = None) -> None:
        self.config = config if config is not None else QLearningAgentConfig()
        self._q_values = np.full(2, self.config.initial_value, dtype=float)

    def start_session(self) -> None:
        """Reset learned values."""

        self._q_values = np.full(2, self.config.initial_value, dtype=float)

    def action_distribution(self) -> np.ndarray:
        """Return choice probabilities for ``[A, B]``."""

        logits = self.config.beta * self._q_values
        logits = logits - float(np.max(logits))
        exp_logits = np.exp(logits)
        return exp_logits / float(np.sum(exp_logits))

    def choose(self, rng: np.random.Generator) -> Option:
        probabilities = self.action_distribution()
        return Option.A if rng.random() < probabilities[0] else Option.B

    def update(self, choice: Option, outcome: Outcome) -> None:
        """Update the chosen option value from shown feedback."""

        if self.config.reward_encoding == "zero_one":
            reward = outcome.as_zero_one()
        else:
            reward = outcome.as_plus_minus_one()
        index = choice.index
        current = self._q_values[index]
        self._q_values[index] = current + self.config.alpha * (reward - current)

    def q_values_snapshot(self) -> dict[Option, float]:
        return {Option.A: float(self._q_values[0]), Option.B: float(self._q_values[1])}


def simulate_session(
    config: SessionConfig,
    agent: QLearningAgent,
    rng: np.random.Generator | None = None,
    *,
    omission_probability: float = 0.0,
    reaction_time_range_ms: tuple[int, int] = (300, 1200),
) -> tuple[TrialRecord, ...]:
    """Run one full session with a simulated participant.

    Parameters
    ----------
    config : SessionConfig
        Session configuration.
    agent : QLearningAgent
        Simulated participant; reset before the session starts.
    rng : numpy.random.Generator | None, optional
        Random source shared by feedback generation, choices and latencies.
    omission_probability : float, optional
        Per-trial probability of letting the deadline elapse.
    reaction_time_range_ms : tuple[int, int], optional
        Inclusive range of uniformly drawn reaction times.

    Returns
    -------
    tuple[TrialRecord, ...]
        The complete trial log.
    """

    if not 0.0 <= omission_probability < 1.0:
        raise ValueError("omission_probability must be in [0, 1)")
    low, high = (int(value) for value in reaction_time_range_ms)
    if low < 0 or high < low:
        raise ValueError("reaction_time_range_ms must satisfy 0 <= low <= high")

    generator = rng if rng is not None else np.random.default_rng()
    machine = TrialStateMachine(config, rng=generator)
    agent.start_session()
    while not machine.is_complete:
        if omission_probability > 0.0 and generator.random() < omission_probability:
            machine.handle_omission()
            continue
        choice = agent.choose(generator)
        record = machine.process_choice(choice, int(generator.integers(low, high + 1)))
        agent.update(choice, Outcome(rewarded=bool(record.feedback_shown)))
    return machine.trials


__all__ = ["QLearningAgent", "QLearningAgentConfig", "simulate_session"]
