"""Run-constrained feedback decks (den Ouden pseudo-randomization)."""

from __future__ import annotations

import warnings
from collections.abc import Sequence

import numpy as np

from prl_task.core.exceptions import DeckGenerationWarning
from prl_task.feedback.urn import round_half_up

DEFAULT_MAX_ATTEMPTS = 10_000
DEFAULT_MAX_RUN = 3


def max_run_length(values: Sequence[bool]) -> int:
    """Return the length of the longest run of identical consecutive values."""

    longest = 0
    current = 0
    previous: bool | None = None
    for value in values:
        current = current + 1 if value == previous else 1
        previous = value
        longest = max(longest, current)
    return longest


def generate_den_ouden_deck(
    n_trials: int,
    probability: float,
    *,
    rng: np.random.Generator,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    max_run: int = DEFAULT_MAX_RUN,
) -> list[bool]:
    """Generate a deck with an exact truthful count and bounded runs.

    Parameters
    ----------
    n_trials : int
        Deck length.
    probability : float
        Proportion of ``True`` entries, rounded half-up to a count.
    rng : numpy.random.Generator
        Random source for Fisher-Yates shuffling.
    max_attempts : int, optional
        Shuffle-and-check budget.
    max_run : int, optional
        Longest allowed run of identical values.

    Returns
    -------
    list[bool]
        A valid deck, or the last candidate when the budget is exhausted.

    Raises
    ------
    ValueError
        If ``n_trials`` is negative, ``probability`` is outside ``[0, 1]``
        or ``max_attempts``/``max_run`` are not positive.

    Notes
    -----
    At extreme probabilities no valid arrangement may exist. In that case a
    :class:`~prl_task.core.exceptions.DeckGenerationWarning` is emitted and
    the unconstrained last candidate is returned.
    """

    if n_trials < 0:
        raise ValueError(f"n_trials must be >= 0, got {n_trials}")
    if not 0.0 <= float(probability) <= 1.0:
        raise ValueError(f"probability must be in [0, 1], got {probability!r}")
    if max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if max_run <= 0:
        raise ValueError("max_run must be > 0")

    n_true = round_half_up(n_trials * float(probability))
    deck: list[bool] = []
    for _ in range(max_attempts):
        deck = [True] * n_true + [False] * (n_trials - n_true)
        for i in range(len(deck) - 1, 0, -1):
            j = int(rng.integers(0, i + 1))
            deck[i], deck[j] = deck[j], deck[i]
        if max_run_length(deck) <= max_run:
            return deck

    warnings.warn(
        f"no deck of {n_trials} trials at p={probability} satisfied max run {max_run} "
        f"after {max_attempts} attempts; using last candidate",
        DeckGenerationWarning,
        stacklevel=2,
    )
    return deck


class DenOudenDeck:
    """Fixed deck consumed cyclically; the index wraps modulo its length."""

    def __init__(self, values: Sequence[bool]) -> None:
        self._values = tuple(bool(value) for value in values)
        self._index = 0

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> tuple[bool, ...]:
        return self._values

    @property
    def position(self) -> int:
        """Number of draws taken so far."""

        return self._index

    def draw(self) -> bool | None:
        """Return the next flag, or ``None`` when the deck is empty."""

        if not self._values:
            return None
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_RUN",
    "DenOudenDeck",
    "generate_den_ouden_deck",
    "max_run_length",
]
