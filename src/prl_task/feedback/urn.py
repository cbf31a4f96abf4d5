"""Balanced-urn generator for congruent-feedback flags.

An urn is a queue of booleans where ``True`` means "show truthful feedback".
Slots are partitioned into windows of :data:`URN_WINDOW_SIZE`; each window
holds exactly ``round_half_up(len(window) * probability)`` truthful flags and
is shuffled in place without crossing its own boundaries.
"""

from __future__ import annotations

import math
import warnings
from collections import deque

import numpy as np

from prl_task.core.exceptions import UrnRefillWarning

URN_WINDOW_SIZE = 10


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties going up (``2.5 -> 3``)."""

    return int(math.floor(float(value) + 0.5))


def _validate_probability(probability: float) -> float:
    value = float(probability)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"probability must be in [0, 1], got {probability!r}")
    return value


def _shuffle_range(values: list[bool], start: int, stop: int, rng: np.random.Generator) -> None:
    """Fisher-Yates shuffle of ``values[start:stop]`` in place."""

    for i in range(stop - 1, start, -1):
        j = start + int(rng.integers(0, i - start + 1))
        values[i], values[j] = values[j], values[i]


def create_feedback_urn(
    size: int,
    probability: float,
    *,
    force_first_true: bool = False,
    rng: np.random.Generator,
) -> list[bool]:
    """Build a window-balanced sequence of congruence flags.

    Parameters
    ----------
    size : int
        Total number of slots. ``0`` yields an empty urn.
    probability : float
        Target proportion of truthful flags per window.
    force_first_true : bool, optional
        Fix slot ``0`` to ``True`` and exclude it from shuffling. The rest of
        the first window is filled around it so the window still carries its
        rounded target count (never fewer than the forced slot).
    rng : numpy.random.Generator
        Random source used for shuffling.

    Returns
    -------
    list[bool]
        Urn contents in draw order (front is index ``0``).

    Raises
    ------
    ValueError
        If ``size`` is negative or ``probability`` is outside ``[0, 1]``.
    """

    if size < 0:
        raise ValueError(f"size must be >= 0, got {size}")
    p = _validate_probability(probability)

    urn: list[bool] = []
    for start in range(0, size, URN_WINDOW_SIZE):
        window_len = min(URN_WINDOW_SIZE, size - start)
        n_true = round_half_up(window_len * p)
        shuffle_start = start
        if start == 0 and force_first_true:
            urn.append(True)
            n_true = max(0, n_true - 1)
            window_len -= 1
            shuffle_start = 1
        urn.extend([True] * n_true)
        urn.extend([False] * (window_len - n_true))
        _shuffle_range(urn, shuffle_start, len(urn), rng)
    return urn


def refill_window(probability: float, *, rng: np.random.Generator) -> list[bool]:
    """Return one freshly shuffled window of :data:`URN_WINDOW_SIZE` flags."""

    return create_feedback_urn(URN_WINDOW_SIZE, probability, rng=rng)


class FeedbackUrn:
    """Exclusive, refillable queue of congruence flags.

    Parameters
    ----------
    values : list[bool]
        Initial contents, front first.
    probability : float
        Proportion used when the urn is refilled after exhaustion.
    rng : numpy.random.Generator
        Random source used for refills.
    label : str, optional
        Name shown in refill warnings.
    """

    def __init__(
        self,
        values: list[bool],
        *,
        probability: float,
        rng: np.random.Generator,
        label: str = "urn",
    ) -> None:
        self._values: deque[bool] = deque(bool(value) for value in values)
        self._probability = _validate_probability(probability)
        self._rng = rng
        self._label = label
        self._n_refills = 0

    def __len__(self) -> int:
        return len(self._values)

    @property
    def n_refills(self) -> int:
        """Number of refills performed so far."""

        return self._n_refills

    def snapshot(self) -> tuple[bool, ...]:
        """Return current contents, front first."""

        return tuple(self._values)

    def draw_back(self) -> bool:
        """Remove and return the last flag (steady-state draw)."""

        self._ensure_not_empty()
        return self._values.pop()

    def draw_front(self) -> bool:
        """Remove and return the first flag (block-start draw)."""

        self._ensure_not_empty()
        return self._values.popleft()

    def _ensure_not_empty(self) -> None:
        if self._values:
            return
        warnings.warn(
            f"{self._label} exhausted; refilling with one balanced window of {URN_WINDOW_SIZE}",
            UrnRefillWarning,
            stacklevel=3,
        )
        self._values.extend(refill_window(self._probability, rng=self._rng))
        self._n_refills += 1


__all__ = [
    "FeedbackUrn",
    "URN_WINDOW_SIZE",
    "create_feedback_urn",
    "refill_window",
    "round_half_up",
]
