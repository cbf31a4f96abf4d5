"""Feedback strategies and the provider that applies them.

Two randomization strategies share one contract: given whether the choice
was objectively correct and the current phase, draw a *congruence* flag from
the matching source. The provider then turns that flag into shown feedback.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Protocol

import numpy as np

from prl_task.core.exceptions import FeedbackFallbackWarning
from prl_task.feedback.den_ouden import DenOudenDeck, generate_den_ouden_deck
from prl_task.feedback.urn import FeedbackUrn, create_feedback_urn

if TYPE_CHECKING:
    from prl_task.task.config import SessionConfig


class FeedbackSchedule(Protocol):
    """Randomization strategy owning the four phase x correctness sources."""

    def draw_congruence(
        self,
        was_correct: bool,
        *,
        reversal_phase: bool,
        block_start: bool,
    ) -> bool | None:
        """Return a congruence flag, or ``None`` when nothing can be drawn."""


def apply_congruence(was_correct: bool, congruent: bool) -> bool:
    """Return shown feedback: truthful when ``congruent``, inverted otherwise."""

    return bool(was_correct) if congruent else not bool(was_correct)


class UrnFeedbackSchedule:
    """Balanced-urn strategy.

    Steady-state draws come from the back of the selected urn. The first draw
    of a new reversal block comes from the front, which realizes the forced
    truthful slot of the reversal-correct urn.
    """

    def __init__(
        self,
        *,
        learning_correct: FeedbackUrn | None,
        learning_incorrect: FeedbackUrn | None,
        reversal_correct: FeedbackUrn | None,
        reversal_incorrect: FeedbackUrn | None,
    ) -> None:
        self._urns = {
            (False, True): learning_correct,
            (False, False): learning_incorrect,
            (True, True): reversal_correct,
            (True, False): reversal_incorrect,
        }

    def urn_for(self, *, reversal_phase: bool, was_correct: bool) -> FeedbackUrn | None:
        return self._urns[(bool(reversal_phase), bool(was_correct))]

    def draw_congruence(
        self,
        was_correct: bool,
        *,
        reversal_phase: bool,
        block_start: bool,
    ) -> bool | None:
        urn = self.urn_for(reversal_phase=reversal_phase, was_correct=was_correct)
        if urn is None:
            return None
        return urn.draw_front() if block_start else urn.draw_back()


class DenOudenFeedbackSchedule:
    """Den Ouden deck strategy; ``block_start`` has no effect on decks."""

    def __init__(
        self,
        *,
        learning_correct: DenOudenDeck | None,
        learning_incorrect: DenOudenDeck | None,
        reversal_correct: DenOudenDeck | None,
        reversal_incorrect: DenOudenDeck | None,
    ) -> None:
        self._decks = {
            (False, True): learning_correct,
            (False, False): learning_incorrect,
            (True, True): reversal_correct,
            (True, False): reversal_incorrect,
        }

    def deck_for(self, *, reversal_phase: bool, was_correct: bool) -> DenOudenDeck | None:
        return self._decks[(bool(reversal_phase), bool(was_correct))]

    def draw_congruence(
        self,
        was_correct: bool,
        *,
        reversal_phase: bool,
        block_start: bool,
    ) -> bool | None:
        deck = self.deck_for(reversal_phase=reversal_phase, was_correct=was_correct)
        if deck is None:
            return None
        return deck.draw()


class FeedbackProvider:
    """Turn objective correctness into shown feedback.

    Parameters
    ----------
    schedule : FeedbackSchedule
        Strategy selected once at session configuration.
    """

    def __init__(self, schedule: FeedbackSchedule) -> None:
        self._schedule = schedule

    @property
    def schedule(self) -> FeedbackSchedule:
        return self._schedule

    def get_feedback(
        self,
        was_correct: bool,
        *,
        reversal_phase: bool = False,
        block_start: bool = False,
    ) -> bool:
        """Return the feedback to display for one responded trial.

        Parameters
        ----------
        was_correct : bool
            Objective correctness of the choice.
        reversal_phase : bool, optional
            Whether the session is past its first reversal.
        block_start : bool, optional
            Whether this is the reversal-triggering trial of a new block.

        Returns
        -------
        bool
            Shown feedback. Falls back to ``was_correct`` with a
            :class:`~prl_task.core.exceptions.FeedbackFallbackWarning` when
            the selected source has nothing to draw.
        """

        congruent = self._schedule.draw_congruence(
            bool(was_correct),
            reversal_phase=bool(reversal_phase),
            block_start=bool(block_start),
        )
        if congruent is None:
            warnings.warn(
                "no feedback source available; showing truthful feedback",
                FeedbackFallbackWarning,
                stacklevel=2,
            )
            return bool(was_correct)
        return apply_congruence(was_correct, congruent)


def create_feedback_provider(config: SessionConfig, rng: np.random.Generator) -> FeedbackProvider:
    """Build the provider selected by ``config.randomization_method``.

    Parameters
    ----------
    config : SessionConfig
        Validated session configuration.
    rng : numpy.random.Generator
        Random source shared by all four sources.

    Returns
    -------
    FeedbackProvider
        Provider with freshly generated urns or decks.

    Notes
    -----
    Learning sources are sized at the planned learning trials and reversal
    sources at the planned reversal trials. In criterion mode both equal
    ``max_trials`` because a reversal may happen at any point.
    """

    p = float(config.feedback_probability)
    n_learning = int(config.planned_learning_trials)
    n_reversal = int(config.planned_reversal_trials)

    if config.randomization_method == "den_ouden":
        schedule: FeedbackSchedule = DenOudenFeedbackSchedule(
            learning_correct=DenOudenDeck(generate_den_ouden_deck(n_learning, p, rng=rng)),
            learning_incorrect=DenOudenDeck(generate_den_ouden_deck(n_learning, p, rng=rng)),
            reversal_correct=DenOudenDeck(generate_den_ouden_deck(n_reversal, p, rng=rng)),
            reversal_incorrect=DenOudenDeck(generate_den_ouden_deck(n_reversal, p, rng=rng)),
        )
        return FeedbackProvider(schedule)

    if config.randomization_method != "urn":
        raise ValueError(f"unknown randomization_method {config.randomization_method!r}")

    def make_urn(size: int, label: str, *, force_first_true: bool = False) -> FeedbackUrn:
        values = create_feedback_urn(size, p, force_first_true=force_first_true, rng=rng)
        return FeedbackUrn(values, probability=p, rng=rng, label=label)

    schedule = UrnFeedbackSchedule(
        learning_correct=make_urn(n_learning, "learning/correct urn"),
        learning_incorrect=make_urn(n_learning, "learning/incorrect urn"),
        reversal_correct=make_urn(n_reversal, "reversal/correct urn", force_first_true=True),
        reversal_incorrect=make_urn(n_reversal, "reversal/incorrect urn"),
    )
    return FeedbackProvider(schedule)


__all__ = [
    "DenOudenFeedbackSchedule",
    "FeedbackProvider",
    "FeedbackSchedule",
    "UrnFeedbackSchedule",
    "apply_congruence",
    "create_feedback_provider",
]
