"""Tests for urn and den Ouden congruence-flag generators."""

from __future__ import annotations

import warnings

import numpy as np
import pytest

from prl_task.core.exceptions import DeckGenerationWarning, UrnRefillWarning
from prl_task.feedback import (
    URN_WINDOW_SIZE,
    DenOudenDeck,
    FeedbackUrn,
    create_feedback_urn,
    generate_den_ouden_deck,
    max_run_length,
    round_half_up,
)


def test_round_half_up_sends_ties_upward() -> None:
    """Ties should round up rather than to even."""

    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(6.5) == 7
    assert round_half_up(7.4999) == 7


@pytest.mark.parametrize("probability", [0.65, 0.7, 0.75, 0.8])
@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_urn_windows_hold_exact_truthful_counts(probability: float, seed: int) -> None:
    """Every window should carry round_half_up(len * p) truthful flags."""

    urn = create_feedback_urn(35, probability, rng=np.random.default_rng(seed))

    assert len(urn) == 35
    for start in range(0, 35, URN_WINDOW_SIZE):
        window = urn[start : start + URN_WINDOW_SIZE]
        assert sum(window) == round_half_up(len(window) * probability)


@pytest.mark.parametrize("seed", range(6))
def test_forced_first_slot_stays_true_without_changing_window_count(seed: int) -> None:
    """Forcing slot zero should keep the first window at its target count."""

    urn = create_feedback_urn(30, 0.7, force_first_true=True, rng=np.random.default_rng(seed))

    assert urn[0] is True
    assert sum(urn[:10]) == 7
    assert sum(urn[10:20]) == 7


def test_forced_first_slot_with_zero_probability() -> None:
    """A zero target should still leave the forced slot truthful."""

    urn = create_feedback_urn(10, 0.0, force_first_true=True, rng=np.random.default_rng(0))

    assert urn == [True] + [False] * 9


def test_create_feedback_urn_validates_inputs() -> None:
    """Urn construction should reject negative sizes and invalid probabilities."""

    rng = np.random.default_rng(0)
    assert create_feedback_urn(0, 0.7, rng=rng) == []
    with pytest.raises(ValueError, match="size must be >= 0"):
        create_feedback_urn(-1, 0.7, rng=rng)
    with pytest.raises(ValueError, match="probability must be in"):
        create_feedback_urn(10, 1.5, rng=rng)


def test_feedback_urn_draws_from_both_ends() -> None:
    """Steady-state draws pop the back; block-start draws pop the front."""

    urn = FeedbackUrn([True, False, False], probability=0.7, rng=np.random.default_rng(0))

    assert urn.draw_front() is True
    assert urn.draw_back() is False
    assert urn.snapshot() == (False,)
    assert len(urn) == 1


def test_feedback_urn_refills_with_warning_when_exhausted() -> None:
    """An exhausted urn should warn and refill with one balanced window."""

    urn = FeedbackUrn([], probability=0.7, rng=np.random.default_rng(4), label="learning/correct urn")

    with pytest.warns(UrnRefillWarning, match="learning/correct urn exhausted"):
        urn.draw_back()

    assert urn.n_refills == 1
    assert len(urn) == URN_WINDOW_SIZE - 1


def test_max_run_length_counts_longest_identical_run() -> None:
    """Run length helper should find the longest run of either value."""

    assert max_run_length([]) == 0
    assert max_run_length([True]) == 1
    assert max_run_length([True, True, False, False, False, True]) == 3


@pytest.mark.parametrize("seed", range(5))
def test_den_ouden_deck_has_exact_count_and_bounded_runs(seed: int) -> None:
    """Generated decks should hit the rounded count with runs of at most three."""

    with warnings.catch_warnings():
        warnings.simplefilter("error", DeckGenerationWarning)
        deck = generate_den_ouden_deck(30, 0.7, rng=np.random.default_rng(seed))

    assert len(deck) == 30
    assert sum(deck) == 21
    assert max_run_length(deck) <= 3


def test_den_ouden_deck_falls_back_when_constraint_is_infeasible() -> None:
    """An infeasible run constraint should warn and return the last candidate."""

    # 24 truthful flags cannot be split into runs of three by 6 others.
    with pytest.warns(DeckGenerationWarning, match="using last candidate"):
        deck = generate_den_ouden_deck(30, 0.8, rng=np.random.default_rng(0), max_attempts=50)

    assert len(deck) == 30
    assert sum(deck) == 24


def test_den_ouden_deck_validates_inputs() -> None:
    """Deck generation should reject invalid sizes and budgets."""

    rng = np.random.default_rng(0)
    with pytest.raises(ValueError, match="n_trials must be >= 0"):
        generate_den_ouden_deck(-1, 0.7, rng=rng)
    with pytest.raises(ValueError, match="max_attempts must be > 0"):
        generate_den_ouden_deck(10, 0.7, rng=rng, max_attempts=0)


def test_den_ouden_deck_cycles_and_handles_empty() -> None:
    """Deck draws should wrap around; an empty deck yields nothing."""

    deck = DenOudenDeck([True, False])
    assert [deck.draw() for _ in range(5)] == [True, False, True, False, True]
    assert deck.position == 5

    assert DenOudenDeck([]).draw() is None
