"""Tests for feedback strategies and the feedback provider."""

from __future__ import annotations

import numpy as np
import pytest

from prl_task.core.exceptions import FeedbackFallbackWarning
from prl_task.feedback import (
    DenOudenDeck,
    DenOudenFeedbackSchedule,
    FeedbackProvider,
    FeedbackUrn,
    UrnFeedbackSchedule,
    apply_congruence,
    create_feedback_provider,
)
from prl_task.task.config import SessionConfig


class FixedSchedule:
    """Schedule returning one congruence value and recording calls."""

    def __init__(self, congruent: bool | None) -> None:
        self.congruent = congruent
        self.calls: list[tuple[bool, bool, bool]] = []

    def draw_congruence(self, was_correct: bool, *, reversal_phase: bool, block_start: bool) -> bool | None:
        self.calls.append((was_correct, reversal_phase, block_start))
        return self.congruent


@pytest.mark.parametrize("was_correct", [True, False])
@pytest.mark.parametrize("congruent", [True, False])
def test_get_feedback_applies_congruence(was_correct: bool, congruent: bool) -> None:
    """Shown feedback should be truthful when congruent and inverted otherwise."""

    schedule = FixedSchedule(congruent)
    provider = FeedbackProvider(schedule)

    shown = provider.get_feedback(was_correct, reversal_phase=True, block_start=False)

    expected = was_correct if congruent else not was_correct
    assert shown is expected
    assert apply_congruence(was_correct, congruent) is expected
    assert schedule.calls == [(was_correct, True, False)]


def test_get_feedback_falls_back_to_truthful_feedback() -> None:
    """A missing source should warn and show truthful feedback."""

    provider = FeedbackProvider(FixedSchedule(None))

    with pytest.warns(FeedbackFallbackWarning, match="showing truthful feedback"):
        assert provider.get_feedback(False) is False


def test_urn_schedule_selects_source_and_draw_end() -> None:
    """Urn strategy should pick the phase/correctness urn and honor block starts."""

    rng = np.random.default_rng(0)
    reversal_correct = FeedbackUrn([True, False, False], probability=0.7, rng=rng)
    learning_incorrect = FeedbackUrn([False, True], probability=0.7, rng=rng)
    schedule = UrnFeedbackSchedule(
        learning_correct=None,
        learning_incorrect=learning_incorrect,
        reversal_correct=reversal_correct,
        reversal_incorrect=None,
    )
    provider = FeedbackProvider(schedule)

    assert provider.get_feedback(True, reversal_phase=True, block_start=True) is True
    assert provider.get_feedback(True, reversal_phase=True) is False
    assert provider.get_feedback(False, reversal_phase=False) is False
    assert reversal_correct.snapshot() == (False,)
    assert learning_incorrect.snapshot() == (False,)

    with pytest.warns(FeedbackFallbackWarning):
        assert provider.get_feedback(True, reversal_phase=False) is True


def test_den_ouden_schedule_ignores_block_start() -> None:
    """Deck strategy should draw sequentially regardless of block starts."""

    deck = DenOudenDeck([False, True])
    schedule = DenOudenFeedbackSchedule(
        learning_correct=deck,
        learning_incorrect=None,
        reversal_correct=None,
        reversal_incorrect=None,
    )
    provider = FeedbackProvider(schedule)

    assert provider.get_feedback(True, block_start=True) is False
    assert provider.get_feedback(True, block_start=True) is True
    assert deck.position == 2


def test_create_feedback_provider_sizes_urns_by_phase() -> None:
    """Urn provider should size sources per phase and force the reversal slot."""

    config = SessionConfig(max_trials=60, feedback_probability=0.7)
    provider = create_feedback_provider(config, np.random.default_rng(3))
    schedule = provider.schedule

    assert isinstance(schedule, UrnFeedbackSchedule)
    for reversal_phase in (False, True):
        for was_correct in (False, True):
            urn = schedule.urn_for(reversal_phase=reversal_phase, was_correct=was_correct)
            assert len(urn) == 30
            assert sum(urn.snapshot()) == 21
    assert schedule.urn_for(reversal_phase=True, was_correct=True).snapshot()[0] is True


def test_create_feedback_provider_builds_criterion_decks() -> None:
    """Den Ouden provider in criterion mode should size every deck at max_trials."""

    config = SessionConfig(max_trials=20, reversal_mode="criterion", randomization_method="den_ouden")
    provider = create_feedback_provider(config, np.random.default_rng(5))
    schedule = provider.schedule

    assert isinstance(schedule, DenOudenFeedbackSchedule)
    for reversal_phase in (False, True):
        for was_correct in (False, True):
            deck = schedule.deck_for(reversal_phase=reversal_phase, was_correct=was_correct)
            assert len(deck) == 20
            assert sum(deck.values) == 14
