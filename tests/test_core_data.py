"""Tests for options, outcomes and trial records."""

from __future__ import annotations

import pytest

from prl_task.core.data import Option, Outcome, TrialRecord, valid_trials


def test_option_parse_accepts_labels_and_codes() -> None:
    """Options should parse from labels, export codes and themselves."""

    assert Option.parse("a") is Option.A
    assert Option.parse(2) is Option.B
    assert Option.parse(Option.B) is Option.B
    assert Option.A.other() is Option.B
    assert (Option.A.code, Option.B.code) == (1, 2)
    assert (Option.A.index, Option.B.index) == (0, 1)
    with pytest.raises(ValueError, match="cannot interpret"):
        Option.parse("left")


def test_outcome_exposes_both_encodings() -> None:
    """Outcome should convert to 0/1 and -1/+1 codings."""

    assert Outcome(True).as_zero_one() == 1.0
    assert Outcome(False).as_zero_one() == 0.0
    assert Outcome(True).as_plus_minus_one() == 1.0
    assert Outcome(False).as_plus_minus_one() == -1.0


def test_trial_record_derived_fields() -> None:
    """Derived codes should follow shown feedback, not correctness."""

    record = TrialRecord(
        trial_index=3,
        choice=Option.B,
        correct_option=Option.B,
        feedback_shown=False,
        actually_correct=True,
        misleading=True,
        reaction_time_ms=512,
        is_omission=False,
        reversal_block=0,
        is_reversal_trial=False,
        is_reversal_phase=False,
    )
    omission = TrialRecord(
        trial_index=4,
        choice=None,
        correct_option=Option.B,
        feedback_shown=None,
        actually_correct=None,
        misleading=False,
        reaction_time_ms=6000,
        is_omission=True,
        reversal_block=0,
        is_reversal_trial=False,
        is_reversal_phase=False,
    )

    assert record.choice_code == 2
    assert record.reward == 0
    assert record.signed_outcome == -1
    assert omission.outcome is None
    assert omission.choice_code is None
    assert valid_trials([record, omission]) == (record,)
