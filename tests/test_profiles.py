"""Tests for parameter buckets, named profiles and model comparisons."""

from __future__ import annotations

import pytest

from prl_task.analysis import (
    THRESHOLDS,
    bucket,
    classify_ab_profile,
    classify_ewa_profile,
    compare_models,
    parameter_level,
    qualitative_profile,
)
from prl_task.inference import ModelFit, SessionFits


@pytest.mark.parametrize(
    ("kind", "below", "between", "at_high"),
    [
        ("alpha", 0.29, 0.30, 0.90),
        ("beta", 2.59, 2.60, 7.35),
        ("tau", 0.49, 0.5, 2.0),
        ("phi", 0.09, 0.10, 0.60),
        ("rho_ewa", 0.27, 0.28, 0.88),
        ("rho_sensitivity", 0.29, 0.30, 0.85),
        ("learning_sensitivity", 0.19, 0.20, 0.75),
    ],
)
def test_parameter_levels_follow_fixed_thresholds(kind: str, below: float, between: float, at_high: float) -> None:
    """Each bucket should be low below its low cut and high from its high cut."""

    assert parameter_level(kind, below) == "low"
    assert parameter_level(kind, between) == "medium"
    assert parameter_level(kind, at_high) == "high"
    assert THRESHOLDS[kind].low == pytest.approx(between)


def test_bucket_boundaries_are_inclusive_upward() -> None:
    """Values equal to a cut belong to the upper bucket."""

    assert bucket(1.0, 1.0, 2.0) == "medium"
    assert bucket(2.0, 1.0, 2.0) == "high"
    assert bucket(0.999, 1.0, 2.0) == "low"


def test_parameter_level_rejects_unknown_kind() -> None:
    """Unknown threshold kinds should raise."""

    with pytest.raises(ValueError, match="unknown threshold kind"):
        parameter_level("gamma", 0.5)


def test_ab_profiles_cross_alpha_and_beta_levels() -> None:
    """Nine profiles should cover the alpha x beta grid."""

    assert classify_ab_profile(0.95, 10.0) == "FLEXIBLE-ADAPTIVE"
    assert classify_ab_profile(0.5, 5.0) == "INTERMEDIATE-TYPICAL"
    assert classify_ab_profile(0.1, 10.0) == "PERSEVERANT/RIGID"
    assert classify_ab_profile(0.1, 1.0) == "DISORGANIZED/CHAOTIC"


def test_ewa_profiles_split_at_high_cut() -> None:
    """EWA profiles should combine three binary splits."""

    assert classify_ewa_profile(0.9, 0.9, 10.0) == "Stable-Exploiter"
    assert classify_ewa_profile(0.05, 0.5, 1.0) == "Volatile-Exploratory"
    assert classify_ewa_profile(0.7, 0.3, 8.0) == "Historical-Exploiter"


def _fit(name: str, nll: float, **params: float) -> ModelFit:
    """Build one synthetic model fit."""

    return ModelFit(model_name=name, params=params, nll=nll, n_observations=60, n_parameters=len(params))


def _fits(*, q_nll: float = 30.0, dual_nll: float = 30.0, alpha_pos: float = 0.5, alpha_neg: float = 0.5) -> SessionFits:
    """Build the five fits a qualitative profile needs."""

    fits = (
        _fit("q_learning", q_nll, alpha=0.5, beta=5.0),
        _fit("q_learning_dual", dual_nll, alpha_pos=alpha_pos, alpha_neg=alpha_neg, beta=5.0),
        _fit("q_learning_stickiness", 29.0, alpha=0.5, beta=5.0, tau=3.0),
        _fit("reinforcement_sensitivity", 40.0, alpha=0.5, rho=0.2),
        _fit("ewa", 45.0, phi=0.3, rho=0.5, beta=3.0),
    )
    return SessionFits(fits={fit.model_name: fit for fit in fits}, n_observations=60)


def test_qualitative_profile_reads_levels_and_flags() -> None:
    """Profile should bucket each parameter and flag extreme values."""

    profile = qualitative_profile(_fits())

    assert profile.ab_profile == "INTERMEDIATE-TYPICAL"
    assert profile.alpha_level == "medium"
    assert profile.tau_level == "high"
    assert profile.elevated_stickiness
    assert profile.reduced_sensitivity
    assert profile.learning_sensitivity_level == "low"
    assert profile.valence_asymmetry is None


def test_qualitative_profile_detects_valence_asymmetry() -> None:
    """A clearly better dual-rate fit should report the dominant valence."""

    profile = qualitative_profile(_fits(q_nll=40.0, dual_nll=30.0, alpha_pos=0.8, alpha_neg=0.3))

    assert profile.valence_asymmetry == "positive"


def test_compare_models_applies_margin() -> None:
    """Differences within the margin should yield a neutral statement."""

    comparisons = {(item.first, item.second): item for item in compare_models(_fits())}

    q_vs_ewa = comparisons[("q_learning", "ewa")]
    assert q_vs_ewa.preferred == "q_learning"
    assert q_vs_ewa.nll_difference == pytest.approx(-15.0)

    q_vs_dual = comparisons[("q_learning", "q_learning_dual")]
    assert q_vs_dual.preferred is None
    assert q_vs_dual.statement.startswith("AB ~ ABdual")


def test_qualitative_profile_requires_core_models() -> None:
    """Missing fits should be reported by name."""

    fits = SessionFits(fits={"q_learning": _fit("q_learning", 10.0, alpha=0.5, beta=5.0)}, n_observations=60)

    with pytest.raises(ValueError, match="requires fits for"):
        qualitative_profile(fits)
