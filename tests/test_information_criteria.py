"""Tests for information-criterion utilities."""

from __future__ import annotations

import numpy as np
import pytest

from prl_task.analysis.information_criteria import aic, akaike_weights, bic


def test_aic_and_bic_match_closed_form() -> None:
    """AIC/BIC helpers should match direct formulas."""

    log_likelihood = -12.5
    n_parameters = 3
    n_observations = 40

    assert aic(log_likelihood=log_likelihood, n_parameters=n_parameters) == pytest.approx(31.0)
    expected_bic = np.log(float(n_observations)) * n_parameters - 2.0 * log_likelihood
    assert bic(
        log_likelihood=log_likelihood,
        n_parameters=n_parameters,
        n_observations=n_observations,
    ) == pytest.approx(expected_bic)


def test_bic_rejects_non_positive_observations() -> None:
    """BIC should reject invalid observation count."""

    with pytest.raises(ValueError, match="n_observations must be > 0"):
        bic(log_likelihood=-1.0, n_parameters=1, n_observations=0)


def test_akaike_weights_normalize_and_order() -> None:
    """Weights should sum to one and favour lower criterion values."""

    weights = akaike_weights({"a": 100.0, "b": 102.0, "c": 110.0})

    assert sum(weights.values()) == pytest.approx(1.0)
    assert weights["a"] > weights["b"] > weights["c"]
    assert weights["b"] / weights["a"] == pytest.approx(np.exp(-1.0))


def test_akaike_weights_handle_large_differences() -> None:
    """Very poor models should get negligible but finite weight."""

    weights = akaike_weights({"good": 10.0, "bad": 5000.0})

    assert weights["good"] == pytest.approx(1.0)
    assert weights["bad"] >= 0.0


def test_akaike_weights_reject_empty_mapping() -> None:
    """Weights need at least one model."""

    with pytest.raises(ValueError, match="must not be empty"):
        akaike_weights({})
