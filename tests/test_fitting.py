"""Tests for grid-search estimation and session-level model fitting."""

from __future__ import annotations

import numpy as np
import pytest

from prl_task.inference import (
    ALPHA_GRID,
    BETA_GRID,
    EncodedTrials,
    GridSearchEstimator,
    QLearningAgent,
    QLearningAgentConfig,
    SessionFits,
    encode_trials,
    fit_all_models,
    fit_model,
    get_model_spec,
    simulate_session,
)
from prl_task.task import SessionConfig, TrialStateMachine


def _simulated_trials(*, alpha: float = 0.3, beta: float = 5.0, n_trials: int = 200, seed: int = 7):
    """Simulate one session from a known single-rate Q-learning process."""

    agent = QLearningAgent(QLearningAgentConfig(alpha=alpha, beta=beta))
    return simulate_session(SessionConfig(max_trials=n_trials), agent, np.random.default_rng(seed))


def test_grid_search_best_is_surface_minimum() -> None:
    """The selected candidate should carry the smallest NLL on the grid."""

    data = encode_trials(_simulated_trials())
    spec = get_model_spec("q_learning")

    result = GridSearchEstimator(spec).fit(data)

    assert result.n_candidates == len(ALPHA_GRID) * len(BETA_GRID)
    assert result.best.nll == pytest.approx(float(np.min(result.candidate_nll)))
    assert result.best.params["alpha"] in ALPHA_GRID
    assert result.best.params["beta"] in BETA_GRID


def test_round_trip_fit_is_no_worse_than_generating_parameters() -> None:
    """Refitting simulated data should match or beat the generating NLL."""

    data = encode_trials(_simulated_trials())
    spec = get_model_spec("q_learning")

    fitted = fit_model(spec, data)
    true_nll = float(spec.nll(data, {"alpha": 0.3, "beta": 5.0}))

    # alpha=0.3 falls between grid points, so allow the grid spacing some slack.
    assert fitted.nll <= true_nll + 1.0

    on_grid = GridSearchEstimator(spec, {"alpha": [0.1, 0.3, 0.5], "beta": [1.0, 5.0, 10.0]}).fit(data)
    assert on_grid.best.nll <= true_nll + 1e-9


def test_ties_resolve_to_first_grid_point() -> None:
    """With no data every candidate ties and the first one wins."""

    empty = EncodedTrials(choices=np.array([], dtype=int), rewarded=np.array([], dtype=bool))

    result = GridSearchEstimator(get_model_spec("q_learning")).fit(empty)

    assert result.best.nll == 0.0
    assert result.best.params == {"alpha": ALPHA_GRID[0], "beta": BETA_GRID[0]}
    assert result.candidate(1).params == {"alpha": ALPHA_GRID[0], "beta": BETA_GRID[1]}


def test_estimator_validates_grid_override() -> None:
    """Grid overrides must name exactly the model parameters."""

    spec = get_model_spec("q_learning")
    with pytest.raises(ValueError, match="unknown parameters"):
        GridSearchEstimator(spec, {"alpha": [0.5], "beta": [1.0], "tau": [0.0]})
    with pytest.raises(ValueError, match="missing parameters"):
        GridSearchEstimator(spec, {"alpha": [0.5]})
    with pytest.raises(ValueError, match="has no candidate values"):
        GridSearchEstimator(spec, {"alpha": [], "beta": [1.0]}).fit(
            EncodedTrials(choices=np.array([0]), rewarded=np.array([True]))
        )


def test_encode_trials_drops_omissions() -> None:
    """Only responded trials should enter the likelihood."""

    machine = TrialStateMachine(SessionConfig(max_trials=4), rng=np.random.default_rng(0))
    machine.process_choice("A", 300)
    machine.handle_omission()
    machine.process_choice("B", 300)

    data = encode_trials(machine.trials)

    assert data.n_trials == 2
    assert data.choices.tolist() == [0, 1]


def test_fit_all_models_returns_every_model_with_criteria() -> None:
    """Fitting a session should return one fit per registered model."""

    trials = _simulated_trials(n_trials=60, seed=3)

    fits = fit_all_models(trials)

    assert isinstance(fits, SessionFits)
    assert len(fits) == 8
    assert fits.n_observations == 60
    for fit in fits:
        assert np.isfinite(fit.nll)
        assert fit.aic == pytest.approx(2 * fit.n_parameters + 2 * fit.nll)
        assert fit.bic is not None
    assert sum(fits.weights("aic").values()) == pytest.approx(1.0)
    assert fits.best_model("nll").nll == pytest.approx(min(fit.nll for fit in fits))


def test_fit_all_models_is_identical_in_parallel() -> None:
    """Process-pool fitting should reproduce the serial result."""

    trials = _simulated_trials(n_trials=40, seed=11)
    names = ("q_learning", "ewa")

    serial = fit_all_models(trials, model_names=names)
    parallel = fit_all_models(trials, model_names=names, max_workers=2)

    for name in names:
        assert parallel[name].params == serial[name].params
        assert parallel[name].nll == pytest.approx(serial[name].nll)


def test_session_fits_criteria_validation() -> None:
    """Unknown criteria and BIC without observations should raise."""

    empty = EncodedTrials(choices=np.array([], dtype=int), rewarded=np.array([], dtype=bool))
    fits = fit_all_models(empty, model_names=("q_learning",))

    assert fits["q_learning"].bic is None
    with pytest.raises(ValueError, match="bic requires at least one"):
        fits.best_model("bic")
    with pytest.raises(ValueError, match="criterion must be one of"):
        fits.best_model("waic")
    with pytest.raises(ValueError, match="unknown model"):
        fit_all_models(empty, model_names=("q_learning", "kalman"))
