"""Grid-search maximum-likelihood fitting of reinforcement-learning models."""

from .fitting import ModelFit, SessionFits, fit_all_models, fit_model, model_nll
from .grids import (
    ALPHA_GRID,
    BETA_GRID,
    DUAL_SENSITIVITY_RHO_GRID,
    EWA_RHO_GRID,
    PHI_GRID,
    SENSITIVITY_RHO_GRID,
    TAU_GRID,
    grid_linspace,
)
from .likelihood import EncodedTrials, encode_sequences, encode_trials
from .mle import GridCandidate, GridSearchEstimator, GridSearchResult
from .models import MODEL_SPECS, ModelSpec, get_model_spec
from .recovery import ParameterRecoveryCase, ParameterRecoveryResult, run_parameter_recovery
from .simulation import QLearningAgent, QLearningAgentConfig, simulate_session

__all__ = [
    "ALPHA_GRID",
    "BETA_GRID",
    "DUAL_SENSITIVITY_RHO_GRID",
    "EWA_RHO_GRID",
    "EncodedTrials",
    "GridCandidate",
    "GridSearchEstimator",
    "GridSearchResult",
    "MODEL_SPECS",
    "ModelFit",
    "ModelSpec",
    "PHI_GRID",
    "ParameterRecoveryCase",
    "ParameterRecoveryResult",
    "QLearningAgent",
    "QLearningAgentConfig",
    "SENSITIVITY_RHO_GRID",
    "SessionFits",
    "TAU_GRID",
    "encode_sequences",
    "encode_trials",
    "fit_all_models",
    "fit_model",
    "get_model_spec",
    "grid_linspace",
    "model_nll",
    "run_parameter_recovery",
    "simulate_session",
]
