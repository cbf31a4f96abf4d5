"""Registry of the reinforcement-learning models fit to each session.

Model Contract
--------------
Decision Rule
    ``P(c) = softmax(beta * Q + tau * I[c == previous choice])`` over the two
    options, evaluated with log-sum-exp. Sensitivity models fix ``beta = 1``.
Update Rule
    Delta-rule models update only the chosen option:
    ``Q[c] <- Q[c] + alpha * (r - Q[c])`` where ``alpha`` may depend on the
    sign of the shown feedback (dual rates) or be scaled by a sensitivity
    ``rho``. EWA uses experience-weighted attractions instead.
Encodings
    Models initialized at ``Q0 = 0.5`` learn from ``{0, 1}`` rewards; models
    initialized at ``Q0 = 0`` learn from ``{-1, +1}`` rewards.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

import numpy as np

from prl_task.inference.grids import (
    ALPHA_GRID,
    BETA_GRID,
    DUAL_SENSITIVITY_RHO_GRID,
    EWA_RHO_GRID,
    PHI_GRID,
    SENSITIVITY_RHO_GRID,
    TAU_GRID,
)
from prl_task.inference.likelihood import REWARD_ENCODINGS, EncodedTrials, delta_rule_nll, ewa_nll

BETA_BOUNDS = (1e-6, 20.0)
TAU_BOUNDS = (0.0, 10.0)
UNIT_BOUNDS = (0.0, 1.0)

NLLFunction = Callable[[EncodedTrials, Mapping[str, np.ndarray]], np.ndarray]


@dataclass(frozen=True, slots=True)
class ModelSpec:
    """Declarative description of one fitted model.

    Parameters
    ----------
    name : str
        Stable model identifier.
    label : str
        Short display label.
    parameter_names : tuple[str, ...]
        Free parameters in grid nesting order (outermost first).
    grid : Mapping[str, tuple[float, ...]]
        Candidate values per parameter.
    reward_encoding : str
        ``"zero_one"`` or ``"plus_minus_one"``.
    initial_value : float
        Initial option value ``Q0``.
    nll_function : NLLFunction
        Vectorised likelihood taking encoded trials and parameter arrays.
    """

    name: str
    label: str
    parameter_names: tuple[str, ...]
    grid: Mapping[str, tuple[float, ...]]
    reward_encoding: str
    initial_value: float
    nll_function: NLLFunction

    def __post_init__(self) -> None:
        if self.reward_encoding not in REWARD_ENCODINGS:
            raise ValueError(f"reward_encoding must be one of {list(REWARD_ENCODINGS)}")
        if set(self.grid) != set(self.parameter_names):
            raise ValueError(f"grid keys must match parameter_names for model {self.name!r}")

    @property
    def n_parameters(self) -> int:
        return len(self.parameter_names)

    @property
    def n_candidates(self) -> int:
        return int(np.prod([len(self.grid[name]) for name in self.parameter_names]))

    def nll(self, data: EncodedTrials, params: Mapping[str, np.ndarray | float]) -> np.ndarray:
        """Evaluate NLL for broadcastable parameter arrays."""

        missing = sorted(set(self.parameter_names) - set(params))
        if missing:
            raise ValueError(f"model {self.name!r} is missing parameters: {missing}")
        arrays = {name: np.asarray(params[name], dtype=float) for name in self.parameter_names}
        return self.nll_function(data, arrays)


def _clip(values: np.ndarray, bounds: tuple[float, float]) -> np.ndarray:
    return np.clip(values, bounds[0], bounds[1])


def _q_learning_nll(encoding: str, initial_value: float) -> NLLFunction:
    def nll(data: EncodedTrials, params: Mapping[str, np.ndarray]) -> np.ndarray:
        alpha = _clip(params["alpha"], UNIT_BOUNDS)
        return delta_rule_nll(
            data.choices,
            data.rewards(encoding),
            data.rewarded,
            alpha_win=alpha,
            alpha_loss=alpha,
            beta=_clip(params["beta"], BETA_BOUNDS),
            initial_value=initial_value,
        )

    return nll


def _dual_q_learning_nll(encoding: str, initial_value: float) -> NLLFunction:
    def nll(data: EncodedTrials, params: Mapping[str, np.ndarray]) -> np.ndarray:
        return delta_rule_nll(
            data.choices,
            data.rewards(encoding),
            data.rewarded,
            alpha_win=_clip(params["alpha_pos"], UNIT_BOUNDS),
            alpha_loss=_clip(params["alpha_neg"], UNIT_BOUNDS),
            beta=_clip(params["beta"], BETA_BOUNDS),
            initial_value=initial_value,
        )

    return nll


def _stickiness_nll(data: EncodedTrials, params: Mapping[str, np.ndarray]) -> np.ndarray:
    alpha = _clip(params["alpha"], UNIT_BOUNDS)
    return delta_rule_nll(
        data.choices,
        data.rewards("zero_one"),
        data.rewarded,
        alpha_win=alpha,
        alpha_loss=alpha,
        beta=_clip(params["beta"], BETA_BOUNDS),
        tau=_clip(params["tau"], TAU_BOUNDS),
        initial_value=0.5,
    )


def _sensitivity_nll(data: EncodedTrials, params: Mapping[str, np.ndarray]) -> np.ndarray:
    learning_sensitivity = _clip(params["alpha"], UNIT_BOUNDS) * _clip(params["rho"], UNIT_BOUNDS)
    return delta_rule_nll(
        data.choices,
        data.rewards("zero_one"),
        data.rewarded,
        alpha_win=learning_sensitivity,
        alpha_loss=learning_sensitivity,
        beta=1.0,
        initial_value=0.5,
    )


def _dual_sensitivity_nll(data: EncodedTrials, params: Mapping[str, np.ndarray]) -> np.ndarray:
    alpha = _clip(params["alpha"], UNIT_BOUNDS)
    return delta_rule_nll(
        data.choices,
        data.rewards("plus_minus_one"),
        data.rewarded,
        alpha_win=alpha * _clip(params["rho_win"], UNIT_BOUNDS),
        alpha_loss=alpha * _clip(params["rho_loss"], UNIT_BOUNDS),
        beta=1.0,
        initial_value=0.0,
    )


def _ewa_nll(data: EncodedTrials, params: Mapping[str, np.ndarray]) -> np.ndarray:
    return ewa_nll(
        data.choices,
        data.rewards("plus_minus_one"),
        phi=_clip(params["phi"], UNIT_BOUNDS),
        rho=_clip(params["rho"], UNIT_BOUNDS),
        beta=_clip(params["beta"], BETA_BOUNDS),
    )


MODEL_SPECS: dict[str, ModelSpec] = {
    spec.name: spec
    for spec in (
        ModelSpec(
            name="q_learning",
            label="Q-learning (alpha, beta)",
            parameter_names=("alpha", "beta"),
            grid={"alpha": ALPHA_GRID, "beta": BETA_GRID},
            reward_encoding="zero_one",
            initial_value=0.5,
            nll_function=_q_learning_nll("zero_one", 0.5),
        ),
        ModelSpec(
            name="q_learning_fictitious",
            label="Q-learning, fictitious coding",
            parameter_names=("alpha", "beta"),
            grid={"alpha": ALPHA_GRID, "beta": BETA_GRID},
            reward_encoding="plus_minus_one",
            initial_value=0.0,
            nll_function=_q_learning_nll("plus_minus_one", 0.0),
        ),
        ModelSpec(
            name="q_learning_dual",
            label="Dual-rate Q-learning",
            parameter_names=("alpha_pos", "alpha_neg", "beta"),
            grid={"alpha_pos": ALPHA_GRID, "alpha_neg": ALPHA_GRID, "beta": BETA_GRID},
            reward_encoding="zero_one",
            initial_value=0.5,
            nll_function=_dual_q_learning_nll("zero_one", 0.5),
        ),
        ModelSpec(
            name="q_learning_dual_fictitious",
            label="Dual-rate Q-learning, fictitious coding",
            parameter_names=("alpha_pos", "alpha_neg", "beta"),
            grid={"alpha_pos": ALPHA_GRID, "alpha_neg": ALPHA_GRID, "beta": BETA_GRID},
            reward_encoding="plus_minus_one",
            initial_value=0.0,
            nll_function=_dual_q_learning_nll("plus_minus_one", 0.0),
        ),
        ModelSpec(
            name="q_learning_stickiness",
            label="Q-learning + stickiness",
            parameter_names=("alpha", "beta", "tau"),
            grid={"alpha": ALPHA_GRID, "beta": BETA_GRID, "tau": TAU_GRID},
            reward_encoding="zero_one",
            initial_value=0.5,
            nll_function=_stickiness_nll,
        ),
        ModelSpec(
            name="reinforcement_sensitivity",
            label="Reinforcement sensitivity (alpha, rho)",
            parameter_names=("alpha", "rho"),
            grid={"alpha": ALPHA_GRID, "rho": SENSITIVITY_RHO_GRID},
            reward_encoding="zero_one",
            initial_value=0.5,
            nll_function=_sensitivity_nll,
        ),
        ModelSpec(
            name="reinforcement_sensitivity_dual",
            label="Dual reinforcement sensitivity",
            parameter_names=("alpha", "rho_win", "rho_loss"),
            grid={
                "alpha": ALPHA_GRID,
                "rho_win": DUAL_SENSITIVITY_RHO_GRID,
                "rho_loss": DUAL_SENSITIVITY_RHO_GRID,
            },
            reward_encoding="plus_minus_one",
            initial_value=0.0,
            nll_function=_dual_sensitivity_nll,
        ),
        ModelSpec(
            name="ewa",
            label="Experience-weighted attraction",
            parameter_names=("phi", "rho", "beta"),
            grid={"phi": PHI_GRID, "rho": EWA_RHO_GRID, "beta": BETA_GRID},
            reward_encoding="plus_minus_one",
            initial_value=0.0,
            nll_function=_ewa_nll,
        ),
    )
}


def get_model_spec(name: str) -> ModelSpec:
    """Return the registered model named ``name``.

    Raises
    ------
    ValueError
        If ``name`` is not registered.
    """

    try:
        return MODEL_SPECS[name]
    except KeyError:
        raise ValueError(f"unknown model {name!r}; expected one of {sorted(MODEL_SPECS)}") from None


__all__ = [
    "BETA_BOUNDS",
    "MODEL_SPECS",
    "ModelSpec",
    "NLLFunction",
    "TAU_BOUNDS",
    "UNIT_BOUNDS",
    "get_model_spec",
]
