"""Information-criterion utilities for comparing single-subject model fits."""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np
from scipy.special import logsumexp


def aic(*, log_likelihood: float, n_parameters: int) -> float:
    """Compute Akaike Information Criterion (AIC).

    Parameters
    ----------
    log_likelihood : float
        Maximized log-likelihood.
    n_parameters : int
        Number of free parameters.

    Returns
    -------
    float
        AIC value.
    """

    return float(2.0 * float(n_parameters) - 2.0 * float(log_likelihood))


def bic(*, log_likelihood: float, n_parameters: int, n_observations: int) -> float:
    """Compute Bayesian Information Criterion (BIC).

    Parameters
    ----------
    log_likelihood : float
        Maximized log-likelihood.
    n_parameters : int
        Number of free parameters.
    n_observations : int
        Number of choices used in fitting.

    Returns
    -------
    float
        BIC value.

    Raises
    ------
    ValueError
        If ``n_observations`` is non-positive.
    """

    if n_observations <= 0:
        raise ValueError("n_observations must be > 0")

    return float(np.log(float(n_observations)) * float(n_parameters) - 2.0 * float(log_likelihood))


def akaike_weights(criterion_values: Mapping[str, float]) -> dict[str, float]:
    """Convert per-model criterion values (lower is better) to relative weights.

    Parameters
    ----------
    criterion_values : Mapping[str, float]
        AIC or BIC value per model name.

    Returns
    -------
    dict[str, float]
        Weights summing to one, keyed like ``criterion_values``.

    Raises
    ------
    ValueError
        If ``criterion_values`` is empty.
    """

    if not criterion_values:
        raise ValueError("criterion_values must not be empty")
    names = list(criterion_values)
    values = np.asarray([float(criterion_values[name]) for name in names], dtype=float)
    log_terms = -0.5 * (values - np.min(values))
    weights = np.exp(log_terms - logsumexp(log_terms))
    return {name: float(weight) for name, weight in zip(names, weights, strict=True)}


__all__ = ["aic", "akaike_weights", "bic"]
