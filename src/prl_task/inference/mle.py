"""Grid-search maximum-likelihood estimation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from itertools import product

import numpy as np

from prl_task.inference.likelihood import EncodedTrials
from prl_task.inference.models import ModelSpec


@dataclass(frozen=True, slots=True)
class GridCandidate:
    """One evaluated parameter candidate.

    Parameters
    ----------
    params : dict[str, float]
        Evaluated parameter set.
    nll : float
        Negative log-likelihood for ``params``.
    """

    params: dict[str, float]
    nll: float

    @property
    def log_likelihood(self) -> float:
        return -float(self.nll)


@dataclass(frozen=True, slots=True)
class GridSearchResult:
    """Grid-search fit output.

    Parameters
    ----------
    best : GridCandidate
        Candidate with the minimum NLL (first occurrence on ties).
    parameter_names : tuple[str, ...]
        Column order of ``candidate_values``.
    candidate_values : numpy.ndarray
        Evaluated grid, shape ``(n_candidates, n_parameters)``.
    candidate_nll : numpy.ndarray
        NLL per candidate, shape ``(n_candidates,)``.
    """

    best: GridCandidate
    parameter_names: tuple[str, ...]
    candidate_values: np.ndarray
    candidate_nll: np.ndarray

    @property
    def n_candidates(self) -> int:
        return int(self.candidate_nll.shape[0])

    def candidate(self, index: int) -> GridCandidate:
        """Return candidate ``index`` in grid order."""

        row = self.candidate_values[index]
        return GridCandidate(
            params={name: float(value) for name, value in zip(self.parameter_names, row, strict=True)},
            nll=float(self.candidate_nll[index]),
        )


class GridSearchEstimator:
    """Deterministic, vectorised grid-search MLE estimator.

    Parameters
    ----------
    spec : ModelSpec
        Model whose likelihood is evaluated.
    parameter_grid : Mapping[str, Sequence[float]] | None, optional
        Override of ``spec.grid``. Keys must match ``spec.parameter_names``.

    Notes
    -----
    The full grid is evaluated in a single likelihood pass. Candidates are
    enumerated with the first parameter outermost, so ties resolve to the
    earliest grid point in that nesting order.
    """

    def __init__(
        self,
        spec: ModelSpec,
        parameter_grid: Mapping[str, Sequence[float]] | None = None,
    ) -> None:
        self._spec = spec
        grid = parameter_grid if parameter_grid is not None else spec.grid
        unknown = sorted(set(grid) - set(spec.parameter_names))
        if unknown:
            raise ValueError(f"parameter_grid includes unknown parameters: {unknown}")
        missing = sorted(set(spec.parameter_names) - set(grid))
        if missing:
            raise ValueError(f"parameter_grid is missing parameters: {missing}")
        self._grid = {name: tuple(float(v) for v in grid[name]) for name in spec.parameter_names}

    @property
    def spec(self) -> ModelSpec:
        return self._spec

    def fit(self, data: EncodedTrials) -> GridSearchResult:
        """Fit model parameters via exhaustive grid search.

        Parameters
        ----------
        data : EncodedTrials
            Observed choices and shown feedback.

        Returns
        -------
        GridSearchResult
            Best candidate and the full NLL surface.

        Raises
        ------
        ValueError
            If any parameter has no candidate values.
        RuntimeError
            If no candidate has a finite NLL.
        """

        names = self._spec.parameter_names
        values = _iter_parameter_grid(names, self._grid)
        columns = {name: values[:, column] for column, name in enumerate(names)}
        nll = np.asarray(self._spec.nll(data, columns), dtype=float).reshape(-1)
        if not np.any(np.isfinite(nll)):
            raise RuntimeError(f"no finite likelihood on the grid for model {self._spec.name!r}")

        scored = np.where(np.isfinite(nll), nll, np.inf)
        best_index = int(np.argmin(scored))
        best = GridCandidate(
            params={name: float(values[best_index, column]) for column, name in enumerate(names)},
            nll=float(nll[best_index]),
        )
        return GridSearchResult(
            best=best,
            parameter_names=names,
            candidate_values=values,
            candidate_nll=nll,
        )


def _iter_parameter_grid(
    names: tuple[str, ...],
    parameter_grid: Mapping[str, tuple[float, ...]],
) -> np.ndarray:
    """Enumerate parameter combinations with the first name outermost.

    Returns
    -------
    numpy.ndarray
        Candidate matrix of shape ``(n_candidates, len(names))``.
    """

    value_lists = []
    for name in names:
        grid_values = parameter_grid[name]
        if not grid_values:
            raise ValueError(f"parameter {name!r} has no candidate values")
        value_lists.append(grid_values)
    return np.asarray(list(product(*value_lists)), dtype=float).reshape(-1, len(names))


__all__ = ["GridCandidate", "GridSearchEstimator", "GridSearchResult"]
