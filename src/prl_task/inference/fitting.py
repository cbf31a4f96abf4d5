"""Fit every registered model to one session's trial log."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass

from prl_task.analysis.information_criteria import aic, akaike_weights, bic
from prl_task.core.data import Option, Outcome, TrialRecord
from prl_task.inference.likelihood import EncodedTrials, encode_sequences, encode_trials
from prl_task.inference.mle import GridSearchEstimator
from prl_task.inference.models import MODEL_SPECS, ModelSpec, get_model_spec


@dataclass(frozen=True, slots=True)
class ModelFit:
    """Best grid point for one model on one session.

    Parameters
    ----------
    model_name : str
        Registered model identifier.
    params : dict[str, float]
        Best-fit parameter values.
    nll : float
        Minimized negative log-likelihood.
    n_observations : int
        Number of responded trials used.
    n_parameters : int
        Number of free parameters.
    """

    model_name: str
    params: dict[str, float]
    nll: float
    n_observations: int
    n_parameters: int

    @property
    def log_likelihood(self) -> float:
        return -float(self.nll)

    @property
    def aic(self) -> float:
        return aic(log_likelihood=self.log_likelihood, n_parameters=self.n_parameters)

    @property
    def bic(self) -> float | None:
        """BIC, or ``None`` when no trials were fitted."""

        if self.n_observations <= 0:
            return None
        return bic(
            log_likelihood=self.log_likelihood,
            n_parameters=self.n_parameters,
            n_observations=self.n_observations,
        )


@dataclass(frozen=True, slots=True)
class SessionFits:
    """All model fits for one session, keyed by model name in fit order."""

    fits: dict[str, ModelFit]
    n_observations: int

    def __getitem__(self, model_name: str) -> ModelFit:
        return self.fits[model_name]

    def __contains__(self, model_name: object) -> bool:
        return model_name in self.fits

    def __iter__(self) -> Iterator[ModelFit]:
        return iter(self.fits.values())

    def __len__(self) -> int:
        return len(self.fits)

    def best_model(self, criterion: str = "aic") -> ModelFit:
        """Return the fit minimizing ``"nll"``, ``"aic"`` or ``"bic"``.

        Raises
        ------
        ValueError
            If ``criterion`` is unknown or there are no fits.
        """

        if not self.fits:
            raise ValueError("no model fits available")
        values = self._criterion_values(criterion)
        best_name = min(values, key=lambda name: values[name])
        return self.fits[best_name]

    def weights(self, criterion: str = "aic") -> dict[str, float]:
        """Relative model weights under ``criterion``."""

        return akaike_weights(self._criterion_values(criterion))

    def _criterion_values(self, criterion: str) -> dict[str, float]:
        if criterion == "nll":
            return {name: fit.nll for name, fit in self.fits.items()}
        if criterion == "aic":
            return {name: fit.aic for name, fit in self.fits.items()}
        if criterion == "bic":
            if self.n_observations <= 0:
                raise ValueError("bic requires at least one fitted observation")
            return {name: float(fit.bic) for name, fit in self.fits.items()}
        raise ValueError(f"criterion must be one of ['aic', 'bic', 'nll'], got {criterion!r}")


def fit_model(model: ModelSpec | str, data: EncodedTrials) -> ModelFit:
    """Fit one model to encoded trials by grid search."""

    spec = get_model_spec(model) if isinstance(model, str) else model
    result = GridSearchEstimator(spec).fit(data)
    return ModelFit(
        model_name=spec.name,
        params=dict(result.best.params),
        nll=float(result.best.nll),
        n_observations=data.n_trials,
        n_parameters=spec.n_parameters,
    )


def fit_all_models(
    trials: Sequence[TrialRecord] | EncodedTrials,
    *,
    model_names: Iterable[str] | None = None,
    max_workers: int | None = None,
) -> SessionFits:
    """Fit the registered models to a session.

    Parameters
    ----------
    trials : Sequence[TrialRecord] | EncodedTrials
        Trial log (omissions are dropped) or pre-encoded data.
    model_names : Iterable[str] | None, optional
        Subset of models to fit. Defaults to every registered model.
    max_workers : int | None, optional
        When greater than one, fit models in a process pool. Fits share no
        state, so the result does not depend on this setting.

    Returns
    -------
    SessionFits
        Fits keyed by model name in registry order.
    """

    data = trials if isinstance(trials, EncodedTrials) else encode_trials(trials)
    names = tuple(model_names) if model_names is not None else tuple(MODEL_SPECS)
    for name in names:
        get_model_spec(name)

    if max_workers is not None and max_workers > 1 and len(names) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {name: executor.submit(fit_model, name, data) for name in names}
            fits = {name: futures[name].result() for name in names}
    else:
        fits = {name: fit_model(name, data) for name in names}
    return SessionFits(fits=fits, n_observations=data.n_trials)


def model_nll(
    model: ModelSpec | str,
    choices: Sequence[Option | int | str],
    outcomes: Sequence[Outcome | bool | int],
    params: Mapping[str, float],
) -> float:
    """Negative log-likelihood of one parameter set on raw sequences."""

    spec = get_model_spec(model) if isinstance(model, str) else model
    data = encode_sequences(choices, outcomes)
    return float(spec.nll(data, params))


__all__ = ["ModelFit", "SessionFits", "fit_all_models", "fit_model", "model_nll"]
