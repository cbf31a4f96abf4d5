"""Qualitative labels derived from best-fit parameters.

Bucket thresholds are fixed; profile names and comparison statements are
presentation text built on top of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prl_task.inference.fitting import SessionFits


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Lower and upper cut points of a three-level bucket."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError("low threshold must not exceed high threshold")


THRESHOLDS: dict[str, Thresholds] = {
    "alpha": Thresholds(0.30, 0.90),
    "beta": Thresholds(2.60, 7.35),
    "tau": Thresholds(0.5, 2.0),
    "phi": Thresholds(0.10, 0.60),
    "rho_ewa": Thresholds(0.28, 0.88),
    "rho_sensitivity": Thresholds(0.30, 0.85),
    "learning_sensitivity": Thresholds(0.20, 0.75),
}

NLL_MARGIN = 5.0
ASYMMETRY_MARGIN = 0.2

PROFILE_MODELS = (
    "q_learning",
    "q_learning_dual",
    "q_learning_stickiness",
    "reinforcement_sensitivity",
    "ewa",
)

AB_PROFILES: dict[tuple[str, str], str] = {
    ("high", "high"): "FLEXIBLE-ADAPTIVE",
    ("high", "medium"): "REACTIVE-BALANCED",
    ("high", "low"): "VOLATILE/EXPLORATORY",
    ("medium", "high"): "BALANCED-DETERMINISTIC",
    ("medium", "medium"): "INTERMEDIATE-TYPICAL",
    ("medium", "low"): "BALANCED-EXPLORATORY",
    ("low", "high"): "PERSEVERANT/RIGID",
    ("low", "medium"): "CONSERVATIVE-BALANCED",
    ("low", "low"): "DISORGANIZED/CHAOTIC",
}

AB_PROFILE_DESCRIPTIONS: dict[str, str] = {
    "FLEXIBLE-ADAPTIVE": "Fast learning with consistent decisions; suited to volatile environments.",
    "REACTIVE-BALANCED": "Fast learning with balanced decisions; adapts well but may overreact.",
    "VOLATILE/EXPLORATORY": "Fast learning with noisy decisions; excessive switching.",
    "BALANCED-DETERMINISTIC": "Moderate learning with high conviction; stable, possibly rigid.",
    "INTERMEDIATE-TYPICAL": "Moderate learning and consistency without marked extremes.",
    "BALANCED-EXPLORATORY": "Moderate learning with exploration; flexible but may lose focus.",
    "PERSEVERANT/RIGID": "Slow learning with high conviction; prone to getting stuck after reversals.",
    "CONSERVATIVE-BALANCED": "Slow learning with balanced decisions; cautious.",
    "DISORGANIZED/CHAOTIC": "Slow learning and inconsistent decisions; weak link between feedback and choice.",
}

EWA_PROFILES: dict[tuple[bool, bool, bool], str] = {
    (False, False, False): "Volatile-Exploratory",
    (False, False, True): "Volatile-Exploiter",
    (False, True, False): "Recent-Exploratory",
    (False, True, True): "Recent-Exploiter",
    (True, False, False): "Historical-Exploratory",
    (True, False, True): "Historical-Exploiter",
    (True, True, False): "Stable-Exploratory",
    (True, True, True): "Stable-Exploiter",
}


def bucket(value: float, low: float, high: float) -> str:
    """Return ``"low"`` below ``low``, ``"medium"`` below ``high``, else ``"high"``."""

    if value < low:
        return "low"
    if value < high:
        return "medium"
    return "high"


def parameter_level(kind: str, value: float) -> str:
    """Bucket ``value`` with the thresholds registered under ``kind``.

    Raises
    ------
    ValueError
        If ``kind`` has no registered thresholds.
    """

    if kind not in THRESHOLDS:
        raise ValueError(f"unknown threshold kind {kind!r}; expected one of {sorted(THRESHOLDS)}")
    thresholds = THRESHOLDS[kind]
    return bucket(float(value), thresholds.low, thresholds.high)


def classify_ab_profile(alpha: float, beta: float) -> str:
    """Name one of nine profiles from the learning-rate and temperature levels."""

    return AB_PROFILES[(parameter_level("alpha", alpha), parameter_level("beta", beta))]


def classify_ewa_profile(phi: float, rho: float, beta: float) -> str:
    """Name one of eight EWA profiles; each parameter is split at its high cut."""

    key = (
        float(phi) >= THRESHOLDS["phi"].high,
        float(rho) >= THRESHOLDS["rho_ewa"].high,
        float(beta) >= THRESHOLDS["beta"].high,
    )
    return EWA_PROFILES[key]


@dataclass(frozen=True, slots=True)
class ModelComparison:
    """NLL comparison between two fitted models.

    Parameters
    ----------
    first, second : str
        Compared model names.
    nll_difference : float
        ``nll(first) - nll(second)``.
    preferred : str | None
        Better model when the difference exceeds the margin, else ``None``.
    statement : str
        Readable conclusion.
    """

    first: str
    second: str
    nll_difference: float
    preferred: str | None
    statement: str


@dataclass(frozen=True, slots=True)
class QualitativeProfile:
    """Qualitative reading of a session's model fits."""

    ab_profile: str
    ab_description: str
    ewa_profile: str
    alpha_level: str
    beta_level: str
    tau_level: str
    rho_sensitivity_level: str
    learning_sensitivity_level: str
    phi_level: str
    rho_ewa_level: str
    valence_asymmetry: str | None
    reduced_sensitivity: bool
    elevated_stickiness: bool
    comparisons: tuple[ModelComparison, ...]


_COMPARISON_TEXT: dict[tuple[str, str], tuple[str, str | None, str | None]] = {
    ("q_learning", "ewa"): (
        "Q-learning > EWA: trial-by-trial updating explains choices better.",
        "EWA > Q-learning: accumulated experience explains choices better.",
        "Q-learning ~ EWA: both models explain behaviour about equally.",
    ),
    ("q_learning", "q_learning_dual"): (
        "AB > ABdual: rewards and punishments are learned symmetrically.",
        "ABdual > AB: learning differs between rewards and punishments.",
        "AB ~ ABdual: no clear evidence of valence-asymmetric learning.",
    ),
    ("q_learning", "q_learning_stickiness"): (
        "AB > AB+stickiness: choices are well explained by feedback alone.",
        "AB+stickiness > AB: choices repeat beyond what feedback explains.",
        "AB ~ AB+stickiness: marginal or absent choice repetition bias.",
    ),
    ("reinforcement_sensitivity", "q_learning"): (
        "RS > AB: reduced reinforcement sensitivity explains choices better.",
        "AB > RS: reinforcement sensitivity is unremarkable.",
        None,
    ),
    ("reinforcement_sensitivity_dual", "q_learning_dual"): (
        "DU-2RHO > ABdual: valence asymmetry is better explained by differential sensitivity.",
        None,
        None,
    ),
}


def compare_models(fits: SessionFits, *, margin: float = NLL_MARGIN) -> tuple[ModelComparison, ...]:
    """Compare fixed model pairs by NLL with a decision margin.

    Pairs whose models are not both present are skipped; pairs without a
    neutral statement are omitted when the difference is within the margin.
    """

    comparisons: list[ModelComparison] = []
    for (first, second), (first_better, second_better, neutral) in _COMPARISON_TEXT.items():
        if first not in fits or second not in fits:
            continue
        difference = float(fits[first].nll - fits[second].nll)
        if abs(difference) > margin:
            preferred = first if difference < 0 else second
            statement = first_better if preferred == first else second_better
            if statement is None:
                continue
        else:
            preferred = None
            if neutral is None:
                continue
            statement = neutral
        comparisons.append(ModelComparison(first, second, difference, preferred, statement))
    return tuple(comparisons)


def qualitative_profile(fits: SessionFits, *, margin: float = NLL_MARGIN) -> QualitativeProfile:
    """Build the qualitative profile for a full set of model fits.

    Raises
    ------
    ValueError
        If a required model fit is missing.
    """

    missing = [name for name in PROFILE_MODELS if name not in fits]
    if missing:
        raise ValueError(f"qualitative profile requires fits for: {missing}")

    ab = fits["q_learning"].params
    dual = fits["q_learning_dual"]
    sticky = fits["q_learning_stickiness"].params
    sensitivity = fits["reinforcement_sensitivity"].params
    ewa = fits["ewa"].params

    valence_asymmetry: str | None = None
    if fits["q_learning"].nll - dual.nll > margin:
        alpha_pos = dual.params["alpha_pos"]
        alpha_neg = dual.params["alpha_neg"]
        if alpha_pos > alpha_neg + ASYMMETRY_MARGIN:
            valence_asymmetry = "positive"
        elif alpha_neg > alpha_pos + ASYMMETRY_MARGIN:
            valence_asymmetry = "negative"

    ab_profile = classify_ab_profile(ab["alpha"], ab["beta"])
    return QualitativeProfile(
        ab_profile=ab_profile,
        ab_description=AB_PROFILE_DESCRIPTIONS[ab_profile],
        ewa_profile=classify_ewa_profile(ewa["phi"], ewa["rho"], ewa["beta"]),
        alpha_level=parameter_level("alpha", ab["alpha"]),
        beta_level=parameter_level("beta", ab["beta"]),
        tau_level=parameter_level("tau", sticky["tau"]),
        rho_sensitivity_level=parameter_level("rho_sensitivity", sensitivity["rho"]),
        learning_sensitivity_level=parameter_level(
            "learning_sensitivity", sensitivity["alpha"] * sensitivity["rho"]
        ),
        phi_level=parameter_level("phi", ewa["phi"]),
        rho_ewa_level=parameter_level("rho_ewa", ewa["rho"]),
        valence_asymmetry=valence_asymmetry,
        reduced_sensitivity=sensitivity["rho"] < THRESHOLDS["rho_sensitivity"].low,
        elevated_stickiness=sticky["tau"] > THRESHOLDS["tau"].high,
        comparisons=compare_models(fits, margin=margin),
    )


__all__ = [
    "AB_PROFILES",
    "AB_PROFILE_DESCRIPTIONS",
    "ASYMMETRY_MARGIN",
    "EWA_PROFILES",
    "ModelComparison",
    "NLL_MARGIN",
    "PROFILE_MODELS",
    "QualitativeProfile",
    "THRESHOLDS",
    "Thresholds",
    "bucket",
    "classify_ab_profile",
    "classify_ewa_profile",
    "compare_models",
    "parameter_level",
    "qualitative_profile",
]
