"""End-of-session report bundling behaviour, model fits and profile labels."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from prl_task.analysis.behavior import BehavioralSummary, summarize_session
from prl_task.analysis.profiles import PROFILE_MODELS, QualitativeProfile, qualitative_profile
from prl_task.core.data import TrialRecord
from prl_task.inference.fitting import SessionFits, fit_all_models
from prl_task.task.machine import TrialStateMachine


@dataclass(frozen=True, slots=True)
class SessionReport:
    """Results payload for one completed session.

    Parameters
    ----------
    trials : tuple[TrialRecord, ...]
        Full trial log, omissions included.
    summary : BehavioralSummary
        Behavioural aggregates.
    fits : SessionFits
        Grid-search fits keyed by model name.
    profile : QualitativeProfile | None
        Qualitative labels, ``None`` when a model it needs was not fitted.
    """

    trials: tuple[TrialRecord, ...]
    summary: BehavioralSummary
    fits: SessionFits
    profile: QualitativeProfile | None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping without the trial log."""

        best = self.fits.best_model("aic") if len(self.fits) else None
        return {
            "summary": self.summary.to_dict(),
            "fits": {
                fit.model_name: {
                    "params": dict(fit.params),
                    "nll": fit.nll,
                    "aic": fit.aic,
                    "bic": fit.bic,
                }
                for fit in self.fits
            },
            "best_model_aic": best.model_name if best is not None else None,
            "profile": asdict(self.profile) if self.profile is not None else None,
        }


def build_report(
    trials: Sequence[TrialRecord],
    *,
    first_learning_trial: int | None = None,
    reversal_learning_trial: int | None = None,
    model_names: Iterable[str] | None = None,
    max_workers: int | None = None,
) -> SessionReport:
    """Summarize and fit an existing trial log."""

    trial_log = tuple(trials)
    summary = summarize_session(
        trial_log,
        first_learning_trial=first_learning_trial,
        reversal_learning_trial=reversal_learning_trial,
    )
    fits = fit_all_models(trial_log, model_names=model_names, max_workers=max_workers)
    profile = None
    if all(name in fits for name in PROFILE_MODELS):
        profile = qualitative_profile(fits)
    return SessionReport(trials=trial_log, summary=summary, fits=fits, profile=profile)


def build_session_report(
    machine: TrialStateMachine,
    *,
    model_names: Iterable[str] | None = None,
    max_workers: int | None = None,
) -> SessionReport:
    """Build the report for the session run by ``machine``.

    Learning-criterion trials are taken from the machine's live state.
    """

    state = machine.state
    return build_report(
        machine.trials,
        first_learning_trial=state.first_learning_trial,
        reversal_learning_trial=state.reversal_learning_trial,
        model_names=model_names,
        max_workers=max_workers,
    )


def format_report_summary(report: SessionReport) -> str:
    """Render a short plain-text summary suitable for copying."""

    summary = report.summary
    lines = [
        f"Trials: {summary.n_trials} (valid {summary.n_valid}, omissions {summary.n_omissions})",
        f"Score: {summary.total_score}",
        f"Accuracy: {_fmt(summary.accuracy)} "
        f"(learning {_fmt(summary.accuracy_learning)}, reversal {_fmt(summary.accuracy_reversal)})",
        f"Mean RT (ms): {_fmt(summary.mean_rt, digits=0)} "
        f"(learning {_fmt(summary.mean_rt_learning, digits=0)}, "
        f"reversal {_fmt(summary.mean_rt_reversal, digits=0)})",
        f"ICV: {_fmt(summary.icv_global)}",
        f"Win-stay: {_fmt(summary.transitions.win_stay)}, lose-shift: {_fmt(summary.transitions.lose_shift)}",
        f"Reversals: {summary.n_reversals}",
        f"Perseverative errors (reversal): {summary.perseverative_errors_reversal}",
        f"Regressive errors (reversal): {summary.regressive_errors_reversal}",
        f"Perseverative streaks: {summary.perseverative_episodes} "
        f"({summary.perseverative_streak_trials} trials, {summary.perseverative_streak_repeats} after the first)",
        f"Trials to first criterion: {_fmt_int(summary.first_learning_trial)}",
        f"Trials to reversal criterion: {_fmt_int(summary.trials_to_reversal_criterion)}",
    ]
    if len(report.fits):
        best = report.fits.best_model("aic")
        params = ", ".join(f"{name}={value:.3f}" for name, value in best.params.items())
        lines.append(f"Best model (AIC): {best.model_name} [{params}] NLL={best.nll:.2f}")
    profile = report.profile
    if profile is not None:
        lines.append(f"Profile: {profile.ab_profile} (alpha {profile.alpha_level}, beta {profile.beta_level})")
        lines.append(f"EWA profile: {profile.ewa_profile}")
        if profile.valence_asymmetry is not None:
            lines.append(f"Valence asymmetry: {profile.valence_asymmetry}")
        for comparison in profile.comparisons:
            lines.append(f"- {comparison.statement}")
    return "\n".join(lines)


def _fmt(value: float | None, *, digits: int = 3) -> str:
    if value is None:
        return "NA"
    return f"{value:.{digits}f}"


def _fmt_int(value: int | None) -> str:
    return "NA" if value is None else str(value)


__all__ = ["SessionReport", "build_report", "build_session_report", "format_report_summary"]
