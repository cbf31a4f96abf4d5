"""Command-line entry points for fitting logged sessions and simulating new ones."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from prl_task.analysis.reconciliation import replay_criterion
from prl_task.inference.fitting import SessionFits
from prl_task.inference.models import MODEL_SPECS
from prl_task.inference.simulation import QLearningAgent, QLearningAgentConfig, simulate_session
from prl_task.io.tabular import read_trial_log_csv, write_model_fits_csv, write_trial_log_csv
from prl_task.report import build_report, format_report_summary
from prl_task.task.config import SessionConfig, load_session_config


def run_fit_cli(argv: Sequence[str] | None = None) -> int:
    """Fit every registered model to a trial-log CSV.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        CLI argument list. When ``None``, process arguments are used.

    Returns
    -------
    int
        Exit code (`0` on success).
    """

    parser = argparse.ArgumentParser(description="Fit reversal-learning models to a trial-log CSV.")
    parser.add_argument("--input-csv", required=True, help="Path to trial-log CSV file.")
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory for output CSV and summary JSON.",
    )
    parser.add_argument(
        "--prefix",
        default="session",
        help="Output filename prefix.",
    )
    parser.add_argument(
        "--model",
        action="append",
        choices=tuple(MODEL_SPECS),
        default=None,
        help="Model to fit; repeat for several. Defaults to all models.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Fit models in this many worker processes.",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=SessionConfig().window_size,
        help="Sliding-window length used to recover the criterion trials.",
    )
    parser.add_argument(
        "--accuracy-threshold",
        type=int,
        default=SessionConfig().accuracy_threshold,
        help="Correct responses within a full window that meet the criterion.",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = str(args.prefix)

    trials = read_trial_log_csv(str(args.input_csv))
    criterion = replay_criterion(
        trials,
        window_size=int(args.window_size),
        accuracy_threshold=int(args.accuracy_threshold),
    )
    report = build_report(
        trials,
        first_learning_trial=criterion.first_learning_trial,
        reversal_learning_trial=criterion.reversal_learning_trial,
        model_names=args.model,
        max_workers=args.max_workers,
    )

    fits_path = write_model_fits_csv(report.fits, output_dir / f"{prefix}_model_fits.csv")
    summary_path = output_dir / f"{prefix}_summary.json"
    summary = {
        "input_csv": str(args.input_csv),
        **_fit_summary(report.fits),
        **report.to_dict(),
    }
    summary_path.write_text(json.dumps(summary, indent=2, sort_keys=True), encoding="utf-8")

    print(f"Model fitting complete: n_trials={len(trials)}, n_models={len(report.fits)}")
    print(f"Model fits CSV: {fits_path}")
    print(f"Summary JSON: {summary_path}")
    print(format_report_summary(report))
    return 0


def run_simulate_cli(argv: Sequence[str] | None = None) -> int:
    """Simulate one session with a Q-learning participant and write its log.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        CLI argument list. When ``None``, process arguments are used.

    Returns
    -------
    int
        Exit code (`0` on success).
    """

    parser = argparse.ArgumentParser(description="Simulate a reversal-learning session.")
    parser.add_argument("--config", default=None, help="Path to session JSON or YAML config.")
    parser.add_argument("--alpha", type=float, required=True, help="Agent learning rate.")
    parser.add_argument("--beta", type=float, required=True, help="Agent inverse temperature.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument(
        "--omission-probability",
        type=float,
        default=0.0,
        help="Per-trial probability of a missed response.",
    )
    parser.add_argument("--participant-id", default="sim", help="Participant identifier.")
    parser.add_argument("--output-csv", required=True, help="Path to output trial-log CSV.")
    args = parser.parse_args(list(argv) if argv is not None else None)

    config = _load_session_config(args.config)
    agent = QLearningAgent(QLearningAgentConfig(alpha=float(args.alpha), beta=float(args.beta)))
    trials = simulate_session(
        config,
        agent,
        np.random.default_rng(args.seed),
        omission_probability=float(args.omission_probability),
    )
    output_path = write_trial_log_csv(
        trials,
        args.output_csv,
        config=config,
        participant_id=str(args.participant_id),
    )

    n_omissions = sum(1 for trial in trials if trial.is_omission)
    n_reversals = sum(1 for trial in trials if trial.is_reversal_trial)
    print(
        f"Simulation complete: n_trials={len(trials)}, n_omissions={n_omissions}, "
        f"n_reversals={n_reversals}"
    )
    print(f"Trial log CSV: {output_path}")
    return 0


def _fit_summary(fits: SessionFits) -> dict[str, Any]:
    """Build compact JSON-serializable selection fields."""

    summary: dict[str, Any] = {
        "n_observations": int(fits.n_observations),
        "n_models": int(len(fits)),
    }
    if len(fits):
        summary["weights_aic"] = fits.weights("aic")
        summary["best_model_nll"] = fits.best_model("nll").model_name
    return summary


def _load_session_config(path: str | None) -> SessionConfig:
    """Load a session config file, or the defaults when no path is given."""

    if path is None:
        return SessionConfig()
    return load_session_config(path)


def main_fit() -> None:
    """Execute the fitting CLI and exit with returned code."""

    raise SystemExit(run_fit_cli())


def main_simulate() -> None:
    """Execute the simulation CLI and exit with returned code."""

    raise SystemExit(run_simulate_cli())


__all__ = ["main_fit", "main_simulate", "run_fit_cli", "run_simulate_cli"]
