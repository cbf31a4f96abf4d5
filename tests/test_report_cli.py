"""Tests for the end-of-session report and the command-line entry points."""

from __future__ import annotations

import csv
import json

import numpy as np

from prl_task.analysis import replay_criterion
from prl_task.cli import run_fit_cli, run_simulate_cli
from prl_task.inference import MODEL_SPECS, QLearningAgent, QLearningAgentConfig
from prl_task.io import read_trial_log_csv, write_trial_log_csv
from prl_task.report import build_session_report, format_report_summary
from prl_task.task import SessionConfig, TrialStateMachine


def _completed_machine() -> TrialStateMachine:
    """Run a 40-trial session driven by a Q-learning agent."""

    machine = TrialStateMachine(SessionConfig(max_trials=40), rng=np.random.default_rng(21))
    agent = QLearningAgent(QLearningAgentConfig(alpha=0.5, beta=6.0))
    rng = np.random.default_rng(22)
    while not machine.is_complete:
        choice = agent.choose(rng)
        record = machine.process_choice(choice, 500)
        agent.update(choice, record.outcome)
    return machine


def test_build_session_report_bundles_summary_fits_and_profile() -> None:
    """Report should combine behaviour, all model fits and profile labels."""

    machine = _completed_machine()

    report = build_session_report(machine)

    assert report.trials == machine.trials
    assert report.summary.n_trials == 40
    assert report.summary.first_learning_trial == machine.state.first_learning_trial
    assert len(report.fits) == len(MODEL_SPECS)
    assert report.profile is not None
    payload = report.to_dict()
    assert payload["best_model_aic"] in MODEL_SPECS
    json.dumps(payload)


def test_report_without_profile_models_has_no_profile() -> None:
    """Fitting a subset of models should leave the profile empty."""

    report = build_session_report(_completed_machine(), model_names=("q_learning",))

    assert report.profile is None
    assert "Best model (AIC): q_learning" in format_report_summary(report)


def test_format_report_summary_lists_key_measures() -> None:
    """Text summary should include counts, accuracy and profile lines."""

    text = format_report_summary(build_session_report(_completed_machine()))

    assert text.startswith("Trials: 40 (valid 40, omissions 0)")
    assert "Accuracy:" in text
    assert "Reversals: 1" in text
    assert "Profile:" in text


def test_simulate_cli_writes_trial_log(tmp_path, capsys) -> None:
    """Simulation CLI should write a readable trial log."""

    config_path = tmp_path / "session.json"
    config_path.write_text(json.dumps({"max_trials": 30, "randomization_method": "den_ouden"}), encoding="utf-8")
    output_csv = tmp_path / "out" / "sim.csv"

    code = run_simulate_cli(
        [
            "--config",
            str(config_path),
            "--alpha",
            "0.4",
            "--beta",
            "5",
            "--seed",
            "3",
            "--output-csv",
            str(output_csv),
        ]
    )

    assert code == 0
    trials = read_trial_log_csv(output_csv)
    assert len(trials) == 30
    with output_csv.open("r", encoding="utf-8", newline="") as handle:
        first = next(csv.DictReader(handle))
    assert first["meta_randomization_method"] == "den_ouden"
    out = capsys.readouterr().out
    assert "Simulation complete: n_trials=30" in out


def test_fit_cli_writes_outputs(tmp_path, capsys) -> None:
    """Fitting CLI should write model-fit CSV and summary JSON artifacts."""

    log_path = tmp_path / "sim.csv"
    assert run_simulate_cli(["--alpha", "0.4", "--beta", "5", "--seed", "1", "--output-csv", str(log_path)]) == 0
    output_dir = tmp_path / "fits"

    code = run_fit_cli(
        [
            "--input-csv",
            str(log_path),
            "--output-dir",
            str(output_dir),
            "--prefix",
            "p01",
            "--model",
            "q_learning",
            "--model",
            "q_learning_dual",
        ]
    )

    assert code == 0
    fits_path = output_dir / "p01_model_fits.csv"
    summary_path = output_dir / "p01_summary.json"
    assert fits_path.exists()
    assert summary_path.exists()

    with fits_path.open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert [row["model"] for row in rows] == ["q_learning", "q_learning_dual"]

    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert summary["n_models"] == 2
    assert summary["n_observations"] == 60
    assert summary["profile"] is None
    expected = replay_criterion(read_trial_log_csv(log_path), window_size=10, accuracy_threshold=8)
    assert summary["summary"]["first_learning_trial"] == expected.first_learning_trial
    assert summary["summary"]["reversal_learning_trial"] == expected.reversal_learning_trial
    assert set(summary["weights_aic"]) == {"q_learning", "q_learning_dual"}

    out = capsys.readouterr().out
    assert "Model fitting complete" in out
    assert "Summary JSON" in out


def test_fit_cli_recovers_criterion_trials(tmp_path, capsys) -> None:
    """Fitting a logged session should report the criterion trials the session reached."""

    machine = _completed_machine()
    log_path = write_trial_log_csv(machine.trials, tmp_path / "session.csv", config=machine.config)

    code = run_fit_cli(
        ["--input-csv", str(log_path), "--output-dir", str(tmp_path), "--model", "q_learning"]
    )

    assert code == 0
    summary = json.loads((tmp_path / "session_summary.json").read_text(encoding="utf-8"))
    assert summary["summary"]["first_learning_trial"] == machine.state.first_learning_trial
    assert summary["summary"]["reversal_learning_trial"] == machine.state.reversal_learning_trial
    first = machine.state.first_learning_trial
    out = capsys.readouterr().out
    assert f"Trials to first criterion: {first if first is not None else 'NA'}" in out
