"""Tabular CSV I/O for session trial logs and model fits.

The trial-log CSV carries one row per attempted trial with session metadata
repeated in ``meta_*`` columns. Missing values are written as ``NA``.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from prl_task.core.data import Option, TrialRecord
from prl_task.task.config import SessionConfig

TASK_VERSION = "prl-task-1"
MISSING = "NA"

_META_COLUMNS = (
    "meta_task_version",
    "meta_reversal_mode",
    "meta_prob_good",
    "meta_prob_bad",
    "meta_feedback_duration_ms",
    "meta_response_deadline_ms",
    "meta_n_trials_planned",
    "meta_reversal_schedule",
    "meta_randomization_method",
)

_DATA_COLUMNS = (
    "participant_id",
    "trial",
    "choice_code",
    "reward",
    "outcome",
    "actual_is_correct",
    "correct_option_in_block",
    "misleading",
    "is_reversal_trial",
    "reversal_block",
    "is_reversal_phase",
    "trial_in_phase",
    "is_perseverative",
    "is_regressive",
    "rt",
    "omission",
    "prob_good",
    "prob_bad",
)

TRIAL_LOG_COLUMNS = (*_META_COLUMNS, *_DATA_COLUMNS)

_REQUIRED_READ_COLUMNS = (
    "trial",
    "choice_code",
    "reward",
    "actual_is_correct",
    "correct_option_in_block",
    "misleading",
    "is_reversal_trial",
    "reversal_block",
    "is_reversal_phase",
    "is_perseverative",
    "is_regressive",
    "rt",
    "omission",
)


def session_metadata(config: SessionConfig) -> dict[str, Any]:
    """Return the ``meta_*`` columns describing ``config``."""

    reversal_trial = config.reversal_trial
    return {
        "meta_task_version": TASK_VERSION,
        "meta_reversal_mode": config.reversal_mode,
        "meta_prob_good": config.feedback_probability,
        "meta_prob_bad": round(1.0 - config.feedback_probability, 6),
        "meta_feedback_duration_ms": config.feedback_duration_ms,
        "meta_response_deadline_ms": _or_missing(config.response_deadline_ms),
        "meta_n_trials_planned": config.max_trials,
        "meta_reversal_schedule": reversal_trial if reversal_trial is not None else "criterion-based",
        "meta_randomization_method": config.randomization_method,
    }


def trial_log_records(
    trials: Sequence[TrialRecord],
    *,
    config: SessionConfig,
    participant_id: str = "",
) -> list[dict[str, Any]]:
    """Flatten a trial log into CSV-ready rows.

    Parameters
    ----------
    trials : Sequence[TrialRecord]
        Trial log in presentation order.
    config : SessionConfig
        Session settings repeated in the ``meta_*`` columns.
    participant_id : str, optional
        Identifier written to every row.

    Returns
    -------
    list[dict[str, Any]]
        One mapping per trial keyed by :data:`TRIAL_LOG_COLUMNS`.
    """

    meta = session_metadata(config)
    prob_good = config.feedback_probability
    prob_bad = meta["meta_prob_bad"]
    block_counts: dict[int, int] = {}
    rows: list[dict[str, Any]] = []
    for trial in trials:
        block_counts[trial.reversal_block] = block_counts.get(trial.reversal_block, 0) + 1
        row = dict(meta)
        row.update(
            {
                "participant_id": participant_id,
                "trial": trial.trial_index,
                "choice_code": _or_missing(trial.choice_code),
                "reward": _or_missing(trial.reward),
                "outcome": _or_missing(trial.signed_outcome),
                "actual_is_correct": _flag_or_missing(trial.actually_correct),
                "correct_option_in_block": (
                    trial.correct_option.value if trial.correct_option is not None else MISSING
                ),
                "misleading": int(trial.misleading),
                "is_reversal_trial": int(trial.is_reversal_trial),
                "reversal_block": trial.reversal_block,
                "is_reversal_phase": int(trial.is_reversal_phase),
                "trial_in_phase": block_counts[trial.reversal_block],
                "is_perseverative": int(trial.is_perseverative),
                "is_regressive": int(trial.is_regressive),
                "rt": trial.reaction_time_ms,
                "omission": int(trial.is_omission),
                "prob_good": prob_good,
                "prob_bad": prob_bad,
            }
        )
        rows.append(row)
    return rows


def write_trial_log_csv(
    trials: Sequence[TrialRecord],
    path: str | Path,
    *,
    config: SessionConfig,
    participant_id: str = "",
) -> Path:
    """Write a trial log to CSV.

    Raises
    ------
    ValueError
        If ``trials`` is empty.
    """

    rows = trial_log_records(trials, config=config, participant_id=participant_id)
    if not rows:
        raise ValueError("trials must not be empty")

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(TRIAL_LOG_COLUMNS))
        writer.writeheader()
        writer.writerows(rows)
    return output_path


def read_trial_log_csv(path: str | Path) -> tuple[TrialRecord, ...]:
    """Read a trial-log CSV back into :class:`TrialRecord` rows.

    Only the data columns are interpreted; ``meta_*`` columns are ignored.

    Raises
    ------
    ValueError
        If required columns are missing or a cell cannot be parsed.
    """

    input_path = Path(path)
    with input_path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        _require_columns(reader.fieldnames, required=_REQUIRED_READ_COLUMNS)
        trials = tuple(_trial_from_row(raw, row_index=index) for index, raw in enumerate(reader))
    return trials


def write_hbayesdm_txt(
    trials: Sequence[TrialRecord],
    path: str | Path,
    *,
    participant_id: str,
) -> Path:
    """Write responded trials in the tab-separated ``subjID/choice/outcome`` layout.

    Choices use ``1``/``2`` coding and outcomes ``-1``/``+1``.
    """

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle, delimiter="\t", lineterminator="\n")
        writer.writerow(["subjID", "choice", "outcome"])
        for trial in trials:
            if trial.is_omission:
                continue
            writer.writerow([participant_id, trial.choice_code, trial.signed_outcome])
    return output_path


def model_fit_records(fits: Iterable[Any]) -> list[dict[str, Any]]:
    """Flatten :class:`~prl_task.inference.fitting.ModelFit` objects into rows.

    Parameter columns are prefixed ``param_`` and appear in first-seen order.
    """

    rows: list[dict[str, Any]] = []
    for fit in fits:
        row: dict[str, Any] = {
            "model": fit.model_name,
            "nll": fit.nll,
            "log_likelihood": fit.log_likelihood,
            "n_parameters": fit.n_parameters,
            "n_observations": fit.n_observations,
            "aic": fit.aic,
            "bic": _or_missing(fit.bic),
        }
        for name, value in fit.params.items():
            row[f"param_{name}"] = value
        rows.append(row)
    return rows


def write_model_fits_csv(fits: Iterable[Any], path: str | Path) -> Path:
    """Write one row per model fit.

    Raises
    ------
    ValueError
        If no fits are provided.
    """

    rows = model_fit_records(fits)
    if not rows:
        raise ValueError("fits must not be empty")

    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames, restval=MISSING)
        writer.writeheader()
        writer.writerows(rows)
    return output_path


def _trial_from_row(raw: dict[str, Any], *, row_index: int) -> TrialRecord:
    """Rebuild one trial from a CSV mapping."""

    is_omission = _parse_flag(raw["omission"], field_name="omission", row_index=row_index)
    choice_raw = _optional(raw["choice_code"])
    correct_raw = _optional(raw["correct_option_in_block"])
    reward_raw = _optional(raw["reward"])
    correct_raw_flag = _optional(raw["actual_is_correct"])
    try:
        choice = Option.parse(choice_raw) if choice_raw is not None else None
        correct_option = Option.parse(correct_raw) if correct_raw is not None else None
    except ValueError as exc:
        raise ValueError(f"row {row_index}: {exc}") from exc

    return TrialRecord(
        trial_index=_coerce_int(raw["trial"], field_name="trial", row_index=row_index),
        choice=choice,
        correct_option=correct_option,
        feedback_shown=(
            None
            if reward_raw is None
            else _parse_flag(reward_raw, field_name="reward", row_index=row_index)
        ),
        actually_correct=(
            None
            if correct_raw_flag is None
            else _parse_flag(correct_raw_flag, field_name="actual_is_correct", row_index=row_index)
        ),
        misleading=_parse_flag(raw["misleading"], field_name="misleading", row_index=row_index),
        reaction_time_ms=_coerce_int(raw["rt"], field_name="rt", row_index=row_index),
        is_omission=is_omission,
        reversal_block=_coerce_int(raw["reversal_block"], field_name="reversal_block", row_index=row_index),
        is_reversal_trial=_parse_flag(
            raw["is_reversal_trial"], field_name="is_reversal_trial", row_index=row_index
        ),
        is_reversal_phase=_parse_flag(
            raw["is_reversal_phase"], field_name="is_reversal_phase", row_index=row_index
        ),
        is_perseverative=_parse_flag(
            raw["is_perseverative"], field_name="is_perseverative", row_index=row_index
        ),
        is_regressive=_parse_flag(raw["is_regressive"], field_name="is_regressive", row_index=row_index),
    )


def _or_missing(value: Any) -> Any:
    return MISSING if value is None else value


def _flag_or_missing(value: bool | None) -> Any:
    return MISSING if value is None else int(value)


def _optional(raw: Any) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    if text == "" or text.upper() == MISSING:
        return None
    return text


def _parse_flag(raw: Any, *, field_name: str, row_index: int) -> bool:
    text = str(raw).strip().lower()
    if text in {"1", "true"}:
        return True
    if text in {"0", "false"}:
        return False
    raise ValueError(f"row {row_index}: {field_name} must be 0/1 or true/false")


def _coerce_int(raw: Any, *, field_name: str, row_index: int) -> int:
    try:
        return int(float(str(raw).strip()))
    except ValueError as exc:
        raise ValueError(f"row {row_index}: {field_name} must be an integer") from exc


def _require_columns(fieldnames: Sequence[str] | None, *, required: tuple[str, ...]) -> None:
    """Require all expected columns to exist in CSV header."""

    if fieldnames is None:
        raise ValueError("CSV file must include a header row")
    missing = [name for name in required if name not in set(fieldnames)]
    if missing:
        raise ValueError(f"CSV file missing required columns: {missing}")


__all__ = [
    "MISSING",
    "TASK_VERSION",
    "TRIAL_LOG_COLUMNS",
    "model_fit_records",
    "read_trial_log_csv",
    "session_metadata",
    "trial_log_records",
    "write_hbayesdm_txt",
    "write_model_fits_csv",
    "write_trial_log_csv",
]
