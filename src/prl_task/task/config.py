"""Session configuration and its declarative loader."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from prl_task.core.config_files import check_keys, coerce_float, coerce_int, load_config_mapping
from prl_task.core.data import Option

REVERSAL_MODES: tuple[str, ...] = ("predetermined", "criterion")
RANDOMIZATION_METHODS: tuple[str, ...] = ("urn", "den_ouden")

_RANDOMIZATION_ALIASES = {
    "urn": "urn",
    "den_ouden": "den_ouden",
    "denouden": "den_ouden",
    "den-ouden": "den_ouden",
}

_CONFIG_KEYS: tuple[str, ...] = (
    "max_trials",
    "reversal_mode",
    "window_size",
    "accuracy_threshold",
    "feedback_probability",
    "randomization_method",
    "feedback_duration_ms",
    "response_deadline_ms",
    "initial_correct_option",
)


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Validated settings for one task session.

    Parameters
    ----------
    max_trials : int, optional
        Number of trials, omissions included.
    reversal_mode : str, optional
        ``"predetermined"`` (single reversal at the midpoint) or
        ``"criterion"`` (reversal whenever the accuracy criterion is met).
    window_size : int, optional
        Sliding-window length for the accuracy criterion.
    accuracy_threshold : int, optional
        Correct responses needed within a full window.
    feedback_probability : float, optional
        Probability that shown feedback is truthful.
    randomization_method : str, optional
        ``"urn"`` or ``"den_ouden"``.
    feedback_duration_ms : int, optional
        Feedback display duration, recorded as session metadata.
    response_deadline_ms : int | None, optional
        Response deadline; ``None`` disables omissions.
    initial_correct_option : Option | None, optional
        Initially correct option. ``None`` lets the first responded choice
        define it.

    Raises
    ------
    ValueError
        If any field is out of range.
    """

    max_trials: int = 60
    reversal_mode: str = "predetermined"
    window_size: int = 10
    accuracy_threshold: int = 8
    feedback_probability: float = 0.7
    randomization_method: str = "urn"
    feedback_duration_ms: int = 750
    response_deadline_ms: int | None = 6000
    initial_correct_option: Option | None = None

    def __post_init__(self) -> None:
        if int(self.max_trials) <= 0:
            raise ValueError("max_trials must be > 0")
        if self.reversal_mode not in REVERSAL_MODES:
            raise ValueError(f"reversal_mode must be one of {list(REVERSAL_MODES)}, got {self.reversal_mode!r}")
        if int(self.window_size) <= 0:
            raise ValueError("window_size must be > 0")
        if not 0 < int(self.accuracy_threshold) <= int(self.window_size):
            raise ValueError("accuracy_threshold must satisfy 0 < accuracy_threshold <= window_size")
        if not 0.0 < float(self.feedback_probability) < 1.0:
            raise ValueError("feedback_probability must be in (0, 1)")
        if self.randomization_method not in RANDOMIZATION_METHODS:
            raise ValueError(
                f"randomization_method must be one of {list(RANDOMIZATION_METHODS)}, "
                f"got {self.randomization_method!r}"
            )
        if int(self.feedback_duration_ms) < 0:
            raise ValueError("feedback_duration_ms must be >= 0")
        if self.response_deadline_ms is not None and int(self.response_deadline_ms) <= 0:
            raise ValueError("response_deadline_ms must be > 0 or None")
        if self.initial_correct_option is not None and not isinstance(self.initial_correct_option, Option):
            object.__setattr__(self, "initial_correct_option", Option.parse(self.initial_correct_option))

    @property
    def reversal_trial(self) -> int | None:
        """One-based index of the predetermined reversal, ``None`` in criterion mode."""

        if self.reversal_mode != "predetermined":
            return None
        return self.max_trials // 2 + 1

    @property
    def planned_learning_trials(self) -> int:
        """Planned size of the learning-phase feedback sources."""

        reversal_trial = self.reversal_trial
        if reversal_trial is None:
            return self.max_trials
        return reversal_trial - 1

    @property
    def planned_reversal_trials(self) -> int:
        """Planned size of the reversal-phase feedback sources."""

        if self.reversal_trial is None:
            return self.max_trials
        return self.max_trials - self.planned_learning_trials


def session_config_from_mapping(mapping: Mapping[str, Any]) -> SessionConfig:
    """Parse a session configuration mapping.

    Parameters
    ----------
    mapping : Mapping[str, Any]
        Raw settings. Missing keys take their defaults; numeric strings are
        coerced.

    Returns
    -------
    SessionConfig
        Validated configuration.

    Raises
    ------
    ValueError
        If unknown keys are present or any value is non-numeric or out of range.
    """

    check_keys(mapping, field_name="session config", allowed=_CONFIG_KEYS)

    kwargs: dict[str, Any] = {}
    for key in ("max_trials", "window_size", "accuracy_threshold", "feedback_duration_ms"):
        if key in mapping:
            kwargs[key] = coerce_int(mapping[key], field_name=key)
    if "feedback_probability" in mapping:
        kwargs["feedback_probability"] = coerce_float(
            mapping["feedback_probability"], field_name="feedback_probability"
        )
    if "reversal_mode" in mapping:
        kwargs["reversal_mode"] = str(mapping["reversal_mode"]).strip().lower()
    if "randomization_method" in mapping:
        raw_method = str(mapping["randomization_method"]).strip().lower()
        if raw_method not in _RANDOMIZATION_ALIASES:
            raise ValueError(
                f"randomization_method must be one of {list(RANDOMIZATION_METHODS)}, got {raw_method!r}"
            )
        kwargs["randomization_method"] = _RANDOMIZATION_ALIASES[raw_method]
    if "response_deadline_ms" in mapping:
        kwargs["response_deadline_ms"] = _parse_deadline(mapping["response_deadline_ms"])
    if mapping.get("initial_correct_option") is not None:
        kwargs["initial_correct_option"] = Option.parse(mapping["initial_correct_option"])

    return SessionConfig(**kwargs)


def load_session_config(path: str | Path) -> SessionConfig:
    """Load and validate a JSON/YAML session file, flat or under a `session` section."""

    return session_config_from_mapping(load_config_mapping(path, section="session"))


def _parse_deadline(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, str) and raw.strip().lower() in {"none", "null", ""}:
        return None
    return coerce_int(raw, field_name="response_deadline_ms")


__all__ = [
    "RANDOMIZATION_METHODS",
    "REVERSAL_MODES",
    "SessionConfig",
    "load_session_config",
    "session_config_from_mapping",
]
