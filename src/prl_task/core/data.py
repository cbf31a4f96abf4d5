"""Trial-level data model for the probabilistic reversal-learning task.

The data model keeps the *objective* correctness of a choice separate from the
feedback that was actually *shown*. Learning models consume the shown feedback
(including misleading trials), while behavioural analyses consume objective
correctness.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Option(str, Enum):
    """One of the two response options."""

    A = "A"
    B = "B"

    def other(self) -> Option:
        """Return the opposite option."""

        return Option.B if self is Option.A else Option.A

    @property
    def code(self) -> int:
        """Export coding (``1`` for A, ``2`` for B)."""

        return 1 if self is Option.A else 2

    @property
    def index(self) -> int:
        """Model coding (``0`` for A, ``1`` for B)."""

        return 0 if self is Option.A else 1

    @classmethod
    def parse(cls, value: object) -> Option:
        """Parse ``"A"``/``"B"`` labels, ``1``/``2`` codes, or an :class:`Option`.

        Raises
        ------
        ValueError
            If ``value`` does not denote an option.
        """

        if isinstance(value, Option):
            return value
        text = str(value).strip().upper()
        if text in {"A", "1"}:
            return cls.A
        if text in {"B", "2"}:
            return cls.B
        raise ValueError(f"cannot interpret {value!r} as an option; expected 'A' or 'B'")


@dataclass(frozen=True, slots=True)
class Outcome:
    """Shown feedback on one trial.

    Parameters
    ----------
    rewarded : bool
        Whether positive feedback was displayed.

    Notes
    -----
    Models initialized at ``Q0=0.5`` use the ``{0, 1}`` encoding. Models
    initialized at ``Q0=0`` use the ``{-1, +1}`` encoding, matching the
    fictitious-play convention of external hierarchical toolchains.
    """

    rewarded: bool

    def as_zero_one(self) -> float:
        """Return ``1.0`` for reward and ``0.0`` for punishment."""

        return 1.0 if self.rewarded else 0.0

    def as_plus_minus_one(self) -> float:
        """Return ``+1.0`` for reward and ``-1.0`` for punishment."""

        return 1.0 if self.rewarded else -1.0


@dataclass(frozen=True, slots=True)
class TrialRecord:
    """Structured log entry for one attempted or omitted trial.

    Parameters
    ----------
    trial_index : int
        One-based sequence number.
    choice : Option | None
        Chosen option, ``None`` for omissions.
    correct_option : Option | None
        Option that was objectively correct when the trial was presented.
        ``None`` only for an omission before the initial correct option was
        defined.
    feedback_shown : bool | None
        Displayed feedback, possibly incongruent with objective correctness.
        ``None`` for omissions.
    actually_correct : bool | None
        ``choice == correct_option``. Never shown to the participant.
    misleading : bool
        ``feedback_shown != actually_correct``.
    reaction_time_ms : int
        Response latency, or the deadline value for omissions.
    is_omission : bool
        Whether the response deadline elapsed without a choice.
    reversal_block : int
        Number of reversals fired so far (``0`` is the initial learning block).
    is_reversal_trial : bool
        ``True`` only on the trial where a reversal fired.
    is_reversal_phase : bool
        ``True`` from the first reversal onward.
    is_perseverative : bool
        Choice repeated the previous block's correct option.
    is_regressive : bool
        Error after a correct choice earlier in the same block.
    """

    trial_index: int
    choice: Option | None
    correct_option: Option | None
    feedback_shown: bool | None
    actually_correct: bool | None
    misleading: bool
    reaction_time_ms: int
    is_omission: bool
    reversal_block: int
    is_reversal_trial: bool
    is_reversal_phase: bool
    is_perseverative: bool = False
    is_regressive: bool = False

    @property
    def outcome(self) -> Outcome | None:
        """Shown feedback as an :class:`Outcome`, ``None`` for omissions."""

        if self.feedback_shown is None:
            return None
        return Outcome(rewarded=bool(self.feedback_shown))

    @property
    def choice_code(self) -> int | None:
        """Export coding of the choice (``1``/``2``)."""

        return self.choice.code if self.choice is not None else None

    @property
    def reward(self) -> int | None:
        """Shown feedback in ``{0, 1}`` coding."""

        outcome = self.outcome
        return int(outcome.as_zero_one()) if outcome is not None else None

    @property
    def signed_outcome(self) -> int | None:
        """Shown feedback in ``{-1, +1}`` coding."""

        outcome = self.outcome
        return int(outcome.as_plus_minus_one()) if outcome is not None else None


def valid_trials(trials: tuple[TrialRecord, ...] | list[TrialRecord]) -> tuple[TrialRecord, ...]:
    """Return non-omitted trials in log order."""

    return tuple(trial for trial in trials if not trial.is_omission)


__all__ = ["Option", "Outcome", "TrialRecord", "valid_trials"]
