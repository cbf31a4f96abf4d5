"""Tests for single-response acceptance around the state machine."""

from __future__ import annotations

import pytest

from prl_task.feedback import FeedbackProvider
from prl_task.task import ResponseGate, SessionConfig, TrialStateMachine


class TruthfulSchedule:
    """Schedule that always shows truthful feedback."""

    def draw_congruence(self, was_correct: bool, *, reversal_phase: bool, block_start: bool) -> bool:
        return True


class FakeHandle:
    """Timer handle recording cancellation."""

    def __init__(self, callback) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Scheduler that stores callbacks for manual firing."""

    def __init__(self) -> None:
        self.scheduled: list[tuple[float, FakeHandle]] = []

    def call_later(self, delay: float, callback, *args) -> FakeHandle:
        handle = FakeHandle(lambda: callback(*args))
        self.scheduled.append((delay, handle))
        return handle


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _gate(**config_kwargs) -> tuple[ResponseGate, FakeScheduler, FakeClock]:
    """Build a gate with deterministic timers and clock."""

    config = SessionConfig(**config_kwargs)
    machine = TrialStateMachine(config, FeedbackProvider(TruthfulSchedule()))
    scheduler = FakeScheduler()
    clock = FakeClock()
    return ResponseGate(machine, scheduler, clock=clock), scheduler, clock


def test_submit_records_latency_and_rejects_double_input() -> None:
    """Only the first response of a trial should be processed."""

    gate, scheduler, clock = _gate(max_trials=5)
    gate.present_stimuli()
    clock.now += 0.25

    record = gate.submit("A")
    second = gate.submit("B")

    assert record is not None
    assert record.reaction_time_ms == 250
    assert second is None
    assert len(gate.machine.trials) == 1
    assert scheduler.scheduled[0][1].cancelled


def test_late_timer_after_response_is_ignored() -> None:
    """A deadline firing after a response should not log an omission."""

    gate, scheduler, clock = _gate(max_trials=5)
    gate.present_stimuli()
    gate.submit("A")

    _, handle = scheduler.scheduled[0]
    assert handle.callback() is None
    assert len(gate.machine.trials) == 1


def test_deadline_logs_omission_and_closes_gate() -> None:
    """The deadline should log an omission and block the late response."""

    gate, scheduler, clock = _gate(max_trials=5, response_deadline_ms=2000)
    gate.present_stimuli()

    delay, handle = scheduler.scheduled[0]
    assert delay == pytest.approx(2.0)
    omission = handle.callback()

    assert omission is not None
    assert omission.is_omission
    assert omission.reaction_time_ms == 2000
    assert not gate.is_accepting
    assert gate.submit("A") is None


def test_stale_timer_from_previous_trial_is_ignored() -> None:
    """A timer armed for an earlier trial must not close the current one."""

    gate, scheduler, clock = _gate(max_trials=5)
    gate.present_stimuli()
    gate.submit("A")
    gate.present_stimuli()

    _, stale = scheduler.scheduled[0]
    assert stale.callback() is None
    assert gate.is_accepting
    assert gate.submit("A") is not None


def test_deadline_change_applies_from_next_trial() -> None:
    """Changing the deadline should only affect trials presented afterwards."""

    gate, scheduler, clock = _gate(max_trials=5, response_deadline_ms=6000)
    gate.present_stimuli()
    gate.deadline_ms = 3000
    _, handle = scheduler.scheduled[0]
    assert handle.callback().reaction_time_ms == 6000

    gate.present_stimuli()
    assert scheduler.scheduled[1][0] == pytest.approx(3.0)


def test_no_timer_without_deadline() -> None:
    """Disabling the deadline should arm no timer."""

    gate, scheduler, clock = _gate(max_trials=5, response_deadline_ms=None)
    gate.present_stimuli()

    assert scheduler.scheduled == []
    assert gate.is_accepting


def test_present_stimuli_rejects_open_trial_and_complete_session() -> None:
    """Presenting twice or after completion should raise."""

    gate, scheduler, clock = _gate(max_trials=1)
    gate.present_stimuli()
    with pytest.raises(RuntimeError, match="already awaiting a response"):
        gate.present_stimuli()

    gate.submit("A")
    with pytest.raises(RuntimeError, match="session is complete"):
        gate.present_stimuli()


def test_invalid_key_keeps_trial_open() -> None:
    """An unrecognized key should leave the gate open and the deadline armed."""

    gate, scheduler, clock = _gate(max_trials=5, response_deadline_ms=2000)
    gate.present_stimuli()

    with pytest.raises(ValueError, match="cannot interpret"):
        gate.submit("C")

    _, handle = scheduler.scheduled[0]
    assert gate.is_accepting
    assert not handle.cancelled
    assert gate.machine.trials == ()

    omission = handle.callback()
    assert omission is not None
    assert omission.is_omission
    assert len(gate.machine.trials) == 1


def test_valid_key_after_invalid_key_is_accepted() -> None:
    """A valid response following a stray key should complete the trial."""

    gate, scheduler, clock = _gate(max_trials=5)
    gate.present_stimuli()
    with pytest.raises(ValueError):
        gate.submit("C")
    clock.now += 0.4

    record = gate.submit("b")

    assert record is not None
    assert record.reaction_time_ms == 400
    assert scheduler.scheduled[0][1].cancelled
