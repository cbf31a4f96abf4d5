"""Single-threaded response acceptance for an event-driven trial loop.

The gate holds one boolean deciding whether a response is currently
accepted. A response and the deadline timer are mutually exclusive
completions of the same trial; whichever arrives first closes the gate and
the other becomes a no-op.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import partial
from typing import Any, Protocol

from prl_task.core.data import Option, TrialRecord
from prl_task.feedback.urn import round_half_up
from prl_task.task.machine import TrialStateMachine


class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Cancel the scheduled callback."""


class Scheduler(Protocol):
    """Anything with ``call_later``; :class:`asyncio.AbstractEventLoop` qualifies."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Schedule ``callback`` after ``delay`` seconds."""


_UNSET: Any = object()


class ResponseGate:
    """Guard response acceptance around a :class:`TrialStateMachine`.

    Parameters
    ----------
    machine : TrialStateMachine
        Machine receiving accepted responses and omissions.
    scheduler : Scheduler
        Timer source for the response deadline.
    clock : Callable[[], float], optional
        Monotonic clock in seconds.
    deadline_ms : int | None, optional
        Initial deadline. Defaults to ``machine.config.response_deadline_ms``.
    """

    def __init__(
        self,
        machine: TrialStateMachine,
        scheduler: Scheduler,
        *,
        clock: Callable[[], float] = time.monotonic,
        deadline_ms: int | None = _UNSET,
    ) -> None:
        self._machine = machine
        self._scheduler = scheduler
        self._clock = clock
        self.deadline_ms = machine.config.response_deadline_ms if deadline_ms is _UNSET else deadline_ms
        self._accepting = False
        self._onset: float | None = None
        self._timer: TimerHandle | None = None
        self._trial_deadline_ms: int | None = None
        self._token = 0

    @property
    def is_accepting(self) -> bool:
        return self._accepting

    @property
    def machine(self) -> TrialStateMachine:
        return self._machine

    def present_stimuli(self) -> None:
        """Open acceptance for the next trial and arm the deadline timer.

        Raises
        ------
        RuntimeError
            If a trial is already open or the session is complete.
        """

        if self._accepting:
            raise RuntimeError("a trial is already awaiting a response")
        if self._machine.is_complete:
            raise RuntimeError("session is complete; no further trials accepted")

        self._token += 1
        self._accepting = True
        self._onset = self._clock()
        self._trial_deadline_ms = self.deadline_ms
        if self._trial_deadline_ms is not None:
            self._timer = self._scheduler.call_later(
                self._trial_deadline_ms / 1000.0,
                partial(self._on_deadline, self._token),
            )
        else:
            self._timer = None

    def submit(self, choice: Option | str) -> TrialRecord | None:
        """Accept one response if the gate is open.

        Returns
        -------
        TrialRecord | None
            The processed record, or ``None`` when no response is accepted.

        Raises
        ------
        ValueError
            If ``choice`` is not an option. The gate stays open and the
            deadline timer stays armed.
        """

        if not self._accepting:
            return None
        option = Option.parse(choice)
        self._accepting = False
        self._cancel_timer()
        onset = self._onset if self._onset is not None else self._clock()
        reaction_time_ms = max(0, round_half_up((self._clock() - onset) * 1000.0))
        return self._machine.process_choice(option, reaction_time_ms)

    def _on_deadline(self, token: int) -> TrialRecord | None:
        if not self._accepting or token != self._token:
            return None
        self._accepting = False
        self._timer = None
        return self._machine.handle_omission(reaction_time_ms=self._trial_deadline_ms)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


__all__ = ["ResponseGate", "Scheduler", "TimerHandle"]
