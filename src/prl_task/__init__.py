"""Top-level package for ``prl_task``.

A probabilistic reversal-learning session is organized as:

1. a :class:`~prl_task.feedback.provider.FeedbackProvider` decides, per trial,
   whether shown feedback is truthful,
2. a :class:`~prl_task.task.machine.TrialStateMachine` classifies each choice,
   fires reversals and appends one :class:`~prl_task.core.data.TrialRecord`,
3. after the session, :func:`~prl_task.analysis.behavior.summarize_session`
   aggregates the log and :func:`~prl_task.inference.fitting.fit_all_models`
   fits the reinforcement-learning models by grid search.

Notes
-----
Objective correctness and shown feedback are stored separately on every
trial. Behavioural measures use the former; learning models use the latter.
"""

from .core.data import Option, Outcome, TrialRecord
from .feedback.provider import FeedbackProvider, create_feedback_provider
from .inference.fitting import SessionFits, fit_all_models
from .report import SessionReport, build_session_report, format_report_summary
from .task.config import SessionConfig, load_session_config
from .task.gate import ResponseGate
from .task.machine import TrialStateMachine

__all__ = [
    "FeedbackProvider",
    "Option",
    "Outcome",
    "ResponseGate",
    "SessionConfig",
    "SessionFits",
    "SessionReport",
    "TrialRecord",
    "TrialStateMachine",
    "build_session_report",
    "create_feedback_provider",
    "fit_all_models",
    "format_report_summary",
    "load_session_config",
]
