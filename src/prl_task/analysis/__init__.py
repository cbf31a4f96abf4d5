"""Behavioural aggregation, reconciliation, information criteria and profiles."""

from .behavior import (
    BehavioralSummary,
    PerseverativeSequences,
    PhaseFeedbackCheck,
    ReversalEpisode,
    TransitionRates,
    feedback_check,
    intra_subject_cv,
    perseverative_sequences,
    reversal_episodes,
    summarize_session,
    transition_rates,
)
from .information_criteria import aic, akaike_weights, bic
from .profiles import (
    THRESHOLDS,
    ModelComparison,
    QualitativeProfile,
    bucket,
    classify_ab_profile,
    classify_ewa_profile,
    compare_models,
    parameter_level,
    qualitative_profile,
)
from .reconciliation import CriterionTrials, PhaseDiscrepancy, reconcile_trial_log, replay_criterion

__all__ = [
    "BehavioralSummary",
    "CriterionTrials",
    "ModelComparison",
    "PerseverativeSequences",
    "PhaseDiscrepancy",
    "PhaseFeedbackCheck",
    "QualitativeProfile",
    "ReversalEpisode",
    "THRESHOLDS",
    "TransitionRates",
    "aic",
    "akaike_weights",
    "bic",
    "bucket",
    "classify_ab_profile",
    "classify_ewa_profile",
    "compare_models",
    "feedback_check",
    "intra_subject_cv",
    "parameter_level",
    "perseverative_sequences",
    "qualitative_profile",
    "reconcile_trial_log",
    "replay_criterion",
    "reversal_episodes",
    "summarize_session",
    "transition_rates",
]
