"""HealthGuard Data Models.

This module contains the dataclasses exchanged with the analytics engine.

Models:
    UserProfileParams: Health attributes scored by the evaluators.
    LifestyleAnswers: Lifestyle questionnaire answers.
    FamilyMember: One relative and their known conditions.
    LabResult: A single lab test value.
    SmokingStatus / AlcoholStatus: Habit enums parsed from free text.
    *Result / LabInterpretation: Evaluator outputs with breakdowns.
    ScoreRecord / ScoreHistory: Append-only score archive.
"""
from models.profile import (
    UserProfileParams,
    LifestyleAnswers,
    FamilyMember,
    LabResult,
    SmokingStatus,
    AlcoholStatus,
)
from models.results import (
    HealthCreditScoreResult,
    DiseaseRiskResult,
    MentalHealthResult,
    LifestyleResult,
    GeneticRiskResult,
    LabInterpretation,
)
from models.history import ScoreRecord, ScoreHistory, SCORE_KEYS

__all__ = [
    "UserProfileParams",
    "LifestyleAnswers",
    "FamilyMember",
    "LabResult",
    "SmokingStatus",
    "AlcoholStatus",
    "HealthCreditScoreResult",
    "DiseaseRiskResult",
    "MentalHealthResult",
    "LifestyleResult",
    "GeneticRiskResult",
    "LabInterpretation",
    "ScoreRecord",
    "ScoreHistory",
    "SCORE_KEYS",
]
