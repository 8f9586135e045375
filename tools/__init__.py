"""HealthGuard Tools Module.

This module contains the deterministic health analytics engine.

Tools:
    evaluate_credit_score: Health Credit Score (300-1000) with weight breakdown.
    evaluate_disease_risks: Cardiovascular and Type 2 Diabetes risk percentages.
    evaluate_mental_health: Mental wellness score from mood logs and sleep.
    evaluate_lifestyle: Lifestyle score with ordered recommendations.
    evaluate_genetic_risk: Inherited risk per disease category.
    evaluate_lab_values: Lab results interpreted against reference ranges.
"""
from tools.health_analytics import (
    evaluate_credit_score,
    evaluate_disease_risks,
    evaluate_mental_health,
    evaluate_lifestyle,
    evaluate_genetic_risk,
)
from tools.lab_values import evaluate_lab_values, find_reference_range, REFERENCE_RANGES

__all__ = [
    "evaluate_credit_score",
    "evaluate_disease_risks",
    "evaluate_mental_health",
    "evaluate_lifestyle",
    "evaluate_genetic_risk",
    "evaluate_lab_values",
    "find_reference_range",
    "REFERENCE_RANGES",
]
