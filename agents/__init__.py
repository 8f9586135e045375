"""HealthGuard Agent Module.

This module contains the agents that sit between a request handler and the
deterministic analytics engine.

Agents:
    AnalyticsAgent: Runs the evaluators and assembles JSON-ready results.
    ExplanationAgent: Bounded Gemini wording with deterministic fallback.
"""
from agents.analytics_agent import AnalyticsAgent, InsufficientDataError
from agents.explanation_agent import ExplanationAgent

__all__ = [
    "AnalyticsAgent",
    "InsufficientDataError",
    "ExplanationAgent",
]
