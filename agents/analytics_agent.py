"""AnalyticsAgent - Deterministic scoring with bounded AI wording

This agent is what a request handler calls. It turns the submitted JSON
into input models, runs the matching evaluator from tools/, and returns the
result as JSON-ready dicts.

Design Decision:
    Scores are never generated. The evaluators compute every number; the
    optional ExplanationAgent only words the headline score and falls back
    to the evaluator's own sentence when the model is slow or failing.
"""
from typing import Any, Dict, List, Optional
import asyncio
import logging

from agents.explanation_agent import ExplanationAgent
from core.observability import log_context, trace_agent
from models.profile import UserProfileParams
from services.score_history import ScoreHistoryService, build_score_snapshot
from tools.health_analytics import (
    evaluate_credit_score,
    evaluate_disease_risks,
    evaluate_genetic_risk,
    evaluate_lifestyle,
    evaluate_mental_health,
)
from tools.lab_values import evaluate_lab_values

logger = logging.getLogger(__name__)

DEFAULT_SLEEP_HOURS = 7

# Stored score key -> field of the analysis output
SNAPSHOT_FIELDS = {
    "credit_score": {"healthScore": "score"},
    "disease_radar": {"cardiacRisk": "cardiovascularPercentage", "diabetesRisk": "type2DiabetesPercentage"},
    "mental": {"mentalScore": "mentalScore"},
    "lifestyle": {"lifestyleScore": "score"},
}


class InsufficientDataError(ValueError):
    """A required profile field for a deterministic calculation is missing."""


def _require(profile: Dict[str, Any], fields: List[str], message: str):
    if not profile or any(not profile.get(name) for name in fields):
        raise InsufficientDataError(message)


class AnalyticsAgent:
    """
    AnalyticsAgent - Deterministic Health Analytics

    This agent:
    - Validates the fields a deterministic calculation cannot do without.
    - Runs the evaluators (pure functions, no shared state).
    - Asks the ExplanationAgent for wording when `explain` is set.
    - Archives changed scores when a ScoreHistoryService and user id are given.
    - Does not perform any medical diagnosis.
    """

    ANALYSES = ("credit_score", "disease_radar", "mental", "lifestyle", "family", "labs")

    def __init__(
        self,
        explainer: Optional[ExplanationAgent] = None,
        history_service: Optional[ScoreHistoryService] = None,
    ):
        self.explainer = explainer
        self.history_service = history_service

    # === Individual analyses ===

    async def credit_score(self, profile: Dict[str, Any], explain: bool = True) -> Dict[str, Any]:
        _require(
            profile, ["age", "bmi", "bloodPressure"],
            "Insufficient Data: Age, BMI, and Blood Pressure are required for a deterministic calculation.",
        )
        result = evaluate_credit_score(UserProfileParams.from_dict(profile))
        if explain and self.explainer is not None:
            result.explanation = await self.explainer.explain_credit_score(profile, result)
        return result.to_dict()

    async def disease_radar(self, profile: Dict[str, Any], explain: bool = True) -> Dict[str, Any]:
        _require(
            profile, ["age", "bmi"],
            "Insufficient Data: Age and BMI are required for predictive disease modeling.",
        )
        result = evaluate_disease_risks(UserProfileParams.from_dict(profile))
        output = result.to_dict()
        if explain and self.explainer is not None:
            output["aiExplanation"] = await self.explainer.explain_disease_risks(profile, result)
        return output

    def mental(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        payload = payload or {}
        sleep_hours = payload.get("sleepHours")
        result = evaluate_mental_health(
            payload.get("moodLogs") or [],
            sleep_hours if sleep_hours else DEFAULT_SLEEP_HOURS,
        )
        return result.to_dict()

    def lifestyle(self, answers: Dict[str, Any]) -> Dict[str, Any]:
        return evaluate_lifestyle(answers or {}).to_dict()

    async def family(self, tree: List[Dict[str, Any]], explain: bool = True) -> Dict[str, Any]:
        risks = evaluate_genetic_risk(tree or [])
        output: Dict[str, Any] = {"risks": [risk.to_dict() for risk in risks]}
        if explain and self.explainer is not None:
            output["roadmap"] = await self.explainer.genetic_roadmap(risks)
        return output

    def labs(self, results: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {"results": [item.to_dict() for item in evaluate_lab_values(results or [])]}

    # === Pipeline entry points ===

    @trace_agent
    async def arun(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run the analysis named in context["analysis"] and store the output
        in context["analytics"].

        Expects:
            context = {
                "analysis": "credit_score" | "disease_radar" | "mental" | "lifestyle" | "family" | "labs",
                "payload": {...},          # request body for that analysis
                "user_id": str,            # optional, enables score history
                "explain": bool,           # optional, default True
            }
        """
        analysis = context.get("analysis")
        payload = context.get("payload")
        explain = context.get("explain", True)

        if analysis == "credit_score":
            output = await self.credit_score(payload, explain)
        elif analysis == "disease_radar":
            output = await self.disease_radar(payload, explain)
        elif analysis == "mental":
            output = self.mental(payload)
        elif analysis == "lifestyle":
            output = self.lifestyle(payload)
        elif analysis == "family":
            output = await self.family(payload, explain)
        elif analysis == "labs":
            output = self.labs(payload)
        else:
            raise ValueError(f"Unknown analysis '{analysis}'. Expected one of {', '.join(self.ANALYSES)}")

        context["analytics"] = output
        self._archive(context.get("user_id"), analysis, output)

        debug_log = context.setdefault("debug", [])
        debug_log.append(f"AnalyticsAgent: {analysis} computed deterministically.")
        log_context(context, "AnalyticsAgent:done")
        return context

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Synchronous entry point for callers without an event loop."""
        return asyncio.run(self.arun(context))

    def _archive(self, user_id: Optional[str], analysis: str, output: Dict[str, Any]):
        if not user_id or self.history_service is None:
            return

        fields = SNAPSHOT_FIELDS.get(analysis, {})
        snapshot = {key: output[source] for key, source in fields.items()}

        if snapshot and self.history_service.record_scores(user_id, snapshot):
            logger.info(f"AnalyticsAgent: stored new {analysis} scores for {user_id}")

    def sync_profile_scores(self, user_id: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recompute the stored headline scores after a profile save.

        Unlike the endpoint analyses this never fails on missing fields;
        absent values simply skip their rules.
        """
        params = UserProfileParams.from_dict(profile)
        snapshot = build_score_snapshot(
            credit=evaluate_credit_score(params),
            disease=evaluate_disease_risks(params),
        )
        if self.history_service is not None:
            self.history_service.record_scores(user_id, snapshot)
        return snapshot
