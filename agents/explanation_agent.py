"""ExplanationAgent - AI wording for deterministic scores

This agent asks Gemini for a short, empathetic explanation of a number the
analytics engine has already computed. The model only ever sees the score
and a few supporting profile fields, never the breakdown, and it is told not
to invent numbers of its own.

Design Decisions:
    1. Hard timeout: the model call races a fixed timeout (4s by default).
       If the timeout wins, the late reply is discarded, not cancelled.
    2. Deterministic fallback: on timeout, rate limiting, API errors,
       blocked or empty responses, the caller's canned sentence is
       returned. These are logged as warnings; the user never sees an error.
    3. No markdown: responses are stripped of code fences and emphasis.
"""
from typing import Any, Dict, List, Optional
import asyncio
import json
import logging

from config.llm import get_gemini_model
from config.settings import AI_EXPLANATION_TIMEOUT_SECONDS
from models.results import DiseaseRiskResult, GeneticRiskResult, HealthCreditScoreResult
from services.rate_limiter import RateLimiter, RateLimitExceededError

logger = logging.getLogger(__name__)

DISEASE_RADAR_FALLBACK = (
    "Based on clinical algorithms tracking your BMI, age, and systemic factors, "
    "typical trajectory risks were determined. Maintain optimal parameters to lower risks."
)
GENETIC_ROADMAP_EMPTY = "Add more family members to generate a personalized genetic roadmap."
GENETIC_ROADMAP_FALLBACK = (
    "Clinical risk detected. Maintain regular screenings and dietary vigilance.|Regular Screenings|Dietary Audit"
)


def credit_score_prompt(profile: Dict[str, Any], result: HealthCreditScoreResult) -> str:
    return (
        f"Based on the user's health profile (BMI: {profile.get('bmi')}, BP: {profile.get('bloodPressure')}), "
        f"their deterministic Health Credit Score is {result.score}/1000. "
        "Give a 2-sentence empathetic explanation and actionable prediction for their future health. "
        "Do not include markdown formatting. Do not state any number other than the score given."
    )


def disease_radar_prompt(profile: Dict[str, Any], result: DiseaseRiskResult) -> str:
    return (
        f"Based on the user's health profile (Age: {profile.get('age')}, BMI: {profile.get('bmi')}, "
        f"BP: {profile.get('bloodPressure')}), their deterministic Cardiovascular Risk is "
        f"{result.cardiovascular_percentage}% and Type 2 Diabetes Risk is {result.type2_diabetes_percentage}%. "
        f"Status is {result.status}.\n"
        "Provide a 2-sentence clinical explanation of why these specific risks exist for them, "
        "and a short prediction. No markdown highlighting. Do not invent other percentages."
    )


def genetic_roadmap_prompt(risks: List[GeneticRiskResult]) -> str:
    payload = json.dumps([risk.to_dict() for risk in risks])
    return (
        f"Based on family health history risks: {payload}.\n"
        "Provide a 2-sentence proactive genetic roadmap for the user.\n"
        "Also provide 2 short bullet points for 'Next Step' and 'Primary Recommendation'. "
        "Format: Roadmap|Next Step|Recommendation."
    )


def _clean(text: Optional[str]) -> str:
    if not text:
        return ""
    return text.replace("```", "").replace("**", "").strip()


def _discard_late_result(task: "asyncio.Future") -> None:
    """Retrieve the outcome of a call that lost the race so asyncio doesn't complain."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Late AI explanation failed after timeout: {error}")
    else:
        logger.debug("Late AI explanation arrived after timeout and was discarded.")


class ExplanationAgent:
    """
    ExplanationAgent - bounded AI wording with a deterministic fallback.

    The model and rate limiter are injected; with no model (e.g. missing
    API key) every call returns its fallback immediately.
    """

    def __init__(
        self,
        model: Any = None,
        timeout_seconds: float = AI_EXPLANATION_TIMEOUT_SECONDS,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.model = model if model is not None else get_gemini_model()
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = rate_limiter

    async def explain(self, prompt: str, fallback: str) -> str:
        """Return the model's explanation, or `fallback` if it can't be had in time."""
        if not self.model:
            return fallback

        if self.rate_limiter is not None:
            try:
                self.rate_limiter.acquire()
            except RateLimitExceededError as e:
                logger.warning(f"AI explanation skipped ({e}), using deterministic fallback.")
                return fallback

        task = asyncio.ensure_future(self._generate(prompt))
        done, _ = await asyncio.wait({task}, timeout=self.timeout_seconds)

        if task not in done:
            task.add_done_callback(_discard_late_result)
            logger.warning(
                f"AI explanation timed out after {self.timeout_seconds:.1f}s, using deterministic fallback."
            )
            return fallback

        try:
            text = _clean(task.result())
        except Exception as e:
            logger.warning(f"AI explanation failed ({e}), using deterministic fallback.")
            return fallback

        if not text:
            logger.warning("AI explanation was empty, using deterministic fallback.")
            return fallback
        return text

    async def _generate(self, prompt: str) -> str:
        response = await self.model.generate_content_async(prompt)
        return response.text

    # === Score-specific helpers ===

    async def explain_credit_score(self, profile: Dict[str, Any], result: HealthCreditScoreResult) -> str:
        return await self.explain(credit_score_prompt(profile, result), result.explanation)

    async def explain_disease_risks(self, profile: Dict[str, Any], result: DiseaseRiskResult) -> str:
        return await self.explain(disease_radar_prompt(profile, result), DISEASE_RADAR_FALLBACK)

    async def genetic_roadmap(self, risks: List[GeneticRiskResult]) -> str:
        if not risks:
            return GENETIC_ROADMAP_EMPTY
        return await self.explain(genetic_roadmap_prompt(risks), GENETIC_ROADMAP_FALLBACK)
