"""Unit Tests for the HealthGuard agents.

The Gemini model is replaced by a small fake so these tests run offline and
can simulate slow, failing and empty responses.

Run with: pytest tests/ -v
"""
import asyncio
import json
import logging

import pytest
from agents.analytics_agent import AnalyticsAgent, InsufficientDataError
from agents import explanation_agent
from agents.explanation_agent import (
    DISEASE_RADAR_FALLBACK,
    GENETIC_ROADMAP_EMPTY,
    GENETIC_ROADMAP_FALLBACK,
    ExplanationAgent,
)
from core.observability import get_metrics_summary, metrics
from main import main
from services import score_history
from services.rate_limiter import RateLimiter, RateLimitExceededError
from services.score_history import ScoreHistoryService
from tools.health_analytics import CREDIT_EXPLANATIONS

PROFILE = {
    "age": 30,
    "bmi": 22,
    "activityLevel": "active",
    "sleepHours": 8,
    "bloodPressure": "115/75",
    "smokingStatus": "never",
    "alcoholStatus": "rarely",
}


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for google.generativeai.GenerativeModel."""

    def __init__(self, text="You are doing well.", delay=0.0, error=None):
        self.text = text
        self.delay = delay
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return FakeResponse(self.text)


class TestExplanationAgent:
    """Bounded AI explanations with deterministic fallback."""

    def test_returns_model_text(self):
        agent = ExplanationAgent(model=FakeModel("**Great** habits.\n```"))
        assert asyncio.run(agent.explain("prompt", "fallback")) == "Great habits."

    def test_timeout_uses_fallback_and_warns(self, caplog):
        """A slow model loses the race; only a warning is logged."""
        caplog.set_level(logging.WARNING)
        agent = ExplanationAgent(model=FakeModel(delay=1.0), timeout_seconds=0.05)

        assert asyncio.run(agent.explain("prompt", "fallback")) == "fallback"
        assert any("timed out" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_model_error_uses_fallback(self, caplog):
        caplog.set_level(logging.WARNING)
        agent = ExplanationAgent(model=FakeModel(error=ConnectionError("network down")))

        assert asyncio.run(agent.explain("prompt", "fallback")) == "fallback"
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_empty_response_uses_fallback(self):
        agent = ExplanationAgent(model=FakeModel(text="  ```  "))
        assert asyncio.run(agent.explain("prompt", "fallback")) == "fallback"

    def test_missing_model_uses_fallback(self, monkeypatch):
        """Without an API key no call is attempted."""
        monkeypatch.setattr(explanation_agent, "get_gemini_model", lambda: None)
        agent = ExplanationAgent()
        assert agent.model is None
        assert asyncio.run(agent.explain("prompt", "fallback")) == "fallback"

    def test_rate_limited_calls_fall_back(self):
        model = FakeModel("AI text")
        agent = ExplanationAgent(model=model, rate_limiter=RateLimiter(limit=1))

        assert asyncio.run(agent.explain("one", "fallback")) == "AI text"
        assert asyncio.run(agent.explain("two", "fallback")) == "fallback"
        assert model.prompts == ["one"]

    def test_genetic_roadmap_fallbacks(self):
        failing = ExplanationAgent(model=FakeModel(error=RuntimeError("boom")))
        tree = [{"relation": "Parent", "conditions": ["Diabetes"]}]

        assert asyncio.run(failing.genetic_roadmap([])) == GENETIC_ROADMAP_EMPTY
        output = asyncio.run(AnalyticsAgent(explainer=failing).family(tree))
        assert output["roadmap"] == GENETIC_ROADMAP_FALLBACK
        assert output["risks"] == [{"condition": "diabetes", "riskPercentage": 30, "tier": "Moderate"}]
        assert failing.model.prompts  # the model was tried before falling back


class TestRateLimiter:
    """Fixed-window limiter for AI calls."""

    def test_window_resets(self):
        now = [0.0]
        limiter = RateLimiter(limit=2, window_seconds=60, clock=lambda: now[0])

        limiter.acquire()
        limiter.acquire()
        assert limiter.remaining == 0
        with pytest.raises(RateLimitExceededError):
            limiter.acquire()

        now[0] = 61.0
        assert limiter.remaining == 2
        limiter.acquire()


class TestAnalyticsAgent:
    """Request-level composition of evaluators and explanations."""

    def test_credit_score_with_ai_explanation(self):
        model = FakeModel("Your habits are strong.")
        agent = AnalyticsAgent(explainer=ExplanationAgent(model=model))

        context = agent.run({"analysis": "credit_score", "payload": PROFILE})

        result = context["analytics"]
        assert result["score"] == 970
        assert result["explanation"] == "Your habits are strong."
        assert result["weightBreakdown"]["Optimal BMI"] == 40
        assert "AnalyticsAgent: credit_score computed deterministically." in context["debug"]

    def test_prompt_carries_score_not_breakdown(self):
        model = FakeModel()
        agent = AnalyticsAgent(explainer=ExplanationAgent(model=model))
        agent.run({"analysis": "credit_score", "payload": PROFILE})

        assert "970/1000" in model.prompts[0]
        assert "Optimal BMI" not in model.prompts[0]

    def test_credit_score_without_explainer(self):
        context = AnalyticsAgent().run({"analysis": "credit_score", "payload": PROFILE})
        assert context["analytics"]["explanation"] == CREDIT_EXPLANATIONS["excellent"]

    def test_credit_score_timeout_keeps_canned_explanation(self):
        agent = AnalyticsAgent(explainer=ExplanationAgent(model=FakeModel(delay=1.0), timeout_seconds=0.05))
        context = agent.run({"analysis": "credit_score", "payload": PROFILE})
        assert context["analytics"]["explanation"] == CREDIT_EXPLANATIONS["excellent"]

    def test_required_fields(self):
        agent = AnalyticsAgent()
        with pytest.raises(InsufficientDataError):
            agent.run({"analysis": "credit_score", "payload": {"age": 30, "bmi": 22}})
        with pytest.raises(InsufficientDataError):
            agent.run({"analysis": "disease_radar", "payload": {"age": 30}})
        with pytest.raises(InsufficientDataError):
            agent.run({"analysis": "disease_radar", "payload": None})

    def test_disease_radar_failure_fallback(self):
        agent = AnalyticsAgent(explainer=ExplanationAgent(model=FakeModel(error=TimeoutError())))
        context = agent.run({
            "analysis": "disease_radar",
            "payload": {"age": 45, "gender": "Male", "bmi": 31, "bloodPressure": "135/85", "smokingStatus": "yes"},
        })
        result = context["analytics"]
        assert result["status"] == "WARNING"
        assert result["aiExplanation"] == DISEASE_RADAR_FALLBACK

    def test_mental_defaults(self):
        """No logs and no sleep means a neutral score with 7h assumed."""
        context = AnalyticsAgent().run({"analysis": "mental", "payload": {}})
        assert context["analytics"] == {"mentalScore": 50, "riskBand": "Moderate", "breakdown": {"Base Neutral": 50}}

    def test_mental_zero_sleep_matches_missing_sleep(self):
        agent = AnalyticsAgent()
        zero = agent.run({"analysis": "mental", "payload": {"moodLogs": [2, 3], "sleepHours": 0}})["analytics"]
        missing = agent.run({"analysis": "mental", "payload": {"moodLogs": [2, 3]}})["analytics"]

        assert zero == missing
        assert "Poor Sleep Penalty" not in zero["breakdown"]

    def test_lifestyle_and_labs(self):
        agent = AnalyticsAgent()
        lifestyle = agent.run({"analysis": "lifestyle", "payload": {"waterIntake": 8}})["analytics"]
        labs = agent.run({"analysis": "labs", "payload": [{"testName": "heart rate", "value": 110, "unit": "bpm"}]})["analytics"]

        assert lifestyle["score"] == 95
        assert labs["results"][0]["interpretation"] == "Tachycardia (High)"
        assert labs["results"][0]["isAnomalous"] is True

    def test_unknown_analysis(self):
        with pytest.raises(ValueError):
            AnalyticsAgent().run({"analysis": "horoscope", "payload": {}})

    def test_changed_scores_are_archived(self):
        history = ScoreHistoryService()
        agent = AnalyticsAgent(history_service=history)

        agent.run({"analysis": "credit_score", "payload": PROFILE, "user_id": "u1"})
        worse = dict(PROFILE, smokingStatus="yes")
        agent.run({"analysis": "credit_score", "payload": worse, "user_id": "u1"})
        agent.run({"analysis": "credit_score", "payload": worse, "user_id": "u1"})

        assert history.get_scores("u1")["healthScore"] == 870
        records = history.get_history("u1").records
        assert len(records) == 1
        assert records[0].scores["healthScore"] == 970

    def test_sync_profile_scores(self):
        history = ScoreHistoryService()
        snapshot = AnalyticsAgent(history_service=history).sync_profile_scores("u2", {"age": 30, "bmi": 24})

        assert snapshot == {"healthScore": 840, "cardiacRisk": 2, "diabetesRisk": 1}
        assert history.get_scores("u2") == snapshot


class TestObservability:
    """Traced agent runs feed the pipeline metrics."""

    def test_runs_are_counted(self):
        before = metrics.total_requests
        AnalyticsAgent().run({"analysis": "lifestyle", "payload": {}})

        summary = get_metrics_summary()
        assert metrics.total_requests == before + 1
        assert "AnalyticsAgent.arun" in summary["agent_avg_latency"]
        assert summary["success_rate"].endswith("%")


class TestCommandLine:
    """main.py end to end, without the AI step."""

    def test_prints_analysis_json(self, tmp_path, capsys):
        body = tmp_path / "labs.json"
        body.write_text(json.dumps([{"testName": "hba1c", "value": 5.2, "unit": "%"}]))

        assert main(["labs", str(body), "--no-explain"]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output["results"][0]["interpretation"] == "Normal"

    def test_rejects_path_like_user_id(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setattr(score_history, "SCORE_HISTORY_PATH", tmp_path / "store")
        body = tmp_path / "profile.json"
        body.write_text(json.dumps(PROFILE))

        code = main([
            "credit_score", str(body), "--no-explain", "--user-id", "../escaped",
        ])

        assert code == 1
        assert "Invalid user id" in capsys.readouterr().err
        assert not (tmp_path / "escaped.json").exists()
