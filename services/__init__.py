"""HealthGuard Services Module.

Services:
    ScoreHistoryService: Current scores plus append-only score history per user.
    RateLimiter: Injected call budget for the AI explanation step.
"""
from services.rate_limiter import RateLimiter, RateLimitExceededError
from services.score_history import ScoreHistoryService, build_score_snapshot

__all__ = [
    "RateLimiter",
    "RateLimitExceededError",
    "ScoreHistoryService",
    "build_score_snapshot",
]
