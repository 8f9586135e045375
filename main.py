"""HealthGuard - command line runner

Runs one deterministic analysis over a JSON request body and prints the
JSON response, the same shape an HTTP handler would return.

    python main.py credit_score profile.json
    python main.py labs labs.json --no-explain
    python main.py disease_radar profile.json --user-id u123
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from agents.analytics_agent import AnalyticsAgent
from agents.explanation_agent import ExplanationAgent
from core.observability import get_metrics_summary
from services.rate_limiter import RateLimiter
from services.score_history import ScoreHistoryService

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="HealthGuard deterministic health analytics")
    parser.add_argument("analysis", choices=AnalyticsAgent.ANALYSES)
    parser.add_argument("payload", type=Path, help="JSON file with the request body")
    parser.add_argument("--user-id", help="Archive changed scores for this user")
    parser.add_argument("--no-explain", action="store_true", help="Skip the AI explanation step")
    args = parser.parse_args(argv)

    try:
        payload = json.loads(args.payload.read_text())
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: could not read {args.payload}: {e}", file=sys.stderr)
        return 2

    explainer = None if args.no_explain else ExplanationAgent(rate_limiter=RateLimiter())
    history = ScoreHistoryService(persist=True) if args.user_id else None
    agent = AnalyticsAgent(explainer=explainer, history_service=history)

    context = {
        "analysis": args.analysis,
        "payload": payload,
        "user_id": args.user_id,
        "explain": not args.no_explain,
    }
    try:
        context = agent.run(context)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info(f"Analysis complete. Metrics: {get_metrics_summary()}")
    print(json.dumps(context["analytics"], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
