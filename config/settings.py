"""Central Configuration for HealthGuard."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Base Directory (Root of the project)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load Environment Variables
load_dotenv(BASE_DIR / ".env")

# LLM Settings
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL_NAME = os.getenv("GEMINI_MODEL_NAME", "gemini-2.0-flash")

# AI Explanation Settings
AI_EXPLANATION_TIMEOUT_SECONDS = float(os.getenv("AI_EXPLANATION_TIMEOUT_SECONDS", "4.0"))
AI_RATE_LIMIT_PER_MINUTE = int(os.getenv("AI_RATE_LIMIT_PER_MINUTE", "30"))

# Scoring Algorithm Version (stamped on every score history record)
ALGORITHM_VERSION = "1.0.0"

# Paths
SCORE_HISTORY_PATH = Path(os.getenv("SCORE_HISTORY_PATH", BASE_DIR / ".score_history"))
