"""Score History Service

This module provides:
1. Per-user storage of the latest deterministic scores
2. An append-only history of previous score snapshots
3. Optional persistence to JSON (one file per user)

The analytics engine never diffs scores itself; this service compares the
new values against the stored ones and archives the old snapshot when any
of them changed.
"""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from config.settings import ALGORITHM_VERSION, SCORE_HISTORY_PATH
from models.history import SCORE_KEYS, ScoreHistory, ScoreRecord
from models.results import (
    DiseaseRiskResult,
    HealthCreditScoreResult,
    LifestyleResult,
    MentalHealthResult,
)

logger = logging.getLogger(__name__)

# User ids double as file names in the storage directory
USER_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_user_id(user_id: Any) -> str:
    if not isinstance(user_id, str) or not USER_ID_PATTERN.fullmatch(user_id):
        raise ValueError(f"Invalid user id {user_id!r}: use letters, digits, '_' or '-'")
    return user_id


def build_score_snapshot(
    credit: Optional[HealthCreditScoreResult] = None,
    disease: Optional[DiseaseRiskResult] = None,
    mental: Optional[MentalHealthResult] = None,
    lifestyle: Optional[LifestyleResult] = None,
) -> Dict[str, Any]:
    """Collect the headline numbers of whichever results are given."""
    snapshot: Dict[str, Any] = {}
    if credit is not None:
        snapshot["healthScore"] = credit.score
    if disease is not None:
        snapshot["cardiacRisk"] = disease.cardiovascular_percentage
        snapshot["diabetesRisk"] = disease.type2_diabetes_percentage
    if mental is not None:
        snapshot["mentalScore"] = mental.mental_score
    if lifestyle is not None:
        snapshot["lifestyleScore"] = lifestyle.score
    return snapshot


class ScoreHistoryService:
    """
    In-memory score store with an append-only history per user.

    Features:
    - Record new scores, archiving the previous snapshot on change
    - Read current scores and history
    - Optional persistence to disk
    """

    def __init__(
        self,
        persist: bool = False,
        storage_dir: Optional[Path] = None,
        algorithm_version: str = ALGORITHM_VERSION,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._current: Dict[str, Dict[str, Any]] = {}
        self._history: Dict[str, ScoreHistory] = {}
        self._persist = persist
        self._storage_dir = Path(storage_dir or SCORE_HISTORY_PATH)
        self._clock = clock
        self.algorithm_version = algorithm_version

        if persist:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    # === Core Operations ===

    def get_scores(self, user_id: str) -> Dict[str, Any]:
        return dict(self._current.get(user_id, {}))

    def get_history(self, user_id: str) -> ScoreHistory:
        return ScoreHistory(list(self._history.get(user_id, ScoreHistory()).records))

    def has_changed(self, user_id: str, scores: Dict[str, Any]) -> bool:
        """True when any provided score differs from the stored value."""
        existing = self._current.get(user_id, {})
        return any(
            value is not None and value != existing.get(key)
            for key, value in scores.items()
            if key in SCORE_KEYS
        )

    def record_scores(self, user_id: str, scores: Dict[str, Any]) -> bool:
        """
        Store new scores for a user.

        When they differ from the stored ones and a previous snapshot exists,
        that snapshot is appended to the history first.

        Returns True if anything changed. Raises ValueError for a user id
        that is not a plain token.
        """
        _validate_user_id(user_id)
        if not self.has_changed(user_id, scores):
            return False

        existing = self._current.get(user_id, {})
        if existing:
            record = ScoreRecord(
                timestamp=self._clock().isoformat(),
                algorithm_version=self.algorithm_version,
                scores={key: existing.get(key) for key in SCORE_KEYS},
            )
            self._history.setdefault(user_id, ScoreHistory()).append(record)
            logger.info(f"Archived score snapshot for {user_id} ({len(self._history[user_id])} records)")

        updated = dict(existing)
        updated.update({key: value for key, value in scores.items() if key in SCORE_KEYS and value is not None})
        self._current[user_id] = updated

        if self._persist:
            self._save_user(user_id)
        return True

    # === Persistence ===

    def _user_path(self, user_id: str) -> Path:
        return self._storage_dir / f"{_validate_user_id(user_id)}.json"

    def _save_user(self, user_id: str):
        """Save one user's scores and history to disk."""
        payload = {
            "userId": user_id,
            "scores": self._current.get(user_id, {}),
            "scoreHistory": self._history.get(user_id, ScoreHistory()).to_list(),
        }
        with open(self._user_path(user_id), "w") as f:
            json.dump(payload, f, indent=2)

    def _load_from_disk(self):
        """Load every stored user; unreadable files are skipped with a warning."""
        for path in self._storage_dir.glob("*.json"):
            try:
                with open(path) as f:
                    data = json.load(f)
                user_id = _validate_user_id(data["userId"])
                self._current[user_id] = dict(data.get("scores") or {})
                self._history[user_id] = ScoreHistory.from_list(data.get("scoreHistory") or [])
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"Failed to load score history {path}: {e}")

        logger.info(f"Loaded score history for {len(self._current)} users")
