import json
from typing import Any, Dict, Iterator, List, Optional, Tuple
from dataclasses import dataclass, field

from config.settings import ALGORITHM_VERSION

# Keys of the persisted score snapshot, in display order
SCORE_KEYS = ("healthScore", "cardiacRisk", "diabetesRisk", "mentalScore", "lifestyleScore")


@dataclass(frozen=True)
class ScoreRecord:
    """One archived snapshot of a user's deterministic scores."""
    timestamp: str
    algorithm_version: str
    scores: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "algorithmVersion": self.algorithm_version,
            "scores": dict(self.scores),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScoreRecord":
        if not isinstance(data, dict) or "timestamp" not in data:
            raise ValueError(f"Not a score record: {data!r}")
        return cls(
            timestamp=str(data["timestamp"]),
            algorithm_version=str(data.get("algorithmVersion") or ALGORITHM_VERSION),
            scores=dict(data.get("scores") or {}),
        )


class ScoreHistory:
    """Append-only log of ScoreRecords.

    Records can be appended and read, never edited or removed.
    """

    def __init__(self, records: Optional[List[ScoreRecord]] = None):
        self._records: List[ScoreRecord] = list(records or [])

    def append(self, record: ScoreRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> Tuple[ScoreRecord, ...]:
        return tuple(self._records)

    @property
    def latest(self) -> Optional[ScoreRecord]:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ScoreRecord]:
        return iter(tuple(self._records))

    # === Serialization ===

    def to_list(self) -> List[dict]:
        return [record.to_dict() for record in self._records]

    def to_json(self) -> str:
        return json.dumps(self.to_list())

    @classmethod
    def from_list(cls, items: List[dict]) -> "ScoreHistory":
        if not isinstance(items, list):
            raise ValueError("Score history must be a list of records")
        return cls([ScoreRecord.from_dict(item) for item in items])

    @classmethod
    def from_json(cls, payload: Optional[str]) -> "ScoreHistory":
        """Parse a stored history; an empty payload is an empty history."""
        if not payload:
            return cls()
        try:
            items = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"Score history is not valid JSON: {e}") from e
        return cls.from_list(items)
