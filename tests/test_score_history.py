"""Tests for score history tracking."""
from datetime import datetime, timezone

import pytest
from config.settings import ALGORITHM_VERSION
from models.history import ScoreHistory, ScoreRecord
from services.score_history import ScoreHistoryService, build_score_snapshot
from tools.health_analytics import evaluate_credit_score, evaluate_disease_risks, evaluate_mental_health

FIXED_TIME = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_TIME


class TestScoreHistoryService:
    """Archive previous scores whenever a new value differs."""

    def test_first_scores_are_stored_without_history(self):
        service = ScoreHistoryService(clock=fixed_clock)
        assert service.record_scores("u1", {"healthScore": 840}) is True
        assert service.get_scores("u1") == {"healthScore": 840}
        assert len(service.get_history("u1")) == 0

    def test_unchanged_scores_are_ignored(self):
        service = ScoreHistoryService(clock=fixed_clock)
        service.record_scores("u1", {"healthScore": 840})
        assert service.record_scores("u1", {"healthScore": 840}) is False
        assert service.record_scores("u1", {"healthScore": None}) is False
        assert len(service.get_history("u1")) == 0

    def test_change_archives_previous_snapshot(self):
        service = ScoreHistoryService(clock=fixed_clock)
        service.record_scores("u1", {"healthScore": 840, "cardiacRisk": 2})
        service.record_scores("u1", {"cardiacRisk": 12})

        assert service.get_scores("u1") == {"healthScore": 840, "cardiacRisk": 12}
        record = service.get_history("u1").latest
        assert record.timestamp == FIXED_TIME.isoformat()
        assert record.algorithm_version == ALGORITHM_VERSION
        assert record.scores["healthScore"] == 840
        assert record.scores["cardiacRisk"] == 2
        assert record.scores["mentalScore"] is None

    def test_history_cannot_be_edited_through_reads(self):
        service = ScoreHistoryService(clock=fixed_clock)
        service.record_scores("u1", {"healthScore": 840})
        service.record_scores("u1", {"healthScore": 700})

        copy = service.get_history("u1")
        copy.append(ScoreRecord(timestamp="x", algorithm_version="9"))
        assert isinstance(copy.records, tuple)
        assert len(service.get_history("u1")) == 1

    def test_users_are_independent(self):
        service = ScoreHistoryService(clock=fixed_clock)
        service.record_scores("u1", {"healthScore": 840})
        assert service.get_scores("u2") == {}
        assert service.has_changed("u2", {"healthScore": 840}) is True

    def test_persistence_round_trip(self, tmp_path):
        service = ScoreHistoryService(persist=True, storage_dir=tmp_path, clock=fixed_clock)
        service.record_scores("u1", {"healthScore": 840})
        service.record_scores("u1", {"healthScore": 700})

        reloaded = ScoreHistoryService(persist=True, storage_dir=tmp_path)
        assert reloaded.get_scores("u1") == {"healthScore": 700}
        assert [r.scores["healthScore"] for r in reloaded.get_history("u1")] == [840]

    def test_user_ids_cannot_leave_the_storage_dir(self, tmp_path):
        store = tmp_path / "store"
        service = ScoreHistoryService(persist=True, storage_dir=store, clock=fixed_clock)

        for bad_id in ("../escaped", "a/b", "", "..", "u1.json", None):
            with pytest.raises(ValueError):
                service.record_scores(bad_id, {"healthScore": 840})

        assert not (tmp_path / "escaped.json").exists()
        assert list(store.iterdir()) == []

    def test_stored_file_with_bad_user_id_is_skipped(self, tmp_path):
        (tmp_path / "evil.json").write_text('{"userId": "../evil", "scores": {"healthScore": 840}}')
        service = ScoreHistoryService(persist=True, storage_dir=tmp_path)
        assert service.get_scores("../evil") == {}

    def test_unreadable_files_are_skipped(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json")
        service = ScoreHistoryService(persist=True, storage_dir=tmp_path)
        assert service.get_scores("broken") == {}


class TestScoreHistorySerialization:
    """JSON boundary of the append-only log."""

    def test_json_shape(self):
        history = ScoreHistory()
        history.append(ScoreRecord(FIXED_TIME.isoformat(), "1.0.0", {"healthScore": 840}))
        assert history.to_list() == [
            {"timestamp": FIXED_TIME.isoformat(), "algorithmVersion": "1.0.0", "scores": {"healthScore": 840}}
        ]
        assert ScoreHistory.from_json(history.to_json()).records == history.records

    def test_empty_payload(self):
        assert len(ScoreHistory.from_json(None)) == 0
        assert len(ScoreHistory.from_json("")) == 0
        assert len(ScoreHistory.from_json("[]")) == 0

    def test_invalid_payloads(self):
        with pytest.raises(ValueError):
            ScoreHistory.from_json("{oops")
        with pytest.raises(ValueError):
            ScoreHistory.from_json('{"timestamp": "t"}')
        with pytest.raises(ValueError):
            ScoreHistory.from_json('[{"scores": {}}]')

    def test_missing_version_defaults(self):
        record = ScoreRecord.from_dict({"timestamp": "2026-01-01T00:00:00", "scores": {"mentalScore": 60}})
        assert record.algorithm_version == ALGORITHM_VERSION


def test_build_score_snapshot():
    profile = {"age": 45, "gender": "Male", "bmi": 31, "bloodPressure": "135/85", "smokingStatus": "yes"}
    snapshot = build_score_snapshot(
        credit=evaluate_credit_score(profile),
        disease=evaluate_disease_risks(profile),
        mental=evaluate_mental_health([4, 5, 4], 8),
    )
    assert snapshot == {"healthScore": 600, "cardiacRisk": 21, "diabetesRisk": 18, "mentalScore": 87}
