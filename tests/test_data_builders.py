"""Tests for record building and serialization in data_builders."""

from __future__ import annotations

from datetime import timedelta
import json

import pytest

from aquarch import ProgressTracker, const, data_builders as db
from aquarch.engines.achievement_engine import AchievementEngine
from aquarch.exceptions import InvalidInputError
from aquarch.utils.dt_utils import EPOCH
from tests.helpers import NOW, make_definition, make_progress, make_session

MS = 1000


def document_session(**overrides: object) -> dict[str, object]:
    """Build a camelCase session document as the session store keeps it."""
    doc: dict[str, object] = {
        "_id": "abc123",
        "userId": "user-1",
        "gameType": const.GAME_TYPE_CONSERVATION_LAB,
        "difficultyLevel": const.DIFFICULTY_INTERMEDIATE,
        "status": const.SESSION_STATUS_COMPLETED,
        "currentScore": 70,
        "maxScore": 100,
        "completionPercentage": 100,
        "startTime": int(NOW.timestamp() * MS),
        "endTime": int((NOW + timedelta(minutes=12)).timestamp() * MS),
        "gameData": {"ignored": True},
    }
    doc.update(overrides)
    return doc


class TestBuildSessionRecord:
    """Tests for session record validation."""

    def test_document_store_shape(self) -> None:
        """camelCase keys and epoch milliseconds are normalized."""
        record = db.build_session_record(document_session())

        assert record == {
            const.DATA_SESSION_ID: "abc123",
            const.DATA_SESSION_USER_ID: "user-1",
            const.DATA_SESSION_GAME_TYPE: const.GAME_TYPE_CONSERVATION_LAB,
            const.DATA_SESSION_DIFFICULTY: const.DIFFICULTY_INTERMEDIATE,
            const.DATA_SESSION_STATUS: const.SESSION_STATUS_COMPLETED,
            const.DATA_SESSION_SCORE: 70.0,
            const.DATA_SESSION_MAX_SCORE: 100.0,
            const.DATA_SESSION_COMPLETION_PERCENTAGE: 100.0,
            const.DATA_SESSION_START_TIME: NOW,
            const.DATA_SESSION_END_TIME: NOW + timedelta(minutes=12),
        }

    def test_active_session_without_times(self) -> None:
        """Optional fields get defaults."""
        record = db.build_session_record(
            {
                "game_type": const.GAME_TYPE_ARTIFACT_IDENTIFICATION,
                "difficulty": const.DIFFICULTY_BEGINNER,
                "status": const.SESSION_STATUS_ACTIVE,
                "score": 0,
                "max_score": 100,
            }
        )

        assert record[const.DATA_SESSION_COMPLETION_PERCENTAGE] == 0
        assert record[const.DATA_SESSION_START_TIME] is None
        assert record[const.DATA_SESSION_END_TIME] is None

    def test_unknown_game_type_raises(self) -> None:
        """Game types are a closed set."""
        with pytest.raises(InvalidInputError) as exc_info:
            db.build_session_record(document_session(gameType="pottery"))

        assert exc_info.value.field == const.DATA_SESSION_GAME_TYPE
        assert not exc_info.value.is_configuration_error

    def test_negative_score_raises(self) -> None:
        """Scores cannot be negative."""
        with pytest.raises(InvalidInputError) as exc_info:
            db.build_session_record(document_session(currentScore=-1))

        assert exc_info.value.field == const.DATA_SESSION_SCORE

    def test_bad_timestamp_raises(self) -> None:
        """Unparseable timestamps are rejected."""
        with pytest.raises(InvalidInputError):
            db.build_session_record(document_session(startTime="yesterday-ish"))

    @pytest.mark.parametrize(
        ("key", "field"),
        [
            ("startTime", const.DATA_SESSION_START_TIME),
            ("endTime", const.DATA_SESSION_END_TIME),
        ],
    )
    def test_out_of_range_epoch_raises(self, key: str, field: str) -> None:
        """Epoch milliseconds beyond the datetime range are invalid input."""
        with pytest.raises(InvalidInputError) as exc_info:
            db.build_session_record(document_session(**{key: 10**20}))

        assert exc_info.value.field == field

    def test_non_mapping_raises(self) -> None:
        """Only mappings are session records."""
        with pytest.raises(InvalidInputError):
            db.build_session_record(["not", "a", "session"])  # type: ignore[arg-type]

    def test_build_session_records_accepts_none(self) -> None:
        """No sessions is an empty history."""
        assert db.build_session_records(None) == []

    def test_revalidating_a_record_is_stable(self) -> None:
        """Built records can be passed through the builder again."""
        record = db.build_session_record(document_session())
        assert db.build_session_record(record) == record


class TestBuildProgressSnapshot:
    """Tests for persisted snapshot validation."""

    def test_document_store_shape(self) -> None:
        """camelCase progress entries are normalized and rounded."""
        snapshot = db.build_progress_snapshot(
            {
                const.GAME_TYPE_SITE_DOCUMENTATION: {
                    "completedLevels": 2,
                    "totalLevels": 3,
                    "bestScore": 88,
                    "averageScore": 72.5,
                    "timeSpent": 41,
                    "lastPlayed": "2026-03-01T12:00:00Z",
                    "achievements": ["documentation_pro"],
                }
            }
        )

        assert snapshot == {
            const.GAME_TYPE_SITE_DOCUMENTATION: {
                const.DATA_PROGRESS_COMPLETED_LEVELS: 2,
                const.DATA_PROGRESS_TOTAL_LEVELS: 3,
                const.DATA_PROGRESS_BEST_SCORE: 88,
                const.DATA_PROGRESS_AVERAGE_SCORE: 73,
                const.DATA_PROGRESS_TIME_SPENT: 41,
                const.DATA_PROGRESS_LAST_PLAYED: NOW,
                const.DATA_PROGRESS_ACHIEVEMENTS: ["documentation_pro"],
            }
        }

    def test_missing_fields_default_to_zero(self) -> None:
        """A sparse entry is zero-filled with last_played at the epoch."""
        snapshot = db.build_progress_snapshot(
            {const.GAME_TYPE_CONSERVATION_LAB: {}}
        )
        assert snapshot[const.GAME_TYPE_CONSERVATION_LAB] == db.empty_game_progress()

    def test_none_is_empty(self) -> None:
        """No previous snapshot is an empty map."""
        assert db.build_progress_snapshot(None) == {}

    def test_unknown_game_type_raises(self) -> None:
        """Snapshot keys must be known game types."""
        with pytest.raises(InvalidInputError) as exc_info:
            db.build_progress_snapshot({"pottery": {}})

        assert exc_info.value.field == "pottery"

    def test_serialized_snapshot_builds_back(self) -> None:
        """Serialized snapshots are JSON-safe and load back unchanged."""
        snapshot = {
            const.GAME_TYPE_ARTIFACT_IDENTIFICATION: make_progress(
                completed_levels=1, best_score=95, time_spent=12, last_played=NOW
            )
        }

        serialized = db.serialize_progress_snapshot(snapshot)  # type: ignore[arg-type]

        entry = serialized[const.GAME_TYPE_ARTIFACT_IDENTIFICATION]
        assert entry[const.DATA_PROGRESS_LAST_PLAYED] == NOW.isoformat()
        assert db.build_progress_snapshot(serialized) == snapshot


class TestBuildCertificationAttempt:
    """Tests for certification attempt validation."""

    def test_document_store_shape(self) -> None:
        """attemptDate in epoch milliseconds is normalized."""
        attempt = db.build_certification_attempt(
            {"attemptDate": 0, "passed": False, "overallScore": 62}
        )

        assert attempt == {
            const.DATA_ATTEMPT_DATE: EPOCH,
            const.DATA_ATTEMPT_PASSED: False,
            const.DATA_ATTEMPT_OVERALL_SCORE: 62.0,
        }

    def test_missing_passed_raises(self) -> None:
        """The outcome of an attempt is required."""
        with pytest.raises(InvalidInputError) as exc_info:
            db.build_certification_attempt({"attemptDate": 0})

        assert exc_info.value.field == const.DATA_ATTEMPT_PASSED


class TestSnapshotFractions:
    """Tests for fractional values in persisted snapshots."""

    def test_fractional_values_are_kept(self) -> None:
        """best_score and time_spent keep fractions; average_score rounds."""
        snapshot = db.build_progress_snapshot(
            {
                const.GAME_TYPE_ARTIFACT_IDENTIFICATION: {
                    "bestScore": 89.6,
                    "averageScore": 72.5,
                    "timeSpent": 12.4,
                }
            }
        )

        entry = snapshot[const.GAME_TYPE_ARTIFACT_IDENTIFICATION]
        assert entry[const.DATA_PROGRESS_BEST_SCORE] == 89.6
        assert entry[const.DATA_PROGRESS_TIME_SPENT] == 12.4
        assert entry[const.DATA_PROGRESS_AVERAGE_SCORE] == 73

    def test_fractional_previous_score_still_crosses(self) -> None:
        """A stored 89.6 is below 90, so reaching 90 fires."""
        previous = db.build_progress_snapshot(
            {const.GAME_TYPE_ARTIFACT_IDENTIFICATION: {"bestScore": 89.6}}
        )
        current = {
            const.GAME_TYPE_ARTIFACT_IDENTIFICATION: make_progress(best_score=90)
        }

        earned = AchievementEngine.detect(
            current, previous, [make_definition(threshold=90)], NOW  # type: ignore[arg-type, list-item]
        )

        assert [a["id"] for a in earned] == ["test-achievement"]


class TestSerializeResult:
    """Tests for JSON-safe result serialization."""

    def test_result_is_json_safe(self, tracker: ProgressTracker) -> None:
        """Datetimes become ISO strings and everything else passes through."""
        result = tracker.calculate_progress(
            [make_session(score=95, session_id="s-1")], None, NOW
        )

        payload = json.loads(json.dumps(db.serialize_result(result)))

        assert payload["overall_completion"] == result["overall_completion"]
        assert payload["certification_status"] == result["certification_status"]
        assert payload["recommendations"] == result["recommendations"]
        assert payload["new_achievements"]
        for achievement in payload["new_achievements"]:
            assert achievement[const.DATA_ACHIEVEMENT_EARNED_DATE] == NOW.isoformat()
        assert payload["totals"] == {
            "total_game_time": 10,
            "total_score": 95,
            "games_played": 1,
            "last_activity": (NOW - timedelta(hours=1)).isoformat(),
        }

    def test_serialize_totals(self) -> None:
        """Only last_activity needs converting."""
        totals = {
            "total_game_time": 0,
            "total_score": 0,
            "games_played": 0,
            "last_activity": EPOCH,
        }

        assert db.serialize_totals(totals) == {  # type: ignore[arg-type]
            **totals,
            "last_activity": "1970-01-01T00:00:00+00:00",
        }
