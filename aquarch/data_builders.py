"""Record validation and normalization helpers.

This module is the SINGLE SOURCE OF TRUTH for turning raw document-store
dicts into the typed structures the engines consume, and for turning engine
output back into JSON-safe dicts for persistence.

### Build Functions
Each structure has a `build_<structure>()` function that:
- Accepts snake_case keys or the document store's camelCase keys
- Validates the closed enumerations (game type, difficulty, status)
- Coerces numbers and timestamps (epoch ms, ISO strings, datetimes)
- Applies field defaults
- Raises InvalidInputError (never voluptuous.Invalid) on failure

### Serialize Functions
`serialize_<structure>()` functions produce dicts containing only str, int,
float, bool, list, and dict values (timestamps as ISO 8601 strings).

Business invariants guaranteed by the session layer (score <= max_score,
end_time >= start_time) are deliberately not re-checked here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, cast

import voluptuous as vol

from . import const
from .exceptions import InvalidInputError
from .type_defs import (
    CertificationAttempt,
    GameProgress,
    ProgressCalculationResult,
    ProgressMap,
    ProgressTotals,
    SessionRecord,
)
from .utils.dt_utils import EPOCH, dt_parse
from .utils.math_utils import round_half_up

# ==============================================================================
# VALIDATORS
# ==============================================================================


def validate_timestamp(value: Any) -> datetime:
    """Coerce a timestamp value into an aware UTC datetime.

    Raises:
        vol.Invalid: If the value cannot be parsed
    """
    parsed = dt_parse(value)
    if parsed is None:
        raise vol.Invalid(f"Invalid timestamp: {value!r}")
    return parsed


def validate_optional_timestamp(value: Any) -> datetime | None:
    """Like validate_timestamp, but None and empty strings pass through."""
    if value is None or value == "":
        return None
    return validate_timestamp(value)


_NON_NEGATIVE_NUMBER = vol.All(vol.Coerce(float), vol.Range(min=0))
_NON_NEGATIVE_INT = vol.All(vol.Coerce(int), vol.Range(min=0))

SESSION_RECORD_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_SESSION_GAME_TYPE): vol.In(const.GAME_TYPES),
        vol.Required(const.DATA_SESSION_DIFFICULTY): vol.In(const.DIFFICULTY_LEVELS),
        vol.Required(const.DATA_SESSION_STATUS): vol.In(const.SESSION_STATUSES),
        vol.Required(const.DATA_SESSION_SCORE): _NON_NEGATIVE_NUMBER,
        vol.Required(const.DATA_SESSION_MAX_SCORE): _NON_NEGATIVE_NUMBER,
        vol.Optional(
            const.DATA_SESSION_COMPLETION_PERCENTAGE, default=0
        ): _NON_NEGATIVE_NUMBER,
        vol.Optional(
            const.DATA_SESSION_START_TIME, default=None
        ): validate_optional_timestamp,
        vol.Optional(
            const.DATA_SESSION_END_TIME, default=None
        ): validate_optional_timestamp,
        vol.Optional(const.DATA_SESSION_ID): vol.Coerce(str),
        vol.Optional(const.DATA_SESSION_USER_ID): vol.Coerce(str),
    },
    # Session documents also carry gameData, actions, etc.
    extra=vol.REMOVE_EXTRA,
)

GAME_PROGRESS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_PROGRESS_COMPLETED_LEVELS, default=0): (
            _NON_NEGATIVE_INT
        ),
        vol.Optional(const.DATA_PROGRESS_TOTAL_LEVELS, default=0): _NON_NEGATIVE_INT,
        vol.Optional(const.DATA_PROGRESS_BEST_SCORE, default=0): _NON_NEGATIVE_NUMBER,
        vol.Optional(const.DATA_PROGRESS_AVERAGE_SCORE, default=0): (
            _NON_NEGATIVE_NUMBER
        ),
        vol.Optional(const.DATA_PROGRESS_TIME_SPENT, default=0): _NON_NEGATIVE_NUMBER,
        vol.Optional(
            const.DATA_PROGRESS_LAST_PLAYED, default=None
        ): validate_optional_timestamp,
        vol.Optional(const.DATA_PROGRESS_ACHIEVEMENTS, default=list): [
            vol.Coerce(str)
        ],
    },
    extra=vol.REMOVE_EXTRA,
)

CERTIFICATION_ATTEMPT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_ATTEMPT_DATE): validate_timestamp,
        vol.Required(const.DATA_ATTEMPT_PASSED): bool,
        vol.Optional(const.DATA_ATTEMPT_OVERALL_SCORE): _NON_NEGATIVE_NUMBER,
    },
    extra=vol.REMOVE_EXTRA,
)


# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_keys(raw: Mapping[str, Any], aliases: Mapping[str, str]) -> dict[str, Any]:
    """Map camelCase document keys onto snake_case record keys.

    A snake_case key already present wins over its alias.
    """
    normalized: dict[str, Any] = {}
    for key, value in raw.items():
        target = aliases.get(key, key)
        if target in normalized and target != key:
            continue
        normalized[target] = value
    return normalized


def _format_invalid(err: vol.Invalid) -> tuple[str, str | None]:
    """Return (message, field) for a voluptuous error."""
    errors = err.errors if isinstance(err, vol.MultipleInvalid) else [err]
    first = errors[0]
    field = ".".join(str(part) for part in first.path) or None
    return "; ".join(str(e) for e in errors), field


def _as_rounded_int(value: float) -> int:
    """Average scores are stored as rounded integers."""
    return round_half_up(value)


def _as_stored_number(value: float) -> float:
    """Keep fractional values as given; integral floats become ints."""
    return int(value) if float(value).is_integer() else float(value)


# ==============================================================================
# SESSION RECORDS
# ==============================================================================


def build_session_record(raw: Mapping[str, Any]) -> SessionRecord:
    """Build a validated SessionRecord from a raw session document.

    Args:
        raw: Session document with snake_case or camelCase keys

    Returns:
        SessionRecord with aware UTC timestamps

    Raises:
        InvalidInputError: If the document is not a mapping or fails validation

    Example:
        build_session_record({
            "gameType": "conservation_lab",
            "difficulty": "beginner",
            "status": "completed",
            "currentScore": 70,
            "maxScore": 100,
            "completionPercentage": 100,
            "startTime": 1760000000000,
            "endTime": 1760000600000,
        })
    """
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            f"Session record must be a mapping, got {type(raw).__name__}"
        )

    try:
        record = SESSION_RECORD_SCHEMA(
            _normalize_keys(raw, const.SESSION_KEY_ALIASES)
        )
    except vol.Invalid as err:
        message, field = _format_invalid(err)
        raise InvalidInputError(f"Invalid session record: {message}", field) from err

    return cast("SessionRecord", record)


def build_session_records(
    raw_sessions: Iterable[Mapping[str, Any]] | None,
) -> list[SessionRecord]:
    """Build SessionRecords for every raw session document.

    Records that are already validated SessionRecords are re-validated;
    validation is idempotent.
    """
    if not raw_sessions:
        return []
    return [build_session_record(raw) for raw in raw_sessions]


# ==============================================================================
# GAME PROGRESS SNAPSHOTS
# ==============================================================================


def empty_game_progress(total_levels: int = 0) -> GameProgress:
    """Return a zeroed GameProgress (never played)."""
    return {
        const.DATA_PROGRESS_COMPLETED_LEVELS: 0,
        const.DATA_PROGRESS_TOTAL_LEVELS: total_levels,
        const.DATA_PROGRESS_BEST_SCORE: 0,
        const.DATA_PROGRESS_AVERAGE_SCORE: 0,
        const.DATA_PROGRESS_TIME_SPENT: 0,
        const.DATA_PROGRESS_LAST_PLAYED: EPOCH,
        const.DATA_PROGRESS_ACHIEVEMENTS: [],
    }


def build_game_progress(raw: Mapping[str, Any]) -> GameProgress:
    """Build a validated GameProgress from a persisted snapshot entry.

    Raises:
        InvalidInputError: If the entry fails validation
    """
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            f"Game progress must be a mapping, got {type(raw).__name__}"
        )

    try:
        data = GAME_PROGRESS_SCHEMA(_normalize_keys(raw, const.PROGRESS_KEY_ALIASES))
    except vol.Invalid as err:
        message, field = _format_invalid(err)
        raise InvalidInputError(f"Invalid game progress: {message}", field) from err

    return {
        const.DATA_PROGRESS_COMPLETED_LEVELS: data[
            const.DATA_PROGRESS_COMPLETED_LEVELS
        ],
        const.DATA_PROGRESS_TOTAL_LEVELS: data[const.DATA_PROGRESS_TOTAL_LEVELS],
        const.DATA_PROGRESS_BEST_SCORE: _as_stored_number(
            data[const.DATA_PROGRESS_BEST_SCORE]
        ),
        const.DATA_PROGRESS_AVERAGE_SCORE: _as_rounded_int(
            data[const.DATA_PROGRESS_AVERAGE_SCORE]
        ),
        const.DATA_PROGRESS_TIME_SPENT: _as_stored_number(
            data[const.DATA_PROGRESS_TIME_SPENT]
        ),
        const.DATA_PROGRESS_LAST_PLAYED: data[const.DATA_PROGRESS_LAST_PLAYED]
        or EPOCH,
        const.DATA_PROGRESS_ACHIEVEMENTS: list(data[const.DATA_PROGRESS_ACHIEVEMENTS]),
    }


def build_progress_snapshot(
    raw_snapshot: Mapping[str, Mapping[str, Any]] | None,
) -> ProgressMap:
    """Build a per-game-type snapshot from persisted data.

    Game types missing from the input stay missing; the achievement engine
    treats them as zeroed progress. best_score and time_spent keep any
    fraction so threshold crossings compare against the stored value;
    average_score is rounded half-up.

    Raises:
        InvalidInputError: On an unknown game type key or an invalid entry
    """
    if not raw_snapshot:
        return {}
    if not isinstance(raw_snapshot, Mapping):
        raise InvalidInputError(
            f"Progress snapshot must be a mapping, got {type(raw_snapshot).__name__}"
        )

    snapshot: dict[str, GameProgress] = {}
    for game_type, entry in raw_snapshot.items():
        if game_type not in const.GAME_TYPES:
            raise InvalidInputError(
                f"Unknown game type in progress snapshot: {game_type}", game_type
            )
        snapshot[game_type] = build_game_progress(entry)
    return cast("ProgressMap", snapshot)


# ==============================================================================
# CERTIFICATION ATTEMPTS
# ==============================================================================


def build_certification_attempt(raw: Mapping[str, Any]) -> CertificationAttempt:
    """Build a validated CertificationAttempt from a stored attempt document.

    Raises:
        InvalidInputError: If the document is not a mapping or fails validation
    """
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            f"Certification attempt must be a mapping, got {type(raw).__name__}"
        )

    try:
        attempt = CERTIFICATION_ATTEMPT_SCHEMA(
            _normalize_keys(raw, const.ATTEMPT_KEY_ALIASES)
        )
    except vol.Invalid as err:
        message, field = _format_invalid(err)
        raise InvalidInputError(
            f"Invalid certification attempt: {message}", field
        ) from err

    return cast("CertificationAttempt", attempt)


# ==============================================================================
# SERIALIZATION
# ==============================================================================


def serialize_game_progress(progress: GameProgress) -> dict[str, Any]:
    """Return a JSON-safe dict for one GameProgress."""
    return {
        const.DATA_PROGRESS_COMPLETED_LEVELS: progress[
            const.DATA_PROGRESS_COMPLETED_LEVELS
        ],
        const.DATA_PROGRESS_TOTAL_LEVELS: progress[const.DATA_PROGRESS_TOTAL_LEVELS],
        const.DATA_PROGRESS_BEST_SCORE: progress[const.DATA_PROGRESS_BEST_SCORE],
        const.DATA_PROGRESS_AVERAGE_SCORE: progress[
            const.DATA_PROGRESS_AVERAGE_SCORE
        ],
        const.DATA_PROGRESS_TIME_SPENT: progress[const.DATA_PROGRESS_TIME_SPENT],
        const.DATA_PROGRESS_LAST_PLAYED: progress[
            const.DATA_PROGRESS_LAST_PLAYED
        ].isoformat(),
        const.DATA_PROGRESS_ACHIEVEMENTS: list(
            progress.get(const.DATA_PROGRESS_ACHIEVEMENTS, [])
        ),
    }


def serialize_progress_snapshot(snapshot: ProgressMap) -> dict[str, dict[str, Any]]:
    """Return a JSON-safe dict for a per-game-type snapshot.

    The output round-trips through build_progress_snapshot().
    """
    return {
        game_type: serialize_game_progress(progress)
        for game_type, progress in snapshot.items()
    }


def serialize_totals(totals: ProgressTotals) -> dict[str, Any]:
    """Return a JSON-safe dict for aggregate totals."""
    return {
        "total_game_time": totals["total_game_time"],
        "total_score": totals["total_score"],
        "games_played": totals["games_played"],
        "last_activity": totals["last_activity"].isoformat(),
    }


def serialize_result(result: ProgressCalculationResult) -> dict[str, Any]:
    """Return a JSON-safe dict for a full progress calculation result."""
    return {
        "overall_completion": result["overall_completion"],
        "game_progress": serialize_progress_snapshot(result["game_progress"]),
        "certification_status": result["certification_status"],
        "new_achievements": [
            {
                **{
                    key: value
                    for key, value in achievement.items()
                    if key != const.DATA_ACHIEVEMENT_EARNED_DATE
                },
                const.DATA_ACHIEVEMENT_EARNED_DATE: achievement[
                    const.DATA_ACHIEVEMENT_EARNED_DATE
                ].isoformat(),
            }
            for achievement in result["new_achievements"]
        ],
        "recommendations": list(result["recommendations"]),
        "totals": serialize_totals(result["totals"]),
    }
