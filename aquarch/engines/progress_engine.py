"""Progress Engine - Pure logic for per-game aggregation and weighted completion.

This engine provides stateless, pure Python functions for:
- Reducing session history into per-game-type GameProgress
- Combining GameProgress into one weighted 0-100 overall completion
- Cross-game totals (time, score, activity)

ARCHITECTURE: This is a pure logic engine. All functions are static methods
that operate on passed-in data. Every call recomputes from the full session
history; nothing is updated incrementally.

Scoring Rules:
- Only COMPLETED sessions contribute to scores and time spent
- A level is completed when a completed session reaches 100% completion
- Completed levels count DISTINCT difficulty levels (so at most 3)
- last_played considers sessions of ANY status
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from .. import const
from ..data_builders import empty_game_progress
from ..exceptions import ConfigurationError
from ..utils.dt_utils import EPOCH, dt_minutes_between
from ..utils.math_utils import (
    calculate_percentage,
    clamp,
    round_half_up,
    safe_ratio,
)

if TYPE_CHECKING:
    from ..type_defs import GameProgress, ProgressMap, ProgressTotals, SessionRecord


class ProgressEngine:
    """Pure logic engine for progress aggregation.

    All methods are static - no instance state. Inputs are never mutated.

    Flow:
        1. aggregate() groups sessions by game type and builds GameProgress
        2. overall_completion() weights per-game completion ratios
        3. calculate_totals() sums time and scores for the overall record
    """

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    @staticmethod
    def aggregate(
        sessions: Iterable[SessionRecord],
        total_levels: Mapping[str, int],
    ) -> ProgressMap:
        """Build GameProgress for every game type.

        Args:
            sessions: Validated session records for one learner (any status)
            total_levels: Configured total level count per game type

        Returns:
            Dict with an entry for each of the five game types
        """
        by_type: dict[str, list[SessionRecord]] = {
            game_type: [] for game_type in const.GAME_TYPES
        }
        for session in sessions:
            bucket = by_type.get(session[const.DATA_SESSION_GAME_TYPE])
            if bucket is not None:
                bucket.append(session)

        progress = {
            game_type: ProgressEngine.aggregate_game_type(
                by_type[game_type], total_levels.get(game_type, 0)
            )
            for game_type in const.GAME_TYPES
        }
        return progress  # type: ignore[return-value]

    @staticmethod
    def aggregate_game_type(
        sessions: list[SessionRecord],
        total_levels: int,
    ) -> GameProgress:
        """Build GameProgress for the sessions of a single game type.

        Args:
            sessions: Sessions already filtered to one game type
            total_levels: Configured total level count for that game type

        Returns:
            GameProgress; zeroed with last_played at the epoch if no sessions
        """
        if not sessions:
            return empty_game_progress(total_levels)

        completed = [
            s
            for s in sessions
            if s[const.DATA_SESSION_STATUS] == const.SESSION_STATUS_COMPLETED
        ]

        scores: list[float] = []
        for session in completed:
            max_score = session[const.DATA_SESSION_MAX_SCORE]
            if max_score <= 0:
                const.LOGGER.warning(
                    "Skipping score of completed %s session %s with max_score=%s",
                    session[const.DATA_SESSION_GAME_TYPE],
                    session.get(const.DATA_SESSION_ID, "<unknown>"),
                    max_score,
                )
                continue
            scores.append(
                calculate_percentage(session[const.DATA_SESSION_SCORE], max_score)
            )

        best_score = round_half_up(max(scores)) if scores else 0
        average_score = round_half_up(sum(scores) / len(scores)) if scores else 0

        # Rounded once over the sum, not per session
        minutes = 0.0
        for session in completed:
            duration = dt_minutes_between(
                session[const.DATA_SESSION_START_TIME],
                session[const.DATA_SESSION_END_TIME],
            )
            if duration is not None:
                minutes += duration

        completed_levels = {
            s[const.DATA_SESSION_DIFFICULTY]
            for s in completed
            if s[const.DATA_SESSION_COMPLETION_PERCENTAGE]
            >= const.LEVEL_COMPLETE_PERCENTAGE
        }

        start_times = [
            s[const.DATA_SESSION_START_TIME]
            for s in sessions
            if s[const.DATA_SESSION_START_TIME] is not None
        ]

        return {
            const.DATA_PROGRESS_COMPLETED_LEVELS: len(completed_levels),
            const.DATA_PROGRESS_TOTAL_LEVELS: total_levels,
            const.DATA_PROGRESS_BEST_SCORE: best_score,
            const.DATA_PROGRESS_AVERAGE_SCORE: average_score,
            const.DATA_PROGRESS_TIME_SPENT: round_half_up(minutes),
            const.DATA_PROGRESS_LAST_PLAYED: max(start_times, default=EPOCH),
            const.DATA_PROGRESS_ACHIEVEMENTS: [],
        }

    # =========================================================================
    # OVERALL COMPLETION
    # =========================================================================

    @staticmethod
    def game_completion_ratio(progress: GameProgress, game_type: str = "") -> float:
        """Return completed/total levels as a percentage capped at 100.

        Raises:
            ConfigurationError: If total_levels <= 0
        """
        total_levels = progress[const.DATA_PROGRESS_TOTAL_LEVELS]
        if total_levels <= 0:
            raise ConfigurationError(
                f"Total levels for {game_type or 'game type'} must be greater "
                f"than zero (got {total_levels})",
                f"{const.CONF_TOTAL_LEVELS}.{game_type}" if game_type else None,
            )
        ratio = progress[const.DATA_PROGRESS_COMPLETED_LEVELS] / total_levels
        return clamp(ratio, 0.0, 1.0) * 100

    @staticmethod
    def overall_completion(
        progress: ProgressMap,
        weights: Mapping[str, float],
    ) -> int:
        """Combine per-game completion into one weighted 0-100 integer.

        result = round(sum(ratio * weight) / sum(weight)), normalized by the
        total weight so weights need not sum to 1.

        Args:
            progress: GameProgress per game type
            weights: Weight per game type

        Returns:
            Overall completion percentage (0-100)

        Raises:
            ConfigurationError: On a missing weight, total weight <= 0, or a
                game type with total_levels <= 0
        """
        weighted = 0.0
        total_weight = 0.0

        for game_type in const.GAME_TYPES:
            if game_type not in weights:
                raise ConfigurationError(
                    f"No weight configured for {game_type}",
                    f"{const.CONF_GAME_WEIGHTS}.{game_type}",
                )
            weight = weights[game_type]
            game_progress = progress.get(game_type)  # type: ignore[call-overload]
            if game_progress is None:
                ratio = 0.0
            else:
                ratio = ProgressEngine.game_completion_ratio(game_progress, game_type)
            weighted += ratio * weight
            total_weight += weight

        if total_weight <= 0:
            raise ConfigurationError(
                "Game weights must sum to more than zero", const.CONF_GAME_WEIGHTS
            )

        return round_half_up(weighted / total_weight)

    # =========================================================================
    # TOTALS
    # =========================================================================

    @staticmethod
    def calculate_totals(progress: ProgressMap) -> ProgressTotals:
        """Sum time and best scores across game types.

        Returns:
            ProgressTotals; last_activity is the epoch when nothing was played
        """
        entries = [
            progress[game_type]  # type: ignore[index]
            for game_type in const.GAME_TYPES
            if game_type in progress
        ]
        played = [
            entry
            for entry in entries
            if entry[const.DATA_PROGRESS_LAST_PLAYED] > EPOCH
        ]
        return {
            "total_game_time": sum(e[const.DATA_PROGRESS_TIME_SPENT] for e in entries),
            "total_score": sum(e[const.DATA_PROGRESS_BEST_SCORE] for e in entries),
            "games_played": len(played),
            "last_activity": max(
                (e[const.DATA_PROGRESS_LAST_PLAYED] for e in entries), default=EPOCH
            ),
        }

    @staticmethod
    def completion_ratio_of(progress: GameProgress) -> float:
        """Return completed/total levels as 0.0-1.0, 0.0 if total is unset."""
        return safe_ratio(
            progress[const.DATA_PROGRESS_COMPLETED_LEVELS],
            progress[const.DATA_PROGRESS_TOTAL_LEVELS],
        )
