"""Achievement Engine - Pure logic for crossing-edge achievement detection.

This engine provides stateless, pure Python functions for:
- Measuring an achievement criterion against a progress snapshot
- Comparing the current snapshot with the previous one
- Reporting achievements whose threshold was crossed between the two

ARCHITECTURE: This is a pure logic engine. All functions are static methods
that operate on passed-in data. Definitions are supplied by the caller and
nothing is remembered between calls: handing in the same pair of snapshots
twice reports the same achievements twice. Deduplicating against earned
achievements is the caller's job.

Detection Rule (crossing edge):
    current_value >= threshold AND previous_value < threshold

Criteria Types:
- score: best_score of the game type (overall: mean best_score of all types)
- completion: completed_levels (overall: sum over all types)
- time: time_spent in minutes (overall: sum over all types)
- streak, perfect_game: accepted in definitions but never fire
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from .. import const
from ..data_builders import empty_game_progress
from ..utils.dt_utils import as_utc, dt_now_utc
from ..utils.math_utils import clamp, safe_ratio

if TYPE_CHECKING:
    from datetime import datetime

    from ..type_defs import (
        Achievement,
        AchievementDefinition,
        AchievementEvaluation,
        GameProgress,
        ProgressMap,
    )


SCOPE_OVERALL = "overall"

# Handler function signature: (progress, game_type or None) -> measured value
CriterionHandler = Callable[["ProgressMap", "str | None"], float]


def _entry(progress: ProgressMap, game_type: str) -> GameProgress:
    """Return the entry for game_type, zeroed if absent."""
    entry = progress.get(game_type)  # type: ignore[call-overload]
    return entry if entry is not None else empty_game_progress()


class AchievementEngine:
    """Pure logic engine for achievement detection.

    All methods are static or class methods - no instance state.

    Evaluation Flow:
        1. Resolve the scope: criteria.game_type, else definition.game_type,
           else overall
        2. Measure the criterion on the previous and current snapshots
        3. Report the achievement only when the threshold was crossed
    """

    # =========================================================================
    # CRITERION HANDLER REGISTRY
    # =========================================================================

    # Maps criteria type to a measuring function
    _CRITERION_HANDLERS: dict[str, CriterionHandler] = {}

    @classmethod
    def _register_handlers(cls) -> None:
        """Register all criterion handlers.

        Called once at module load to populate _CRITERION_HANDLERS.
        """
        if cls._CRITERION_HANDLERS:
            return  # Already registered

        cls._CRITERION_HANDLERS = {
            const.CRITERIA_TYPE_SCORE: cls._measure_score,
            const.CRITERIA_TYPE_COMPLETION: cls._measure_completion,
            const.CRITERIA_TYPE_TIME: cls._measure_time,
        }

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @classmethod
    def detect(
        cls,
        current: ProgressMap,
        previous: ProgressMap | None,
        definitions: Iterable[AchievementDefinition],
        now: datetime | None = None,
    ) -> list[Achievement]:
        """Return the achievements newly earned between two snapshots.

        Args:
            current: Freshly aggregated GameProgress per game type
            previous: Last persisted snapshot; missing entries (or None)
                count as zeroed progress
            definitions: Achievement definitions to check, in report order
            now: Timestamp stamped on earned achievements (defaults to now, UTC)

        Returns:
            Earned achievements in definition order
        """
        earned_date = as_utc(now) if now is not None else dt_now_utc()
        baseline: ProgressMap = previous or {}  # type: ignore[assignment]
        earned: list[Achievement] = []

        for definition in definitions:
            evaluation = cls.evaluate_definition(definition, current, baseline)
            if evaluation["newly_earned"]:
                earned.append(cls._make_achievement(definition, earned_date))

        return earned

    @classmethod
    def evaluate_definition(
        cls,
        definition: AchievementDefinition,
        current: ProgressMap,
        previous: ProgressMap | None = None,
    ) -> AchievementEvaluation:
        """Evaluate one definition and explain the outcome.

        Args:
            definition: Achievement definition
            current: Current GameProgress per game type
            previous: Previous GameProgress per game type (None = zeroed)

        Returns:
            AchievementEvaluation with measured values, progress toward the
            threshold (0.0-1.0), and whether the threshold was just crossed
        """
        criteria = definition[const.DATA_ACHIEVEMENT_CRITERIA]
        criteria_type = criteria[const.DATA_CRITERIA_TYPE]
        threshold = criteria[const.DATA_CRITERIA_THRESHOLD]
        game_type = criteria.get(const.DATA_CRITERIA_GAME_TYPE) or definition.get(
            const.DATA_ACHIEVEMENT_GAME_TYPE
        )
        scope = game_type or SCOPE_OVERALL
        achievement_id = definition[const.DATA_ACHIEVEMENT_ID]

        handler = cls._CRITERION_HANDLERS.get(criteria_type)
        if handler is None:
            if criteria_type in const.CRITERIA_TYPES:
                const.LOGGER.debug(
                    "Criteria type %s is not evaluated (achievement %s)",
                    criteria_type,
                    achievement_id,
                )
            else:
                const.LOGGER.warning(
                    "Unknown criteria type: %s for achievement %s",
                    criteria_type,
                    achievement_id,
                )
            return cls._make_evaluation(
                achievement_id=achievement_id,
                criteria_type=criteria_type,
                scope=scope,
                current_value=0,
                previous_value=0,
                threshold=threshold,
                newly_earned=False,
                reason=f"Criteria type {criteria_type} is not evaluated",
            )

        current_value = handler(current, game_type)
        previous_value = handler(previous or {}, game_type)  # type: ignore[arg-type]
        reached = current_value >= threshold
        newly_earned = reached and previous_value < threshold

        if newly_earned:
            reason = f"Crossed {threshold}: {previous_value} -> {current_value}"
        elif reached:
            reason = f"Already reached before: {previous_value} >= {threshold}"
        else:
            reason = f"{criteria_type.capitalize()}: {current_value}/{threshold}"

        return cls._make_evaluation(
            achievement_id=achievement_id,
            criteria_type=criteria_type,
            scope=scope,
            current_value=current_value,
            previous_value=previous_value,
            threshold=threshold,
            newly_earned=newly_earned,
            reason=reason,
        )

    # =========================================================================
    # CRITERION HANDLERS
    # =========================================================================

    @staticmethod
    def _measure_score(progress: ProgressMap, game_type: str | None) -> float:
        """Best score of one game type, or the mean over all five."""
        if game_type:
            return _entry(progress, game_type)[const.DATA_PROGRESS_BEST_SCORE]
        total = sum(
            _entry(progress, gt)[const.DATA_PROGRESS_BEST_SCORE]
            for gt in const.GAME_TYPES
        )
        return total / len(const.GAME_TYPES)

    @staticmethod
    def _measure_completion(progress: ProgressMap, game_type: str | None) -> float:
        """Completed levels of one game type, or the sum over all five."""
        if game_type:
            return _entry(progress, game_type)[const.DATA_PROGRESS_COMPLETED_LEVELS]
        return sum(
            _entry(progress, gt)[const.DATA_PROGRESS_COMPLETED_LEVELS]
            for gt in const.GAME_TYPES
        )

    @staticmethod
    def _measure_time(progress: ProgressMap, game_type: str | None) -> float:
        """Minutes spent on one game type, or the sum over all five."""
        if game_type:
            return _entry(progress, game_type)[const.DATA_PROGRESS_TIME_SPENT]
        return sum(
            _entry(progress, gt)[const.DATA_PROGRESS_TIME_SPENT]
            for gt in const.GAME_TYPES
        )

    # =========================================================================
    # RESULT BUILDERS
    # =========================================================================

    @staticmethod
    def _make_evaluation(
        achievement_id: str,
        criteria_type: str,
        scope: str,
        current_value: float,
        previous_value: float,
        threshold: float,
        newly_earned: bool,
        reason: str = "",
    ) -> AchievementEvaluation:
        """Create a standardized AchievementEvaluation.

        A threshold of 0 reports full progress.
        """
        return {
            "achievement_id": achievement_id,
            "criteria_type": criteria_type,
            "scope": scope,
            "current_value": current_value,
            "previous_value": previous_value,
            "threshold": threshold,
            "progress": clamp(
                safe_ratio(current_value, threshold, default=1.0), 0.0, 1.0
            ),
            "newly_earned": newly_earned,
            "reason": reason,
        }

    @staticmethod
    def _make_achievement(
        definition: AchievementDefinition,
        earned_date: datetime,
    ) -> Achievement:
        """Create the outward Achievement record for an earned definition."""
        achievement: Achievement = {
            "id": definition[const.DATA_ACHIEVEMENT_ID],
            "name": definition[const.DATA_ACHIEVEMENT_NAME],
            "description": definition.get(const.DATA_ACHIEVEMENT_DESCRIPTION, ""),
            "earned_date": earned_date,
        }
        if const.DATA_ACHIEVEMENT_ICON_URL in definition:
            achievement["icon_url"] = definition[const.DATA_ACHIEVEMENT_ICON_URL]
        if const.DATA_ACHIEVEMENT_GAME_TYPE in definition:
            achievement["game_type"] = definition[const.DATA_ACHIEVEMENT_GAME_TYPE]
        return achievement


AchievementEngine._register_handlers()
