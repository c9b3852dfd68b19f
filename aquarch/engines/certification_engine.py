"""Certification Engine - Pure logic for certification gates and remediation.

This engine provides stateless, pure Python functions for:
- The all-or-nothing certification eligibility gate
- Eligibility guidance (partial completion, missing requirements, time estimate)
- Remediation plans for game types below their score threshold
- Retest cooldown after a failed certification attempt

ARCHITECTURE: This is a pure logic engine. All functions are static methods
that operate on passed-in data.

The evaluator only ever returns "eligible" or "not_eligible". The
"certified" status is set by the external issuance step, never here.

A game type is SATISFIED when:
    completed_levels >= minimum_levels[game_type]
    AND best_score >= certification_thresholds[game_type]
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import math
from typing import TYPE_CHECKING

from .. import const
from ..data_builders import empty_game_progress
from ..utils.dt_utils import as_utc, dt_add_hours, dt_hours_until, dt_now_utc
from ..utils.math_utils import clamp, round_half_up, safe_ratio

if TYPE_CHECKING:
    from datetime import datetime

    from ..type_defs import (
        CertificationAttempt,
        CertificationStatus,
        EligibilityStatus,
        GameProgress,
        ProgressMap,
        RemediationActivity,
        RemediationPlan,
        RetestStatus,
    )


def _progress_for(progress: ProgressMap, game_type: str) -> GameProgress:
    """Return the entry for game_type, zeroed if absent."""
    entry = progress.get(game_type)  # type: ignore[call-overload]
    return entry if entry is not None else empty_game_progress()


def _format_points(value: float) -> str:
    """Render a score gap without a trailing .0 for whole numbers."""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


class CertificationEngine:
    """Pure logic engine for certification eligibility.

    All methods are static - no instance state.
    """

    # =========================================================================
    # GATE
    # =========================================================================

    @staticmethod
    def is_game_satisfied(
        progress: GameProgress,
        minimum_levels: int,
        threshold: float,
    ) -> bool:
        """Return True if one game type meets both level and score gates."""
        return (
            progress[const.DATA_PROGRESS_COMPLETED_LEVELS] >= minimum_levels
            and progress[const.DATA_PROGRESS_BEST_SCORE] >= threshold
        )

    @staticmethod
    def satisfied_game_types(
        progress: ProgressMap,
        minimum_levels: Mapping[str, int],
        thresholds: Mapping[str, float],
    ) -> list[str]:
        """Return the game types meeting both gates, in canonical order."""
        return [
            game_type
            for game_type in const.GAME_TYPES
            if CertificationEngine.is_game_satisfied(
                _progress_for(progress, game_type),
                minimum_levels[game_type],
                thresholds[game_type],
            )
        ]

    @staticmethod
    def evaluate(
        progress: ProgressMap,
        minimum_levels: Mapping[str, int],
        thresholds: Mapping[str, float],
    ) -> CertificationStatus:
        """Apply the all-or-nothing certification gate.

        No partial credit and no weighting: every one of the five game types
        must be satisfied.

        Args:
            progress: GameProgress per game type
            minimum_levels: Required completed levels per game type
            thresholds: Required best score per game type

        Returns:
            "eligible" or "not_eligible" (never "certified")
        """
        satisfied = CertificationEngine.satisfied_game_types(
            progress, minimum_levels, thresholds
        )
        if len(satisfied) == len(const.GAME_TYPES):
            return const.CERTIFICATION_STATUS_ELIGIBLE  # type: ignore[return-value]
        return const.CERTIFICATION_STATUS_NOT_ELIGIBLE  # type: ignore[return-value]

    # =========================================================================
    # GUIDANCE
    # =========================================================================

    @staticmethod
    def eligibility_status(
        progress: ProgressMap,
        minimum_levels: Mapping[str, int],
        thresholds: Mapping[str, float],
    ) -> EligibilityStatus:
        """Explain how far a learner is from certification.

        Per game type, level completion and score completion are each capped
        at 1 and averaged; the game averages are averaged again and scaled to
        0-100. A zero requirement counts as fully met.

        Each unmet level count and each unmet score contributes one message,
        so a game type can contribute up to two. Time estimate: 20 minutes
        per missing level plus 15 minutes per started 10-point score gap.

        Returns:
            EligibilityStatus; estimated_time_to_completion is None when
            eligible
        """
        missing: list[str] = []
        total_completion = 0.0
        estimated_minutes = 0

        for game_type in const.GAME_TYPES:
            game = _progress_for(progress, game_type)
            required_levels = minimum_levels[game_type]
            threshold = thresholds[game_type]
            name = const.GAME_DISPLAY_NAMES[game_type]
            completed_levels = game[const.DATA_PROGRESS_COMPLETED_LEVELS]
            best_score = game[const.DATA_PROGRESS_BEST_SCORE]

            if completed_levels < required_levels:
                remaining = required_levels - completed_levels
                missing.append(
                    const.MSG_MISSING_LEVELS.format(remaining=remaining, game=name)
                )
                estimated_minutes += remaining * const.ESTIMATE_MINUTES_PER_LEVEL

            if best_score < threshold:
                gap = threshold - best_score
                missing.append(
                    const.MSG_MISSING_SCORE.format(game=name, gap=_format_points(gap))
                )
                estimated_minutes += (
                    math.ceil(gap / const.ESTIMATE_SCORE_STEP_POINTS)
                    * const.ESTIMATE_MINUTES_PER_SCORE_STEP
                )

            level_completion = clamp(
                safe_ratio(completed_levels, required_levels, default=1.0), 0.0, 1.0
            )
            score_completion = clamp(
                safe_ratio(best_score, threshold, default=1.0), 0.0, 1.0
            )
            total_completion += (level_completion + score_completion) / 2

        is_eligible = not missing
        return {
            "is_eligible": is_eligible,
            "completion_percentage": round_half_up(
                total_completion / len(const.GAME_TYPES) * 100
            ),
            "missing_requirements": missing,
            "estimated_time_to_completion": (
                estimated_minutes if estimated_minutes > 0 else None
            ),
        }

    # =========================================================================
    # REMEDIATION
    # =========================================================================

    @staticmethod
    def recommended_difficulty(best_score: float) -> str:
        """Pick the practice difficulty for a learner's current best score."""
        if best_score >= const.REMEDIATION_ADVANCED_SCORE:
            return const.DIFFICULTY_ADVANCED
        if best_score >= const.REMEDIATION_INTERMEDIATE_SCORE:
            return const.DIFFICULTY_INTERMEDIATE
        return const.DIFFICULTY_BEGINNER

    @staticmethod
    def remediation_priority(score_gap: float) -> str:
        """Map a score gap to a remediation priority."""
        if score_gap > const.REMEDIATION_HIGH_GAP:
            return const.REMEDIATION_PRIORITY_HIGH
        if score_gap > const.REMEDIATION_MEDIUM_GAP:
            return const.REMEDIATION_PRIORITY_MEDIUM
        return const.REMEDIATION_PRIORITY_LOW

    @staticmethod
    def remediation_plan(
        progress: ProgressMap,
        thresholds: Mapping[str, float],
        now: datetime | None = None,
    ) -> RemediationPlan:
        """Build a practice plan for every game type below its score threshold.

        Activities are ordered high -> medium -> low priority; within a
        priority they keep canonical game order. Each activity is estimated
        at 2 minutes per missing score point.

        Args:
            progress: GameProgress per game type
            thresholds: Required best score per game type
            now: Reference time for the retest date (defaults to now, UTC)

        Returns:
            RemediationPlan (empty activities when every score is met)
        """
        reference = as_utc(now) if now is not None else dt_now_utc()
        weak_areas: list[str] = []
        activities: list[RemediationActivity] = []

        for game_type in const.GAME_TYPES:
            best_score = _progress_for(progress, game_type)[
                const.DATA_PROGRESS_BEST_SCORE
            ]
            required = thresholds[game_type]
            if best_score >= required:
                continue

            name = const.GAME_DISPLAY_NAMES[game_type]
            gap = required - best_score
            difficulty = CertificationEngine.recommended_difficulty(best_score)
            weak_areas.append(name)
            activities.append(
                {
                    "game_type": game_type,  # type: ignore[typeddict-item]
                    "difficulty": difficulty,  # type: ignore[typeddict-item]
                    "description": const.MSG_REMEDIATION_ACTIVITY.format(
                        game=name,
                        difficulty=difficulty,
                        current=_format_points(best_score),
                        required=_format_points(required),
                    ),
                    "estimated_time": math.ceil(
                        gap * const.REMEDIATION_MINUTES_PER_POINT
                    ),
                    "priority": CertificationEngine.remediation_priority(gap),  # type: ignore[typeddict-item]
                }
            )

        activities.sort(
            key=lambda activity: const.REMEDIATION_PRIORITY_ORDER[activity["priority"]]
        )

        return {
            "weak_areas": weak_areas,
            "recommended_activities": activities,
            "estimated_completion_time": sum(a["estimated_time"] for a in activities),
            "retest_eligible_at": dt_add_hours(
                reference, const.RETEST_COOLDOWN_HOURS
            ),
        }

    # =========================================================================
    # RETEST
    # =========================================================================

    @staticmethod
    def retest_status(
        attempts: Iterable[CertificationAttempt],
        now: datetime | None = None,
    ) -> RetestStatus:
        """Decide whether a learner may retake the certification assessment.

        A retest is allowed when there are no failed attempts, or when the
        cooldown since the most recent failed attempt has elapsed.

        Args:
            attempts: Prior attempts in any order
            now: Reference time (defaults to now, UTC)

        Returns:
            RetestStatus; next_retest_date and hours_remaining are None
            when a retest is allowed
        """
        reference = as_utc(now) if now is not None else dt_now_utc()
        failed = [attempt for attempt in attempts if not attempt["passed"]]

        if not failed:
            return {
                "can_retest": True,
                "attempt_count": 0,
                "next_retest_date": None,
                "hours_remaining": None,
            }

        last_failed = max(as_utc(attempt["attempt_date"]) for attempt in failed)
        next_retest = dt_add_hours(last_failed, const.RETEST_COOLDOWN_HOURS)
        can_retest = reference >= next_retest

        return {
            "can_retest": can_retest,
            "attempt_count": len(failed),
            "next_retest_date": None if can_retest else next_retest,
            "hours_remaining": (
                None if can_retest else dt_hours_until(next_retest, reference)
            ),
        }
