"""Tests for CertificationEngine.

Tests cover:
- The all-or-nothing eligibility gate
- Eligibility guidance (missing requirements, completion, time estimate)
- Remediation plans (difficulty, priority, ordering)
- Retest cooldown after failed attempts
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, get_args

from aquarch import const
from aquarch.engines.certification_engine import CertificationEngine
from aquarch.type_defs import CertificationStatus, ProgressMap
from tests.helpers import (
    NOW,
    REACHABLE_MINIMUM_LEVELS,
    make_attempt,
    make_progress,
    make_snapshot,
)

ART = const.GAME_TYPE_ARTIFACT_IDENTIFICATION
EXC = const.GAME_TYPE_EXCAVATION_SIMULATION
SITE = const.GAME_TYPE_SITE_DOCUMENTATION
HIST = const.GAME_TYPE_HISTORICAL_TIMELINE
LAB = const.GAME_TYPE_CONSERVATION_LAB

THRESHOLDS = const.DEFAULT_CERTIFICATION_THRESHOLDS


def make_exactly_satisfied(**overrides: Any) -> ProgressMap:
    """Build progress meeting every reachable minimum and threshold exactly."""
    entries = {
        game_type: make_progress(
            completed_levels=REACHABLE_MINIMUM_LEVELS[game_type],
            total_levels=REACHABLE_MINIMUM_LEVELS[game_type],
            best_score=THRESHOLDS[game_type],
        )
        for game_type in const.GAME_TYPES
    }
    entries.update(overrides)
    return make_snapshot(**entries)


# =============================================================================
# TEST: evaluate
# =============================================================================


class TestEvaluate:
    """Tests for the certification gate."""

    def test_all_requirements_met_is_eligible(self) -> None:
        """Meeting every gate exactly is enough."""
        result = CertificationEngine.evaluate(
            make_exactly_satisfied(), REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )
        assert result == const.CERTIFICATION_STATUS_ELIGIBLE

    def test_one_point_short_is_not_eligible(self) -> None:
        """No partial credit: four of five is not eligible."""
        progress = make_exactly_satisfied(
            **{LAB: make_progress(completed_levels=2, total_levels=2, best_score=64)}
        )

        result = CertificationEngine.evaluate(
            progress, REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        assert result == const.CERTIFICATION_STATUS_NOT_ELIGIBLE

    def test_one_level_short_is_not_eligible(self) -> None:
        """Score alone does not satisfy a game type."""
        progress = make_exactly_satisfied(
            **{ART: make_progress(completed_levels=2, best_score=100)}
        )

        result = CertificationEngine.evaluate(
            progress, REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        assert result == const.CERTIFICATION_STATUS_NOT_ELIGIBLE

    def test_empty_progress_is_not_eligible(self) -> None:
        """A brand-new learner is not eligible."""
        result = CertificationEngine.evaluate(
            {}, const.DEFAULT_MINIMUM_LEVELS, THRESHOLDS
        )
        assert result == const.CERTIFICATION_STATUS_NOT_ELIGIBLE

    def test_default_minimums_block_certification(self) -> None:
        """Minimums of 5 and 4 cannot be met with three difficulty levels."""
        progress = {
            game_type: make_progress(completed_levels=3, best_score=100)
            for game_type in const.GAME_TYPES
        }

        result = CertificationEngine.evaluate(
            progress, const.DEFAULT_MINIMUM_LEVELS, THRESHOLDS  # type: ignore[arg-type]
        )

        assert result == const.CERTIFICATION_STATUS_NOT_ELIGIBLE

    def test_never_reports_certified(self) -> None:
        """The certified status is valid but only issuance sets it."""
        result = CertificationEngine.evaluate(
            make_exactly_satisfied(), REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        assert const.CERTIFICATION_STATUS_CERTIFIED in get_args(CertificationStatus)
        assert result != const.CERTIFICATION_STATUS_CERTIFIED

    def test_satisfied_game_types_in_canonical_order(self) -> None:
        """Satisfied types are listed in canonical game order."""
        progress = make_snapshot(
            **{
                LAB: make_progress(completed_levels=2, best_score=65),
                ART: make_progress(completed_levels=3, best_score=80),
            }
        )

        satisfied = CertificationEngine.satisfied_game_types(
            progress, REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        assert satisfied == [ART, LAB]


# =============================================================================
# TEST: eligibility_status
# =============================================================================


class TestEligibilityStatus:
    """Tests for eligibility guidance."""

    def test_single_score_gap_reports_exactly_one_requirement(self) -> None:
        """One point short in one game gives one message and 15 minutes."""
        progress = make_exactly_satisfied(
            **{LAB: make_progress(completed_levels=2, total_levels=2, best_score=64)}
        )

        status = CertificationEngine.eligibility_status(
            progress, REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        assert status["is_eligible"] is False
        assert status["missing_requirements"] == [
            "Improve Conservation Lab score by 1 points"
        ]
        assert status["estimated_time_to_completion"] == 15
        assert status["completion_percentage"] == 100  # 99.8 rounded

    def test_eligible_has_no_estimate(self) -> None:
        """Eligible learners get 100% and no time estimate."""
        status = CertificationEngine.eligibility_status(
            make_exactly_satisfied(), REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        assert status == {
            "is_eligible": True,
            "completion_percentage": 100,
            "missing_requirements": [],
            "estimated_time_to_completion": None,
        }

    def test_empty_progress_lists_every_requirement(self) -> None:
        """A new learner misses a level and a score requirement per game."""
        status = CertificationEngine.eligibility_status(
            {}, const.DEFAULT_MINIMUM_LEVELS, THRESHOLDS
        )

        assert status["completion_percentage"] == 0
        assert len(status["missing_requirements"]) == 10
        assert status["missing_requirements"][:2] == [
            "Complete 5 more Artifact Identification level(s)",
            "Improve Artifact Identification score by 80 points",
        ]
        # 17 levels * 20 + (8 + 8 + 7 + 7 + 7) score steps * 15
        assert status["estimated_time_to_completion"] == 895

    def test_partial_completion_percentage(self) -> None:
        """Level and score completion are averaged per game, then over games."""
        progress = make_snapshot(
            **{ART: make_progress(completed_levels=3, best_score=40)}
        )

        status = CertificationEngine.eligibility_status(
            progress, REACHABLE_MINIMUM_LEVELS, THRESHOLDS
        )

        # Artifact: (1.0 + 0.5) / 2 = 0.75; others 0 -> 0.75 / 5 = 15%
        assert status["completion_percentage"] == 15

    def test_zero_requirements_count_as_met(self) -> None:
        """A minimum or threshold of 0 is fully met."""
        zeros = {game_type: 0 for game_type in const.GAME_TYPES}

        status = CertificationEngine.eligibility_status({}, zeros, zeros)

        assert status["is_eligible"] is True
        assert status["completion_percentage"] == 100
        assert status["estimated_time_to_completion"] is None


# =============================================================================
# TEST: remediation_plan
# =============================================================================


class TestRemediationPlan:
    """Tests for remediation plan generation."""

    def test_activities_ordered_by_priority(self) -> None:
        """High before medium before low; ties keep canonical order."""
        progress = make_snapshot(
            **{
                ART: make_progress(best_score=50),  # gap 30 -> high
                EXC: make_progress(best_score=70),  # gap 5 -> low
                SITE: make_progress(best_score=55),  # gap 15 -> medium
                HIST: make_progress(best_score=65),  # gap 5 -> low
                LAB: make_progress(best_score=90),  # met
            }
        )

        plan = CertificationEngine.remediation_plan(progress, THRESHOLDS, NOW)

        assert [a["game_type"] for a in plan["recommended_activities"]] == [
            ART,
            SITE,
            EXC,
            HIST,
        ]
        assert [a["priority"] for a in plan["recommended_activities"]] == [
            const.REMEDIATION_PRIORITY_HIGH,
            const.REMEDIATION_PRIORITY_MEDIUM,
            const.REMEDIATION_PRIORITY_LOW,
            const.REMEDIATION_PRIORITY_LOW,
        ]
        assert plan["weak_areas"] == [
            "Artifact Identification",
            "Excavation Simulation",
            "Site Documentation",
            "Historical Timeline",
        ]
        assert plan["estimated_completion_time"] == 60 + 30 + 10 + 10

    def test_activity_details(self) -> None:
        """Difficulty follows the current score; minutes are 2 per point."""
        progress = make_snapshot(**{ART: make_progress(best_score=50)})

        plan = CertificationEngine.remediation_plan(
            progress, {**THRESHOLDS, **dict.fromkeys(const.GAME_TYPES[1:], 0)}, NOW
        )

        assert plan["recommended_activities"] == [
            {
                "game_type": ART,
                "difficulty": const.DIFFICULTY_BEGINNER,
                "description": (
                    "Practice Artifact Identification at beginner level to "
                    "improve your score from 50% to 80%"
                ),
                "estimated_time": 60,
                "priority": const.REMEDIATION_PRIORITY_HIGH,
            }
        ]

    def test_recommended_difficulty_boundaries(self) -> None:
        """Beginner below 60, intermediate from 60, advanced from 70."""
        assert CertificationEngine.recommended_difficulty(59) == "beginner"
        assert CertificationEngine.recommended_difficulty(60) == "intermediate"
        assert CertificationEngine.recommended_difficulty(69) == "intermediate"
        assert CertificationEngine.recommended_difficulty(70) == "advanced"

    def test_priority_boundaries(self) -> None:
        """Gaps of exactly 20 and 10 stay in the lower band."""
        assert CertificationEngine.remediation_priority(21) == "high"
        assert CertificationEngine.remediation_priority(20) == "medium"
        assert CertificationEngine.remediation_priority(11) == "medium"
        assert CertificationEngine.remediation_priority(10) == "low"

    def test_no_weak_areas_gives_empty_plan(self) -> None:
        """Meeting every threshold leaves nothing to practice."""
        plan = CertificationEngine.remediation_plan(
            make_exactly_satisfied(), THRESHOLDS, NOW
        )

        assert plan["weak_areas"] == []
        assert plan["recommended_activities"] == []
        assert plan["estimated_completion_time"] == 0

    def test_retest_eligible_after_cooldown(self) -> None:
        """The retest date is 48 hours after the reference time."""
        plan = CertificationEngine.remediation_plan({}, THRESHOLDS, NOW)
        assert plan["retest_eligible_at"] == NOW + timedelta(hours=48)


# =============================================================================
# TEST: retest_status
# =============================================================================


class TestRetestStatus:
    """Tests for the retest cooldown."""

    def test_no_attempts_can_retest(self) -> None:
        """A learner who never failed may take the assessment."""
        status = CertificationEngine.retest_status([], NOW)

        assert status == {
            "can_retest": True,
            "attempt_count": 0,
            "next_retest_date": None,
            "hours_remaining": None,
        }

    def test_passed_attempts_are_ignored(self) -> None:
        """Only failed attempts start a cooldown."""
        status = CertificationEngine.retest_status(
            [make_attempt(hours_ago=1, passed=True)], NOW  # type: ignore[list-item]
        )

        assert status["can_retest"] is True
        assert status["attempt_count"] == 0

    def test_recent_failure_blocks_retest(self) -> None:
        """A failure 10 hours ago leaves 38 hours of cooldown."""
        attempt = make_attempt(hours_ago=10)

        status = CertificationEngine.retest_status([attempt], NOW)  # type: ignore[list-item]

        assert status["can_retest"] is False
        assert status["attempt_count"] == 1
        assert status["hours_remaining"] == 38
        assert status["next_retest_date"] == attempt["attempt_date"] + timedelta(
            hours=48
        )

    def test_partial_hours_round_up(self) -> None:
        """37.5 hours remaining is reported as 38."""
        status = CertificationEngine.retest_status(
            [make_attempt(hours_ago=10.5)], NOW  # type: ignore[list-item]
        )
        assert status["hours_remaining"] == 38

    def test_cooldown_elapsed_exactly(self) -> None:
        """At exactly 48 hours the learner may retest."""
        status = CertificationEngine.retest_status(
            [make_attempt(hours_ago=48)], NOW  # type: ignore[list-item]
        )

        assert status["can_retest"] is True
        assert status["attempt_count"] == 1
        assert status["next_retest_date"] is None

    def test_latest_failure_governs(self) -> None:
        """An old failure does not shorten the cooldown of a recent one."""
        attempts = [make_attempt(hours_ago=100), make_attempt(hours_ago=2)]

        status = CertificationEngine.retest_status(attempts, NOW)  # type: ignore[arg-type]

        assert status["can_retest"] is False
        assert status["attempt_count"] == 2
        assert status["hours_remaining"] == 46
