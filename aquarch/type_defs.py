"""Type definitions for Aquarch data structures.

TypedDict is used for every structure whose keys are fixed at design time:
session records, per-game progress, achievement definitions, and the
results handed back to callers. Maps keyed by game type stay plain
``dict[GameType, ...]`` because the key set is data, not schema.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime validation of raw input
happens in data_builders.py (voluptuous schemas), not here.

IMPORTANT: This file must only import from typing and the standard library
so engines, builders, and tests can all import it without cycles.
"""

from datetime import datetime
from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

GameType = Literal[
    "artifact_identification",
    "excavation_simulation",
    "site_documentation",
    "historical_timeline",
    "conservation_lab",
]
DifficultyLevel = Literal["beginner", "intermediate", "advanced"]
SessionStatus = Literal["active", "completed", "abandoned"]
CertificationStatus = Literal["not_eligible", "eligible", "certified"]
CriteriaType = Literal["score", "completion", "time", "streak", "perfect_game"]
RemediationPriority = Literal["high", "medium", "low"]

AchievementId = str


# =============================================================================
# Input
# =============================================================================


class SessionRecord(TypedDict):
    """One attempt at one game type, as produced by the session layer."""

    game_type: GameType
    difficulty: DifficultyLevel
    status: SessionStatus
    score: float
    max_score: float
    completion_percentage: float
    start_time: datetime | None
    end_time: datetime | None
    session_id: NotRequired[str]
    user_id: NotRequired[str]


# =============================================================================
# Derived Progress
# =============================================================================


class GameProgress(TypedDict):
    """Per-game-type statistics, recomputed on every aggregation."""

    completed_levels: int
    total_levels: int
    best_score: float  # integral when aggregated; snapshots may carry fractions
    average_score: int
    time_spent: float  # minutes; integral when aggregated
    last_played: datetime  # epoch when never played
    achievements: list[AchievementId]


ProgressMap = dict[GameType, GameProgress]


class ProgressTotals(TypedDict):
    """Cross-game totals stored alongside overall completion."""

    total_game_time: int  # minutes
    total_score: int
    games_played: int
    last_activity: datetime


# =============================================================================
# Achievements
# =============================================================================


class AchievementCriteria(TypedDict):
    """Detection rule for one achievement."""

    type: CriteriaType
    threshold: float
    game_type: NotRequired[GameType]
    difficulty: NotRequired[DifficultyLevel]


class AchievementDefinition(TypedDict):
    """Configured achievement; game_type absent means it spans all games."""

    id: AchievementId
    name: str
    description: str
    criteria: AchievementCriteria
    icon_url: NotRequired[str]
    game_type: NotRequired[GameType]


class Achievement(TypedDict):
    """Newly earned achievement reported outward."""

    id: AchievementId
    name: str
    description: str
    earned_date: datetime
    icon_url: NotRequired[str]
    game_type: NotRequired[GameType]


class AchievementEvaluation(TypedDict):
    """Detailed crossing-edge evaluation of one definition."""

    achievement_id: AchievementId
    criteria_type: str
    scope: str  # game type or "overall"
    current_value: float
    previous_value: float
    threshold: float
    progress: float  # 0.0-1.0
    newly_earned: bool
    reason: str


# =============================================================================
# Certification
# =============================================================================


class EligibilityStatus(TypedDict):
    """UI guidance companion to the eligible/not_eligible gate."""

    is_eligible: bool
    completion_percentage: int
    missing_requirements: list[str]
    estimated_time_to_completion: int | None  # minutes, None when eligible


class RemediationActivity(TypedDict):
    """One recommended practice activity for a weak game type."""

    game_type: GameType
    difficulty: DifficultyLevel
    description: str
    estimated_time: int  # minutes
    priority: RemediationPriority


class RemediationPlan(TypedDict):
    """Prioritized practice plan for game types below their score threshold."""

    weak_areas: list[str]
    recommended_activities: list[RemediationActivity]
    estimated_completion_time: int  # minutes
    retest_eligible_at: datetime


class CertificationAttempt(TypedDict):
    """Prior certification attempt, supplied by the persistence layer."""

    attempt_date: datetime
    passed: bool
    overall_score: NotRequired[float]


class RetestStatus(TypedDict):
    """Whether a learner may retake the certification assessment."""

    can_retest: bool
    attempt_count: int
    next_retest_date: datetime | None
    hours_remaining: int | None


# =============================================================================
# Result
# =============================================================================


class ProgressCalculationResult(TypedDict):
    """Everything the UI and persistence layers need after one calculation."""

    overall_completion: int
    game_progress: ProgressMap
    certification_status: CertificationStatus
    new_achievements: list[Achievement]
    recommendations: list[str]
    totals: ProgressTotals
