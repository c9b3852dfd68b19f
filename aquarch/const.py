# File: const.py
"""Constants for the Aquarch progress engine.

This file centralizes game identifiers, record keys, defaults, and display
labels for consistency across the engines, builders, and tracker.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Game Types
# ------------------------------------------------------------------------------------------------
GAME_TYPE_ARTIFACT_IDENTIFICATION = "artifact_identification"
GAME_TYPE_EXCAVATION_SIMULATION = "excavation_simulation"
GAME_TYPE_SITE_DOCUMENTATION = "site_documentation"
GAME_TYPE_HISTORICAL_TIMELINE = "historical_timeline"
GAME_TYPE_CONSERVATION_LAB = "conservation_lab"

# Canonical order; used for iteration, tie-breaking, and message ordering
GAME_TYPES: Final[tuple[str, ...]] = (
    GAME_TYPE_ARTIFACT_IDENTIFICATION,
    GAME_TYPE_EXCAVATION_SIMULATION,
    GAME_TYPE_SITE_DOCUMENTATION,
    GAME_TYPE_HISTORICAL_TIMELINE,
    GAME_TYPE_CONSERVATION_LAB,
)

GAME_DISPLAY_NAMES: Final[dict[str, str]] = {
    GAME_TYPE_ARTIFACT_IDENTIFICATION: "Artifact Identification",
    GAME_TYPE_EXCAVATION_SIMULATION: "Excavation Simulation",
    GAME_TYPE_SITE_DOCUMENTATION: "Site Documentation",
    GAME_TYPE_HISTORICAL_TIMELINE: "Historical Timeline",
    GAME_TYPE_CONSERVATION_LAB: "Conservation Lab",
}

# ------------------------------------------------------------------------------------------------
# Difficulty Levels
# ------------------------------------------------------------------------------------------------
DIFFICULTY_BEGINNER = "beginner"
DIFFICULTY_INTERMEDIATE = "intermediate"
DIFFICULTY_ADVANCED = "advanced"

DIFFICULTY_LEVELS: Final[tuple[str, ...]] = (
    DIFFICULTY_BEGINNER,
    DIFFICULTY_INTERMEDIATE,
    DIFFICULTY_ADVANCED,
)

# completed_levels counts distinct difficulty levels, so it can never exceed this
MAX_COMPLETABLE_LEVELS = len(DIFFICULTY_LEVELS)

# ------------------------------------------------------------------------------------------------
# Session Status
# ------------------------------------------------------------------------------------------------
SESSION_STATUS_ACTIVE = "active"
SESSION_STATUS_COMPLETED = "completed"
SESSION_STATUS_ABANDONED = "abandoned"

SESSION_STATUSES: Final[tuple[str, ...]] = (
    SESSION_STATUS_ACTIVE,
    SESSION_STATUS_COMPLETED,
    SESSION_STATUS_ABANDONED,
)

# A level counts as completed at this completion percentage
LEVEL_COMPLETE_PERCENTAGE = 100

# ------------------------------------------------------------------------------------------------
# Certification Status
# ------------------------------------------------------------------------------------------------
CERTIFICATION_STATUS_NOT_ELIGIBLE = "not_eligible"
CERTIFICATION_STATUS_ELIGIBLE = "eligible"
# Reached only through external issuance; never returned by the evaluator
CERTIFICATION_STATUS_CERTIFIED = "certified"

# ------------------------------------------------------------------------------------------------
# Achievement Criteria Types
# ------------------------------------------------------------------------------------------------
CRITERIA_TYPE_SCORE = "score"
CRITERIA_TYPE_COMPLETION = "completion"
CRITERIA_TYPE_TIME = "time"
# Accepted in definitions but not evaluated by the detector
CRITERIA_TYPE_STREAK = "streak"
CRITERIA_TYPE_PERFECT_GAME = "perfect_game"

CRITERIA_TYPES: Final[tuple[str, ...]] = (
    CRITERIA_TYPE_SCORE,
    CRITERIA_TYPE_COMPLETION,
    CRITERIA_TYPE_TIME,
    CRITERIA_TYPE_STREAK,
    CRITERIA_TYPE_PERFECT_GAME,
)

# ------------------------------------------------------------------------------------------------
# Session Record Keys
# ------------------------------------------------------------------------------------------------
DATA_SESSION_ID = "session_id"
DATA_SESSION_USER_ID = "user_id"
DATA_SESSION_GAME_TYPE = "game_type"
DATA_SESSION_DIFFICULTY = "difficulty"
DATA_SESSION_STATUS = "status"
DATA_SESSION_SCORE = "score"
DATA_SESSION_MAX_SCORE = "max_score"
DATA_SESSION_COMPLETION_PERCENTAGE = "completion_percentage"
DATA_SESSION_START_TIME = "start_time"
DATA_SESSION_END_TIME = "end_time"

# Document-store (camelCase) aliases accepted by build_session_record()
SESSION_KEY_ALIASES: Final[dict[str, str]] = {
    "_id": DATA_SESSION_ID,
    "id": DATA_SESSION_ID,
    "sessionId": DATA_SESSION_ID,
    "userId": DATA_SESSION_USER_ID,
    "gameType": DATA_SESSION_GAME_TYPE,
    "difficultyLevel": DATA_SESSION_DIFFICULTY,
    "difficulty_level": DATA_SESSION_DIFFICULTY,
    "currentScore": DATA_SESSION_SCORE,
    "current_score": DATA_SESSION_SCORE,
    "maxScore": DATA_SESSION_MAX_SCORE,
    "completionPercentage": DATA_SESSION_COMPLETION_PERCENTAGE,
    "startTime": DATA_SESSION_START_TIME,
    "endTime": DATA_SESSION_END_TIME,
}

# ------------------------------------------------------------------------------------------------
# Game Progress Keys
# ------------------------------------------------------------------------------------------------
DATA_PROGRESS_COMPLETED_LEVELS = "completed_levels"
DATA_PROGRESS_TOTAL_LEVELS = "total_levels"
DATA_PROGRESS_BEST_SCORE = "best_score"
DATA_PROGRESS_AVERAGE_SCORE = "average_score"
DATA_PROGRESS_TIME_SPENT = "time_spent"
DATA_PROGRESS_LAST_PLAYED = "last_played"
DATA_PROGRESS_ACHIEVEMENTS = "achievements"

PROGRESS_KEY_ALIASES: Final[dict[str, str]] = {
    "completedLevels": DATA_PROGRESS_COMPLETED_LEVELS,
    "totalLevels": DATA_PROGRESS_TOTAL_LEVELS,
    "bestScore": DATA_PROGRESS_BEST_SCORE,
    "averageScore": DATA_PROGRESS_AVERAGE_SCORE,
    "timeSpent": DATA_PROGRESS_TIME_SPENT,
    "lastPlayed": DATA_PROGRESS_LAST_PLAYED,
}

# ------------------------------------------------------------------------------------------------
# Achievement Definition Keys
# ------------------------------------------------------------------------------------------------
DATA_ACHIEVEMENT_ID = "id"
DATA_ACHIEVEMENT_NAME = "name"
DATA_ACHIEVEMENT_DESCRIPTION = "description"
DATA_ACHIEVEMENT_ICON_URL = "icon_url"
DATA_ACHIEVEMENT_GAME_TYPE = "game_type"
DATA_ACHIEVEMENT_CRITERIA = "criteria"
DATA_ACHIEVEMENT_EARNED_DATE = "earned_date"

DATA_CRITERIA_TYPE = "type"
DATA_CRITERIA_THRESHOLD = "threshold"
DATA_CRITERIA_GAME_TYPE = "game_type"
DATA_CRITERIA_DIFFICULTY = "difficulty"

# ------------------------------------------------------------------------------------------------
# Certification Attempt Keys
# ------------------------------------------------------------------------------------------------
DATA_ATTEMPT_DATE = "attempt_date"
DATA_ATTEMPT_PASSED = "passed"
DATA_ATTEMPT_OVERALL_SCORE = "overall_score"

ATTEMPT_KEY_ALIASES: Final[dict[str, str]] = {
    "attemptDate": DATA_ATTEMPT_DATE,
    "overallScore": DATA_ATTEMPT_OVERALL_SCORE,
}

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_GAME_WEIGHTS = "game_weights"
CONF_MINIMUM_LEVELS = "minimum_levels"
CONF_CERTIFICATION_THRESHOLDS = "certification_thresholds"
CONF_TOTAL_LEVELS = "total_levels"
CONF_ACHIEVEMENTS = "achievements"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_GAME_WEIGHTS: Final[dict[str, float]] = {
    GAME_TYPE_ARTIFACT_IDENTIFICATION: 0.25,
    GAME_TYPE_EXCAVATION_SIMULATION: 0.30,
    GAME_TYPE_SITE_DOCUMENTATION: 0.20,
    GAME_TYPE_HISTORICAL_TIMELINE: 0.15,
    GAME_TYPE_CONSERVATION_LAB: 0.10,
}

# Minimums of 5 and 4 exceed MAX_COMPLETABLE_LEVELS; kept as configured
DEFAULT_MINIMUM_LEVELS: Final[dict[str, int]] = {
    GAME_TYPE_ARTIFACT_IDENTIFICATION: 5,
    GAME_TYPE_EXCAVATION_SIMULATION: 4,
    GAME_TYPE_SITE_DOCUMENTATION: 3,
    GAME_TYPE_HISTORICAL_TIMELINE: 3,
    GAME_TYPE_CONSERVATION_LAB: 2,
}

DEFAULT_CERTIFICATION_THRESHOLDS: Final[dict[str, int]] = {
    GAME_TYPE_ARTIFACT_IDENTIFICATION: 80,
    GAME_TYPE_EXCAVATION_SIMULATION: 75,
    GAME_TYPE_SITE_DOCUMENTATION: 70,
    GAME_TYPE_HISTORICAL_TIMELINE: 70,
    GAME_TYPE_CONSERVATION_LAB: 65,
}

# ------------------------------------------------------------------------------------------------
# Eligibility Estimates
# ------------------------------------------------------------------------------------------------
ESTIMATE_MINUTES_PER_LEVEL = 20
ESTIMATE_MINUTES_PER_SCORE_STEP = 15
ESTIMATE_SCORE_STEP_POINTS = 10

# ------------------------------------------------------------------------------------------------
# Recommendations
# ------------------------------------------------------------------------------------------------
RECOMMEND_FOCUS_RATIO = 0.5
RECOMMEND_PRACTICE_SCORE = 70
RECOMMEND_CLOSE_TO_ELIGIBLE_COUNT = 3

MSG_RECOMMEND_FOCUS = "Focus on {game} to improve overall progress"
MSG_RECOMMEND_PRACTICE = "Practice {games} to improve scores"
MSG_RECOMMEND_READY = "You're ready for certification! Take the final assessment."
MSG_RECOMMEND_CLOSE = "You're close to certification eligibility. Keep practicing!"

MSG_MISSING_LEVELS = "Complete {remaining} more {game} level(s)"
MSG_MISSING_SCORE = "Improve {game} score by {gap} points"

# ------------------------------------------------------------------------------------------------
# Remediation & Retest
# ------------------------------------------------------------------------------------------------
REMEDIATION_PRIORITY_HIGH = "high"
REMEDIATION_PRIORITY_MEDIUM = "medium"
REMEDIATION_PRIORITY_LOW = "low"

REMEDIATION_PRIORITY_ORDER: Final[dict[str, int]] = {
    REMEDIATION_PRIORITY_HIGH: 0,
    REMEDIATION_PRIORITY_MEDIUM: 1,
    REMEDIATION_PRIORITY_LOW: 2,
}

# Score gap above which priority escalates
REMEDIATION_HIGH_GAP = 20
REMEDIATION_MEDIUM_GAP = 10

# Best score at which the next difficulty is recommended
REMEDIATION_INTERMEDIATE_SCORE = 60
REMEDIATION_ADVANCED_SCORE = 70

REMEDIATION_MINUTES_PER_POINT = 2

MSG_REMEDIATION_ACTIVITY = (
    "Practice {game} at {difficulty} level to improve your score "
    "from {current}% to {required}%"
)

RETEST_COOLDOWN_HOURS = 48
