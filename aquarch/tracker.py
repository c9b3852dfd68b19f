"""Progress Tracker - Orchestrates one learner's progress calculation.

This tracker handles the full pipeline for a single call:
- Input building: raw session/snapshot documents -> validated records
- Aggregation: per-game-type progress and cross-game totals
- Gates: weighted completion and all-or-nothing certification status
- Events: achievements crossed since the previous snapshot
- Guidance: recommendations, eligibility detail, remediation, retests

ARCHITECTURE:
- ProgressTracker = STATEFUL only in its configuration
- Engines = Pure calculation logic (STATELESS)
- The caller persists results and supplies the last persisted snapshot

Each tracker owns its ProgressConfig. There is no shared default instance;
construct one per caller (or per configuration) as needed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from . import const, data_builders as db
from .config import ProgressConfig
from .engines.achievement_engine import AchievementEngine
from .engines.certification_engine import CertificationEngine
from .engines.progress_engine import ProgressEngine
from .engines.recommendation_engine import RecommendationEngine
from .utils.dt_utils import as_utc, dt_now_utc

if TYPE_CHECKING:
    from datetime import datetime

    from .type_defs import (
        AchievementEvaluation,
        EligibilityStatus,
        ProgressCalculationResult,
        ProgressMap,
        RemediationPlan,
        RetestStatus,
    )


class ProgressTracker:
    """Progress and certification calculator for one configuration.

    Responsibilities:
    - Validate raw input at the boundary (InvalidInputError on bad shape)
    - Run the engines in order and assemble ProgressCalculationResult
    - Log newly earned achievements and eligibility

    NOT responsible for:
    - Persisting progress, achievements, or certificates
    - Deduplicating achievements already granted (pass the true previous
      snapshot to avoid re-firing)
    - Issuing certificates ("certified" is set by the issuance step)
    """

    def __init__(self, config: ProgressConfig | None = None) -> None:
        """Initialize the ProgressTracker.

        Args:
            config: Weights, gates, and achievements; defaults when None
        """
        self.config = config if config is not None else ProgressConfig()

    # =========================================================================
    # MAIN PIPELINE
    # =========================================================================

    def calculate_progress(
        self,
        sessions: Iterable[Mapping[str, Any]] | None,
        previous: Mapping[str, Mapping[str, Any]] | None = None,
        now: datetime | None = None,
    ) -> ProgressCalculationResult:
        """Calculate a learner's progress from their full session history.

        Args:
            sessions: Every session of the learner (any status); raw
                document-store dicts or SessionRecords
            previous: Last persisted per-game-type snapshot; None or missing
                entries count as zeroed progress
            now: Timestamp for earned achievements (defaults to now, UTC)

        Returns:
            ProgressCalculationResult

        Raises:
            InvalidInputError: If a session or snapshot entry is malformed
            ConfigurationError: If the configuration cannot be applied
        """
        reference = as_utc(now) if now is not None else dt_now_utc()
        records = db.build_session_records(sessions)
        baseline = db.build_progress_snapshot(previous)

        const.LOGGER.debug(
            "Calculating progress from %d session(s), %d previous snapshot entries",
            len(records),
            len(baseline),
        )

        game_progress = ProgressEngine.aggregate(records, self._total_levels)
        overall_completion = ProgressEngine.overall_completion(
            game_progress, self.config.game_weights
        )
        satisfied = CertificationEngine.satisfied_game_types(
            game_progress,
            self.config.minimum_levels,
            self.config.certification_thresholds,
        )
        certification_status = CertificationEngine.evaluate(
            game_progress,
            self.config.minimum_levels,
            self.config.certification_thresholds,
        )
        new_achievements = AchievementEngine.detect(
            game_progress, baseline, self.config.achievements, reference
        )
        recommendations = RecommendationEngine.recommend(game_progress, satisfied)

        for achievement in new_achievements:
            const.LOGGER.info(
                "Achievement earned: %s (%s)",
                achievement["name"],
                achievement["id"],
            )
        if certification_status == const.CERTIFICATION_STATUS_ELIGIBLE:
            const.LOGGER.info("All certification requirements met")
        else:
            const.LOGGER.debug(
                "Certification requirements met for %d of %d game types: %s",
                len(satisfied),
                len(const.GAME_TYPES),
                satisfied,
            )

        return {
            "overall_completion": overall_completion,
            "game_progress": game_progress,
            "certification_status": certification_status,
            "new_achievements": new_achievements,
            "recommendations": recommendations,
            "totals": ProgressEngine.calculate_totals(game_progress),
        }

    # =========================================================================
    # CERTIFICATION GUIDANCE
    # =========================================================================

    def calculate_eligibility_status(
        self, sessions: Iterable[Mapping[str, Any]] | None
    ) -> EligibilityStatus:
        """Explain how far the learner is from certification."""
        game_progress = self._aggregate(sessions)
        return CertificationEngine.eligibility_status(
            game_progress,
            self.config.minimum_levels,
            self.config.certification_thresholds,
        )

    def generate_remediation_plan(
        self,
        sessions: Iterable[Mapping[str, Any]] | None,
        now: datetime | None = None,
    ) -> RemediationPlan:
        """Build a practice plan for game types below their score threshold."""
        game_progress = self._aggregate(sessions)
        plan = CertificationEngine.remediation_plan(
            game_progress, self.config.certification_thresholds, now
        )
        const.LOGGER.debug(
            "Remediation plan with %d activities for weak areas %s",
            len(plan["recommended_activities"]),
            plan["weak_areas"],
        )
        return plan

    def check_retest(
        self,
        attempts: Iterable[Mapping[str, Any]] | None,
        now: datetime | None = None,
    ) -> RetestStatus:
        """Decide whether the learner may retake the certification assessment.

        Raises:
            InvalidInputError: If an attempt document is malformed
        """
        records = [db.build_certification_attempt(raw) for raw in attempts or ()]
        return CertificationEngine.retest_status(records, now)

    def evaluate_achievements(
        self,
        sessions: Iterable[Mapping[str, Any]] | None,
        previous: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> list[AchievementEvaluation]:
        """Report progress toward every configured achievement."""
        game_progress = self._aggregate(sessions)
        baseline = db.build_progress_snapshot(previous)
        return [
            AchievementEngine.evaluate_definition(definition, game_progress, baseline)
            for definition in self.config.achievements
        ]

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @property
    def _total_levels(self) -> dict[str, int]:
        """Per-game total levels; config fills these in on construction."""
        return self.config.total_levels or dict(self.config.minimum_levels)

    def _aggregate(self, sessions: Iterable[Mapping[str, Any]] | None) -> ProgressMap:
        """Build records and aggregate them with this tracker's config."""
        records = db.build_session_records(sessions)
        return ProgressEngine.aggregate(records, self._total_levels)
