"""Recommendation Engine - Human-readable guidance from aggregated progress.

Three independent rules, emitted in this order:
1. Focus: the game type with the lowest level-completion ratio, if below 50%
2. Practice: every game type with a best score below 70, in one message
3. Readiness: all five game types satisfied, or at least three of them

An empty list is a valid result, and is always the result for a learner
who has not played any game yet.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING

from .. import const
from ..data_builders import empty_game_progress
from ..utils.dt_utils import EPOCH
from .progress_engine import ProgressEngine

if TYPE_CHECKING:
    from ..type_defs import ProgressMap


class RecommendationEngine:
    """Pure logic engine for learner recommendations."""

    @staticmethod
    def recommend(progress: ProgressMap, satisfied: Collection[str]) -> list[str]:
        """Derive recommendations for one learner.

        Args:
            progress: GameProgress per game type
            satisfied: Game types meeting both certification gates

        Returns:
            Recommendation messages (possibly empty)
        """
        recommendations: list[str] = []

        if not any(
            game[const.DATA_PROGRESS_LAST_PLAYED] > EPOCH
            for game in progress.values()
        ):
            const.LOGGER.debug("No game played yet; no recommendations")
            return recommendations

        # Stable sort: ties keep canonical game order
        ranked = sorted(
            (
                (
                    game_type,
                    progress.get(game_type) or empty_game_progress(),  # type: ignore[call-overload]
                )
                for game_type in const.GAME_TYPES
            ),
            key=lambda item: ProgressEngine.completion_ratio_of(item[1]),
        )

        weakest_type, weakest = ranked[0]
        if ProgressEngine.completion_ratio_of(weakest) < const.RECOMMEND_FOCUS_RATIO:
            recommendations.append(
                const.MSG_RECOMMEND_FOCUS.format(
                    game=const.GAME_DISPLAY_NAMES[weakest_type]
                )
            )

        low_scores = [
            const.GAME_DISPLAY_NAMES[game_type]
            for game_type, game in ranked
            if game[const.DATA_PROGRESS_BEST_SCORE] < const.RECOMMEND_PRACTICE_SCORE
        ]
        if low_scores:
            recommendations.append(
                const.MSG_RECOMMEND_PRACTICE.format(games=", ".join(low_scores))
            )

        satisfied_count = len(set(satisfied) & set(const.GAME_TYPES))
        if satisfied_count == len(const.GAME_TYPES):
            recommendations.append(const.MSG_RECOMMEND_READY)
        elif satisfied_count >= const.RECOMMEND_CLOSE_TO_ELIGIBLE_COUNT:
            recommendations.append(const.MSG_RECOMMEND_CLOSE)

        const.LOGGER.debug(
            "Generated %d recommendation(s); weakest game type: %s",
            len(recommendations),
            weakest_type,
        )
        return recommendations
