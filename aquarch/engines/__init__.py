"""Engine modules for Aquarch.

Contains pure computation engines:
- progress_engine: Session aggregation, weighted completion, and totals
- certification_engine: Eligibility gate, guidance, remediation, and retests
- achievement_engine: Crossing-edge achievement detection
- recommendation_engine: Learner guidance messages
"""

# Use relative imports within package to avoid mypy module resolution issues
from .achievement_engine import AchievementEngine
from .certification_engine import CertificationEngine
from .progress_engine import ProgressEngine
from .recommendation_engine import RecommendationEngine

__all__ = [
    "AchievementEngine",
    "CertificationEngine",
    "ProgressEngine",
    "RecommendationEngine",
]
