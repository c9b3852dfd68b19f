"""Engine configuration: weights, certification gates, and achievements.

A ProgressConfig is built once per caller and handed to a ProgressTracker.
Nothing here is shared module state: every config owns copies of its maps,
and default_achievement_definitions() returns a fresh list on each call.

Per-game maps may be partial; missing game types fall back to the defaults
in const.py. Validation runs on construction so a bad configuration fails
before any progress is computed.

Default minimum levels of 5 (artifact identification) and 4 (excavation
simulation) cannot be reached while completed levels count distinct
difficulty levels (at most 3). They are kept as configured; see
unreachable_minimums().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import voluptuous as vol
import yaml

from . import const
from .exceptions import ConfigurationError
from .type_defs import AchievementDefinition

# ==============================================================================
# SCHEMAS
# ==============================================================================

_NON_NEGATIVE_NUMBER = vol.All(vol.Coerce(float), vol.Range(min=0))
_NON_NEGATIVE_INT = vol.All(vol.Coerce(int), vol.Range(min=0))
_GAME_TYPE = vol.In(const.GAME_TYPES)

ACHIEVEMENT_CRITERIA_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_CRITERIA_TYPE): vol.In(const.CRITERIA_TYPES),
        vol.Required(const.DATA_CRITERIA_THRESHOLD): _NON_NEGATIVE_NUMBER,
        vol.Optional(const.DATA_CRITERIA_GAME_TYPE): _GAME_TYPE,
        vol.Optional(const.DATA_CRITERIA_DIFFICULTY): vol.In(const.DIFFICULTY_LEVELS),
    }
)

ACHIEVEMENT_DEFINITION_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_ACHIEVEMENT_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_ACHIEVEMENT_NAME): str,
        vol.Optional(const.DATA_ACHIEVEMENT_DESCRIPTION, default=""): str,
        vol.Optional(const.DATA_ACHIEVEMENT_ICON_URL): str,
        vol.Optional(const.DATA_ACHIEVEMENT_GAME_TYPE): _GAME_TYPE,
        vol.Required(const.DATA_ACHIEVEMENT_CRITERIA): ACHIEVEMENT_CRITERIA_SCHEMA,
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(const.CONF_GAME_WEIGHTS): {_GAME_TYPE: _NON_NEGATIVE_NUMBER},
        vol.Optional(const.CONF_MINIMUM_LEVELS): {_GAME_TYPE: _NON_NEGATIVE_INT},
        vol.Optional(const.CONF_CERTIFICATION_THRESHOLDS): {
            _GAME_TYPE: _NON_NEGATIVE_NUMBER
        },
        vol.Optional(const.CONF_TOTAL_LEVELS): {
            _GAME_TYPE: vol.All(vol.Coerce(int), vol.Range(min=1))
        },
        vol.Optional(const.CONF_ACHIEVEMENTS): [ACHIEVEMENT_DEFINITION_SCHEMA],
    }
)

_ACHIEVEMENT_KEY_ALIASES = {
    "iconUrl": const.DATA_ACHIEVEMENT_ICON_URL,
    "gameType": const.DATA_ACHIEVEMENT_GAME_TYPE,
}


# ==============================================================================
# DEFAULT ACHIEVEMENTS
# ==============================================================================


def default_achievement_definitions() -> list[AchievementDefinition]:
    """Return the eight stock achievement definitions as a new list."""
    return [
        {
            "id": "first_artifact",
            "name": "First Discovery",
            "description": "Complete your first artifact identification game",
            "game_type": const.GAME_TYPE_ARTIFACT_IDENTIFICATION,
            "criteria": {"type": const.CRITERIA_TYPE_COMPLETION, "threshold": 1},
        },
        {
            "id": "artifact_expert",
            "name": "Artifact Expert",
            "description": "Score 90% or higher in artifact identification",
            "game_type": const.GAME_TYPE_ARTIFACT_IDENTIFICATION,
            "criteria": {"type": const.CRITERIA_TYPE_SCORE, "threshold": 90},
        },
        {
            "id": "excavation_master",
            "name": "Excavation Master",
            "description": "Complete all excavation simulation levels",
            "game_type": const.GAME_TYPE_EXCAVATION_SIMULATION,
            "criteria": {"type": const.CRITERIA_TYPE_COMPLETION, "threshold": 4},
        },
        {
            "id": "documentation_pro",
            "name": "Documentation Pro",
            "description": "Score 85% or higher in site documentation",
            "game_type": const.GAME_TYPE_SITE_DOCUMENTATION,
            "criteria": {"type": const.CRITERIA_TYPE_SCORE, "threshold": 85},
        },
        {
            "id": "time_traveler",
            "name": "Time Traveler",
            "description": "Master the historical timeline challenges",
            "game_type": const.GAME_TYPE_HISTORICAL_TIMELINE,
            "criteria": {"type": const.CRITERIA_TYPE_SCORE, "threshold": 80},
        },
        {
            "id": "conservator",
            "name": "Junior Conservator",
            "description": "Complete conservation lab training",
            "game_type": const.GAME_TYPE_CONSERVATION_LAB,
            "criteria": {"type": const.CRITERIA_TYPE_COMPLETION, "threshold": 2},
        },
        {
            "id": "dedicated_learner",
            "name": "Dedicated Learner",
            "description": "Spend 2 hours learning underwater archaeology",
            # Minutes, summed across all game types
            "criteria": {"type": const.CRITERIA_TYPE_TIME, "threshold": 120},
        },
        {
            "id": "well_rounded",
            "name": "Well-Rounded Archaeologist",
            "description": "Complete at least one level in all game types",
            # Completed levels, summed across all game types
            "criteria": {"type": const.CRITERIA_TYPE_COMPLETION, "threshold": 5},
        },
    ]


# ==============================================================================
# CONFIG
# ==============================================================================


def _validate(schema: vol.Schema, data: Any, what: str) -> Any:
    """Run a schema, translating voluptuous errors into ConfigurationError."""
    try:
        return schema(data)
    except vol.Invalid as err:
        errors = err.errors if isinstance(err, vol.MultipleInvalid) else [err]
        path = ".".join(str(part) for part in errors[0].path) or None
        raise ConfigurationError(
            f"Invalid {what}: " + "; ".join(str(e) for e in errors), path
        ) from err


def _normalize_achievement(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Accept camelCase keys in achievement definitions."""
    if not isinstance(raw, Mapping):
        return raw  # let the schema report it
    return {_ACHIEVEMENT_KEY_ALIASES.get(key, key): value for key, value in raw.items()}


@dataclass(slots=True)
class ProgressConfig:
    """Configuration for one ProgressTracker.

    Attributes:
        game_weights: Weight of each game type in overall completion; need not
            sum to 1 but must sum to more than 0
        minimum_levels: Completed levels required per game type for certification
        certification_thresholds: Best score (0-100) required per game type
        total_levels: Denominator of per-game completion; defaults to
            minimum_levels and must be > 0 for every game type
        achievements: Achievement definitions evaluated on every calculation
    """

    game_weights: dict[str, float] = field(
        default_factory=lambda: dict(const.DEFAULT_GAME_WEIGHTS)
    )
    minimum_levels: dict[str, int] = field(
        default_factory=lambda: dict(const.DEFAULT_MINIMUM_LEVELS)
    )
    certification_thresholds: dict[str, float] = field(
        default_factory=lambda: dict(const.DEFAULT_CERTIFICATION_THRESHOLDS)
    )
    total_levels: dict[str, int] | None = None
    achievements: list[AchievementDefinition] = field(
        default_factory=default_achievement_definitions
    )

    def __post_init__(self) -> None:
        """Merge partial maps over defaults and validate everything."""
        validated = _validate(
            CONFIG_SCHEMA,
            {
                const.CONF_GAME_WEIGHTS: dict(self.game_weights),
                const.CONF_MINIMUM_LEVELS: dict(self.minimum_levels),
                const.CONF_CERTIFICATION_THRESHOLDS: dict(
                    self.certification_thresholds
                ),
                const.CONF_TOTAL_LEVELS: dict(self.total_levels or {}),
                const.CONF_ACHIEVEMENTS: [
                    _normalize_achievement(item) for item in self.achievements
                ],
            },
            "progress configuration",
        )

        self.game_weights = {
            **const.DEFAULT_GAME_WEIGHTS,
            **validated[const.CONF_GAME_WEIGHTS],
        }
        self.minimum_levels = {
            **const.DEFAULT_MINIMUM_LEVELS,
            **validated[const.CONF_MINIMUM_LEVELS],
        }
        self.certification_thresholds = {
            **const.DEFAULT_CERTIFICATION_THRESHOLDS,
            **validated[const.CONF_CERTIFICATION_THRESHOLDS],
        }
        self.total_levels = {
            **self.minimum_levels,
            **validated[const.CONF_TOTAL_LEVELS],
        }
        self.achievements = validated[const.CONF_ACHIEVEMENTS]

        if sum(self.game_weights.values()) <= 0:
            raise ConfigurationError(
                "Game weights must sum to more than zero", const.CONF_GAME_WEIGHTS
            )

        for game_type, levels in self.total_levels.items():
            if levels <= 0:
                raise ConfigurationError(
                    f"Total levels for {game_type} must be greater than zero "
                    f"(got {levels}); set total_levels explicitly when a "
                    "minimum level count is 0",
                    f"{const.CONF_TOTAL_LEVELS}.{game_type}",
                )

        seen: set[str] = set()
        for definition in self.achievements:
            achievement_id = definition[const.DATA_ACHIEVEMENT_ID]
            if achievement_id in seen:
                raise ConfigurationError(
                    f"Duplicate achievement id: {achievement_id}",
                    const.CONF_ACHIEVEMENTS,
                )
            seen.add(achievement_id)

        unreachable = self.unreachable_minimums()
        if unreachable:
            const.LOGGER.debug(
                "Minimum levels exceed the %d completable difficulty levels: %s",
                const.MAX_COMPLETABLE_LEVELS,
                unreachable,
            )

    # ------------------------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ProgressConfig:
        """Build a config from a plain mapping (e.g. parsed JSON/YAML).

        Keys: game_weights, minimum_levels, certification_thresholds,
        total_levels, achievements. All optional.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )

        raw = dict(data)
        if isinstance(raw.get(const.CONF_ACHIEVEMENTS), list):
            raw[const.CONF_ACHIEVEMENTS] = [
                _normalize_achievement(item) for item in raw[const.CONF_ACHIEVEMENTS]
            ]
        validated = _validate(CONFIG_SCHEMA, raw, "progress configuration")
        kwargs: dict[str, Any] = {}
        for key in (
            const.CONF_GAME_WEIGHTS,
            const.CONF_MINIMUM_LEVELS,
            const.CONF_CERTIFICATION_THRESHOLDS,
            const.CONF_TOTAL_LEVELS,
            const.CONF_ACHIEVEMENTS,
        ):
            if key in validated:
                kwargs[key] = validated[key]
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ProgressConfig:
        """Load a config from a YAML file.

        An empty file yields the default configuration.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        config_path = Path(path)
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except OSError as err:
            raise ConfigurationError(
                f"Cannot read configuration file {config_path}: {err}"
            ) from err
        except yaml.YAMLError as err:
            raise ConfigurationError(
                f"Cannot parse configuration file {config_path}: {err}"
            ) from err

        const.LOGGER.debug("Loaded progress configuration from %s", config_path)
        return cls.from_dict(data)

    # ------------------------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------------------------

    def unreachable_minimums(self) -> dict[str, int]:
        """Return minimum level requirements that no learner can satisfy.

        completed_levels counts distinct difficulty levels, so any minimum
        above const.MAX_COMPLETABLE_LEVELS blocks certification for everyone.
        """
        return {
            game_type: levels
            for game_type, levels in self.minimum_levels.items()
            if levels > const.MAX_COMPLETABLE_LEVELS
        }
