"""
EDGE_CONFIG.PY - Versioned, Immutable Edge Scoring Configuration
================================================================

Every scoring call receives its configuration explicitly. There is no
module-level mutable singleton: presets are frozen pydantic models and
`with_overrides()` returns a NEW config instead of mutating the old one.

Two schema versions coexist:
    version 1 - LEGACY_EDGE_CONFIG  (historical edge scoring output)
    version 2 - DEFAULT_EDGE_CONFIG (unified scoring, league rules opt-in)

Configuration errors (no `default` market bonus, unordered tier cutoffs,
unsupported version) raise EdgeConfigError when the config is built or
loaded - at startup, never per record.

Usage:
    from core.edge_config import DEFAULT_EDGE_CONFIG, load_edge_config

    config = load_edge_config("edge_config.yaml")
    strict = config.with_overrides(tier_thresholds={"S": 24})
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.scoring_contract import EDGE_SCORING_VERSION

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = (EDGE_SCORING_VERSION["LEGACY"], EDGE_SCORING_VERSION["CURRENT"])


class EdgeConfigError(ValueError):
    """Raised when an edge scoring configuration is unusable."""


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# GENERIC RULE TABLES
# =============================================================================

class OddsRule(_FrozenModel):
    """Odds strictly below `threshold` (a heavier favorite) earns `high`."""
    threshold: float = -125
    high: float = 3


class ThresholdRule(_FrozenModel):
    """Score strictly above `threshold` earns `strong`."""
    threshold: float
    strong: float


class TierThresholds(_FrozenModel):
    """Minimum clamped score per tier. D is implicit below C."""
    S: float = 23
    A: float = 20
    B: float = 15
    C: float = 10

    @model_validator(mode="after")
    def _descending(self) -> "TierThresholds":
        if not (self.S > self.A > self.B > self.C):
            raise ValueError(
                f"tier cutoffs must be strictly descending S > A > B > C, "
                f"got S={self.S} A={self.A} B={self.B} C={self.C}"
            )
        return self

    def as_pairs(self) -> Tuple[Tuple[str, float], ...]:
        return (("S", self.S), ("A", self.A), ("B", self.B), ("C", self.C))


# =============================================================================
# ZONE THREAT (INTERNAL ONLY)
# =============================================================================

class StatCutoff(_FrozenModel):
    """Pitcher risk stat: `extreme_points` at/above extreme, else `high_points` at/above high."""
    high: float
    extreme: float
    high_points: int = 1
    extreme_points: int = 2

    @model_validator(mode="after")
    def _ordered(self) -> "StatCutoff":
        if self.extreme < self.high:
            raise ValueError(f"extreme cutoff {self.extreme} below high cutoff {self.high}")
        return self


class WalkRateCutoff(_FrozenModel):
    """BB/9: poor control adds risk, elite control removes it (the only negative rule)."""
    poor: float = 4.0
    elite: float = 1.7
    poor_points: int = 1
    elite_points: int = -1


class MatchupGate(_FrozenModel):
    """All four conditions are mandatory for the boost (park OR wind counts as one)."""
    min_batter_barrel: float = 10.0
    launch_angle_min: float = 16.0
    launch_angle_max: float = 28.0
    min_park_factor: float = 1.04


class ZoneThreatConfig(_FrozenModel):
    enabled: bool = True
    log_decisions: bool = True
    hr_markets: Tuple[str, ...] = ("Home Runs", "Home Run", "HR", "home_runs", "batter_home_runs")

    hr_per_9: StatCutoff = StatCutoff(high=1.8, extreme=2.2)
    barrel_percent: StatCutoff = StatCutoff(high=10, extreme=12)
    meatball_percent: StatCutoff = StatCutoff(high=7, extreme=9)
    hittable_count_pct: StatCutoff = StatCutoff(high=28, extreme=32)
    recent_hrs: StatCutoff = StatCutoff(high=4, extreme=6)
    walk_rate: WalkRateCutoff = WalkRateCutoff()

    extreme_threshold: int = 5
    moderate_threshold: int = 3
    edge_boost: float = 2
    matchup_gate: MatchupGate = MatchupGate()

    @model_validator(mode="after")
    def _classification_order(self) -> "ZoneThreatConfig":
        if self.extreme_threshold < self.moderate_threshold:
            raise ValueError("extreme_threshold must be >= moderate_threshold")
        return self


# =============================================================================
# EDGE SCORE CONFIG
# =============================================================================

class EdgeScoreConfig(_FrozenModel):
    version: int = EDGE_SCORING_VERSION["CURRENT"]
    market: Dict[str, float]
    odds: OddsRule = OddsRule()
    trend_score: ThresholdRule = ThresholdRule(threshold=0.7, strong=4)
    matchup_score: ThresholdRule = ThresholdRule(threshold=0.6, strong=3)
    role_score: ThresholdRule = ThresholdRule(threshold=0.5, strong=2)
    line_value_score: ThresholdRule = ThresholdRule(threshold=0.6, strong=3)
    source: Dict[str, float] = Field(default_factory=dict)
    tags: Dict[str, float] = Field(default_factory=dict)
    max: float = 25
    tier_thresholds: TierThresholds = TierThresholds()
    zone_threat: ZoneThreatConfig = ZoneThreatConfig()

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported edge scoring version {value}, expected one of {SUPPORTED_VERSIONS}")
        return value

    @field_validator("market")
    @classmethod
    def _market_default(cls, value: Dict[str, float]) -> Dict[str, float]:
        if "default" not in value:
            raise ValueError("market table must define a 'default' bonus")
        return value

    @field_validator("max")
    @classmethod
    def _positive_max(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"max must be positive, got {value}")
        return value

    def with_overrides(self, **changes: Any) -> "EdgeScoreConfig":
        """Return a new config with `changes` deep-merged over this one."""
        return build_edge_config(_deep_merge(self.model_dump(), changes))


def _deep_merge(base: Dict[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict) and key not in ("market", "source", "tags"):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_edge_config(data: Mapping[str, Any]) -> EdgeScoreConfig:
    """Validate a raw mapping into an EdgeScoreConfig, raising EdgeConfigError on failure."""
    try:
        return EdgeScoreConfig.model_validate(dict(data))
    except ValidationError as e:
        raise EdgeConfigError(f"Invalid edge scoring config: {e}") from e


# =============================================================================
# PRESETS
# =============================================================================

_MARKET_TABLE = {
    "points": 5,
    "rebounds": 4,
    "assists": 4,
    "3PM": 3,
    "PRA": 2,
    "Home Runs": 3,
    "default": 1,
}

_SOURCE_TABLE = {
    "premium": 2,
    "verified": 1,
    "standard": 0,
}

_TAG_TABLE = {
    "rocket": 3,
    "ladder": 2,
    "value": 1,
}

LEGACY_EDGE_CONFIG = build_edge_config({
    "version": EDGE_SCORING_VERSION["LEGACY"],
    "market": _MARKET_TABLE,
    "source": _SOURCE_TABLE,
    "tags": _TAG_TABLE,
    "max": 25,
})

# Unified scale leaves headroom above the legacy max for league rules + boosts
DEFAULT_EDGE_CONFIG = build_edge_config({
    "version": EDGE_SCORING_VERSION["CURRENT"],
    "market": _MARKET_TABLE,
    "source": _SOURCE_TABLE,
    "tags": _TAG_TABLE,
    "max": 30,
})


def load_edge_config(path: Optional[Union[str, Path]] = None) -> EdgeScoreConfig:
    """
    Load a config from YAML, merged over the preset for its version.

    A missing path returns DEFAULT_EDGE_CONFIG. The file's `version` key picks
    the base preset (1 -> legacy, otherwise unified).

    Raises:
        EdgeConfigError: file unreadable, not a mapping, or failing validation
    """
    if not path:
        return DEFAULT_EDGE_CONFIG

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise EdgeConfigError(f"Cannot read edge config {path}: {e}") from e

    if not isinstance(raw, Mapping):
        raise EdgeConfigError(f"Edge config {path} must be a mapping, got {type(raw).__name__}")

    base = LEGACY_EDGE_CONFIG if raw.get("version") == EDGE_SCORING_VERSION["LEGACY"] else DEFAULT_EDGE_CONFIG
    config = base.with_overrides(**raw)
    logger.info("Loaded edge config %s (version=%s, max=%s)", path, config.version, config.max)
    return config
