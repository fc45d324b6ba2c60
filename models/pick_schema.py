"""
Edge Grading Schemas - v2
Prop records in, grade views out.

PropRecord tolerates partially-populated and malformed feed rows: a field that
cannot be parsed becomes absent (None) so the rule reading it does not apply.
PublicGradeView and InternalGradeView are separate types on purpose - the public
view has no field that can carry Zone Threat data.
"""
import math
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from core.scoring_contract import PROMOTION_TIERS, SOLO_LOCK_TIER

TierLetter = Literal["S", "A", "B", "C", "D"]
ThreatLevel = Literal["CLEAN", "MODERATE", "EXTREME"]
Reaction = Literal["sharp_agree", "sharp_fade", "neutral", "unknown"]

# Breakdown values are numeric contributions or short diagnostic notes
BreakdownValue = Union[int, float, str]
ScoreBreakdown = Dict[str, BreakdownValue]

_FLOAT_FIELDS = (
    "trend_score", "matchup_score", "role_score", "line_value_score",
    "pitcher_hr_per_9", "pitcher_barrel_pct", "pitcher_meatball_pct",
    "pitcher_hittable_count_pct", "pitcher_recent_hrs", "pitcher_walk_rate",
    "batter_barrel_pct", "batter_launch_angle", "park_factor",
    "dvp_score",
)
_BOOL_FIELDS = ("is_rocket", "is_ladder", "wind_out", "context_flag")
_STR_FIELDS = (
    "market_type", "stat_type", "source", "provider", "league",
    "pitcher_id", "pitcher_name", "admin_override_tier",
)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def _to_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        return None
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    return None


class PropRecord(BaseModel):
    """
    A single prop/pick to be graded.

    Only `id` is required. Everything else is absent unless the feed supplied
    a usable value. Unknown columns are kept (extra="allow") so promotion can
    copy the row through untouched.
    """
    model_config = ConfigDict(extra="allow")

    id: str

    market_type: Optional[str] = None
    odds: Optional[float] = None
    trend_score: Optional[float] = None
    matchup_score: Optional[float] = None
    role_score: Optional[float] = None
    line_value_score: Optional[float] = None
    source: Optional[str] = None
    is_rocket: Optional[bool] = None
    is_ladder: Optional[bool] = None
    tags: List[str] = Field(default_factory=list)
    league: Optional[str] = None
    context_flag: Optional[bool] = None
    admin_override_tier: Optional[str] = None

    # Pitcher risk (Zone Threat)
    pitcher_id: Optional[str] = None
    pitcher_name: Optional[str] = None
    pitcher_hr_per_9: Optional[float] = None
    pitcher_barrel_pct: Optional[float] = None
    pitcher_meatball_pct: Optional[float] = None
    pitcher_hittable_count_pct: Optional[float] = None
    pitcher_recent_hrs: Optional[float] = None
    pitcher_walk_rate: Optional[float] = None

    # Matchup (Zone Threat)
    batter_barrel_pct: Optional[float] = None
    batter_launch_angle: Optional[float] = None
    park_factor: Optional[float] = None
    wind_out: Optional[bool] = None

    # Raw feed aliases
    stat_type: Optional[str] = None
    dvp_score: Optional[float] = None
    provider: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator(*_FLOAT_FIELDS, mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> Optional[float]:
        return _to_float(value)

    @field_validator("odds", mode="before")
    @classmethod
    def _coerce_odds(cls, value: Any) -> Optional[float]:
        # fractional American odds are kept as-is so -125.5 stays below -125
        return _to_float(value)

    @field_validator(*_BOOL_FIELDS, mode="before")
    @classmethod
    def _coerce_bool(cls, value: Any) -> Optional[bool]:
        return _to_bool(value)

    @field_validator(*_STR_FIELDS, mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return value if value.strip() else None
        return None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [tag for tag in value if isinstance(tag, str)]

    @model_validator(mode="after")
    def _resolve_aliases(self) -> "PropRecord":
        if self.market_type is None and self.stat_type is not None:
            self.market_type = self.stat_type
        if self.matchup_score is None and self.dvp_score is not None:
            self.matchup_score = self.dvp_score
        if self.source is None and self.provider is not None:
            self.source = self.provider
        return self


class ZoneThreatAnalysis(BaseModel):
    """INTERNAL ONLY - Zone Threat outcome for one grading call."""
    eligible: bool
    threat_level: Optional[ThreatLevel] = None
    boost_applied: Optional[float] = None
    pitcher_name: Optional[str] = None


class GradeResult(BaseModel):
    """Full (internal) grade. postable/solo_lock are derived from the final tier only."""
    model_config = ConfigDict(frozen=True)

    score: float
    tier: TierLetter
    tags: List[str] = Field(default_factory=list)
    breakdown: ScoreBreakdown = Field(default_factory=dict)
    version: int

    @computed_field
    @property
    def postable(self) -> bool:
        return self.tier in PROMOTION_TIERS

    @computed_field
    @property
    def solo_lock(self) -> bool:
        return self.tier == SOLO_LOCK_TIER


class PublicGradeView(BaseModel):
    """Member-facing grade. Built from the public ledger only."""
    model_config = ConfigDict(frozen=True)

    edge_score: float
    tier: TierLetter
    context_tags: List[str] = Field(default_factory=list)
    edge_breakdown: ScoreBreakdown = Field(default_factory=dict)
    version: int

    @computed_field
    @property
    def postable(self) -> bool:
        return self.tier in PROMOTION_TIERS

    @computed_field
    @property
    def solo_lock(self) -> bool:
        return self.tier == SOLO_LOCK_TIER


class InternalGradeView(GradeResult):
    """Audit/logging view: full grade + Zone Threat analysis + raw league overlay detail."""
    zone_threat_analysis: ZoneThreatAnalysis
    league_overlay: Dict[str, float] = Field(default_factory=dict)


class MarketReaction(BaseModel):
    """Market-resistance signal for a finalized pick."""
    reaction: Reaction = "unknown"
    movement: Optional[float] = None
    movement_pct: Optional[float] = None
    updated_line: Optional[float] = None


class LegResult(BaseModel):
    leg_id: str
    score: float
    tier: TierLetter
    breakdown: ScoreBreakdown = Field(default_factory=dict)


class TicketDecision(BaseModel):
    """Outcome of the all-legs-qualify gate for a multi-leg ticket."""
    ticket_id: str
    bet_type: str
    promote: bool
    ticket_score: Optional[int] = None
    leg_results: List[LegResult] = Field(default_factory=list)
    blocking_legs: List[str] = Field(default_factory=list)
