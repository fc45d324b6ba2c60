"""
EDGE_SCORING.PY - Composite Edge Scorer
=======================================

Single entry point: compute_edge_score(prop, config, mode, admin_override_tier)

PIPELINE (deterministic, no hidden state):
    0
    + league overlay          (unified + use_league_rules only, capped per overlay)
    + market type bonus       (table lookup, `default` fallback)
    + odds bonus              (odds < threshold)
    + trend / matchup / role  (score > threshold)
    + source bonus            (recognized source)
    + line value              (score > threshold)
    + rocket / ladder tags
    + no-context-flag bonus   (unified only)
    + Zone Threat boost       (INTERNAL LEDGER ONLY)
    -> clamp to [0, max]
    -> tier from the CLAMPED score
    -> admin override replaces the tier (audit note), never the score

MODES:
    ScoringMode.legacy()   - version 1 behaviour: exact market match, no league
                             rules, no context flag rule. Legacy is a restricted
                             unified pipeline, so parity holds by construction.
    ScoringMode.unified()  - config version, case-insensitive market fallback,
                             opt-in league rules, opt-out zone threat.

PUBLIC vs INTERNAL:
    Every contribution goes through a ledger that marks it public or internal.
    PublicGradeView is built from public entries only; InternalGradeView sees
    everything. The score itself is shared.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from core.edge_config import DEFAULT_EDGE_CONFIG, LEGACY_EDGE_CONFIG, EdgeScoreConfig
from core.rule_primitives import (
    context_flag_bonus,
    line_value_bonus,
    market_type_bonus,
    matchup_bonus,
    odds_bonus,
    role_bonus,
    source_bonus,
    tag_bonuses,
    trend_bonus,
)
from core.scoring_contract import (
    BREAKDOWN_OVERRIDE_KEY,
    BREAKDOWN_TOTAL_KEY,
    EDGE_SCORING_VERSION,
    ZONE_THREAT_BOOST_KEY,
    ZONE_THREAT_LEVEL_KEY,
    ZONE_THREAT_TAG,
)
from core.zone_threat import ZoneThreatOutcome, evaluate_zone_threat
from league_rules import league_overlay_score
from models.pick_schema import (
    BreakdownValue,
    GradeResult,
    InternalGradeView,
    PropRecord,
    PublicGradeView,
    ScoreBreakdown,
    ZoneThreatAnalysis,
)
from tiering import clamp_score, resolve_tier

logger = logging.getLogger(__name__)

LEGACY = "legacy"
UNIFIED = "unified"

PropInput = Union[PropRecord, Mapping[str, Any]]


# =============================================================================
# SCORING MODE
# =============================================================================

@dataclass(frozen=True)
class ScoringMode:
    kind: str = UNIFIED
    use_league_rules: bool = False
    use_zone_threat: bool = True

    @classmethod
    def legacy(cls) -> "ScoringMode":
        return cls(kind=LEGACY, use_league_rules=False, use_zone_threat=True)

    @classmethod
    def unified(cls, use_league_rules: bool = False, use_zone_threat: bool = True) -> "ScoringMode":
        return cls(kind=UNIFIED, use_league_rules=use_league_rules, use_zone_threat=use_zone_threat)

    @property
    def is_legacy(self) -> bool:
        return self.kind == LEGACY

    def version_for(self, config: EdgeScoreConfig) -> int:
        return EDGE_SCORING_VERSION["LEGACY"] if self.is_legacy else config.version


# =============================================================================
# LEDGER
# =============================================================================

class _BreakdownLedger:
    """Ordered contributions, each flagged public or internal."""

    def __init__(self):
        self._entries: List[Tuple[str, BreakdownValue, bool]] = []
        self.score: float = 0

    def add(self, key: str, value: float, internal: bool = False) -> None:
        self.score += value
        self._entries.append((key, value, internal))

    def note(self, key: str, value: BreakdownValue, internal: bool = False) -> None:
        self._entries.append((key, value, internal))

    def public(self) -> ScoreBreakdown:
        return {key: value for key, value, internal in self._entries if not internal}

    def full(self) -> ScoreBreakdown:
        return {key: value for key, value, _ in self._entries}


@dataclass(frozen=True)
class EdgeComputation:
    """One scoring pass. Views are projections of this object, never copies with keys deleted."""
    score: float
    tier: str
    version: int
    public_tags: List[str]
    internal_tags: List[str]
    public_breakdown: ScoreBreakdown
    full_breakdown: ScoreBreakdown
    zone_threat: ZoneThreatOutcome
    league_detail: Dict[str, float] = field(default_factory=dict)

    def grade_result(self) -> GradeResult:
        return GradeResult(
            score=self.score,
            tier=self.tier,
            tags=self.public_tags + self.internal_tags,
            breakdown=self.full_breakdown,
            version=self.version,
        )

    def public_view(self) -> PublicGradeView:
        return PublicGradeView(
            edge_score=self.score,
            tier=self.tier,
            context_tags=list(self.public_tags),
            edge_breakdown=self.public_breakdown,
            version=self.version,
        )

    def internal_view(self) -> InternalGradeView:
        return InternalGradeView(
            score=self.score,
            tier=self.tier,
            tags=self.public_tags + self.internal_tags,
            breakdown=self.full_breakdown,
            version=self.version,
            zone_threat_analysis=self.zone_threat.analysis,
            league_overlay=self.league_detail,
        )


def as_prop_record(prop: PropInput) -> PropRecord:
    if isinstance(prop, PropRecord):
        return prop
    return PropRecord.model_validate(dict(prop))


# =============================================================================
# COMPOSITE SCORER
# =============================================================================

def compute_edge_score(
    prop: PropInput,
    config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG,
    mode: Optional[ScoringMode] = None,
    admin_override_tier: Optional[str] = None,
) -> EdgeComputation:
    """
    Run the full pipeline for one prop.

    Args:
        prop: PropRecord or raw record mapping (must carry an `id`)
        config: Immutable scoring configuration
        mode: ScoringMode (defaults to unified without league rules)
        admin_override_tier: Replaces the computed tier; score unchanged

    Returns:
        EdgeComputation with public/internal projections
    """
    prop = as_prop_record(prop)
    mode = mode or ScoringMode.unified()
    ledger = _BreakdownLedger()
    public_tags: List[str] = []
    internal_tags: List[str] = []
    league_detail: Dict[str, float] = {}

    if mode.use_league_rules and not mode.is_legacy:
        overlay = league_overlay_score(prop)
        for key, value in overlay.breakdown.items():
            ledger.add(key, value)
        league_detail = overlay.detail

    ledger.add("market_type", market_type_bonus(prop, config, case_insensitive=not mode.is_legacy))

    for key, rule in (
        ("odds", odds_bonus),
        ("trend_score", trend_bonus),
        ("matchup_score", matchup_bonus),
        ("role_score", role_bonus),
        ("source", source_bonus),
        ("line_value_score", line_value_bonus),
    ):
        bonus = rule(prop, config)
        if bonus is not None:
            ledger.add(key, bonus)

    for key, tag, bonus in tag_bonuses(prop, config):
        ledger.add(key, bonus)
        public_tags.append(tag)

    if not mode.is_legacy:
        bonus = context_flag_bonus(prop)
        if bonus is not None:
            ledger.add("no_context_flag", bonus)

    # ZONE THREAT RATING (INTERNAL ONLY)
    zone = ZoneThreatOutcome(analysis=ZoneThreatAnalysis(eligible=False))
    if mode.use_zone_threat:
        zone = evaluate_zone_threat(prop, config.zone_threat)
        if zone.boost > 0:
            ledger.add(ZONE_THREAT_BOOST_KEY, zone.boost, internal=True)
            internal_tags.append(ZONE_THREAT_TAG)
        if zone.threat_level is not None:
            ledger.note(ZONE_THREAT_LEVEL_KEY, zone.threat_level, internal=True)

    score = clamp_score(round(ledger.score, 4), config.max)
    ledger.note(BREAKDOWN_TOTAL_KEY, score)

    tier, override_note = resolve_tier(score, config.tier_thresholds, admin_override_tier)
    if override_note is not None:
        ledger.note(BREAKDOWN_OVERRIDE_KEY, override_note)

    return EdgeComputation(
        score=score,
        tier=tier,
        version=mode.version_for(config),
        public_tags=public_tags,
        internal_tags=internal_tags,
        public_breakdown=ledger.public(),
        full_breakdown=ledger.full(),
        zone_threat=zone,
        league_detail=league_detail,
    )


# =============================================================================
# ACCESSORS
# =============================================================================

def final_edge_score(
    prop: PropInput,
    config: EdgeScoreConfig = LEGACY_EDGE_CONFIG,
    admin_override_tier: Optional[str] = None,
) -> GradeResult:
    """Legacy contract: full (internal) grade from the version 1 pipeline."""
    return compute_edge_score(prop, config, ScoringMode.legacy(), admin_override_tier).grade_result()


def unified_edge_score(
    prop: PropInput,
    config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG,
    admin_override_tier: Optional[str] = None,
    use_league_rules: bool = False,
    use_legacy_scoring: bool = False,
    use_zone_threat: bool = True,
) -> GradeResult:
    """
    Unified contract. use_legacy_scoring=True reproduces final_edge_score()
    exactly for the same config.
    """
    if use_legacy_scoring:
        mode = ScoringMode.legacy()
    else:
        mode = ScoringMode.unified(use_league_rules=use_league_rules, use_zone_threat=use_zone_threat)
    return compute_edge_score(prop, config, mode, admin_override_tier).grade_result()


def grade_pick(prop: PropInput, config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG) -> GradeResult:
    """Unified scoring with league rules folded in."""
    return unified_edge_score(prop, config, use_league_rules=True)


def score_prop_edge(
    prop: PropInput,
    config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG,
    mode: Optional[ScoringMode] = None,
) -> PublicGradeView:
    """PUBLIC accessor - no Zone Threat keys, tags or levels."""
    return compute_edge_score(prop, config, mode).public_view()


def get_internal_scoring_details(
    prop: PropInput,
    config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG,
    mode: Optional[ScoringMode] = None,
    admin_override_tier: Optional[str] = None,
) -> InternalGradeView:
    """
    INTERNAL ONLY: full grade plus Zone Threat analysis.
    DO NOT use this for public-facing features.
    """
    return compute_edge_score(prop, config, mode, admin_override_tier).internal_view()
