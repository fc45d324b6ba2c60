"""
ZONE THREAT RATING - INTERNAL ONLY
==================================

Pitcher home-run risk classifier used to boost HR / rocket props.

NOTHING in this module may reach a public breakdown, tag list or score
explanation. Only the internal accessor (edge_scoring.get_internal_scoring_details)
and internal logs see the threat level or the boost.

Two steps:
1. Risk scoring - six threshold checks on pitcher stats
       HR/9, barrel%, meatball%, hittable-count%, recent HRs -> 0 / high_points / extreme_points
       walk rate -> +poor_points (poor control) or elite_points (elite control, negative)
   The total is NOT clamped and may go below zero.
       total >= extreme_threshold  -> EXTREME
       total >= moderate_threshold -> MODERATE
       otherwise                   -> CLEAN
2. Boost gate - EXTREME AND batter barrel% >= 10 AND launch angle in [16, 28]
   AND (park factor >= 1.04 OR wind blowing out). Any failure -> no boost.

The caller checks market eligibility first (is_zone_threat_eligible): HR market
allowlist OR is_rocket, plus pitcher identity/core stats and batter matchup data.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.edge_config import StatCutoff, ZoneThreatConfig
from models.pick_schema import PropRecord, ZoneThreatAnalysis

logger = logging.getLogger(__name__)

CLEAN = "CLEAN"
MODERATE = "MODERATE"
EXTREME = "EXTREME"

NEUTRAL_PARK_FACTOR = 1.0


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class PitcherStats:
    """Pitcher risk profile. A None stat does not contribute to the risk score."""
    pitcher_id: str
    name: str
    hr_per_9: Optional[float] = None            # HR allowed per 9 IP (league avg ~1.3)
    barrel_percent: Optional[float] = None      # Barrel% allowed (league avg ~8)
    meatball_percent: Optional[float] = None    # % pitches in the meatball zone
    hittable_count_pct: Optional[float] = None  # % pitches in HR-prone counts (2-0, 3-1)
    recent_hrs: Optional[float] = None          # HR allowed over the last 3 starts
    walk_rate: Optional[float] = None           # BB/9 (elite control < 2.0)


@dataclass(frozen=True)
class MatchupData:
    batter_barrel: float
    batter_launch: float
    park_factor: float = NEUTRAL_PARK_FACTOR    # 1.00 neutral, > 1.04 hitter friendly
    wind_out: bool = False


@dataclass(frozen=True)
class ZoneThreatOutcome:
    """Result of one Zone Threat evaluation, consumed by the composite scorer."""
    analysis: ZoneThreatAnalysis
    boost: float = 0.0
    threat_level: Optional[str] = None


# =============================================================================
# EXTRACTION
# =============================================================================

def extract_pitcher_stats(prop: PropRecord) -> Optional[PitcherStats]:
    """Pitcher identity (id + name) is required; stats may be partial."""
    if not prop.pitcher_id or not prop.pitcher_name:
        return None
    return PitcherStats(
        pitcher_id=prop.pitcher_id,
        name=prop.pitcher_name,
        hr_per_9=prop.pitcher_hr_per_9,
        barrel_percent=prop.pitcher_barrel_pct,
        meatball_percent=prop.pitcher_meatball_pct,
        hittable_count_pct=prop.pitcher_hittable_count_pct,
        recent_hrs=prop.pitcher_recent_hrs,
        walk_rate=prop.pitcher_walk_rate,
    )


def extract_matchup_data(prop: PropRecord) -> Optional[MatchupData]:
    """Batter barrel% and launch angle are required; park/wind default to neutral."""
    if prop.batter_barrel_pct is None or prop.batter_launch_angle is None:
        return None
    return MatchupData(
        batter_barrel=prop.batter_barrel_pct,
        batter_launch=prop.batter_launch_angle,
        park_factor=prop.park_factor if prop.park_factor is not None else NEUTRAL_PARK_FACTOR,
        wind_out=bool(prop.wind_out),
    )


def is_zone_threat_eligible(prop: PropRecord, config: ZoneThreatConfig) -> bool:
    """
    Market + data gate, evaluated before any risk scoring.

    is_rocket overrides the HR market allowlist entirely.
    """
    if not config.enabled:
        return False

    market_ok = prop.market_type in config.hr_markets or prop.is_rocket is True
    if not market_ok:
        return False

    has_pitcher = bool(
        prop.pitcher_id and prop.pitcher_name
        and prop.pitcher_hr_per_9 is not None
        and prop.pitcher_barrel_pct is not None
    )
    if not has_pitcher:
        return False

    return prop.batter_barrel_pct is not None and prop.batter_launch_angle is not None


# =============================================================================
# RISK SCORING
# =============================================================================

def _stat_points(value: Optional[float], cutoff: StatCutoff) -> int:
    if value is None:
        return 0
    if value >= cutoff.extreme:
        return cutoff.extreme_points
    if value >= cutoff.high:
        return cutoff.high_points
    return 0


def zone_threat_risk_score(pitcher: PitcherStats, config: ZoneThreatConfig) -> int:
    """Raw (unclamped) risk score. Elite control can pull it below zero."""
    score = 0
    score += _stat_points(pitcher.hr_per_9, config.hr_per_9)
    score += _stat_points(pitcher.barrel_percent, config.barrel_percent)
    score += _stat_points(pitcher.meatball_percent, config.meatball_percent)
    score += _stat_points(pitcher.hittable_count_pct, config.hittable_count_pct)
    score += _stat_points(pitcher.recent_hrs, config.recent_hrs)

    if pitcher.walk_rate is not None:
        if pitcher.walk_rate >= config.walk_rate.poor:
            score += config.walk_rate.poor_points
        elif pitcher.walk_rate <= config.walk_rate.elite:
            score += config.walk_rate.elite_points

    return score


def classify_risk_score(score: int, config: ZoneThreatConfig) -> str:
    if score >= config.extreme_threshold:
        return EXTREME
    if score >= config.moderate_threshold:
        return MODERATE
    return CLEAN


def zone_threat_rating(pitcher: PitcherStats, config: ZoneThreatConfig) -> str:
    return classify_risk_score(zone_threat_risk_score(pitcher, config), config)


def should_boost_hr_prop(pitcher: PitcherStats, matchup: MatchupData, config: ZoneThreatConfig) -> bool:
    """All four matchup conditions are mandatory; there is no partial boost."""
    if zone_threat_rating(pitcher, config) != EXTREME:
        return False

    gate = config.matchup_gate
    barrel_ok = matchup.batter_barrel >= gate.min_batter_barrel
    launch_ok = gate.launch_angle_min <= matchup.batter_launch <= gate.launch_angle_max
    park_ok = matchup.park_factor >= gate.min_park_factor or matchup.wind_out

    return barrel_ok and launch_ok and park_ok


def calculate_zone_threat_boost(pitcher: PitcherStats, matchup: MatchupData, config: ZoneThreatConfig) -> float:
    return config.edge_boost if should_boost_hr_prop(pitcher, matchup, config) else 0.0


def evaluate_zone_threat(prop: PropRecord, config: ZoneThreatConfig) -> ZoneThreatOutcome:
    """Full evaluation for one prop: eligibility, level, boost and the internal analysis."""
    if not is_zone_threat_eligible(prop, config):
        return ZoneThreatOutcome(analysis=ZoneThreatAnalysis(eligible=False))

    pitcher = extract_pitcher_stats(prop)
    matchup = extract_matchup_data(prop)
    if pitcher is None or matchup is None:
        return ZoneThreatOutcome(analysis=ZoneThreatAnalysis(eligible=False))

    level = zone_threat_rating(pitcher, config)
    boost = calculate_zone_threat_boost(pitcher, matchup, config)

    if boost > 0 and config.log_decisions:
        log_zone_threat_decision(pitcher, matchup, prop.id, config)

    analysis = ZoneThreatAnalysis(
        eligible=True,
        threat_level=level,
        boost_applied=boost if boost > 0 else None,
        pitcher_name=pitcher.name,
    )
    return ZoneThreatOutcome(analysis=analysis, boost=boost, threat_level=level)


# =============================================================================
# INTERNAL REVIEW
# =============================================================================

def generate_zone_threat_summary(
    pitcher: PitcherStats,
    config: ZoneThreatConfig,
    matchup: Optional[MatchupData] = None,
) -> str:
    """Markdown summary for internal review. Never for public consumption."""
    level = zone_threat_rating(pitcher, config)

    def fmt(value: Optional[float], spec: str) -> str:
        return "n/a" if value is None else format(value, spec)

    lines = [
        f"## Zone Threat Analysis - {pitcher.name}",
        "",
        f"**Threat Level:** {level}",
        "",
        "### Pitcher Metrics",
        f"- HR/9: {fmt(pitcher.hr_per_9, '.2f')} (Threshold: {config.hr_per_9.high})",
        f"- Barrel%: {fmt(pitcher.barrel_percent, '.1f')}% (Threshold: {config.barrel_percent.high}%)",
        f"- Meatball%: {fmt(pitcher.meatball_percent, '.1f')}% (Threshold: {config.meatball_percent.high}%)",
        f"- Hittable Count%: {fmt(pitcher.hittable_count_pct, '.1f')}% (Threshold: {config.hittable_count_pct.high}%)",
        f"- Recent HRs (3 starts): {fmt(pitcher.recent_hrs, 'g')} (Threshold: {config.recent_hrs.high})",
        f"- BB/9: {fmt(pitcher.walk_rate, '.2f')} (Elite: <{config.walk_rate.elite})",
    ]

    if matchup is not None:
        boost = calculate_zone_threat_boost(pitcher, matchup, config)
        lines += [
            "",
            "### Matchup Context",
            f"- Batter Barrel%: {matchup.batter_barrel:.1f}%",
            f"- Launch Angle: {matchup.batter_launch:.1f}°",
            f"- Park Factor: {matchup.park_factor:.2f}",
            f"- Wind Out: {'Yes' if matchup.wind_out else 'No'}",
            "",
            f"**Edge Boost Applied:** {f'+{boost:g} points' if boost > 0 else 'None'}",
        ]

    return "\n".join(lines) + "\n"


def log_zone_threat_decision(
    pitcher: PitcherStats,
    matchup: MatchupData,
    prop_id: str,
    config: ZoneThreatConfig,
) -> None:
    boost = calculate_zone_threat_boost(pitcher, matchup, config)
    if boost > 0:
        logger.info(
            "[ZONE THREAT BOOST] Prop %s: %s flagged EXTREME, boost +%s",
            prop_id, pitcher.name, boost,
            extra={"prop_id": prop_id, "pitcher_id": pitcher.pitcher_id, "boost": boost},
        )
