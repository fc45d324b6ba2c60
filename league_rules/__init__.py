"""
LEAGUE RULES - Per-sport overlays layered on the generic edge rules
===================================================================

Supported leagues: NBA, MLB, NHL, NFL.

league_overlay_score() folds an overlay into at most four additive entries:

    league_odds_sweet_spot  +1 if -125 <= odds <= 115
    league_core_stats       sum(core_stats), only if positive, capped at 2
    league_dvp_score        +1 if matchup/DVP score >= 1
    league_synergy          sum(synergy), only if positive, capped at 2

Caps apply to the overlay's summed breakdown, never to individual rules.
An unknown league still earns the league-agnostic entries (sweet spot, DVP).
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from core.scoring_contract import (
    DVP_BONUS,
    DVP_MIN_SCORE,
    LEAGUE_CORE_STATS_CAP,
    LEAGUE_SYNERGY_CAP,
    ODDS_SWEET_SPOT,
    ODDS_SWEET_SPOT_BONUS,
)
from league_rules.base import LeagueOverlay
from league_rules.mlb import MLB_OVERLAY
from league_rules.nba import NBA_OVERLAY
from league_rules.nfl import NFL_OVERLAY
from league_rules.nhl import NHL_OVERLAY
from models.pick_schema import PropRecord

LEAGUE_OVERLAYS: Dict[str, LeagueOverlay] = {
    overlay.league: overlay
    for overlay in (NBA_OVERLAY, MLB_OVERLAY, NHL_OVERLAY, NFL_OVERLAY)
}

SUPPORTED_LEAGUES = tuple(LEAGUE_OVERLAYS)


@dataclass(frozen=True)
class LeagueOverlayResult:
    score: float
    breakdown: Dict[str, float] = field(default_factory=dict)   # additive entries
    detail: Dict[str, float] = field(default_factory=dict)      # raw per-rule overlay values


def get_league_overlay(league: Optional[str]) -> Optional[LeagueOverlay]:
    if not league:
        return None
    return LEAGUE_OVERLAYS.get(league.strip().upper())


def _capped_sum(values: Dict[str, float], cap: float) -> Optional[float]:
    total = round(sum(values.values()), 4)
    if total <= 0:
        return None
    return min(total, cap)


def league_overlay_score(prop: PropRecord) -> LeagueOverlayResult:
    breakdown: Dict[str, float] = {}
    detail: Dict[str, float] = {}
    overlay = get_league_overlay(prop.league)

    low, high = ODDS_SWEET_SPOT
    if prop.odds is not None and low <= prop.odds <= high:
        breakdown["league_odds_sweet_spot"] = ODDS_SWEET_SPOT_BONUS

    if overlay is not None:
        core = overlay.core_stats(prop)
        detail.update({f"core.{key}": value for key, value in core.items()})
        capped = _capped_sum(core, LEAGUE_CORE_STATS_CAP)
        if capped is not None:
            breakdown["league_core_stats"] = capped

    if prop.matchup_score is not None and prop.matchup_score >= DVP_MIN_SCORE:
        breakdown["league_dvp_score"] = DVP_BONUS

    if overlay is not None:
        synergy = overlay.synergy(prop)
        detail.update({f"synergy.{key}": value for key, value in synergy.items()})
        capped = _capped_sum(synergy, LEAGUE_SYNERGY_CAP)
        if capped is not None:
            breakdown["league_synergy"] = capped

    return LeagueOverlayResult(score=sum(breakdown.values()), breakdown=breakdown, detail=detail)


__all__ = [
    "LEAGUE_OVERLAYS",
    "SUPPORTED_LEAGUES",
    "LeagueOverlay",
    "LeagueOverlayResult",
    "get_league_overlay",
    "league_overlay_score",
]
