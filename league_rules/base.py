"""
League overlay definition shared by every sport.

An overlay is pure configuration: per-league weights for the generic
trend/matchup/role/line-value scores plus market-type and tag substring
bonuses. Matching is case-insensitive substring matching.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from models.pick_schema import PropRecord

# (substring, breakdown_key, bonus)
SubstringBonus = Tuple[str, str, float]


@dataclass(frozen=True)
class LeagueOverlay:
    league: str
    trend_weight: float
    matchup_weight: float
    role_weight: float
    line_value_key: str
    line_value_weight: float
    rocket_boost: float
    ladder_consistency: float
    market_bonuses: Tuple[SubstringBonus, ...] = ()   # first match wins
    tag_bonuses: Tuple[SubstringBonus, ...] = ()      # each applies independently

    def core_stats(self, prop: PropRecord) -> Dict[str, float]:
        """Fundamental stat weights plus the market-type bonus."""
        breakdown: Dict[str, float] = {}
        if prop.trend_score is not None:
            breakdown["trend_factor"] = prop.trend_score * self.trend_weight
        if prop.matchup_score is not None:
            breakdown["matchup_advantage"] = prop.matchup_score * self.matchup_weight
        if prop.role_score is not None:
            breakdown["role_impact"] = prop.role_score * self.role_weight

        market_type = (prop.market_type or "").lower()
        for needle, key, bonus in self.market_bonuses:
            if needle in market_type:
                breakdown[key] = bonus
                break
        return breakdown

    def synergy(self, prop: PropRecord) -> Dict[str, float]:
        """Situational factors: line value, rocket/ladder flags, context tags."""
        breakdown: Dict[str, float] = {}
        if prop.line_value_score is not None:
            breakdown[self.line_value_key] = prop.line_value_score * self.line_value_weight
        if prop.is_rocket:
            breakdown["rocket_boost"] = self.rocket_boost
        if prop.is_ladder:
            breakdown["ladder_consistency"] = self.ladder_consistency

        lowered_tags = [tag.lower() for tag in prop.tags]
        for needle, key, bonus in self.tag_bonuses:
            if any(needle in tag for tag in lowered_tags):
                breakdown[key] = bonus
        return breakdown
