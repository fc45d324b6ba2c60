"""
RULE PRIMITIVES - Independent edge scoring checks
=================================================

Each primitive reads one or two fields from a PropRecord and returns the
contribution it earns, or None when the rule does not apply. Absent input
never raises and never contributes: missing data means "rule does not apply",
not "scored zero".

Comparisons:
    continuous scores (trend/matchup/role/line value) - strict >
    odds                                              - strict < (heavier favorite)
"""

from typing import List, Optional, Tuple

from core.edge_config import EdgeScoreConfig, ThresholdRule
from core.scoring_contract import NO_CONTEXT_FLAG_BONUS
from models.pick_schema import PropRecord


def market_type_bonus(prop: PropRecord, config: EdgeScoreConfig, case_insensitive: bool = False) -> float:
    """
    Market table lookup with the mandatory `default` fallback.

    Exact match first; unified scoring additionally tries a case-insensitive
    match so "Points" finds "points".
    """
    market = config.market
    market_type = prop.market_type
    if market_type is not None:
        if market_type in market:
            return market[market_type]
        if case_insensitive:
            folded = market_type.casefold()
            for key, value in market.items():
                if key != "default" and key.casefold() == folded:
                    return value
    return market["default"]


def odds_bonus(prop: PropRecord, config: EdgeScoreConfig) -> Optional[float]:
    if prop.odds is None:
        return None
    if prop.odds < config.odds.threshold:
        return config.odds.high
    return None


def _threshold_bonus(value: Optional[float], rule: ThresholdRule) -> Optional[float]:
    if value is None:
        return None
    return rule.strong if value > rule.threshold else None


def trend_bonus(prop: PropRecord, config: EdgeScoreConfig) -> Optional[float]:
    return _threshold_bonus(prop.trend_score, config.trend_score)


def matchup_bonus(prop: PropRecord, config: EdgeScoreConfig) -> Optional[float]:
    return _threshold_bonus(prop.matchup_score, config.matchup_score)


def role_bonus(prop: PropRecord, config: EdgeScoreConfig) -> Optional[float]:
    return _threshold_bonus(prop.role_score, config.role_score)


def line_value_bonus(prop: PropRecord, config: EdgeScoreConfig) -> Optional[float]:
    return _threshold_bonus(prop.line_value_score, config.line_value_score)


def source_bonus(prop: PropRecord, config: EdgeScoreConfig) -> Optional[float]:
    """Recognized source with a non-zero bonus. Unknown sources do not apply."""
    if not prop.source:
        return None
    bonus = config.source.get(prop.source)
    return bonus if bonus else None


def tag_bonuses(prop: PropRecord, config: EdgeScoreConfig) -> List[Tuple[str, str, float]]:
    """
    Rocket / ladder bonuses, additive and independent.

    Returns (breakdown_key, public_tag, bonus) for each flag that is set.
    """
    earned = []
    if prop.is_rocket:
        earned.append(("is_rocket", "rocket", config.tags.get("rocket", 0)))
    if prop.is_ladder:
        earned.append(("is_ladder", "ladder", config.tags.get("ladder", 0)))
    return earned


def context_flag_bonus(prop: PropRecord) -> Optional[float]:
    """No injury/context flag on the prop (explicit False) earns a small bonus."""
    if prop.context_flag is False:
        return NO_CONTEXT_FLAG_BONUS
    return None
