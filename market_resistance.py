"""
MARKET_RESISTANCE.PY - How the betting market reacted to a graded pick
======================================================================

MarketResistance.analyze(pick) -> MarketReaction

    sharp_agree  - price shortened on our side (market moved with us)
    sharp_fade   - price drifted against us beyond the fade threshold
    neutral      - movement inside the dead zone
    unknown      - no opening odds, or no current line available

Movement is measured in implied probability so that -110 -> -130 and
+150 -> +130 compare on the same scale:
    movement      = current_odds - opening_odds       (American odds points)
    movement_pct  = (p_current - p_open) / p_open * 100
"""

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from core.scoring_contract import (
    REACTION_NEUTRAL,
    REACTION_SHARP_AGREE,
    REACTION_SHARP_FADE,
    REACTION_UNKNOWN,
)
from models.pick_schema import MarketReaction

logger = logging.getLogger(__name__)

# Lookup returns the current American odds for the pick, or None when unavailable
OddsLookup = Callable[[Mapping[str, Any]], Awaitable[Optional[float]]]

DEFAULT_MOVE_THRESHOLD_PCT = 3.0


class MarketResistance(Protocol):
    async def analyze(self, pick: Mapping[str, Any]) -> MarketReaction:
        ...


def implied_probability(odds: float) -> float:
    """American odds -> implied win probability."""
    if odds < 0:
        return abs(odds) / (abs(odds) + 100)
    return 100 / (odds + 100)


class NullMarketResistance:
    """No market feed configured: every pick is `unknown`."""

    async def analyze(self, pick: Mapping[str, Any]) -> MarketReaction:
        return MarketReaction(reaction=REACTION_UNKNOWN)


class LineMovementResistance:
    """Compares the pick's opening odds with the current line from `odds_lookup`."""

    def __init__(self, odds_lookup: OddsLookup, threshold_pct: float = DEFAULT_MOVE_THRESHOLD_PCT):
        self.odds_lookup = odds_lookup
        self.threshold_pct = threshold_pct

    async def analyze(self, pick: Mapping[str, Any]) -> MarketReaction:
        opening = _as_odds(pick.get("odds"))
        if opening is None:
            return MarketReaction(reaction=REACTION_UNKNOWN)

        current = _as_odds(await self.odds_lookup(pick))
        if current is None:
            return MarketReaction(reaction=REACTION_UNKNOWN)

        p_open = implied_probability(opening)
        p_current = implied_probability(current)
        movement_pct = round((p_current - p_open) / p_open * 100, 2)

        if movement_pct >= self.threshold_pct:
            reaction = REACTION_SHARP_AGREE
        elif movement_pct <= -self.threshold_pct:
            reaction = REACTION_SHARP_FADE
        else:
            reaction = REACTION_NEUTRAL

        logger.debug(
            "Market reaction for %s: %s (open=%s current=%s move=%s%%)",
            pick.get("id"), reaction, opening, current, movement_pct,
        )
        return MarketReaction(
            reaction=reaction,
            movement=current - opening,
            movement_pct=movement_pct,
            updated_line=current,
        )


def _as_odds(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        odds = float(value)
    except (TypeError, ValueError):
        return None
    # American odds never fall inside (-100, 100)
    if -100 < odds < 100:
        return None
    return odds
