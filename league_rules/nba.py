"""NBA overlay - pace and playmaking weighted."""

from league_rules.base import LeagueOverlay

NBA_OVERLAY = LeagueOverlay(
    league="NBA",
    trend_weight=0.3,
    matchup_weight=0.25,
    role_weight=0.2,
    line_value_key="pace_factor",
    line_value_weight=0.15,
    rocket_boost=0.2,
    ladder_consistency=0.15,
    market_bonuses=(
        ("points", "scoring_prop_bonus", 0.1),
        ("rebounds", "rebounding_prop_bonus", 0.08),
        ("assists", "playmaking_prop_bonus", 0.12),
    ),
    tag_bonuses=(
        ("injury", "injury_opportunity", 0.1),
        ("rest", "rest_advantage", 0.08),
    ),
)

nba_core_stats = NBA_OVERLAY.core_stats
nba_synergy = NBA_OVERLAY.synergy
