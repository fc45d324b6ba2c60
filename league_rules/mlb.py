"""MLB overlay - line value doubles as the weather/park factor."""

from league_rules.base import LeagueOverlay

MLB_OVERLAY = LeagueOverlay(
    league="MLB",
    trend_weight=0.35,
    matchup_weight=0.3,
    role_weight=0.25,
    line_value_key="environmental_factor",
    line_value_weight=0.2,
    rocket_boost=0.18,
    ladder_consistency=0.12,
    market_bonuses=(
        ("hit", "batting_prop_bonus", 0.12),
        ("strikeout", "pitching_prop_bonus", 0.15),
        ("run", "scoring_prop_bonus", 0.1),
    ),
    tag_bonuses=(
        ("weather", "weather_advantage", 0.08),
        ("park", "park_factor", 0.06),
    ),
)

mlb_core_stats = MLB_OVERLAY.core_stats
mlb_synergy = MLB_OVERLAY.synergy
