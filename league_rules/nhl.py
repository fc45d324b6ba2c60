"""NHL overlay. Rest tags count against the prop (tired legs)."""

from league_rules.base import LeagueOverlay

NHL_OVERLAY = LeagueOverlay(
    league="NHL",
    trend_weight=0.32,
    matchup_weight=0.28,
    role_weight=0.22,
    line_value_key="game_flow_factor",
    line_value_weight=0.18,
    rocket_boost=0.16,
    ladder_consistency=0.13,
    market_bonuses=(
        ("goal", "scoring_prop_bonus", 0.14),
        ("assist", "playmaking_prop_bonus", 0.12),
        ("save", "goalie_prop_bonus", 0.16),
    ),
    tag_bonuses=(
        ("rest", "fatigue_factor", -0.1),
        ("home", "home_ice_advantage", 0.09),
    ),
)

nhl_core_stats = NHL_OVERLAY.core_stats
nhl_synergy = NHL_OVERLAY.synergy
