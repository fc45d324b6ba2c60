"""NFL overlay - line value read as the game script factor; weather tags are negative."""

from league_rules.base import LeagueOverlay

NFL_OVERLAY = LeagueOverlay(
    league="NFL",
    trend_weight=0.4,
    matchup_weight=0.35,
    role_weight=0.3,
    line_value_key="game_script_factor",
    line_value_weight=0.25,
    rocket_boost=0.22,
    ladder_consistency=0.17,
    market_bonuses=(
        ("passing", "passing_prop_bonus", 0.12),
        ("rushing", "rushing_prop_bonus", 0.15),
        ("receiving", "receiving_prop_bonus", 0.13),
        ("touchdown", "scoring_prop_bonus", 0.18),
    ),
    tag_bonuses=(
        ("weather", "weather_impact", -0.08),
        ("primetime", "prime_time_boost", 0.1),
        ("injury", "injury_opportunity", 0.12),
    ),
)

nfl_core_stats = NFL_OVERLAY.core_stats
nfl_synergy = NFL_OVERLAY.synergy
