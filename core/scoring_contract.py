"""
Scoring Contract - Single Source of Truth
All edge scoring and grading logic MUST reference these constants (no duplicated literals).
"""

# Scoring algorithm versions (stamped on every GradeResult)
EDGE_SCORING_VERSION = {
    "CURRENT": 2,
    "LEGACY": 1,
    "MINIMUM_SUPPORTED": 1,
}

# Tier ladder, highest first. D is the floor (no lower bound check).
TIER_ORDER = ("S", "A", "B", "C", "D")
FLOOR_TIER = "D"

# Postable <=> tier in PROMOTION_TIERS; solo lock <=> tier == SOLO_LOCK_TIER
PROMOTION_TIERS = frozenset({"S", "A"})
SOLO_LOCK_TIER = "S"

# Breakdown bookkeeping keys
BREAKDOWN_TOTAL_KEY = "total"
BREAKDOWN_OVERRIDE_KEY = "override"

# Zone Threat (INTERNAL ONLY) - these keys/tags never leave the internal ledger
ZONE_THREAT_BOOST_KEY = "zone_threat_boost"
ZONE_THREAT_LEVEL_KEY = "zone_threat_level"
ZONE_THREAT_TAG = "zone-threat-extreme"
INTERNAL_TAG_PREFIX = "zone-threat"
INTERNAL_BREAKDOWN_KEYS = frozenset({ZONE_THREAT_BOOST_KEY, ZONE_THREAT_LEVEL_KEY})

# League overlay caps (applied after summing an overlay's own breakdown)
LEAGUE_CORE_STATS_CAP = 2.0
LEAGUE_SYNERGY_CAP = 2.0

# League overlay league-agnostic entries
ODDS_SWEET_SPOT = (-125, 115)   # inclusive American odds window
ODDS_SWEET_SPOT_BONUS = 1
DVP_MIN_SCORE = 1.0
DVP_BONUS = 1

# Context flag rule (unified only): context_flag is False -> +1
NO_CONTEXT_FLAG_BONUS = 1

# Multi-leg tickets
MULTI_LEG_BET_TYPES = frozenset({"parlay", "teaser", "roundrobin", "sgp"})
MULTI_LEG_FLAGS = ("is_parlay", "is_teaser", "is_rr")
SINGLE_BET_TYPE = "single"

# Orchestrator batch bound
DEFAULT_BATCH_LIMIT = 100

# Record store tables
SOURCE_TABLE = "daily_picks"
PROMOTED_TABLE = "final_picks"
ALERTS_TABLE = "alerts"

# Claim lifecycle (play_status for single grading, final_grading_status for final promotion)
STATUS_PENDING = "pending"
STATUS_GRADING = "grading"
STATUS_GRADED = "graded"
STATUS_SKIPPED = "skipped"

# Market resistance reactions
REACTION_SHARP_AGREE = "sharp_agree"
REACTION_SHARP_FADE = "sharp_fade"
REACTION_NEUTRAL = "neutral"
REACTION_UNKNOWN = "unknown"
MARKET_FADE_ALERT = {
    "type": "market_fade",
    "severity": "medium",
}
