"""
TIERING.PY - SINGLE SOURCE OF TRUTH FOR EDGE TIERS
==================================================

This module is the ONLY place a tier letter is derived from an edge score.
All other files should import from here via:
    from tiering import tier_from_score, resolve_tier, is_postable, is_solo_lock

TIER HIERARCHY (highest to lowest):
1. S - Solo lock, postable
2. A - Postable
3. B
4. C
5. D - Floor. Default when no higher cutoff is met (no lower bound check)

Cutoffs come from EdgeScoreConfig.tier_thresholds and are compared against the
CLAMPED score. postable/solo_lock are always derived from the FINAL tier
(after any admin override), never from the pre-override tier.
"""

import logging
from typing import List, Optional, Tuple

from core.edge_config import TierThresholds
from core.scoring_contract import FLOOR_TIER, PROMOTION_TIERS, SOLO_LOCK_TIER, TIER_ORDER

logger = logging.getLogger(__name__)

# =============================================================================
# TIER DETERMINATION
# =============================================================================

def clamp_score(score: float, max_score: float) -> float:
    """Clamp to [0, max_score]."""
    return min(max_score, max(0, score))


def tier_from_score(score: float, thresholds: TierThresholds) -> str:
    """
    Highest tier whose cutoff the score meets (>=). D when none is met.

    Args:
        score: Clamped edge score
        thresholds: Configured S/A/B/C cutoffs

    Returns:
        Tier letter
    """
    for tier, cutoff in thresholds.as_pairs():
        if score >= cutoff:
            return tier
    return FLOOR_TIER


def normalize_override(admin_override_tier: Optional[str]) -> Optional[str]:
    """
    Validate an admin override tier.

    Unknown values are ignored (logged), never raised: an override comes from
    record data, and bad data must not break grading.
    """
    if admin_override_tier is None:
        return None
    if not isinstance(admin_override_tier, str) or not admin_override_tier.strip():
        return None
    tier = admin_override_tier.strip().upper()
    if tier not in TIER_ORDER:
        logger.warning("Ignoring invalid admin override tier %r", admin_override_tier)
        return None
    return tier


def resolve_tier(
    score: float,
    thresholds: TierThresholds,
    admin_override_tier: Optional[str] = None,
) -> Tuple[str, Optional[str]]:
    """
    Final tier for a clamped score.

    Returns:
        Tuple of (final_tier, override_note). override_note is the audit
        string for the breakdown when an override replaced the computed tier.
    """
    override = normalize_override(admin_override_tier)
    if override is not None:
        return override, f"Forced to {override}"
    return tier_from_score(score, thresholds), None


def is_postable(tier: str) -> bool:
    return tier in PROMOTION_TIERS


def is_solo_lock(tier: str) -> bool:
    return tier == SOLO_LOCK_TIER


def all_tiers_qualify(tiers: List[str]) -> bool:
    """Strict AND: every tier must be postable. An empty list never qualifies."""
    return bool(tiers) and all(is_postable(tier) for tier in tiers)
