"""
Core module - scoring contract, configuration, rule primitives and shared infrastructure
"""

from .edge_config import (
    DEFAULT_EDGE_CONFIG,
    LEGACY_EDGE_CONFIG,
    EdgeConfigError,
    EdgeScoreConfig,
    load_edge_config,
)
from .record_store import InMemoryRecordStore, RecordStore, RecordStoreError
from .scoring_contract import (
    EDGE_SCORING_VERSION,
    PROMOTION_TIERS,
    SOLO_LOCK_TIER,
    TIER_ORDER,
)

__all__ = [
    "DEFAULT_EDGE_CONFIG",
    "LEGACY_EDGE_CONFIG",
    "EdgeConfigError",
    "EdgeScoreConfig",
    "load_edge_config",
    "InMemoryRecordStore",
    "RecordStore",
    "RecordStoreError",
    "EDGE_SCORING_VERSION",
    "PROMOTION_TIERS",
    "SOLO_LOCK_TIER",
    "TIER_ORDER",
]
