"""
ENV_CONFIG.PY - Process settings from environment variables
===========================================================
Read once at import by the scoring API and the grading jobs.
Scoring tables themselves live in core/edge_config.py (+ optional YAML).

    LOG_LEVEL             INFO
    LOG_FORMAT            json | text
    DATABASE_URL          empty -> local SQLite
    EDGE_CONFIG_PATH      empty -> built-in unified preset
    GRADING_BATCH_LIMIT   records per batch (positive int)
    USE_LEAGUE_RULES      fold league overlays into unified scoring
    API_AUTH_ENABLED      require X-API-Key on /score
    API_AUTH_KEY
    ADMIN_API_KEY         required for /internal/score (no key -> endpoint closed)
"""

import logging
import os
from typing import Dict, List, Optional

from core.scoring_contract import DEFAULT_BATCH_LIMIT

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_env(name: str, *aliases: str, default: Optional[str] = None) -> Optional[str]:
    """First non-blank value among name and its aliases, stripped."""
    for key in (name,) + aliases:
        raw = (os.getenv(key) or "").strip()
        if raw:
            return raw
    return default


def get_env_bool(name: str, default: bool = False) -> bool:
    raw = (get_env(name) or "").lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    if raw:
        logger.warning("Ignoring unrecognized boolean %s=%r, using %s", name, raw, default)
    return default


def get_env_int(name: str, default: int) -> int:
    """Positive integer. Unparseable or non-positive -> default (logged)."""
    raw = get_env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%s, using %s", name, value, default)
        return default
    return value


class Config:
    API_VERSION = "2.0"

    LOG_LEVEL = get_env("LOG_LEVEL", default="INFO").upper()
    LOG_FORMAT = get_env("LOG_FORMAT", default="json").lower()

    DATABASE_URL = get_env("DATABASE_URL")

    EDGE_CONFIG_PATH = get_env("EDGE_CONFIG_PATH", "SCORING_CONFIG_PATH")
    GRADING_BATCH_LIMIT = get_env_int("GRADING_BATCH_LIMIT", DEFAULT_BATCH_LIMIT)
    USE_LEAGUE_RULES = get_env_bool("USE_LEAGUE_RULES")

    API_AUTH_ENABLED = get_env_bool("API_AUTH_ENABLED")
    API_AUTH_KEY = get_env("API_AUTH_KEY")
    ADMIN_API_KEY = get_env("ADMIN_API_KEY")

    @classmethod
    def summary(cls) -> Dict[str, object]:
        """Boot summary. Never includes key values."""
        return {
            "api_version": cls.API_VERSION,
            "database": "configured" if cls.DATABASE_URL else "local-sqlite",
            "edge_config": cls.EDGE_CONFIG_PATH or "built-in",
            "batch_limit": cls.GRADING_BATCH_LIMIT,
            "league_rules": cls.USE_LEAGUE_RULES,
            "member_auth": cls.API_AUTH_ENABLED,
            "internal_endpoints": "open-to-admin" if cls.ADMIN_API_KEY else "closed",
        }

    @classmethod
    def problems(cls) -> List[str]:
        """Settings that leave part of the service unusable."""
        found = []
        if cls.API_AUTH_ENABLED and not cls.API_AUTH_KEY:
            found.append("API_AUTH_ENABLED is set without API_AUTH_KEY")
        if not cls.ADMIN_API_KEY:
            found.append("ADMIN_API_KEY not set, /internal/score rejects every request")
        if cls.EDGE_CONFIG_PATH and not os.path.isfile(cls.EDGE_CONFIG_PATH):
            found.append(f"EDGE_CONFIG_PATH {cls.EDGE_CONFIG_PATH} does not exist")
        return found

    @classmethod
    def log_status(cls) -> Dict[str, object]:
        summary = cls.summary()
        logger.info("Config: %s", " ".join(f"{k}={v}" for k, v in summary.items()))
        for problem in cls.problems():
            logger.warning("Config: %s", problem)
        return summary
