"""
tests/conftest.py - Pytest configuration and fixtures

Makes the suite environment-agnostic:
- plain-text logs, no database URL, league rules off
- shared prop fixtures for the scorer, the orchestrators and the API
"""

import os
import sys

import pytest

# Env must be set BEFORE env_config is imported anywhere
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("EDGE_CONFIG_PATH", None)
os.environ.pop("USE_LEAGUE_RULES", None)

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.record_store import InMemoryRecordStore  # noqa: E402


# =============================================================================
# PROPS
# =============================================================================

@pytest.fixture
def minimal_prop():
    """Only an id: every rule except the market default is absent."""
    return {"id": "p-min"}


@pytest.fixture
def strong_prop():
    """
    22 points under either mode:
    points 5 + odds 3 + trend 4 + matchup 3 + role 2 + premium 2 + line value 3
    """
    return {
        "id": "p-strong",
        "market_type": "points",
        "odds": -150,
        "trend_score": 0.8,
        "matchup_score": 0.7,
        "role_score": 0.6,
        "line_value_score": 0.7,
        "source": "premium",
    }


@pytest.fixture
def rocket_prop(strong_prop):
    """strong_prop + rocket tag = 25 (S)."""
    return {**strong_prop, "id": "p-rocket", "is_rocket": True}


@pytest.fixture
def extreme_pitcher():
    """Risk score 11: five stats at extreme (2 each) + poor control (+1)."""
    return {
        "pitcher_id": "pit-1",
        "pitcher_name": "Gas Can",
        "pitcher_hr_per_9": 2.5,
        "pitcher_barrel_pct": 14,
        "pitcher_meatball_pct": 10,
        "pitcher_hittable_count_pct": 35,
        "pitcher_recent_hrs": 8,
        "pitcher_walk_rate": 4.8,
    }


@pytest.fixture
def favorable_matchup():
    return {
        "batter_barrel_pct": 12,
        "batter_launch_angle": 20,
        "park_factor": 1.06,
        "wind_out": True,
    }


@pytest.fixture
def unfavorable_matchup():
    return {
        "batter_barrel_pct": 7,
        "batter_launch_angle": 12,
        "park_factor": 0.95,
        "wind_out": False,
    }


@pytest.fixture
def hr_prop(extreme_pitcher, favorable_matchup):
    """Home Runs market (3) + Zone Threat boost (2) = 5 internally."""
    return {
        "id": "p-hr",
        "market_type": "Home Runs",
        **extreme_pitcher,
        **favorable_matchup,
    }


@pytest.fixture
def store():
    return InMemoryRecordStore()
