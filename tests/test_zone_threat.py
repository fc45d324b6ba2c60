"""
TEST_ZONE_THREAT.PY - Pitcher HR risk classifier (internal)
===========================================================

Tests verify:
1. Risk scoring per stat, walk-rate adjustment, unclamped totals
2. CLEAN / MODERATE / EXTREME classification boundaries
3. Matchup gate (all conditions mandatory, park OR wind)
4. Market/data eligibility and the markdown summary

Run with: python -m pytest tests/test_zone_threat.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.edge_config import DEFAULT_EDGE_CONFIG
from core.zone_threat import (
    CLEAN,
    EXTREME,
    MODERATE,
    MatchupData,
    PitcherStats,
    calculate_zone_threat_boost,
    evaluate_zone_threat,
    extract_matchup_data,
    generate_zone_threat_summary,
    is_zone_threat_eligible,
    should_boost_hr_prop,
    zone_threat_rating,
    zone_threat_risk_score,
)
from models.pick_schema import PropRecord

ZT = DEFAULT_EDGE_CONFIG.zone_threat


def pitcher(**stats):
    return PitcherStats(pitcher_id="pit-9", name="Test Arm", **stats)


EXTREME_PITCHER = pitcher(
    hr_per_9=2.5, barrel_percent=14, meatball_percent=10,
    hittable_count_pct=35, recent_hrs=8, walk_rate=4.8,
)
FAVORABLE = MatchupData(batter_barrel=12, batter_launch=20, park_factor=1.06, wind_out=True)
UNFAVORABLE = MatchupData(batter_barrel=7, batter_launch=12, park_factor=0.95, wind_out=False)


# =============================================================================
# RISK SCORE
# =============================================================================

class TestRiskScore:
    """Six threshold checks, no clamping."""

    def test_extreme_pitcher_total(self):
        assert zone_threat_risk_score(EXTREME_PITCHER, ZT) == 11

    def test_no_stats_scores_zero(self):
        assert zone_threat_risk_score(pitcher(), ZT) == 0

    def test_missing_walk_rate_does_not_count_as_elite(self):
        assert zone_threat_risk_score(pitcher(hr_per_9=1.0), ZT) == 0

    def test_elite_control_goes_negative(self):
        assert zone_threat_risk_score(pitcher(walk_rate=1.5), ZT) == -1

    def test_elite_boundary_inclusive(self):
        assert zone_threat_risk_score(pitcher(walk_rate=1.7), ZT) == -1
        assert zone_threat_risk_score(pitcher(walk_rate=1.8), ZT) == 0

    def test_poor_control_boundary_inclusive(self):
        assert zone_threat_risk_score(pitcher(walk_rate=4.0), ZT) == 1

    @pytest.mark.parametrize("field,high,extreme", [
        ("hr_per_9", 1.8, 2.2),
        ("barrel_percent", 10, 12),
        ("meatball_percent", 7, 9),
        ("hittable_count_pct", 28, 32),
        ("recent_hrs", 4, 6),
    ])
    def test_stat_cutoffs(self, field, high, extreme):
        """Each stat: 0 below high, 1 at high, 2 at extreme."""
        assert zone_threat_risk_score(pitcher(**{field: high - 0.01}), ZT) == 0
        assert zone_threat_risk_score(pitcher(**{field: high}), ZT) == 1
        assert zone_threat_risk_score(pitcher(**{field: extreme}), ZT) == 2


# =============================================================================
# CLASSIFICATION
# =============================================================================

class TestClassification:

    def test_extreme(self):
        assert zone_threat_rating(EXTREME_PITCHER, ZT) == EXTREME

    def test_moderate_at_three(self):
        p = pitcher(hr_per_9=1.9, barrel_percent=10.5, meatball_percent=7.5)
        assert zone_threat_risk_score(p, ZT) == 3
        assert zone_threat_rating(p, ZT) == MODERATE

    def test_extreme_at_five(self):
        p = pitcher(hr_per_9=2.2, barrel_percent=12, recent_hrs=4)
        assert zone_threat_risk_score(p, ZT) == 5
        assert zone_threat_rating(p, ZT) == EXTREME

    def test_clean(self):
        assert zone_threat_rating(pitcher(hr_per_9=1.9), ZT) == CLEAN

    def test_elite_control_can_demote(self):
        p = pitcher(hr_per_9=2.2, barrel_percent=12, recent_hrs=4, walk_rate=1.2)
        assert zone_threat_rating(p, ZT) == MODERATE


# =============================================================================
# MATCHUP GATE
# =============================================================================

class TestMatchupGate:
    """EXTREME + barrel + launch window + (park OR wind)."""

    def test_favorable_boosts(self):
        assert should_boost_hr_prop(EXTREME_PITCHER, FAVORABLE, ZT) is True
        assert calculate_zone_threat_boost(EXTREME_PITCHER, FAVORABLE, ZT) == 2

    def test_unfavorable_no_boost(self):
        assert should_boost_hr_prop(EXTREME_PITCHER, UNFAVORABLE, ZT) is False
        assert calculate_zone_threat_boost(EXTREME_PITCHER, UNFAVORABLE, ZT) == 0

    def test_non_extreme_never_boosts(self):
        p = pitcher(hr_per_9=1.9, barrel_percent=10.5, meatball_percent=7.5)
        assert should_boost_hr_prop(p, FAVORABLE, ZT) is False

    def test_launch_window_inclusive(self):
        for angle in (16, 28):
            matchup = MatchupData(batter_barrel=12, batter_launch=angle, park_factor=1.04)
            assert should_boost_hr_prop(EXTREME_PITCHER, matchup, ZT) is True
        matchup = MatchupData(batter_barrel=12, batter_launch=28.5, park_factor=1.10)
        assert should_boost_hr_prop(EXTREME_PITCHER, matchup, ZT) is False

    def test_wind_out_rescues_neutral_park(self):
        matchup = MatchupData(batter_barrel=10, batter_launch=20, park_factor=1.0, wind_out=True)
        assert should_boost_hr_prop(EXTREME_PITCHER, matchup, ZT) is True

    def test_neutral_park_no_wind_fails(self):
        matchup = MatchupData(batter_barrel=10, batter_launch=20, park_factor=1.03, wind_out=False)
        assert should_boost_hr_prop(EXTREME_PITCHER, matchup, ZT) is False

    def test_low_batter_barrel_fails(self):
        matchup = MatchupData(batter_barrel=9.9, batter_launch=20, park_factor=1.2, wind_out=True)
        assert should_boost_hr_prop(EXTREME_PITCHER, matchup, ZT) is False

    def test_custom_edge_boost(self):
        config = DEFAULT_EDGE_CONFIG.with_overrides(zone_threat={"edge_boost": 3}).zone_threat
        assert calculate_zone_threat_boost(EXTREME_PITCHER, FAVORABLE, config) == 3


# =============================================================================
# ELIGIBILITY + EVALUATION
# =============================================================================

class TestEligibility:

    def test_hr_market_eligible(self, hr_prop):
        assert is_zone_threat_eligible(PropRecord(**hr_prop), ZT) is True

    def test_non_hr_market_ineligible(self, hr_prop):
        assert is_zone_threat_eligible(PropRecord(**{**hr_prop, "market_type": "points"}), ZT) is False

    def test_rocket_overrides_market(self, hr_prop):
        prop = PropRecord(**{**hr_prop, "market_type": "points", "is_rocket": True})
        assert is_zone_threat_eligible(prop, ZT) is True

    def test_missing_pitcher_core_stats(self, hr_prop):
        prop = PropRecord(**{**hr_prop, "pitcher_barrel_pct": None})
        assert is_zone_threat_eligible(prop, ZT) is False

    def test_missing_batter_data(self, hr_prop):
        prop = PropRecord(**{**hr_prop, "batter_launch_angle": None})
        assert is_zone_threat_eligible(prop, ZT) is False

    def test_disabled(self, hr_prop):
        config = DEFAULT_EDGE_CONFIG.with_overrides(zone_threat={"enabled": False}).zone_threat
        assert is_zone_threat_eligible(PropRecord(**hr_prop), config) is False

    def test_matchup_defaults(self, hr_prop):
        prop = PropRecord(**{**hr_prop, "park_factor": None, "wind_out": None})
        matchup = extract_matchup_data(prop)
        assert matchup.park_factor == 1.0
        assert matchup.wind_out is False

    def test_evaluate_outcome(self, hr_prop):
        outcome = evaluate_zone_threat(PropRecord(**hr_prop), ZT)
        assert outcome.boost == 2
        assert outcome.threat_level == EXTREME
        assert outcome.analysis.eligible is True

    def test_evaluate_ineligible(self, strong_prop):
        outcome = evaluate_zone_threat(PropRecord(**strong_prop), ZT)
        assert outcome.boost == 0
        assert outcome.threat_level is None
        assert outcome.analysis.eligible is False


class TestSummary:

    def test_summary_with_matchup(self):
        summary = generate_zone_threat_summary(EXTREME_PITCHER, ZT, FAVORABLE)
        assert "Zone Threat Analysis - Test Arm" in summary
        assert "**Threat Level:** EXTREME" in summary
        assert "Wind Out: Yes" in summary
        assert "+2 points" in summary

    def test_summary_without_matchup(self):
        summary = generate_zone_threat_summary(pitcher(hr_per_9=1.0), ZT)
        assert "CLEAN" in summary
        assert "Matchup Context" not in summary
        assert "Barrel%: n/a" in summary
