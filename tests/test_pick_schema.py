"""
TEST_PICK_SCHEMA.PY - Prop records and grade views
==================================================

Tests verify:
1. Lenient parsing: malformed values become absent, never raise
2. Raw-feed alias resolution
3. Derived postable / solo_lock flags
4. The public view cannot carry Zone Threat data

Run with: python -m pytest tests/test_pick_schema.py -v
"""

import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.pick_schema import GradeResult, InternalGradeView, PropRecord, PublicGradeView


class TestPropRecordParsing:
    """Data errors are coerced to None."""

    def test_id_required(self):
        with pytest.raises(ValidationError):
            PropRecord()

    def test_int_id_coerced(self):
        assert PropRecord(id=7).id == "7"

    def test_numeric_strings_parsed(self):
        prop = PropRecord(id="a", trend_score="0.85", odds="-150")
        assert prop.trend_score == 0.85
        assert prop.odds == -150

    def test_fractional_odds_kept(self):
        assert PropRecord(id="a", odds="-125.5").odds == -125.5
        assert PropRecord(id="a", odds=-110.0).odds == -110

    def test_garbage_numbers_absent(self):
        prop = PropRecord(id="a", trend_score="abc", matchup_score=float("nan"), odds={"x": 1})
        assert prop.trend_score is None
        assert prop.matchup_score is None
        assert prop.odds is None

    def test_bool_is_not_a_number(self):
        assert PropRecord(id="a", role_score=True).role_score is None

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("False", False), ("1", True), (0, False), ("maybe", None), (None, None),
    ])
    def test_bool_parsing(self, raw, expected):
        assert PropRecord(id="a", is_rocket=raw).is_rocket is expected

    def test_tags_non_list(self):
        assert PropRecord(id="a", tags="rocket").tags == []

    def test_tags_non_strings_dropped(self):
        assert PropRecord(id="a", tags=["rest", 5, None]).tags == ["rest"]

    def test_blank_strings_absent(self):
        assert PropRecord(id="a", market_type="   ").market_type is None

    def test_unknown_fields_kept(self):
        prop = PropRecord(id="a", player_name="Someone", play_status="pending")
        assert prop.model_dump()["player_name"] == "Someone"


class TestAliases:
    """Raw feed column names resolve when the primary field is absent."""

    def test_stat_type(self):
        assert PropRecord(id="a", stat_type="rebounds").market_type == "rebounds"

    def test_dvp_score(self):
        assert PropRecord(id="a", dvp_score=0.9).matchup_score == 0.9

    def test_provider(self):
        assert PropRecord(id="a", provider="verified").source == "verified"

    def test_primary_wins(self):
        prop = PropRecord(id="a", market_type="points", stat_type="rebounds", matchup_score=0.2, dvp_score=0.9)
        assert prop.market_type == "points"
        assert prop.matchup_score == 0.2


class TestGradeViews:

    def test_flags_derived_from_tier(self):
        assert GradeResult(score=24, tier="S", version=2).solo_lock is True
        assert GradeResult(score=21, tier="A", version=2).postable is True
        assert GradeResult(score=21, tier="A", version=2).solo_lock is False

    def test_flags_not_settable(self):
        result = GradeResult(score=1, tier="D", version=2, postable=True, solo_lock=True)
        assert result.postable is False
        assert result.solo_lock is False

    def test_flags_serialized(self):
        dumped = PublicGradeView(edge_score=21, tier="A", version=2).model_dump()
        assert dumped["postable"] is True
        assert dumped["solo_lock"] is False

    def test_invalid_tier_rejected(self):
        with pytest.raises(ValidationError):
            GradeResult(score=1, tier="E", version=2)

    def test_public_view_has_no_internal_fields(self):
        fields = set(PublicGradeView.model_fields)
        assert "zone_threat_analysis" not in fields
        assert "league_overlay" not in fields

    def test_internal_view_extends_grade(self):
        assert issubclass(InternalGradeView, GradeResult)
        assert "zone_threat_analysis" in InternalGradeView.model_fields
