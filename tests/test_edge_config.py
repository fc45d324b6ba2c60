"""
TEST_EDGE_CONFIG.PY - Versioned, immutable scoring configuration
================================================================

Tests verify:
1. Presets (legacy v1, unified v2)
2. Validation failures raise EdgeConfigError at build time
3. Immutability and with_overrides()
4. YAML loading

Run with: python -m pytest tests/test_edge_config.py -v
"""

import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.edge_config import (
    DEFAULT_EDGE_CONFIG,
    LEGACY_EDGE_CONFIG,
    EdgeConfigError,
    build_edge_config,
    load_edge_config,
)


class TestPresets:

    def test_legacy(self):
        assert LEGACY_EDGE_CONFIG.version == 1
        assert LEGACY_EDGE_CONFIG.max == 25

    def test_default(self):
        assert DEFAULT_EDGE_CONFIG.version == 2
        assert DEFAULT_EDGE_CONFIG.max == 30

    def test_shared_tables(self):
        for config in (LEGACY_EDGE_CONFIG, DEFAULT_EDGE_CONFIG):
            assert config.market["default"] == 1
            assert config.market["points"] == 5
            assert config.odds.threshold == -125
            assert config.odds.high == 3
            assert config.tags["rocket"] == 3
            assert config.tags["ladder"] == 2
            assert config.tier_thresholds.as_pairs() == (("S", 23), ("A", 20), ("B", 15), ("C", 10))

    def test_zone_threat_defaults(self):
        zt = DEFAULT_EDGE_CONFIG.zone_threat
        assert zt.extreme_threshold == 5
        assert zt.moderate_threshold == 3
        assert zt.edge_boost == 2
        assert "Home Runs" in zt.hr_markets


class TestValidation:
    """Broken configs fail when built, never per record."""

    def _base(self, **changes):
        data = DEFAULT_EDGE_CONFIG.model_dump()
        data.update(changes)
        return data

    def test_missing_default_market(self):
        with pytest.raises(EdgeConfigError, match="default"):
            build_edge_config(self._base(market={"points": 5}))

    def test_unordered_tiers(self):
        with pytest.raises(EdgeConfigError, match="descending"):
            build_edge_config(self._base(tier_thresholds={"S": 20, "A": 23, "B": 15, "C": 10}))

    def test_non_positive_max(self):
        with pytest.raises(EdgeConfigError):
            build_edge_config(self._base(max=-1))

    def test_unknown_version(self):
        with pytest.raises(EdgeConfigError, match="version"):
            build_edge_config(self._base(version=3))

    def test_unknown_key(self):
        with pytest.raises(EdgeConfigError):
            build_edge_config(self._base(bogus=True))

    def test_error_is_value_error(self):
        assert issubclass(EdgeConfigError, ValueError)


class TestImmutability:

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_EDGE_CONFIG.max = 99

    def test_with_overrides_returns_new(self):
        strict = DEFAULT_EDGE_CONFIG.with_overrides(tier_thresholds={"S": 24})
        assert strict.tier_thresholds.S == 24
        assert strict.tier_thresholds.A == 20
        assert DEFAULT_EDGE_CONFIG.tier_thresholds.S == 23

    def test_with_overrides_replaces_tables_wholesale(self):
        config = DEFAULT_EDGE_CONFIG.with_overrides(market={"default": 2, "hits": 4})
        assert config.market == {"default": 2, "hits": 4}

    def test_with_overrides_validates(self):
        with pytest.raises(EdgeConfigError):
            DEFAULT_EDGE_CONFIG.with_overrides(tier_thresholds={"S": 5})


class TestLoad:

    def test_no_path_is_default(self):
        assert load_edge_config(None) is DEFAULT_EDGE_CONFIG

    def test_yaml_merged_over_default(self, tmp_path):
        path = tmp_path / "edge.yaml"
        path.write_text("max: 40\ntier_thresholds:\n  S: 30\nzone_threat:\n  edge_boost: 3\n")
        config = load_edge_config(path)
        assert config.version == 2
        assert config.max == 40
        assert config.tier_thresholds.S == 30
        assert config.tier_thresholds.C == 10
        assert config.zone_threat.edge_boost == 3

    def test_yaml_version_1_uses_legacy_base(self, tmp_path):
        path = tmp_path / "legacy.yaml"
        path.write_text("version: 1\n")
        config = load_edge_config(str(path))
        assert config.version == 1
        assert config.max == 25

    def test_missing_file(self, tmp_path):
        with pytest.raises(EdgeConfigError, match="Cannot read"):
            load_edge_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("max: [unclosed\n")
        with pytest.raises(EdgeConfigError):
            load_edge_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(EdgeConfigError, match="mapping"):
            load_edge_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "nodefault.yaml"
        path.write_text("market:\n  points: 5\n")
        with pytest.raises(EdgeConfigError):
            load_edge_config(path)
