"""
Tests for scripts/run_grading.py - the batch job entry point.
"""

import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import SqlRecordStore
from scripts.run_grading import main


class TestRunGrading:

    def test_non_positive_limit(self):
        assert main(["--limit", "0"]) == 1

    def test_bad_config(self, tmp_path):
        assert main(["--config", str(tmp_path / "missing.yaml"), "--database-url", f"sqlite:///{tmp_path / 'x.db'}"]) == 1

    def test_grading_batch(self, tmp_path, capsys, strong_prop):
        url = f"sqlite:///{tmp_path / 'picks.db'}"
        store = SqlRecordStore(url)
        store.seed("daily_picks", [{**strong_prop, "play_status": "pending", "edge_score": None}])

        assert main(["--database-url", url, "--json"]) == 0
        out = capsys.readouterr().out
        # log lines share stdout; the stats object is printed last
        stats = json.loads(out[out.rindex("{\n"):])
        assert stats["graded"] == 1
        assert stats["promoted"] == 1
        assert store.count("final_picks") == 1

    def test_final_promotion_batch(self, tmp_path, capsys, strong_prop):
        url = f"sqlite:///{tmp_path / 'final.db'}"
        store = SqlRecordStore(url)
        store.seed("daily_picks", [{
            **strong_prop, "promoted_to_final": False, "is_valid": True, "final_grading_status": None,
        }])

        assert main(["--multi-leg", "--database-url", url]) == 0
        assert "promoted=1" in capsys.readouterr().out
