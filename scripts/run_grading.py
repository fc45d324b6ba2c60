#!/usr/bin/env python3
"""
Grading Job Runner
Runs one grading batch (or one final-promotion batch) against the record store.

Designed for:
1) Cron / scheduler execution: python -m scripts.run_grading
2) Ad-hoc runs: python -m scripts.run_grading --multi-leg --limit 25

Usage:
    python -m scripts.run_grading [--multi-leg] [--limit N] [--config PATH]
                                  [--league-rules] [--database-url URL] [--json]

Exit codes:
    0 - batch ran (per-record errors are reported in the stats, not the exit code)
    1 - batch could not start (bad config, store unreachable, fetch failed)
"""

import os
import sys
import json
import asyncio
import argparse
import logging
from typing import List, Optional

# Add parent dir to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.edge_config import EdgeConfigError, load_edge_config
from core.record_store import RecordStoreError
from core.structured_logging import configure_structured_logging
from database import init_database
from edge_scoring import ScoringMode
from env_config import Config
from grading_orchestrator import BatchStats, GradingOrchestrator
from multi_leg import MultiLegAggregator

logger = logging.getLogger("run_grading")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one edge grading batch")
    parser.add_argument("--multi-leg", action="store_true",
                        help="Run the final-promotion job (tickets + single bets)")
    parser.add_argument("--limit", type=int, default=Config.GRADING_BATCH_LIMIT,
                        help="Max records per batch (default: %(default)s)")
    parser.add_argument("--config", default=Config.EDGE_CONFIG_PATH,
                        help="Edge scoring YAML config (default: built-in preset)")
    parser.add_argument("--league-rules", action="store_true", default=Config.USE_LEAGUE_RULES,
                        help="Fold league overlays into unified scoring")
    parser.add_argument("--database-url", default=Config.DATABASE_URL,
                        help="SQLAlchemy database URL (default: DATABASE_URL or local SQLite)")
    parser.add_argument("--json", action="store_true", help="Print batch stats as JSON")
    return parser


async def run_batch(args: argparse.Namespace) -> BatchStats:
    config = load_edge_config(args.config)
    store = init_database(args.database_url)
    mode = ScoringMode.unified(use_league_rules=args.league_rules)

    if args.multi_leg:
        job = MultiLegAggregator(store, config=config, mode=mode, batch_limit=args.limit)
    else:
        job = GradingOrchestrator(store, config=config, mode=mode, batch_limit=args.limit)
    return await job.run()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_structured_logging(Config.LOG_LEVEL, Config.LOG_FORMAT)

    if args.limit <= 0:
        logger.error("--limit must be positive, got %s", args.limit)
        return 1

    try:
        stats = asyncio.run(run_batch(args))
    except (EdgeConfigError, RecordStoreError) as e:
        logger.error("Grading batch failed to start: %s", e)
        return 1

    if args.json:
        print(json.dumps(stats.as_dict(), indent=2))
    else:
        print(" ".join(f"{k}={v}" for k, v in stats.as_dict().items()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
