"""
GRADING_ORCHESTRATOR.PY - Batch grading of pending daily picks
==============================================================

GradingOrchestrator.run() -> BatchStats

1. Fetch up to batch_limit records from daily_picks where
   edge_score IS NULL and play_status = 'pending'.
   A fetch failure propagates: the run is over before it started.
2. Per record, isolated from every other record:
     claim      play_status pending -> grading (lost claim = another run owns it, skip)
     grade      composite scorer, configured mode, admin_override_tier honored
     market     MarketResistance.analyze(); collaborator failure -> 'unknown'
     persist    PUBLIC grade + market fields + graded_at + scoring_version,
                play_status -> graded
     promote    tier S/A -> insert into final_picks (failure logged + counted,
                grade NOT rolled back, NOT retried; an id already in
                final_picks from an interrupted earlier run counts as promoted)
     alert      promoted + sharp_fade -> alerts row (market_fade / medium),
                failure logged only
   Any other failure: logged with the record id, counted, claim released
   best-effort, loop continues.
3. Completion line + BatchStats.

Zone Threat analysis is written to the log only. Nothing internal is
persisted to daily_picks or final_picks.
"""

import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from core.edge_config import DEFAULT_EDGE_CONFIG, EdgeScoreConfig
from core.record_store import DuplicateRecordError, RecordStore
from core.scoring_contract import (
    ALERTS_TABLE,
    DEFAULT_BATCH_LIMIT,
    MARKET_FADE_ALERT,
    PROMOTED_TABLE,
    REACTION_SHARP_FADE,
    SOURCE_TABLE,
    STATUS_GRADED,
    STATUS_GRADING,
    STATUS_PENDING,
)
from core.structured_logging import grading_run, log_error, log_info, log_warning
from edge_scoring import EdgeComputation, ScoringMode, compute_edge_score
from market_resistance import MarketResistance, NullMarketResistance
from metrics import (
    track_alert,
    track_batch_duration,
    track_graded,
    track_grading_error,
    track_promotion,
)
from models.pick_schema import MarketReaction, PublicGradeView

logger = logging.getLogger(__name__)


@dataclass
class BatchStats:
    fetched: int = 0
    graded: int = 0
    promoted: int = 0
    alerts: int = 0
    skipped: int = 0
    errors: int = 0
    promotion_errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def public_grade_fields(view: PublicGradeView) -> Dict[str, Any]:
    """Columns persisted for a grade. Built from the public view only."""
    return {
        "edge_score": view.edge_score,
        "tier": view.tier,
        "tags": list(view.context_tags),
        "edge_breakdown": dict(view.edge_breakdown),
        "postable": view.postable,
        "solo_lock": view.solo_lock,
        "scoring_version": view.version,
    }


def market_fields(reaction: MarketReaction) -> Dict[str, Any]:
    return {
        "market_reaction": reaction.reaction,
        "line_movement": reaction.movement,
        "movement_pct": reaction.movement_pct,
        "updated_line": reaction.updated_line,
    }


class GradingOrchestrator:
    """
    Sequential async grader over a RecordStore.

    Subclasses change the fetch filter, the claim field and process_record();
    batch bookkeeping, claim/release, promotion and error isolation are shared.
    """

    job_name = "grading"
    source_table = SOURCE_TABLE
    promoted_table = PROMOTED_TABLE
    claim_field = "play_status"
    claim_expected: Any = STATUS_PENDING

    def __init__(
        self,
        store: RecordStore,
        config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG,
        mode: Optional[ScoringMode] = None,
        market: Optional[MarketResistance] = None,
        batch_limit: int = DEFAULT_BATCH_LIMIT,
    ):
        if batch_limit <= 0:
            raise ValueError(f"batch_limit must be positive, got {batch_limit}")
        self.store = store
        self.config = config
        self.mode = mode or ScoringMode.unified()
        self.market = market or NullMarketResistance()
        self.batch_limit = batch_limit

    def fetch_filters(self) -> Dict[str, Any]:
        return {"edge_score": None, "play_status": STATUS_PENDING}

    # =========================================================================
    # BATCH LOOP
    # =========================================================================

    async def run(self) -> BatchStats:
        stats = BatchStats()
        started = time.perf_counter()

        with grading_run(job=self.job_name) as run_id:
            records = await self.store.fetch(self.source_table, self.fetch_filters(), self.batch_limit)
            stats.fetched = len(records)

            if not records:
                log_info(logger, f"[{self.job_name}] No records to grade", job=self.job_name)
            else:
                log_info(logger, f"[{self.job_name}] Found {len(records)} records to grade",
                         job=self.job_name, fetched=len(records))

            for record in records:
                await self._process(record, stats)

            duration = time.perf_counter() - started
            track_batch_duration(self.job_name, duration)
            log_info(
                logger,
                f"[{self.job_name}] Batch complete: {stats.graded} graded, {stats.promoted} promoted, "
                f"{stats.errors} errors in {duration * 1000:.0f}ms",
                job=self.job_name, run=run_id, duration_ms=round(duration * 1000), **stats.as_dict(),
            )
        return stats

    async def _process(self, record: Mapping[str, Any], stats: BatchStats) -> None:
        record_id = record.get("id")
        if record_id is None:
            log_warning(logger, "Record without id, skipping", job=self.job_name)
            stats.skipped += 1
            return

        claimed = False
        try:
            claimed = await self.store.claim(
                self.source_table, record_id, self.claim_field, self.claim_expected, STATUS_GRADING
            )
            if not claimed:
                log_info(logger, f"Pick {record_id} already claimed by another run, skipping",
                         pick_id=record_id, job=self.job_name)
                stats.skipped += 1
                return
            await self.process_record(record, stats)
        except Exception as e:
            stats.errors += 1
            track_grading_error(self.job_name)
            log_error(logger, f"Failed to grade pick {record_id}: {e}",
                      pick_id=record_id, job=self.job_name, error=str(e), error_type=type(e).__name__)
            if claimed:
                await self._release(record_id)

    async def _release(self, record_id: str) -> None:
        """Hand the record back to the next run. Best-effort."""
        try:
            await self.store.claim(
                self.source_table, record_id, self.claim_field, STATUS_GRADING, self.claim_expected
            )
        except Exception as e:
            log_warning(logger, f"Could not release claim on pick {record_id}: {e}",
                        pick_id=record_id, job=self.job_name)

    # =========================================================================
    # PER-RECORD GRADING
    # =========================================================================

    def grade(self, record: Mapping[str, Any], mode: Optional[ScoringMode] = None) -> EdgeComputation:
        return compute_edge_score(
            record, self.config, mode or self.mode, record.get("admin_override_tier")
        )

    async def process_record(self, record: Mapping[str, Any], stats: BatchStats) -> None:
        record_id = record["id"]
        computation = self.grade(record)
        view = computation.public_view()
        reaction = await self.market_reaction(record)

        fields = {
            **public_grade_fields(view),
            **market_fields(reaction),
            "graded_at": utc_now_iso(),
            self.claim_field: STATUS_GRADED,
        }
        await self.store.update(self.source_table, record_id, fields)
        stats.graded += 1
        track_graded(self.job_name, view.tier)
        self.log_internal_analysis(record_id, computation)

        if view.postable:
            final_pick = {
                **record,
                **fields,
                "promoted_at": utc_now_iso(),
                "source_pick_id": record_id,
            }
            await self.promote(record_id, final_pick, stats)
            if reaction.reaction == REACTION_SHARP_FADE:
                await self.publish_alert(record_id, reaction, stats)

        log_info(logger, f"Graded pick {record_id} - Tier: {view.tier}, Edge: {view.edge_score}",
                 pick_id=record_id, tier=view.tier, edge_score=view.edge_score,
                 market_reaction=reaction.reaction)

    async def market_reaction(self, record: Mapping[str, Any]) -> MarketReaction:
        try:
            return await self.market.analyze(record)
        except Exception as e:
            log_warning(logger, f"Market resistance unavailable for pick {record.get('id')}: {e}",
                        pick_id=record.get("id"), error=str(e))
            return MarketReaction()

    async def promote(self, record_id: str, final_pick: Dict[str, Any], stats: BatchStats) -> bool:
        """
        Insert into final_picks. Failure is logged and counted, never raised.

        A duplicate id means an earlier run already promoted this record and
        then failed to write the source row back; the promotion stands.
        """
        try:
            await self.store.insert(self.promoted_table, final_pick)
        except DuplicateRecordError:
            log_warning(logger, f"Pick {record_id} already in {self.promoted_table}, keeping existing promotion",
                        pick_id=record_id, job=self.job_name)
            return True
        except Exception as e:
            stats.promotion_errors += 1
            track_promotion(self.job_name, success=False)
            log_error(logger, f"Failed to promote pick {record_id} to {self.promoted_table}: {e}",
                      pick_id=record_id, job=self.job_name, error=str(e))
            return False

        stats.promoted += 1
        track_promotion(self.job_name, success=True)
        log_info(logger, f"Promoted pick {record_id} to {self.promoted_table}",
                 pick_id=record_id, job=self.job_name)
        return True

    async def publish_alert(self, record_id: str, reaction: MarketReaction, stats: BatchStats) -> None:
        alert = {
            **MARKET_FADE_ALERT,
            "pick_id": record_id,
            "movement_pct": reaction.movement_pct,
            "created_at": utc_now_iso(),
            "agent_name": self.job_name,
        }
        try:
            await self.store.insert(ALERTS_TABLE, alert)
        except Exception as e:
            log_error(logger, f"Failed to publish alert for pick {record_id}: {e}",
                      pick_id=record_id, error=str(e))
            return
        stats.alerts += 1
        track_alert(alert["type"])

    def log_internal_analysis(self, record_id: str, computation: EdgeComputation) -> None:
        analysis = computation.zone_threat.analysis
        if not analysis.eligible:
            return
        log_info(
            logger,
            f"Zone threat analysis for pick {record_id}: {analysis.threat_level}",
            pick_id=record_id,
            zone_threat=analysis.model_dump(),
            internal_score=computation.score,
        )
