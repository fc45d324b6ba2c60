"""
MULTI_LEG.PY - Final promotion job (tickets + single bets)
==========================================================

MultiLegAggregator is the GradingOrchestrator specialised for final promotion:

    source filter   promoted_to_final = False, is_valid = True,
                    final_grading_status IS NULL
    claim           final_grading_status NULL -> grading

Ticket policy (evaluate_ticket):
    - multi-leg: bet_type in {parlay, teaser, roundrobin, sgp} (any case)
      or is_parlay / is_teaser / is_rr set
    - every leg graded independently (legacy-compatible mode by default)
    - promote ONLY if every leg tier is S or A (strict AND)
    - ticket_score = round-half-up(mean(leg scores))
    - fewer than two legs -> not a gradeable ticket: warning + skipped

Single bets go through the composite scorer and are promoted when the final
tier (admin override honored) is S or A.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from core.edge_config import DEFAULT_EDGE_CONFIG, EdgeScoreConfig
from core.record_store import RecordStore
from core.scoring_contract import (
    DEFAULT_BATCH_LIMIT,
    MULTI_LEG_BET_TYPES,
    MULTI_LEG_FLAGS,
    SINGLE_BET_TYPE,
    STATUS_GRADED,
    STATUS_SKIPPED,
)
from core.structured_logging import log_info, log_warning
from edge_scoring import ScoringMode, compute_edge_score
from grading_orchestrator import BatchStats, GradingOrchestrator, public_grade_fields, utc_now_iso
from market_resistance import MarketResistance
from metrics import track_graded
from models.pick_schema import LegResult, TicketDecision
from tiering import all_tiers_qualify, is_postable

logger = logging.getLogger(__name__)

MIN_TICKET_LEGS = 2


def bet_type_of(record: Mapping[str, Any]) -> str:
    bet_type = record.get("bet_type")
    if isinstance(bet_type, str) and bet_type.strip():
        return bet_type.strip().lower()
    return SINGLE_BET_TYPE


def is_multi_leg(record: Mapping[str, Any]) -> bool:
    if any(record.get(flag) is True for flag in MULTI_LEG_FLAGS):
        return True
    return bet_type_of(record) in MULTI_LEG_BET_TYPES


def ticket_score(scores: List[float]) -> int:
    """Mean of leg scores, rounded half up (2.5 -> 3)."""
    return int(np.floor(np.mean(scores) + 0.5))


class MultiLegAggregator(GradingOrchestrator):
    job_name = "final_promotion"
    claim_field = "final_grading_status"
    claim_expected = None

    def __init__(
        self,
        store: RecordStore,
        config: EdgeScoreConfig = DEFAULT_EDGE_CONFIG,
        mode: Optional[ScoringMode] = None,
        leg_mode: Optional[ScoringMode] = None,
        market: Optional[MarketResistance] = None,
        batch_limit: int = DEFAULT_BATCH_LIMIT,
    ):
        super().__init__(store, config=config, mode=mode, market=market, batch_limit=batch_limit)
        self.leg_mode = leg_mode or ScoringMode.legacy()

    def fetch_filters(self) -> Dict[str, Any]:
        return {"promoted_to_final": False, "is_valid": True, "final_grading_status": None}

    # =========================================================================
    # TICKET POLICY
    # =========================================================================

    def evaluate_ticket(self, ticket: Mapping[str, Any]) -> Optional[TicketDecision]:
        """
        Grade every leg and apply the all-legs-qualify gate.

        Returns:
            TicketDecision, or None when the ticket has fewer than two legs
        """
        legs = ticket.get("legs")
        if not isinstance(legs, list) or len(legs) < MIN_TICKET_LEGS:
            return None

        ticket_id = str(ticket.get("id"))
        leg_results: List[LegResult] = []
        for i, leg in enumerate(legs):
            leg = dict(leg)
            leg_id = str(leg.get("id") or f"{ticket_id}:leg{i}")
            leg["id"] = leg_id
            view = compute_edge_score(
                leg, self.config, self.leg_mode, leg.get("admin_override_tier")
            ).public_view()
            leg_results.append(LegResult(
                leg_id=leg_id,
                score=view.edge_score,
                tier=view.tier,
                breakdown=view.edge_breakdown,
            ))

        tiers = [result.tier for result in leg_results]
        return TicketDecision(
            ticket_id=ticket_id,
            bet_type=bet_type_of(ticket),
            promote=all_tiers_qualify(tiers),
            ticket_score=ticket_score([result.score for result in leg_results]),
            leg_results=leg_results,
            blocking_legs=[r.leg_id for r in leg_results if not is_postable(r.tier)],
        )

    # =========================================================================
    # PER-RECORD
    # =========================================================================

    async def process_record(self, record: Mapping[str, Any], stats: BatchStats) -> None:
        if is_multi_leg(record):
            await self._process_ticket(record, stats)
        else:
            await self._process_single(record, stats)

    async def _process_ticket(self, record: Mapping[str, Any], stats: BatchStats) -> None:
        record_id = record["id"]
        decision = self.evaluate_ticket(record)

        if decision is None:
            log_warning(logger, f"Multi-leg bet {record_id} missing legs array, skipping",
                        pick_id=record_id, bet_type=bet_type_of(record))
            await self.store.update(self.source_table, record_id, {self.claim_field: STATUS_SKIPPED})
            stats.skipped += 1
            return

        stats.graded += 1
        track_graded(self.job_name, "ticket")
        done = {self.claim_field: STATUS_GRADED}

        if not decision.promote:
            await self.store.update(self.source_table, record_id, done)
            log_info(logger, f"Multi-leg bet {record_id} not promoted (one or more legs below threshold)",
                     pick_id=record_id, bet_type=decision.bet_type, blocking_legs=decision.blocking_legs)
            return

        final_ticket = {
            **record,
            "leg_results": [result.model_dump() for result in decision.leg_results],
            "ticket_score": decision.ticket_score,
            "promoted_at": utc_now_iso(),
            "source_pick_id": record_id,
            **done,
        }
        if await self.promote(record_id, final_ticket, stats):
            done.update({"promoted_to_final": True, "promoted_final_at": utc_now_iso()})
            log_info(logger, f"Multi-leg bet {record_id} promoted, ticket score {decision.ticket_score}",
                     pick_id=record_id, bet_type=decision.bet_type, ticket_score=decision.ticket_score)
        await self.store.update(self.source_table, record_id, done)

    async def _process_single(self, record: Mapping[str, Any], stats: BatchStats) -> None:
        record_id = record["id"]
        view = self.grade(record).public_view()
        stats.graded += 1
        track_graded(self.job_name, view.tier)
        done: Dict[str, Any] = {self.claim_field: STATUS_GRADED}

        if view.postable:
            final_pick = {
                **record,
                **public_grade_fields(view),
                "promoted_at": utc_now_iso(),
                "source_pick_id": record_id,
                **done,
            }
            if await self.promote(record_id, final_pick, stats):
                done.update({"promoted_to_final": True, "promoted_final_at": utc_now_iso()})
        else:
            log_info(logger, f"Pick {record_id} not promoted to {self.promoted_table}",
                     pick_id=record_id, tier=view.tier)

        await self.store.update(self.source_table, record_id, done)
