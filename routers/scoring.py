"""
SCORING ROUTER - Edge scoring endpoints

Endpoints:
    - POST /score           - Public grade (no Zone Threat data, ever)
    - POST /internal/score  - Full internal grade + optional markdown summary
                              (X-Admin-Key required)

The scoring configuration is loaded once at startup and read from
app.state.edge_config; requests never change it.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from core.auth import verify_admin_key, verify_api_key
from core.edge_config import DEFAULT_EDGE_CONFIG, EdgeScoreConfig
from core.zone_threat import extract_matchup_data, extract_pitcher_stats, generate_zone_threat_summary
from edge_scoring import ScoringMode, compute_edge_score
from env_config import Config
from metrics import metrics_middleware
from models.pick_schema import InternalGradeView, PropRecord, PublicGradeView

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scoring"])


class ScoreRequest(BaseModel):
    prop: PropRecord
    mode: Literal["legacy", "unified"] = "unified"
    use_league_rules: Optional[bool] = None
    use_zone_threat: bool = True

    def scoring_mode(self) -> ScoringMode:
        if self.mode == "legacy":
            return ScoringMode.legacy()
        league_rules = Config.USE_LEAGUE_RULES if self.use_league_rules is None else self.use_league_rules
        return ScoringMode.unified(use_league_rules=league_rules, use_zone_threat=self.use_zone_threat)


class InternalScoreRequest(ScoreRequest):
    admin_override_tier: Optional[str] = None
    include_summary: bool = False


class InternalScoreResponse(BaseModel):
    grade: InternalGradeView
    summary: Optional[str] = Field(default=None, description="Markdown Zone Threat summary")


def get_edge_config(request: Request) -> EdgeScoreConfig:
    return getattr(request.app.state, "edge_config", DEFAULT_EDGE_CONFIG)


# =============================================================================
# PUBLIC
# =============================================================================

@router.post("/score", response_model=PublicGradeView)
@metrics_middleware
async def score(
    body: ScoreRequest,
    config: EdgeScoreConfig = Depends(get_edge_config),
    auth: bool = Depends(verify_api_key),
):
    """Grade one prop. Member-facing: built from the public ledger only."""
    return compute_edge_score(body.prop, config, body.scoring_mode()).public_view()


# =============================================================================
# INTERNAL
# =============================================================================

@router.post("/internal/score", response_model=InternalScoreResponse)
@metrics_middleware
async def internal_score(
    body: InternalScoreRequest,
    config: EdgeScoreConfig = Depends(get_edge_config),
    auth: bool = Depends(verify_admin_key),
):
    """INTERNAL ONLY: full grade with Zone Threat analysis and league overlay detail."""
    computation = compute_edge_score(body.prop, config, body.scoring_mode(), body.admin_override_tier)

    summary = None
    if body.include_summary:
        pitcher = extract_pitcher_stats(body.prop)
        if pitcher is not None:
            summary = generate_zone_threat_summary(
                pitcher, config.zone_threat, extract_matchup_data(body.prop)
            )

    logger.info("Internal score for %s: tier=%s score=%s", body.prop.id, computation.tier, computation.score)
    return InternalScoreResponse(grade=computation.internal_view(), summary=summary)
