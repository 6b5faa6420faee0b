"""Confidence score endpoints."""

import logging

from fastapi import APIRouter

from papertrade.core.deps import Store
from papertrade.schemas.score import RecalculationResponse, ScoreBreakdown, ScoreHistoryResponse
from papertrade.services.scoring_service import ScoreRecalculator, load_score_breakdown

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/confidence", response_model=ScoreBreakdown)
async def get_confidence(user_id: str, store: Store) -> ScoreBreakdown:
    """
    Break the confidence score down into its contributions.

    The total is computed from current activity, so it can be ahead of the
    stored score until the next recalculation.
    """
    return await load_score_breakdown(store, user_id)


@router.get("/confidence/history", response_model=list[ScoreHistoryResponse])
async def get_confidence_history(user_id: str, store: Store) -> list[ScoreHistoryResponse]:
    """Get every recorded score, oldest first."""
    history = await store.list_score_history(user_id)
    return [ScoreHistoryResponse(score=h.score, recorded_at=h.recorded_at) for h in history]


@router.post("/confidence/recalculate", response_model=RecalculationResponse)
async def recalculate_confidence(user_id: str, store: Store) -> RecalculationResponse:
    """
    Recompute and store the confidence score now.

    Unlike the refresh after a trade, failures here are returned to the caller.
    """
    score = await ScoreRecalculator(store).recalculate(user_id)
    return RecalculationResponse(user_id=user_id, confidence_score=score)
