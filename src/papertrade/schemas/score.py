"""Confidence score schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ScoreBreakdown(BaseModel):
    """Each contribution to the confidence score.

    When the user has no trades and no completed lessons every bonus is zero
    and ``total_score`` is the rounded base score.
    """

    base_score: Decimal
    has_activity: bool
    trade_count: int
    trade_bonus: Decimal
    holdings_count: int
    diversification_bonus: Decimal
    lessons_completed: int
    lesson_bonus: Decimal
    profitable_trades: int
    profitable_bonus: Decimal
    days_active: int
    activity_bonus: Decimal
    total_score: Decimal


class ScoreHistoryResponse(BaseModel):
    """Score history entry returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    score: Decimal
    recorded_at: datetime


class RecalculationResponse(BaseModel):
    """Result of an explicit recalculation request."""

    user_id: str
    confidence_score: Decimal | None
