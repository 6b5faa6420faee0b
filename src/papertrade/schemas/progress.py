"""Progress statistics and achievement schemas."""

from decimal import Decimal

from pydantic import BaseModel

from papertrade.schemas.score import ScoreHistoryResponse


class TradingStatistics(BaseModel):
    """Aggregates over the user's trade history."""

    total_trades: int
    sell_count: int
    win_rate: Decimal  # Percent of sells closed at a profit
    best_trade: Decimal
    total_profit: Decimal
    days_active: int


class Achievement(BaseModel):
    """A badge the user has earned."""

    badge_type: str
    name: str
    description: str


class ProgressReport(BaseModel):
    """Everything the progress page shows."""

    confidence_score: Decimal | None
    statistics: TradingStatistics
    achievements: list[Achievement]
    score_history: list[ScoreHistoryResponse]
