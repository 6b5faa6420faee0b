"""Schemas package."""

from papertrade.schemas.portfolio import (
    AffordableShares,
    HoldingSnapshot,
    LossScenario,
    LossScenarios,
    PortfolioSnapshot,
    PositionSizeAssessment,
)
from papertrade.schemas.profile import (
    AssessmentSubmit,
    LessonCompletionResponse,
    ProfileCreate,
    ProfileResponse,
)
from papertrade.schemas.progress import Achievement, ProgressReport, TradingStatistics
from papertrade.schemas.records import (
    HoldingRecord,
    LessonCompletionRecord,
    MarketQuoteRecord,
    PortfolioRecord,
    ProfileRecord,
    ScoreHistoryRecord,
    TransactionCreate,
    TransactionRecord,
)
from papertrade.schemas.score import (
    RecalculationResponse,
    ScoreBreakdown,
    ScoreHistoryResponse,
)
from papertrade.schemas.trade import TradeRequest, TradeResult

__all__ = [
    # Store records
    "PortfolioRecord",
    "HoldingRecord",
    "TransactionCreate",
    "TransactionRecord",
    "ProfileRecord",
    "ScoreHistoryRecord",
    "LessonCompletionRecord",
    "MarketQuoteRecord",
    # Trade schemas
    "TradeRequest",
    "TradeResult",
    # Portfolio schemas
    "HoldingSnapshot",
    "PortfolioSnapshot",
    "AffordableShares",
    "PositionSizeAssessment",
    "LossScenario",
    "LossScenarios",
    # Score schemas
    "ScoreBreakdown",
    "ScoreHistoryResponse",
    "RecalculationResponse",
    # Profile schemas
    "ProfileCreate",
    "ProfileResponse",
    "AssessmentSubmit",
    "LessonCompletionResponse",
    # Progress schemas
    "TradingStatistics",
    "Achievement",
    "ProgressReport",
]
