"""Records exchanged with the trading store.

These are the shapes the trade engine and the scoring engine work with. The
SQL store builds them from ORM rows (``from_attributes``); any other store
implementation only needs to return the same models.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from papertrade.models.transaction import TradeType


class PortfolioRecord(BaseModel):
    """Cash balance of a user with its concurrency version."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    cash: Decimal = Field(..., ge=0)
    version: int = 1


class HoldingRecord(BaseModel):
    """Open position in one symbol."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    symbol: str
    shares: Decimal = Field(..., gt=0)
    average_price: Decimal = Field(..., gt=0)
    version: int = 1

    @property
    def cost_basis(self) -> Decimal:
        """Total amount paid for the shares still held."""
        return self.shares * self.average_price


class TransactionCreate(BaseModel):
    """Trade about to be appended to the transaction log."""

    user_id: str
    symbol: str
    type: TradeType
    shares: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    total: Decimal
    profit_loss: Decimal | None = None
    timestamp: datetime


class TransactionRecord(TransactionCreate):
    """Trade as stored in the transaction log."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID


class ProfileRecord(BaseModel):
    """Profile fields the scoring engine reads."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: str | None = None
    assessment_score: Decimal | None = None  # Onboarding seed, base of every recalculation
    confidence_score: Decimal | None = None
    created_at: datetime | None = None


class ScoreHistoryRecord(BaseModel):
    """One recorded confidence score."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    score: Decimal
    recorded_at: datetime


class LessonCompletionRecord(BaseModel):
    """A lesson the user has completed."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    lesson_slug: str
    completed_at: datetime


class MarketQuoteRecord(BaseModel):
    """Externally supplied quote for a symbol."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str
    name: str | None = None
    current_price: Decimal = Field(..., gt=0)
    change: Decimal = Decimal("0")
    change_percent: Decimal = Decimal("0")
    updated_at: datetime | None = None
