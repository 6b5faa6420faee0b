"""Trade request and result schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from papertrade.models.transaction import TradeType
from papertrade.schemas.records import HoldingRecord, TransactionRecord


class TradeRequest(BaseModel):
    """Buy or sell order submitted by the UI.

    ``price`` is optional: when omitted the current market quote is used.
    """

    symbol: str = Field(..., min_length=1, max_length=20)
    shares: Decimal = Field(..., gt=0, decimal_places=6)
    price: Decimal | None = Field(None, gt=0, decimal_places=6)

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """Strip and uppercase the symbol."""
        symbol = v.strip().upper()
        if not symbol:
            raise ValueError("Symbol must not be blank")
        return symbol


class TradeResult(BaseModel):
    """Outcome of an executed trade."""

    type: TradeType
    symbol: str
    shares: Decimal
    price: Decimal
    total: Decimal
    profit_loss: Decimal | None = None
    profit_loss_percent: Decimal | None = None
    cash: Decimal  # Cash balance after the trade
    holding: HoldingRecord | None = None  # None once the position is closed
    transaction: TransactionRecord
    confidence_score: Decimal | None = None  # None if recalculation failed
