"""Transaction model: the append-only trade log."""

import enum
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from papertrade.db.base import Base


class TradeType(str, enum.Enum):
    """Side of an executed trade."""

    BUY = "buy"
    SELL = "sell"


class Transaction(Base):
    """One executed trade. Rows are never updated or deleted."""

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.user_id", ondelete="CASCADE"), index=True
    )
    symbol: Mapped[str] = mapped_column(String(20), index=True)
    type: Mapped[TradeType] = mapped_column(
        Enum(TradeType, values_callable=lambda e: [m.value for m in e], name="trade_type")
    )
    shares: Mapped[Decimal] = mapped_column(Numeric(18, 6))
    price: Mapped[Decimal] = mapped_column(Numeric(18, 6))
    total: Mapped[Decimal] = mapped_column(Numeric(18, 6))
    # NULL for buys; realized (price - average cost) * shares for sells
    profit_loss: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), index=True
    )
