"""Market quote model, refreshed out-of-band by the quote ingestion job."""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from papertrade.db.base import Base


class MarketQuote(Base):
    """Latest known price of a symbol. Read-only to the trading core."""

    __tablename__ = "market_quotes"

    symbol: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_price: Mapped[Decimal] = mapped_column(Numeric(18, 6))
    change: Mapped[Decimal] = mapped_column(Numeric(18, 6), default=Decimal("0"))
    change_percent: Mapped[Decimal] = mapped_column(Numeric(9, 4), default=Decimal("0"))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
