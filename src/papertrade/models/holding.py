"""Holding model for tracking open positions."""

import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from papertrade.db.base import Base, TimestampMixin, VersionedMixin


class Holding(Base, TimestampMixin, VersionedMixin):
    """Current position of a user in one symbol.

    A row exists only while ``shares > 0``; selling the last share deletes it.
    """

    __tablename__ = "holdings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.user_id", ondelete="CASCADE"), index=True
    )
    symbol: Mapped[str] = mapped_column(String(20), index=True)
    shares: Mapped[Decimal] = mapped_column(Numeric(18, 6))  # Supports fractional shares
    average_price: Mapped[Decimal] = mapped_column(Numeric(18, 6))

    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_holdings_user_symbol"),
        CheckConstraint("shares > 0", name="ck_holdings_shares_positive"),
    )
