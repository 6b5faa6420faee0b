"""Portfolio model holding a user's virtual cash."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from papertrade.db.base import Base, TimestampMixin, VersionedMixin


class Portfolio(Base, TimestampMixin, VersionedMixin):
    """Cash account of a user, one per profile.

    Total value is never stored; it is derived from holdings and quotes.
    """

    __tablename__ = "portfolios"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.user_id", ondelete="CASCADE"), primary_key=True
    )
    cash: Mapped[Decimal] = mapped_column(Numeric(18, 6))

    __table_args__ = (CheckConstraint("cash >= 0", name="ck_portfolios_cash_non_negative"),)
