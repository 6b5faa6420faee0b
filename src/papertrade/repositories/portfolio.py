"""Portfolio repository with compare-and-swap cash updates."""

from decimal import Decimal

from sqlalchemy import update

from papertrade.models.portfolio import Portfolio
from papertrade.repositories.base import BaseRepository


class PortfolioRepository(BaseRepository[Portfolio]):
    """Repository for Portfolio model.

    Example:
        >>> repo = PortfolioRepository(Portfolio, db)
        >>> portfolio = await repo.get("user-123")
        >>> ok = await repo.update_cash_if_version("user-123", Decimal("8500"), portfolio.version)
    """

    async def update_cash_if_version(
        self,
        user_id: str,
        cash: Decimal,
        expected_version: int,
    ) -> bool:
        """Set the cash balance if nobody changed the portfolio since it was read.

        Args:
            user_id: Owner of the portfolio
            cash: New cash balance
            expected_version: Version observed when the portfolio was read

        Returns:
            True if exactly one row matched and was updated, False if the
            version moved on (or the portfolio is gone)

        Note:
            Caller must commit the transaction.
        """
        result = await self.db.execute(
            update(Portfolio)
            .where(Portfolio.user_id == user_id, Portfolio.version == expected_version)
            .values(cash=cash, version=Portfolio.version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
