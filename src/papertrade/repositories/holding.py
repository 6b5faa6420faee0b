"""Holding repository for holding-specific database operations."""

from decimal import Decimal

from sqlalchemy import delete, select, update

from papertrade.models.holding import Holding
from papertrade.repositories.base import BaseRepository


class HoldingRepository(BaseRepository[Holding]):
    """Repository for Holding model with holding-specific queries.

    Updates and deletes are conditional on the version the caller read, so
    two trades racing on the same position cannot both succeed.

    Example:
        >>> repo = HoldingRepository(Holding, db)
        >>> holding = await repo.get_by_user_and_symbol("user-123", "AAPL")
    """

    async def get_by_user_and_symbol(self, user_id: str, symbol: str) -> Holding | None:
        """Get the user's holding in a symbol.

        Args:
            user_id: Owner of the holding
            symbol: The security symbol (e.g., "AAPL")

        Returns:
            Holding if the user has an open position, None otherwise
        """
        return await self._scalar_one_or_none(
            select(Holding).where(Holding.user_id == user_id, Holding.symbol == symbol.upper())
        )

    async def list_by_user(self, user_id: str) -> list[Holding]:
        """Get all open positions of a user, ordered by symbol."""
        return await self._scalars(
            select(Holding).where(Holding.user_id == user_id).order_by(Holding.symbol)
        )

    async def update_if_version(
        self,
        user_id: str,
        symbol: str,
        *,
        shares: Decimal,
        average_price: Decimal,
        expected_version: int,
    ) -> bool:
        """Set shares and cost basis if the holding is still at the expected version.

        Returns:
            True if the holding was updated, False on a version mismatch

        Note:
            Caller must commit the transaction.
        """
        result = await self.db.execute(
            update(Holding)
            .where(
                Holding.user_id == user_id,
                Holding.symbol == symbol,
                Holding.version == expected_version,
            )
            .values(shares=shares, average_price=average_price, version=Holding.version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def delete_if_version(self, user_id: str, symbol: str, expected_version: int) -> bool:
        """Delete the holding if it is still at the expected version.

        Returns:
            True if the holding was deleted, False on a version mismatch

        Note:
            Caller must commit the transaction.
        """
        result = await self.db.execute(
            delete(Holding)
            .where(
                Holding.user_id == user_id,
                Holding.symbol == symbol,
                Holding.version == expected_version,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
