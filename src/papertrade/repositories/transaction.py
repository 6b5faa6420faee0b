"""Transaction repository: append and query the trade log."""

from sqlalchemy import select

from papertrade.models.transaction import TradeType, Transaction
from papertrade.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for the append-only Transaction model.

    Transactions are never updated or deleted.

    Example:
        >>> repo = TransactionRepository(Transaction, db)
        >>> sells = await repo.list_by_user("user-123", trade_type=TradeType.SELL)
    """

    async def list_by_user(
        self,
        user_id: str,
        *,
        trade_type: TradeType | None = None,
        symbol: str | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """Get a user's trades, most recent first.

        Args:
            user_id: Owner of the trades
            trade_type: Only return buys or only sells
            symbol: Only return trades in this symbol
            limit: Maximum number of trades to return

        Returns:
            List of transactions ordered by timestamp descending
        """
        statement = select(Transaction).where(Transaction.user_id == user_id)
        if trade_type is not None:
            statement = statement.where(Transaction.type == trade_type)
        if symbol is not None:
            statement = statement.where(Transaction.symbol == symbol.upper())
        statement = statement.order_by(Transaction.timestamp.desc())
        if limit is not None:
            statement = statement.limit(limit)
        return await self._scalars(statement)
