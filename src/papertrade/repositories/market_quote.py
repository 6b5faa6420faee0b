"""Market quote repository (read-only)."""

from collections.abc import Iterable

from sqlalchemy import select

from papertrade.models.market_quote import MarketQuote
from papertrade.repositories.base import BaseRepository


class MarketQuoteRepository(BaseRepository[MarketQuote]):
    """Repository for MarketQuote model.

    Quotes are written by the external ingestion job; the trading core only
    reads them.
    """

    async def get_by_symbols(self, symbols: Iterable[str]) -> list[MarketQuote]:
        """Get the quotes that exist for the given symbols.

        Args:
            symbols: Symbols to look up (case-insensitive)

        Returns:
            Quotes found; symbols without a quote are simply absent
        """
        wanted = {symbol.upper() for symbol in symbols}
        if not wanted:
            return []
        return await self._scalars(select(MarketQuote).where(MarketQuote.symbol.in_(wanted)))
