"""Portfolio snapshot: holdings valued at current market quotes.

``get_portfolio_snapshot`` is the one place that derives total portfolio
value. Everything else (API, achievements, position sizing) calls it.
"""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from papertrade.core.exceptions import NotFoundError
from papertrade.schemas.portfolio import HoldingSnapshot, PortfolioSnapshot
from papertrade.schemas.records import HoldingRecord, MarketQuoteRecord, PortfolioRecord
from papertrade.services.calculations import money, percent
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _holding_snapshot(holding: HoldingRecord, quote: MarketQuoteRecord | None) -> HoldingSnapshot:
    cost_basis = money(holding.shares * holding.average_price)
    if quote is None:
        return HoldingSnapshot(
            symbol=holding.symbol,
            shares=holding.shares,
            average_price=holding.average_price,
            cost_basis=cost_basis,
            is_stale=True,
        )

    current_value = money(holding.shares * quote.current_price)
    gain_loss = current_value - cost_basis
    return HoldingSnapshot(
        symbol=holding.symbol,
        name=quote.name,
        shares=holding.shares,
        average_price=holding.average_price,
        cost_basis=cost_basis,
        current_price=quote.current_price,
        current_value=current_value,
        gain_loss=gain_loss,
        gain_loss_percent=percent(gain_loss, cost_basis),
        change=quote.change,
        change_percent=quote.change_percent,
        day_change=money(holding.shares * quote.change),
    )


def get_portfolio_snapshot(
    portfolio: PortfolioRecord,
    holdings: Sequence[HoldingRecord],
    quotes: Mapping[str, MarketQuoteRecord],
) -> PortfolioSnapshot:
    """Value a portfolio at the given quotes.

    Holdings without a quote stay in the list, marked ``is_stale`` with their
    market fields set to None, and are left out of every aggregate.

    Args:
        portfolio: Cash balance
        holdings: Open positions
        quotes: Current quotes keyed by symbol

    Returns:
        PortfolioSnapshot with per-holding values and portfolio totals
    """
    snapshots = [_holding_snapshot(h, quotes.get(h.symbol)) for h in holdings]
    quoted = [s for s in snapshots if not s.is_stale]

    holdings_value = sum((s.current_value for s in quoted), ZERO)
    total_cost_basis = sum((s.cost_basis for s in quoted), ZERO)
    total_gain_loss = sum((s.gain_loss for s in quoted), ZERO)
    day_change = sum((s.day_change for s in quoted), ZERO)

    stale_symbols = [s.symbol for s in snapshots if s.is_stale]
    if stale_symbols:
        logger.debug(f"No current quote for {', '.join(stale_symbols)}")

    return PortfolioSnapshot(
        cash=portfolio.cash,
        holdings=snapshots,
        holdings_value=holdings_value,
        total_value=portfolio.cash + holdings_value,
        total_cost_basis=total_cost_basis,
        total_gain_loss=total_gain_loss,
        day_change=day_change,
        day_change_percent=percent(day_change, holdings_value),
        stale_symbols=stale_symbols,
    )


async def load_portfolio_snapshot(store: TradingStore, user_id: str) -> PortfolioSnapshot:
    """Read a user's portfolio, holdings and quotes and build the snapshot.

    Raises:
        NotFoundError: If the user has no portfolio
    """
    portfolio = await store.get_portfolio(user_id)
    if portfolio is None:
        raise NotFoundError(f"Portfolio for user {user_id} not found")
    holdings = await store.list_holdings(user_id)
    quotes = await store.get_market_quotes(h.symbol for h in holdings)
    return get_portfolio_snapshot(portfolio, holdings, quotes)
