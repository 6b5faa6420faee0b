"""Service layer that ties a trade request to the engine and the scoring.

Routes call ``execute_trade``; it resolves the execution price, runs the
trade and then refreshes the confidence score on a best-effort basis.
"""

import logging
from decimal import Decimal

from papertrade.core.exceptions import NotFoundError, ValidationError
from papertrade.models.transaction import TradeType
from papertrade.schemas.portfolio import AffordableShares, LossScenarios, PositionSizeAssessment
from papertrade.schemas.trade import TradeRequest, TradeResult
from papertrade.services.calculations import (
    assess_position_size,
    calculate_affordable_shares,
    calculate_loss_scenarios,
)
from papertrade.services.portfolio_service import load_portfolio_snapshot
from papertrade.services.scoring_service import ScoreRecalculator
from papertrade.services.trade_engine import TradeEngine
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)


async def get_quote_price(store: TradingStore, symbol: str) -> Decimal:
    """Current market price of a symbol.

    Raises:
        NotFoundError: If there is no quote for the symbol
    """
    symbol = symbol.strip().upper()
    quotes = await store.get_market_quotes([symbol])
    quote = quotes.get(symbol)
    if quote is None:
        raise NotFoundError(f"No market quote for {symbol}")
    return quote.current_price


async def execute_trade(
    store: TradingStore,
    user_id: str,
    request: TradeRequest,
    trade_type: TradeType,
) -> TradeResult:
    """Execute a buy or sell and refresh the user's confidence score.

    When the request carries no price the current quote is used. A failed
    score refresh leaves ``confidence_score`` empty but the trade stands.

    Args:
        store: Trading store
        user_id: Owner of the portfolio
        request: Symbol, shares and optional price
        trade_type: BUY or SELL

    Returns:
        TradeResult including the refreshed confidence score

    Raises:
        NotFoundError: Unknown portfolio, or no price given and no quote
        ValidationError, TradeRejectedError, ConcurrencyError,
        StoreUnavailableError: As raised by the trade engine
    """
    price = request.price
    if price is None:
        price = await get_quote_price(store, request.symbol)

    engine = TradeEngine(store)
    if trade_type == TradeType.BUY:
        result = await engine.execute_buy(user_id, request.symbol, request.shares, price)
    elif trade_type == TradeType.SELL:
        result = await engine.execute_sell(user_id, request.symbol, request.shares, price)
    else:
        raise ValidationError(f"Unsupported trade type: {trade_type}")

    result.confidence_score = await ScoreRecalculator(store).recalculate_after_trade(user_id)
    return result


async def get_affordable_shares(
    store: TradingStore, user_id: str, symbol: str
) -> AffordableShares:
    """How many shares of a symbol the user's cash buys at the current quote.

    Raises:
        NotFoundError: If the user has no portfolio or the symbol no quote
    """
    portfolio = await store.get_portfolio(user_id)
    if portfolio is None:
        raise NotFoundError(f"Portfolio for user {user_id} not found")
    price = await get_quote_price(store, symbol)
    return calculate_affordable_shares(price, portfolio.cash)


async def assess_trade_size(
    store: TradingStore, user_id: str, symbol: str, shares: Decimal
) -> PositionSizeAssessment:
    """Rate a prospective purchase against the user's total portfolio value.

    Raises:
        NotFoundError: If the user has no portfolio or the symbol no quote
        ValidationError: If shares is not positive
    """
    if shares <= 0:
        raise ValidationError(f"Shares must be greater than 0, got {shares}")
    snapshot = await load_portfolio_snapshot(store, user_id)
    price = await get_quote_price(store, symbol)
    return assess_position_size(shares, price, snapshot.total_value)


async def get_loss_scenarios(
    store: TradingStore, user_id: str, symbol: str, shares: Decimal
) -> LossScenarios:
    """What buying ``shares`` at the current quote would be worth after price drops.

    Raises:
        NotFoundError: If the user has no portfolio or the symbol no quote
        ValidationError: If shares is not positive
    """
    if await store.get_portfolio(user_id) is None:
        raise NotFoundError(f"Portfolio for user {user_id} not found")
    symbol = symbol.strip().upper()
    price = await get_quote_price(store, symbol)
    return calculate_loss_scenarios(symbol, shares, price)
