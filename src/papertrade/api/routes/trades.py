"""Trade endpoints."""

import logging

from fastapi import APIRouter, Request

from papertrade.core.config import settings
from papertrade.core.deps import Store
from papertrade.core.rate_limit import limiter
from papertrade.models.transaction import TradeType
from papertrade.schemas.records import TransactionRecord
from papertrade.schemas.trade import TradeRequest, TradeResult
from papertrade.services import trading_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/trades/buy", response_model=TradeResult)
@limiter.limit(settings.TRADE_RATE_LIMIT)
async def buy(request: Request, user_id: str, trade: TradeRequest, store: Store) -> TradeResult:
    """
    Buy shares with virtual cash.

    Uses the current market quote when no price is given.

    Raises:
        - 400: Invalid shares, price or symbol
        - 404: Unknown user, or no price given and no quote for the symbol
        - 409: The portfolio kept changing during the trade
        - 422: Insufficient funds
        - 429: Rate limit exceeded
        - 503: Store unavailable
    """
    return await trading_service.execute_trade(store, user_id, trade, TradeType.BUY)


@router.post("/trades/sell", response_model=TradeResult)
@limiter.limit(settings.TRADE_RATE_LIMIT)
async def sell(request: Request, user_id: str, trade: TradeRequest, store: Store) -> TradeResult:
    """
    Sell shares of an open position.

    Raises:
        - 400: Invalid shares, price or symbol
        - 404: Unknown user, or no price given and no quote for the symbol
        - 409: The portfolio kept changing during the trade
        - 422: No position in the symbol, or selling more shares than held
        - 429: Rate limit exceeded
        - 503: Store unavailable
    """
    return await trading_service.execute_trade(store, user_id, trade, TradeType.SELL)


@router.get("/transactions", response_model=list[TransactionRecord])
async def list_transactions(
    user_id: str,
    store: Store,
    type: TradeType | None = None,
    symbol: str | None = None,
    limit: int | None = None,
) -> list[TransactionRecord]:
    """
    Get a user's trades, most recent first.

    Args:
        user_id: Owner of the trades
        type: Only buys or only sells
        symbol: Only trades in this symbol
        limit: Maximum number of trades to return
    """
    return await store.list_transactions(user_id, trade_type=type, symbol=symbol, limit=limit)
