"""Portfolio endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Query

from papertrade.core.deps import Store
from papertrade.schemas.portfolio import (
    AffordableShares,
    LossScenarios,
    PortfolioSnapshot,
    PositionSizeAssessment,
)
from papertrade.services import trading_service
from papertrade.services.portfolio_service import load_portfolio_snapshot

router = APIRouter()


@router.get("/portfolio", response_model=PortfolioSnapshot)
async def get_portfolio(user_id: str, store: Store) -> PortfolioSnapshot:
    """
    Get the portfolio valued at current market quotes.

    Holdings without a quote are listed as stale and left out of the totals.
    """
    return await load_portfolio_snapshot(store, user_id)


@router.get("/portfolio/affordability/{symbol}", response_model=AffordableShares)
async def get_affordability(user_id: str, symbol: str, store: Store) -> AffordableShares:
    """How many shares of a symbol the cash balance buys at the current quote."""
    return await trading_service.get_affordable_shares(store, user_id, symbol)


@router.get("/portfolio/position-size/{symbol}", response_model=PositionSizeAssessment)
async def get_position_size(
    user_id: str,
    symbol: str,
    store: Store,
    shares: Decimal = Query(..., gt=0),
) -> PositionSizeAssessment:
    """How large buying ``shares`` of a symbol would be within the portfolio."""
    return await trading_service.assess_trade_size(store, user_id, symbol, shares)


@router.get("/portfolio/loss-scenarios/{symbol}", response_model=LossScenarios)
async def get_loss_scenarios(
    user_id: str,
    symbol: str,
    store: Store,
    shares: Decimal = Query(..., gt=0),
) -> LossScenarios:
    """What buying ``shares`` of a symbol would be worth after 10%, 20% and 50% drops."""
    return await trading_service.get_loss_scenarios(store, user_id, symbol, shares)
