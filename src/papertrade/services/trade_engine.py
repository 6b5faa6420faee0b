"""Trade execution: how a buy or sell mutates cash, holdings and the trade log.

Every attempt re-reads the portfolio and the holding, validates against that
fresh state and writes with compare-and-swap on the row versions, all inside
one ``store.atomic()`` block. A lost race raises ``ConcurrencyError``, the
block rolls back and the whole trade is retried from the reads.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from decimal import Decimal

from papertrade.core.config import settings
from papertrade.core.exceptions import (
    ConcurrencyError,
    InsufficientFundsError,
    InsufficientSharesError,
    NoPositionError,
    NotFoundError,
)
from papertrade.models.transaction import TradeType
from papertrade.schemas.records import PortfolioRecord, TransactionCreate
from papertrade.schemas.trade import TradeResult
from papertrade.services.calculations import (
    money,
    percent,
    realized_profit_loss,
    trade_total,
    validate_trade_inputs,
    weighted_average_price,
)
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)


class TradeEngine:
    """Executes buys and sells against an injected trading store.

    Example:
        >>> engine = TradeEngine(store)
        >>> result = await engine.execute_buy("user-123", "AAPL", Decimal("10"), Decimal("150"))
        >>> result.cash
        Decimal('8500.000000')
    """

    def __init__(self, store: TradingStore, *, retries: int | None = None):
        """Initialize the engine.

        Args:
            store: Trading store used for every read and write
            retries: Whole-trade retries after a conflict (default: TRADE_CONFLICT_RETRIES)
        """
        self.store = store
        self.retries = retries if retries is not None else settings.TRADE_CONFLICT_RETRIES

    async def execute_buy(
        self, user_id: str, symbol: str, shares: Decimal, price: Decimal
    ) -> TradeResult:
        """Buy shares with virtual cash.

        Args:
            user_id: Owner of the portfolio
            symbol: Security symbol (normalized to uppercase)
            shares: Number of shares, fractional allowed
            price: Execution price per share

        Returns:
            TradeResult with the new cash balance, holding and transaction

        Raises:
            ValidationError: Non-positive shares or price, or empty symbol
            NotFoundError: The user has no portfolio
            InsufficientFundsError: shares x price exceeds available cash
            ConcurrencyError: Still conflicting after the configured retries
            StoreUnavailableError: The store timed out or is unreachable
        """
        symbol = validate_trade_inputs(symbol, shares, price)
        return await self._with_retries(
            f"buy {shares} {symbol} for {user_id}",
            lambda: self._buy(user_id, symbol, shares, price),
        )

    async def execute_sell(
        self, user_id: str, symbol: str, shares: Decimal, price: Decimal
    ) -> TradeResult:
        """Sell shares of an existing position.

        Profit or loss is realized against the position's average cost. The
        average cost itself never changes on a sell; a position sold down to
        zero shares is deleted.

        Raises:
            ValidationError: Non-positive shares or price, or empty symbol
            NotFoundError: The user has no portfolio
            NoPositionError: The user does not hold the symbol
            InsufficientSharesError: Selling more shares than held
            ConcurrencyError: Still conflicting after the configured retries
            StoreUnavailableError: The store timed out or is unreachable
        """
        symbol = validate_trade_inputs(symbol, shares, price)
        return await self._with_retries(
            f"sell {shares} {symbol} for {user_id}",
            lambda: self._sell(user_id, symbol, shares, price),
        )

    async def _with_retries(
        self, description: str, attempt: Callable[[], Awaitable[TradeResult]]
    ) -> TradeResult:
        for attempt_number in range(self.retries + 1):
            try:
                async with self.store.atomic():
                    return await attempt()
            except ConcurrencyError:
                if attempt_number >= self.retries:
                    logger.warning(
                        f"Giving up on {description} after {attempt_number + 1} attempts"
                    )
                    raise
                logger.info(f"Conflict during {description}, retrying")
        raise AssertionError("unreachable")

    async def _load_portfolio(self, user_id: str) -> PortfolioRecord:
        portfolio = await self.store.get_portfolio(user_id)
        if portfolio is None:
            raise NotFoundError(f"Portfolio for user {user_id} not found")
        return portfolio

    async def _buy(self, user_id: str, symbol: str, shares: Decimal, price: Decimal) -> TradeResult:
        portfolio = await self._load_portfolio(user_id)
        holding = await self.store.get_holding(user_id, symbol)

        total = trade_total(shares, price)
        if total > portfolio.cash:
            raise InsufficientFundsError(
                f"Insufficient funds: need ${total}, have ${portfolio.cash}"
            )

        updated = await self.store.update_portfolio_cash(
            user_id, portfolio.cash - total, expected_version=portfolio.version
        )

        if holding is None:
            new_holding = await self.store.upsert_holding(
                user_id,
                symbol,
                shares=shares,
                average_price=money(price),
                expected_version=None,
            )
        else:
            new_holding = await self.store.upsert_holding(
                user_id,
                symbol,
                shares=holding.shares + shares,
                average_price=weighted_average_price(
                    holding.shares, holding.average_price, shares, price
                ),
                expected_version=holding.version,
            )

        transaction = await self.store.insert_transaction(
            TransactionCreate(
                user_id=user_id,
                symbol=symbol,
                type=TradeType.BUY,
                shares=shares,
                price=price,
                total=total,
                profit_loss=None,
                timestamp=datetime.now(UTC),
            )
        )

        logger.info(f"User {user_id} bought {shares} {symbol} @ {price} (total {total})")
        return TradeResult(
            type=TradeType.BUY,
            symbol=symbol,
            shares=shares,
            price=price,
            total=total,
            cash=updated.cash,
            holding=new_holding,
            transaction=transaction,
        )

    async def _sell(
        self, user_id: str, symbol: str, shares: Decimal, price: Decimal
    ) -> TradeResult:
        portfolio = await self._load_portfolio(user_id)
        holding = await self.store.get_holding(user_id, symbol)

        if holding is None:
            raise NoPositionError(f"You do not own any {symbol}")
        if shares > holding.shares:
            raise InsufficientSharesError(
                f"Insufficient shares: trying to sell {shares} {symbol}, own {holding.shares}"
            )

        total = trade_total(shares, price)
        profit_loss = realized_profit_loss(shares, price, holding.average_price)
        profit_loss_percent = percent(profit_loss, shares * holding.average_price)

        updated = await self.store.update_portfolio_cash(
            user_id, portfolio.cash + total, expected_version=portfolio.version
        )

        remaining = holding.shares - shares
        if remaining == 0:
            await self.store.delete_holding(user_id, symbol, expected_version=holding.version)
            new_holding = None
        else:
            new_holding = await self.store.upsert_holding(
                user_id,
                symbol,
                shares=remaining,
                average_price=holding.average_price,
                expected_version=holding.version,
            )

        transaction = await self.store.insert_transaction(
            TransactionCreate(
                user_id=user_id,
                symbol=symbol,
                type=TradeType.SELL,
                shares=shares,
                price=price,
                total=total,
                profit_loss=profit_loss,
                timestamp=datetime.now(UTC),
            )
        )

        logger.info(
            f"User {user_id} sold {shares} {symbol} @ {price} (total {total}, P/L {profit_loss})"
        )
        return TradeResult(
            type=TradeType.SELL,
            symbol=symbol,
            shares=shares,
            price=price,
            total=total,
            profit_loss=profit_loss,
            profit_loss_percent=profit_loss_percent,
            cash=updated.cash,
            holding=new_holding,
            transaction=transaction,
        )
