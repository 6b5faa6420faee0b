"""SQLAlchemy implementation of the trading store."""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.core.config import settings
from papertrade.core.exceptions import (
    ConcurrencyError,
    ConflictError,
    NotFoundError,
    StoreUnavailableError,
)
from papertrade.db.session import transactional
from papertrade.models.holding import Holding
from papertrade.models.lesson_progress import LessonProgress
from papertrade.models.market_quote import MarketQuote
from papertrade.models.portfolio import Portfolio
from papertrade.models.profile import Profile
from papertrade.models.score_history import ScoreHistory
from papertrade.models.transaction import TradeType, Transaction
from papertrade.repositories import (
    HoldingRepository,
    LessonProgressRepository,
    MarketQuoteRepository,
    PortfolioRepository,
    ProfileRepository,
    ScoreHistoryRepository,
    TransactionRepository,
)
from papertrade.schemas.records import (
    HoldingRecord,
    LessonCompletionRecord,
    MarketQuoteRecord,
    PortfolioRecord,
    ProfileRecord,
    ScoreHistoryRecord,
    TransactionCreate,
    TransactionRecord,
)
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)

# Driver-level failures that mean "could not talk to the database"
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


class SqlAlchemyStore(TradingStore):
    """Trading store backed by an async SQLAlchemy session.

    One instance wraps one session (one request). Every call runs under
    ``asyncio.timeout`` and translates driver failures into
    ``StoreUnavailableError``.

    Example:
        >>> store = SqlAlchemyStore(db)
        >>> async with store.atomic():
        ...     portfolio = await store.get_portfolio("user-123")
    """

    def __init__(self, db: AsyncSession, *, timeout: float | None = None):
        """Initialize the store.

        Args:
            db: Async database session
            timeout: Seconds allowed per store call (default: STORE_TIMEOUT_SECONDS)
        """
        self.db = db
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS
        self.profiles = ProfileRepository(Profile, db)
        self.portfolios = PortfolioRepository(Portfolio, db)
        self.holdings = HoldingRepository(Holding, db)
        self.transactions = TransactionRepository(Transaction, db)
        self.score_history = ScoreHistoryRepository(ScoreHistory, db)
        self.lessons = LessonProgressRepository(LessonProgress, db)
        self.quotes = MarketQuoteRepository(MarketQuote, db)

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        """Bound one store call in time and translate I/O failures."""
        try:
            async with asyncio.timeout(self.timeout):
                yield
        except TimeoutError as e:
            logger.error(f"Store operation '{operation}' timed out after {self.timeout}s")
            raise StoreUnavailableError(
                f"Store operation '{operation}' timed out after {self.timeout}s"
            ) from e
        except _UNAVAILABLE_ERRORS as e:
            logger.error(f"Store operation '{operation}' failed: {type(e).__name__}: {e}")
            raise StoreUnavailableError(f"Store operation '{operation}' failed") from e

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["SqlAlchemyStore"]:
        """Run the block in one database transaction.

        The commit is bounded by the same timeout as every other store call.
        """
        try:
            async with transactional(self.db, commit=False):
                yield self
                async with self._guard("commit"):
                    await self.db.commit()
        except _UNAVAILABLE_ERRORS as e:
            raise StoreUnavailableError("Could not commit to the store") from e

    # Profiles

    async def get_profile(self, user_id: str) -> ProfileRecord | None:
        async with self._guard("get_profile"):
            profile = await self.profiles.get(user_id)
        return ProfileRecord.model_validate(profile) if profile else None

    async def create_profile(self, user_id: str, display_name: str | None) -> ProfileRecord:
        try:
            async with self._guard("create_profile"):
                profile = await self.profiles.create(
                    obj_in={"user_id": user_id, "display_name": display_name}
                )
        except IntegrityError as e:
            raise ConflictError(f"Account for user {user_id} already exists") from e
        return ProfileRecord.model_validate(profile)

    async def update_profile_score(self, user_id: str, score: Decimal) -> None:
        async with self._guard("update_profile_score"):
            updated = await self.profiles.update_score(user_id, score)
        if not updated:
            raise NotFoundError(f"Profile for user {user_id} not found")

    async def set_assessment_score(self, user_id: str, score: Decimal) -> None:
        async with self._guard("set_assessment_score"):
            updated = await self.profiles.update_assessment_score(user_id, score)
        if not updated:
            raise NotFoundError(f"Profile for user {user_id} not found")

    async def append_score_history(
        self, user_id: str, score: Decimal, recorded_at: datetime
    ) -> ScoreHistoryRecord:
        async with self._guard("append_score_history"):
            entry = await self.score_history.create(
                obj_in={"user_id": user_id, "score": score, "recorded_at": recorded_at}
            )
        return ScoreHistoryRecord.model_validate(entry)

    async def list_score_history(self, user_id: str) -> list[ScoreHistoryRecord]:
        async with self._guard("list_score_history"):
            entries = await self.score_history.list_by_user(user_id)
        return [ScoreHistoryRecord.model_validate(entry) for entry in entries]

    # Portfolio

    async def get_portfolio(self, user_id: str) -> PortfolioRecord | None:
        async with self._guard("get_portfolio"):
            portfolio = await self.portfolios.get(user_id)
        return PortfolioRecord.model_validate(portfolio) if portfolio else None

    async def create_portfolio(self, user_id: str, cash: Decimal) -> PortfolioRecord:
        async with self._guard("create_portfolio"):
            portfolio = await self.portfolios.create(
                obj_in={"user_id": user_id, "cash": cash, "version": 1}
            )
        return PortfolioRecord.model_validate(portfolio)

    async def update_portfolio_cash(
        self, user_id: str, cash: Decimal, *, expected_version: int
    ) -> PortfolioRecord:
        async with self._guard("update_portfolio_cash"):
            updated = await self.portfolios.update_cash_if_version(
                user_id, cash, expected_version
            )
        if not updated:
            raise ConcurrencyError(
                f"Portfolio of user {user_id} changed since version {expected_version}"
            )
        return PortfolioRecord(user_id=user_id, cash=cash, version=expected_version + 1)

    # Holdings

    async def get_holding(self, user_id: str, symbol: str) -> HoldingRecord | None:
        async with self._guard("get_holding"):
            holding = await self.holdings.get_by_user_and_symbol(user_id, symbol)
        return HoldingRecord.model_validate(holding) if holding else None

    async def list_holdings(self, user_id: str) -> list[HoldingRecord]:
        async with self._guard("list_holdings"):
            holdings = await self.holdings.list_by_user(user_id)
        return [HoldingRecord.model_validate(holding) for holding in holdings]

    async def upsert_holding(
        self,
        user_id: str,
        symbol: str,
        *,
        shares: Decimal,
        average_price: Decimal,
        expected_version: int | None,
    ) -> HoldingRecord:
        if expected_version is None:
            try:
                async with self._guard("insert_holding"):
                    holding = await self.holdings.create(
                        obj_in={
                            "user_id": user_id,
                            "symbol": symbol,
                            "shares": shares,
                            "average_price": average_price,
                            "version": 1,
                        }
                    )
            except IntegrityError as e:
                raise ConcurrencyError(
                    f"Holding {symbol} of user {user_id} was opened concurrently"
                ) from e
            return HoldingRecord.model_validate(holding)

        async with self._guard("update_holding"):
            updated = await self.holdings.update_if_version(
                user_id,
                symbol,
                shares=shares,
                average_price=average_price,
                expected_version=expected_version,
            )
        if not updated:
            raise ConcurrencyError(
                f"Holding {symbol} of user {user_id} changed since version {expected_version}"
            )
        return HoldingRecord(
            user_id=user_id,
            symbol=symbol,
            shares=shares,
            average_price=average_price,
            version=expected_version + 1,
        )

    async def delete_holding(self, user_id: str, symbol: str, *, expected_version: int) -> None:
        async with self._guard("delete_holding"):
            deleted = await self.holdings.delete_if_version(user_id, symbol, expected_version)
        if not deleted:
            raise ConcurrencyError(
                f"Holding {symbol} of user {user_id} changed since version {expected_version}"
            )

    # Transactions

    async def insert_transaction(self, record: TransactionCreate) -> TransactionRecord:
        async with self._guard("insert_transaction"):
            transaction = await self.transactions.create(obj_in=record)
        return TransactionRecord.model_validate(transaction)

    async def list_transactions(
        self,
        user_id: str,
        *,
        trade_type: TradeType | None = None,
        symbol: str | None = None,
        limit: int | None = None,
    ) -> list[TransactionRecord]:
        async with self._guard("list_transactions"):
            transactions = await self.transactions.list_by_user(
                user_id, trade_type=trade_type, symbol=symbol, limit=limit
            )
        return [TransactionRecord.model_validate(t) for t in transactions]

    # Lessons

    async def list_completed_lessons(self, user_id: str) -> list[LessonCompletionRecord]:
        async with self._guard("list_completed_lessons"):
            lessons = await self.lessons.list_by_user(user_id)
        return [LessonCompletionRecord.model_validate(lesson) for lesson in lessons]

    async def mark_lesson_completed(
        self, user_id: str, lesson_slug: str, completed_at: datetime
    ) -> LessonCompletionRecord:
        async with self._guard("mark_lesson_completed"):
            lesson = await self.lessons.get_by_user_and_slug(user_id, lesson_slug)
            if lesson is None:
                try:
                    lesson = await self.lessons.create(
                        obj_in={
                            "user_id": user_id,
                            "lesson_slug": lesson_slug,
                            "completed_at": completed_at,
                        }
                    )
                except IntegrityError as e:
                    raise ConcurrencyError(
                        f"Lesson {lesson_slug} of user {user_id} was completed concurrently"
                    ) from e
        return LessonCompletionRecord.model_validate(lesson)

    # Market data

    async def get_market_quotes(self, symbols: Iterable[str]) -> dict[str, MarketQuoteRecord]:
        async with self._guard("get_market_quotes"):
            quotes = await self.quotes.get_by_symbols(symbols)
        return {quote.symbol: MarketQuoteRecord.model_validate(quote) for quote in quotes}
