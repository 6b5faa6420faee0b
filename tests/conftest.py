"""Pytest fixtures for testing."""

import copy
import uuid
from collections.abc import AsyncGenerator, AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from main import app
from papertrade.core.exceptions import ConcurrencyError, ConflictError, NotFoundError
from papertrade.core.rate_limit import limiter
from papertrade.db.base import Base
from papertrade.db.session import get_db
from papertrade.models.market_quote import MarketQuote
from papertrade.models.transaction import TradeType
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
from papertrade.store.sql import SqlAlchemyStore

# Test database URL (SQLite in-memory for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class InMemoryStore(TradingStore):
    """Trading store kept in dictionaries.

    ``atomic()`` snapshots the state and restores it if the block raises, so
    rollback behaves like the SQL store's transaction.
    """

    def __init__(self) -> None:
        self.profiles: dict[str, ProfileRecord] = {}
        self.portfolios: dict[str, PortfolioRecord] = {}
        self.holdings: dict[tuple[str, str], HoldingRecord] = {}
        self.transactions: list[TransactionRecord] = []
        self.score_history: list[ScoreHistoryRecord] = []
        self.lessons: dict[tuple[str, str], LessonCompletionRecord] = {}
        self.quotes: dict[str, MarketQuoteRecord] = {}
        self.commits = 0
        self.rollbacks = 0

    def _state(self) -> tuple:
        return (
            self.profiles,
            self.portfolios,
            self.holdings,
            self.transactions,
            self.score_history,
            self.lessons,
        )

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["InMemoryStore"]:
        saved = copy.deepcopy(self._state())
        try:
            yield self
        except Exception:
            (
                self.profiles,
                self.portfolios,
                self.holdings,
                self.transactions,
                self.score_history,
                self.lessons,
            ) = saved
            self.rollbacks += 1
            raise
        self.commits += 1

    def add_quote(self, symbol: str, price: str, change: str = "0", name: str | None = None):
        self.quotes[symbol] = MarketQuoteRecord(
            symbol=symbol,
            name=name,
            current_price=Decimal(price),
            change=Decimal(change),
            updated_at=datetime.now(UTC),
        )

    # Profiles

    async def get_profile(self, user_id: str) -> ProfileRecord | None:
        return self.profiles.get(user_id)

    async def create_profile(self, user_id: str, display_name: str | None) -> ProfileRecord:
        if user_id in self.profiles:
            raise ConflictError(f"Account for user {user_id} already exists")
        profile = ProfileRecord(
            user_id=user_id, display_name=display_name, created_at=datetime.now(UTC)
        )
        self.profiles[user_id] = profile
        return profile

    async def update_profile_score(self, user_id: str, score: Decimal) -> None:
        if user_id not in self.profiles:
            raise NotFoundError(f"Profile for user {user_id} not found")
        self.profiles[user_id] = self.profiles[user_id].model_copy(
            update={"confidence_score": score}
        )

    async def set_assessment_score(self, user_id: str, score: Decimal) -> None:
        if user_id not in self.profiles:
            raise NotFoundError(f"Profile for user {user_id} not found")
        self.profiles[user_id] = self.profiles[user_id].model_copy(
            update={"assessment_score": score, "confidence_score": score}
        )

    async def append_score_history(
        self, user_id: str, score: Decimal, recorded_at: datetime
    ) -> ScoreHistoryRecord:
        entry = ScoreHistoryRecord(user_id=user_id, score=score, recorded_at=recorded_at)
        self.score_history.append(entry)
        return entry

    async def list_score_history(self, user_id: str) -> list[ScoreHistoryRecord]:
        return sorted(
            (h for h in self.score_history if h.user_id == user_id),
            key=lambda h: h.recorded_at,
        )

    # Portfolio

    async def get_portfolio(self, user_id: str) -> PortfolioRecord | None:
        return self.portfolios.get(user_id)

    async def create_portfolio(self, user_id: str, cash: Decimal) -> PortfolioRecord:
        portfolio = PortfolioRecord(user_id=user_id, cash=cash, version=1)
        self.portfolios[user_id] = portfolio
        return portfolio

    async def update_portfolio_cash(
        self, user_id: str, cash: Decimal, *, expected_version: int
    ) -> PortfolioRecord:
        current = self.portfolios.get(user_id)
        if current is None or current.version != expected_version:
            raise ConcurrencyError(f"Portfolio of user {user_id} changed")
        updated = PortfolioRecord(user_id=user_id, cash=cash, version=expected_version + 1)
        self.portfolios[user_id] = updated
        return updated

    # Holdings

    async def get_holding(self, user_id: str, symbol: str) -> HoldingRecord | None:
        return self.holdings.get((user_id, symbol.upper()))

    async def list_holdings(self, user_id: str) -> list[HoldingRecord]:
        return sorted(
            (h for (owner, _), h in self.holdings.items() if owner == user_id),
            key=lambda h: h.symbol,
        )

    async def upsert_holding(
        self,
        user_id: str,
        symbol: str,
        *,
        shares: Decimal,
        average_price: Decimal,
        expected_version: int | None,
    ) -> HoldingRecord:
        key = (user_id, symbol)
        current = self.holdings.get(key)
        if expected_version is None:
            if current is not None:
                raise ConcurrencyError(f"Holding {symbol} was opened concurrently")
            version = 1
        else:
            if current is None or current.version != expected_version:
                raise ConcurrencyError(f"Holding {symbol} changed")
            version = expected_version + 1
        holding = HoldingRecord(
            user_id=user_id,
            symbol=symbol,
            shares=shares,
            average_price=average_price,
            version=version,
        )
        self.holdings[key] = holding
        return holding

    async def delete_holding(self, user_id: str, symbol: str, *, expected_version: int) -> None:
        current = self.holdings.get((user_id, symbol))
        if current is None or current.version != expected_version:
            raise ConcurrencyError(f"Holding {symbol} changed")
        del self.holdings[(user_id, symbol)]

    # Transactions

    async def insert_transaction(self, record: TransactionCreate) -> TransactionRecord:
        transaction = TransactionRecord(id=uuid.uuid4(), **record.model_dump())
        self.transactions.append(transaction)
        return transaction

    async def list_transactions(
        self,
        user_id: str,
        *,
        trade_type: TradeType | None = None,
        symbol: str | None = None,
        limit: int | None = None,
    ) -> list[TransactionRecord]:
        matches = [
            t
            for t in reversed(self.transactions)
            if t.user_id == user_id
            and (trade_type is None or t.type == trade_type)
            and (symbol is None or t.symbol == symbol.upper())
        ]
        return matches[:limit] if limit is not None else matches

    # Lessons

    async def list_completed_lessons(self, user_id: str) -> list[LessonCompletionRecord]:
        return [lesson for (owner, _), lesson in self.lessons.items() if owner == user_id]

    async def mark_lesson_completed(
        self, user_id: str, lesson_slug: str, completed_at: datetime
    ) -> LessonCompletionRecord:
        key = (user_id, lesson_slug)
        if key not in self.lessons:
            self.lessons[key] = LessonCompletionRecord(
                user_id=user_id, lesson_slug=lesson_slug, completed_at=completed_at
            )
        return self.lessons[key]

    # Market data

    async def get_market_quotes(self, symbols: Iterable[str]) -> dict[str, MarketQuoteRecord]:
        wanted = {symbol.upper() for symbol in symbols}
        return {s: q for s, q in self.quotes.items() if s in wanted}


@pytest.fixture(autouse=True)
def reset_limiter():
    """Reset rate limiter storage so trade tests do not leak into each other."""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_db(test_engine) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def memory_store() -> InMemoryStore:
    """Empty in-memory trading store."""
    return InMemoryStore()


@pytest.fixture
def sql_store(test_db: AsyncSession) -> SqlAlchemyStore:
    """SQL trading store over the test database."""
    return SqlAlchemyStore(test_db)


@pytest_asyncio.fixture(scope="function")
async def market_quotes(test_db: AsyncSession) -> list[MarketQuote]:
    """Quotes for AAPL, MSFT and VOO, as the ingestion job would write them."""
    quotes = [
        MarketQuote(
            symbol="AAPL",
            name="Apple Inc.",
            current_price=Decimal("180.00"),
            change=Decimal("2.00"),
            change_percent=Decimal("1.12"),
        ),
        MarketQuote(
            symbol="MSFT",
            name="Microsoft Corporation",
            current_price=Decimal("400.00"),
            change=Decimal("-4.00"),
            change_percent=Decimal("-0.99"),
        ),
        MarketQuote(
            symbol="VOO",
            name="Vanguard S&P 500 ETF",
            current_price=Decimal("450.00"),
            change=Decimal("1.50"),
            change_percent=Decimal("0.33"),
        ),
    ]
    test_db.add_all(quotes)
    await test_db.commit()
    return quotes
