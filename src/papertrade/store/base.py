"""Abstract trading store.

The trade engine, the scoring engine and the other services depend on this
interface only. ``SqlAlchemyStore`` is the production implementation; tests
inject an in-memory one.

Contract shared by every implementation:
    - Reads return fresh state, never a value cached from an earlier call.
    - Conditional writes (``expected_version``) raise ``ConcurrencyError``
      when the record changed since it was read.
    - Every call completes or fails within a bounded time; failures to reach
      the backend raise ``StoreUnavailableError``.
    - Writes made inside ``atomic()`` are committed together on a clean exit
      and discarded if the block raises.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from decimal import Decimal

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


class TradingStore(ABC):
    """Persistence operations the trading core needs."""

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager["TradingStore"]:
        """Unit of work: commit on success, discard everything on error."""
        ...

    # Profiles

    @abstractmethod
    async def get_profile(self, user_id: str) -> ProfileRecord | None:
        """Get a user's profile."""
        ...

    @abstractmethod
    async def create_profile(self, user_id: str, display_name: str | None) -> ProfileRecord:
        """Create a profile with no confidence score yet."""
        ...

    @abstractmethod
    async def update_profile_score(self, user_id: str, score: Decimal) -> None:
        """Overwrite the current confidence score; NotFoundError if no profile."""
        ...

    @abstractmethod
    async def set_assessment_score(self, user_id: str, score: Decimal) -> None:
        """Store the onboarding seed and make it the current score; NotFoundError if no profile."""
        ...

    @abstractmethod
    async def append_score_history(
        self, user_id: str, score: Decimal, recorded_at: datetime
    ) -> ScoreHistoryRecord:
        """Append one score history entry."""
        ...

    @abstractmethod
    async def list_score_history(self, user_id: str) -> list[ScoreHistoryRecord]:
        """Get the score history, oldest first."""
        ...

    # Portfolio

    @abstractmethod
    async def get_portfolio(self, user_id: str) -> PortfolioRecord | None:
        """Get a user's cash balance and its version."""
        ...

    @abstractmethod
    async def create_portfolio(self, user_id: str, cash: Decimal) -> PortfolioRecord:
        """Create the user's portfolio with its starting cash."""
        ...

    @abstractmethod
    async def update_portfolio_cash(
        self, user_id: str, cash: Decimal, *, expected_version: int
    ) -> PortfolioRecord:
        """Set cash if the portfolio is still at ``expected_version``."""
        ...

    # Holdings

    @abstractmethod
    async def get_holding(self, user_id: str, symbol: str) -> HoldingRecord | None:
        """Get the user's open position in a symbol."""
        ...

    @abstractmethod
    async def list_holdings(self, user_id: str) -> list[HoldingRecord]:
        """Get all open positions of a user, ordered by symbol."""
        ...

    @abstractmethod
    async def upsert_holding(
        self,
        user_id: str,
        symbol: str,
        *,
        shares: Decimal,
        average_price: Decimal,
        expected_version: int | None,
    ) -> HoldingRecord:
        """Insert a holding (``expected_version=None``) or update it conditionally.

        An insert that collides with an existing holding is a conflict too.
        """
        ...

    @abstractmethod
    async def delete_holding(self, user_id: str, symbol: str, *, expected_version: int) -> None:
        """Delete a holding if it is still at ``expected_version``."""
        ...

    # Transactions

    @abstractmethod
    async def insert_transaction(self, record: TransactionCreate) -> TransactionRecord:
        """Append a trade to the transaction log."""
        ...

    @abstractmethod
    async def list_transactions(
        self,
        user_id: str,
        *,
        trade_type: TradeType | None = None,
        symbol: str | None = None,
        limit: int | None = None,
    ) -> list[TransactionRecord]:
        """Get the user's trades, most recent first."""
        ...

    # Lessons

    @abstractmethod
    async def list_completed_lessons(self, user_id: str) -> list[LessonCompletionRecord]:
        """Get the lessons the user has completed."""
        ...

    @abstractmethod
    async def mark_lesson_completed(
        self, user_id: str, lesson_slug: str, completed_at: datetime
    ) -> LessonCompletionRecord:
        """Record a completed lesson; completing it again returns the first record.

        Raises ConcurrencyError if another writer recorded it in the meantime.
        """
        ...

    # Market data

    @abstractmethod
    async def get_market_quotes(self, symbols: Iterable[str]) -> dict[str, MarketQuoteRecord]:
        """Get current quotes keyed by symbol; unknown symbols are absent."""
        ...


__all__ = ["TradingStore"]
