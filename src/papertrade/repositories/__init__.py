"""Repository layer for database operations.

This package provides the repository pattern implementation, centralizing
all database access logic. The SQL trading store composes these
repositories; services never touch them directly.

Repositories:
    - BaseRepository: Generic get/create for any model
    - ProfileRepository: Profiles and confidence score updates
    - PortfolioRepository: Cash balance with compare-and-swap updates
    - HoldingRepository: Open positions with versioned update/delete
    - TransactionRepository: Append-only trade log queries
    - ScoreHistoryRepository: Confidence score history
    - LessonProgressRepository: Completed lessons
    - MarketQuoteRepository: Read-only market quotes

Usage:
    >>> from papertrade.repositories import HoldingRepository
    >>> from papertrade.models.holding import Holding
    >>>
    >>> repo = HoldingRepository(Holding, db)
    >>> holding = await repo.get_by_user_and_symbol("user-123", "AAPL")
"""

from papertrade.repositories.base import BaseRepository
from papertrade.repositories.holding import HoldingRepository
from papertrade.repositories.lesson_progress import LessonProgressRepository
from papertrade.repositories.market_quote import MarketQuoteRepository
from papertrade.repositories.portfolio import PortfolioRepository
from papertrade.repositories.profile import ProfileRepository
from papertrade.repositories.score_history import ScoreHistoryRepository
from papertrade.repositories.transaction import TransactionRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "PortfolioRepository",
    "HoldingRepository",
    "TransactionRepository",
    "ScoreHistoryRepository",
    "LessonProgressRepository",
    "MarketQuoteRepository",
]
