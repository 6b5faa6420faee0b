"""Trading store: the persistence boundary of the trading core."""

from papertrade.store.base import TradingStore
from papertrade.store.sql import SqlAlchemyStore

__all__ = ["TradingStore", "SqlAlchemyStore"]
