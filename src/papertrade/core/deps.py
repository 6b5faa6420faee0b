"""Dependencies for FastAPI routes."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.db.session import get_db
from papertrade.store.base import TradingStore
from papertrade.store.sql import SqlAlchemyStore


async def get_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TradingStore:
    """
    Get the trading store for the current request.

    Args:
        db: Database session (injected)

    Returns:
        A SqlAlchemyStore bound to the request's session
    """
    return SqlAlchemyStore(db)


# Type alias for cleaner dependency injection
Store = Annotated[TradingStore, Depends(get_store)]
