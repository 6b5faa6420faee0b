"""Base repository with common CRUD operations.

Provides generic database operations that can be inherited by model-specific
repositories. Uses SQLAlchemy 2.0's async API with proper type hints.

Supports both Pydantic models and dictionaries for create operations,
with automatic validation for Pydantic models.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.db.base import Base

# Generic type for SQLAlchemy models
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations.

    Repositories do NOT manage transactions - the caller is responsible for
    commit/rollback.

    Reads always refresh already-loaded instances from the database
    (``populate_existing``). Versioned rows are updated with bulk
    ``UPDATE ... WHERE version = :expected`` statements that bypass the
    identity map, so a cached instance may otherwise be stale.

    Type Parameters:
        ModelType: The SQLAlchemy model class

    Example:
        >>> class PortfolioRepository(BaseRepository[Portfolio]):
        ...     pass
        >>>
        >>> repo = PortfolioRepository(Portfolio, db)
        >>> portfolio = await repo.get("user-123")
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """Initialize repository.

        Args:
            model: The SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def get(self, id: Any) -> ModelType | None:
        """Get a single record by primary key.

        Args:
            id: Primary key value

        Returns:
            Model instance if found, None otherwise
        """
        return await self.db.get(self.model, id, populate_existing=True)

    async def create(self, *, obj_in: BaseModel | dict[str, Any]) -> ModelType:
        """Create a new record with Pydantic validation support.

        Args:
            obj_in: Pydantic model or dictionary of field names and values.

        Returns:
            Created model instance (not yet committed)

        Note:
            Caller must commit the transaction.

        Example:
            >>> holding = await repo.create(
            ...     obj_in={"user_id": "u1", "symbol": "AAPL", "shares": 10, "average_price": 150}
            ... )
            >>> await db.commit()
        """
        if isinstance(obj_in, BaseModel):
            create_data = obj_in.model_dump(exclude_unset=True)
        else:
            create_data = obj_in

        db_obj = self.model(**create_data)
        self.db.add(db_obj)
        await self.db.flush()
        await self.db.refresh(db_obj)
        return db_obj

    async def _scalars(self, statement: Select) -> list[ModelType]:
        """Execute a select and return fresh model instances."""
        result = await self.db.execute(statement.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def _scalar_one_or_none(self, statement: Select) -> ModelType | None:
        """Execute a select expected to match at most one row."""
        result = await self.db.execute(statement.execution_options(populate_existing=True))
        return result.scalar_one_or_none()
