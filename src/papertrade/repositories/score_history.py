"""Score history repository."""

from sqlalchemy import select

from papertrade.models.score_history import ScoreHistory
from papertrade.repositories.base import BaseRepository


class ScoreHistoryRepository(BaseRepository[ScoreHistory]):
    """Repository for ScoreHistory model."""

    async def list_by_user(self, user_id: str) -> list[ScoreHistory]:
        """Get a user's score history, oldest first (chart order)."""
        return await self._scalars(
            select(ScoreHistory)
            .where(ScoreHistory.user_id == user_id)
            .order_by(ScoreHistory.recorded_at.asc())
        )
