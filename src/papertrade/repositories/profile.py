"""Profile repository."""

from decimal import Decimal

from sqlalchemy import update

from papertrade.models.profile import Profile
from papertrade.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile model.

    Example:
        >>> repo = ProfileRepository(Profile, db)
        >>> profile = await repo.get("user-123")
    """

    async def update_score(self, user_id: str, score: Decimal) -> bool:
        """Overwrite the current confidence score.

        Args:
            user_id: Owner of the profile
            score: New score (one fractional digit)

        Returns:
            True if the profile exists and was updated

        Note:
            Caller must commit the transaction.
        """
        result = await self.db.execute(
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(confidence_score=score)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def update_assessment_score(self, user_id: str, score: Decimal) -> bool:
        """Store the onboarding seed and make it the current score.

        Returns:
            True if the profile exists and was updated

        Note:
            Caller must commit the transaction.
        """
        result = await self.db.execute(
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(assessment_score=score, confidence_score=score)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
