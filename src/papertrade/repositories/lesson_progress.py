"""Lesson progress repository."""

from sqlalchemy import select

from papertrade.models.lesson_progress import LessonProgress
from papertrade.repositories.base import BaseRepository


class LessonProgressRepository(BaseRepository[LessonProgress]):
    """Repository for LessonProgress model."""

    async def get_by_user_and_slug(self, user_id: str, lesson_slug: str) -> LessonProgress | None:
        """Get the completion record of one lesson, if any."""
        return await self._scalar_one_or_none(
            select(LessonProgress).where(
                LessonProgress.user_id == user_id,
                LessonProgress.lesson_slug == lesson_slug,
            )
        )

    async def list_by_user(self, user_id: str) -> list[LessonProgress]:
        """Get all lessons a user has completed, in completion order."""
        return await self._scalars(
            select(LessonProgress)
            .where(LessonProgress.user_id == user_id)
            .order_by(LessonProgress.completed_at.asc())
        )
