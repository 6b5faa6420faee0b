"""Lesson completion endpoints."""

from fastapi import APIRouter

from papertrade.core.deps import Store
from papertrade.schemas.profile import LessonCompletionResponse
from papertrade.services import account_service

router = APIRouter()


@router.get("/lessons", response_model=list[LessonCompletionResponse])
async def list_completed_lessons(user_id: str, store: Store) -> list[LessonCompletionResponse]:
    """Get the lessons a user has completed."""
    lessons = await store.list_completed_lessons(user_id)
    return [
        LessonCompletionResponse(lesson_slug=lesson.lesson_slug, completed_at=lesson.completed_at)
        for lesson in lessons
    ]


@router.post("/lessons/{lesson_slug}/complete", response_model=LessonCompletionResponse)
async def complete_lesson(
    user_id: str, lesson_slug: str, store: Store
) -> LessonCompletionResponse:
    """
    Mark a lesson as completed and refresh the confidence score.

    Completing the same lesson twice keeps the first completion time.
    """
    return await account_service.complete_lesson(store, user_id, lesson_slug)
