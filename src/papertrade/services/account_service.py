"""Service layer for opening accounts, onboarding and lesson completion."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from papertrade.core.config import settings
from papertrade.core.exceptions import (
    ConcurrencyError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from papertrade.schemas.profile import LessonCompletionResponse, ProfileResponse
from papertrade.schemas.records import ProfileRecord
from papertrade.services.scoring_service import ScoreRecalculator
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)

MAX_LESSON_SLUG_LENGTH = 100


async def get_profile_or_404(store: TradingStore, user_id: str) -> ProfileRecord:
    """Get a user's profile.

    Raises:
        NotFoundError: If the user has no profile
    """
    profile = await store.get_profile(user_id)
    if profile is None:
        raise NotFoundError(f"Profile for user {user_id} not found")
    return profile


async def get_profile_response(store: TradingStore, user_id: str) -> ProfileResponse:
    """Get a user's profile together with their cash balance."""
    profile = await get_profile_or_404(store, user_id)
    portfolio = await store.get_portfolio(user_id)
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        confidence_score=profile.confidence_score,
        created_at=profile.created_at,
        cash=portfolio.cash if portfolio else None,
    )


async def open_account(
    store: TradingStore,
    user_id: str,
    display_name: str | None = None,
    *,
    starting_cash: Decimal | None = None,
) -> ProfileResponse:
    """Create a profile and a portfolio funded with the starting cash.

    The confidence score stays empty until the onboarding assessment.

    Args:
        store: Trading store
        user_id: Identity issued by the auth provider
        display_name: Name shown in the UI
        starting_cash: Initial cash (default: STARTING_CASH)

    Returns:
        The new profile with its cash balance

    Raises:
        ConflictError: If the user already has an account

    Example:
        >>> profile = await open_account(store, "user-123", "Ada")
    """
    cash = starting_cash if starting_cash is not None else settings.STARTING_CASH

    async with store.atomic():
        if await store.get_profile(user_id) is not None:
            raise ConflictError(f"Account for user {user_id} already exists")
        profile = await store.create_profile(user_id, display_name)
        portfolio = await store.create_portfolio(user_id, cash)

    logger.info(f"Opened account for user {user_id} with ${cash}")
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        confidence_score=profile.confidence_score,
        created_at=profile.created_at,
        cash=portfolio.cash,
    )


async def complete_assessment(
    store: TradingStore,
    user_id: str,
    confidence_level: int,
    *,
    now: datetime | None = None,
) -> ProfileResponse:
    """Seed the confidence score from the onboarding self-rating.

    Raises:
        ValidationError: If confidence_level is outside 1..10
        NotFoundError: If the user has no profile
    """
    await get_profile_or_404(store, user_id)
    await ScoreRecalculator(store).seed_from_assessment(user_id, confidence_level, now=now)
    return await get_profile_response(store, user_id)


async def complete_lesson(
    store: TradingStore,
    user_id: str,
    lesson_slug: str,
    *,
    now: datetime | None = None,
) -> LessonCompletionResponse:
    """Record a completed lesson and refresh the confidence score.

    Completing a lesson again returns the original completion time.

    Raises:
        ValidationError: If the slug is empty or too long
        NotFoundError: If the user has no profile
    """
    slug = lesson_slug.strip()
    if not slug or len(slug) > MAX_LESSON_SLUG_LENGTH:
        raise ValidationError(
            f"Lesson slug must be 1 to {MAX_LESSON_SLUG_LENGTH} characters, got {lesson_slug!r}"
        )

    now = now or datetime.now(UTC)
    await get_profile_or_404(store, user_id)
    try:
        async with store.atomic():
            lesson = await store.mark_lesson_completed(user_id, slug, now)
    except ConcurrencyError:
        # A parallel request recorded it first; read back its record
        logger.info(f"Lesson {slug} of user {user_id} completed concurrently, re-reading")
        async with store.atomic():
            lesson = await store.mark_lesson_completed(user_id, slug, now)

    score = await ScoreRecalculator(store).recalculate_after_trade(user_id, now=now)
    logger.info(f"User {user_id} completed lesson {slug}")
    return LessonCompletionResponse(
        lesson_slug=lesson.lesson_slug,
        completed_at=lesson.completed_at,
        confidence_score=score,
    )
