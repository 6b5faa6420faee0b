"""Confidence score: a bounded 0-10 engagement metric derived from activity.

The score starts from the onboarding assessment (or a default) and grows with
trading, diversification, lessons, a first profitable sale and account age.
``compute_score`` and ``get_score_breakdown`` share one computation, so the
breakdown shown to the user always adds up to the stored score.
"""

import asyncio
import logging
import weakref
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from papertrade.core.constants import ScoringConstants
from papertrade.core.exceptions import NotFoundError, ValidationError
from papertrade.models.transaction import TradeType
from papertrade.schemas.records import (
    HoldingRecord,
    LessonCompletionRecord,
    ProfileRecord,
    TransactionRecord,
)
from papertrade.schemas.score import ScoreBreakdown
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def round_score(value: Decimal) -> Decimal:
    """Round to one decimal (half up) and clamp into [0, 10]."""
    rounded = value.quantize(ScoringConstants.SCORE_QUANTUM, rounding=ROUND_HALF_UP)
    return min(max(rounded, ScoringConstants.SCORE_MIN), ScoringConstants.SCORE_MAX)


def seed_score_from_assessment(raw: int) -> Decimal:
    """Turn the onboarding self-rating into the starting confidence score.

    Args:
        raw: Self-rated confidence from 1 to 10

    Returns:
        ``raw * 0.7 + 2`` rounded to one decimal (2.7 to 9.0)

    Raises:
        ValidationError: If raw is outside 1..10
    """
    low, high = ScoringConstants.ASSESSMENT_MIN, ScoringConstants.ASSESSMENT_MAX
    if isinstance(raw, bool) or not low <= raw <= high:
        raise ValidationError(f"Confidence level must be between {low} and {high}, got {raw}")
    return round_score(
        Decimal(raw) * ScoringConstants.ASSESSMENT_WEIGHT + ScoringConstants.ASSESSMENT_OFFSET
    )


def account_age_days(created_at: datetime | None, now: datetime) -> int:
    """Whole days since the account was created, 0 when unknown."""
    if created_at is None:
        return 0
    if created_at.tzinfo is None:
        # SQLite hands back naive datetimes; they are stored as UTC
        created_at = created_at.replace(tzinfo=UTC)
    return max((now - created_at).days, 0)


def get_score_breakdown(
    profile: ProfileRecord,
    transactions: Sequence[TransactionRecord],
    holdings: Sequence[HoldingRecord],
    completed_lessons: Sequence[LessonCompletionRecord],
    *,
    now: datetime | None = None,
) -> ScoreBreakdown:
    """Compute every contribution to the confidence score.

    Without trades and without completed lessons no modifier applies and the
    total is just the rounded base score, whatever the holdings or the
    account age.

    Args:
        profile: Profile carrying the assessment score and creation time
        transactions: All of the user's trades
        holdings: Positions currently held
        completed_lessons: Lessons the user has completed
        now: Reference time for account age (default: current UTC time)

    Returns:
        ScoreBreakdown whose ``total_score`` is the confidence score
    """
    now = now or datetime.now(UTC)
    base = profile.assessment_score
    if base is None:
        base = ScoringConstants.DEFAULT_BASE_SCORE

    trade_count = len(transactions)
    holdings_count = len({h.symbol for h in holdings if h.shares > 0})
    lessons_completed = len(completed_lessons)
    profitable_trades = sum(
        1
        for t in transactions
        if t.type == TradeType.SELL and t.profit_loss is not None and t.profit_loss > 0
    )
    days_active = account_age_days(profile.created_at, now)
    has_activity = trade_count > 0 or lessons_completed > 0

    trade_bonus = diversification_bonus = lesson_bonus = profitable_bonus = activity_bonus = ZERO
    if has_activity:
        trade_bonus = min(trade_count * ScoringConstants.TRADE_WEIGHT, ScoringConstants.TRADE_CAP)

        # Flat bonus from the threshold on, not a continuation of the linear part
        if holdings_count >= ScoringConstants.DIVERSIFICATION_THRESHOLD:
            diversification_bonus = ScoringConstants.DIVERSIFICATION_FLAT_BONUS
        else:
            diversification_bonus = holdings_count * ScoringConstants.DIVERSIFICATION_WEIGHT

        lesson_bonus = min(
            lessons_completed * ScoringConstants.LESSON_WEIGHT, ScoringConstants.LESSON_CAP
        )

        if profitable_trades > 0:
            profitable_bonus = ScoringConstants.PROFITABLE_TRADE_BONUS

        if days_active >= ScoringConstants.ACTIVITY_THRESHOLD_DAYS:
            activity_bonus = ScoringConstants.ACTIVITY_FLAT_BONUS
        else:
            activity_bonus = days_active * ScoringConstants.ACTIVITY_WEIGHT

    total = (
        base
        + trade_bonus
        + diversification_bonus
        + lesson_bonus
        + profitable_bonus
        + activity_bonus
    )

    return ScoreBreakdown(
        base_score=base,
        has_activity=has_activity,
        trade_count=trade_count,
        trade_bonus=trade_bonus,
        holdings_count=holdings_count,
        diversification_bonus=diversification_bonus,
        lessons_completed=lessons_completed,
        lesson_bonus=lesson_bonus,
        profitable_trades=profitable_trades,
        profitable_bonus=profitable_bonus,
        days_active=days_active,
        activity_bonus=activity_bonus,
        total_score=round_score(total),
    )


def compute_score(
    profile: ProfileRecord,
    transactions: Sequence[TransactionRecord],
    holdings: Sequence[HoldingRecord],
    completed_lessons: Sequence[LessonCompletionRecord],
    *,
    now: datetime | None = None,
) -> Decimal:
    """Compute the confidence score (one decimal, within 0..10)."""
    return get_score_breakdown(
        profile, transactions, holdings, completed_lessons, now=now
    ).total_score


class UserLocks:
    """One ``asyncio.Lock`` per user, dropped once nobody holds a reference."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_user(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock


# Shared by every recalculator in this process
score_locks = UserLocks()


class ScoreRecalculator:
    """Recomputes and stores a user's confidence score.

    Writes for one user are serialized through ``score_locks``, so two
    recalculations never interleave their profile and history writes.

    Example:
        >>> recalculator = ScoreRecalculator(store)
        >>> score = await recalculator.recalculate_after_trade("user-123")
    """

    def __init__(self, store: TradingStore, *, locks: UserLocks | None = None):
        self.store = store
        self.locks = locks or score_locks

    async def recalculate(self, user_id: str, *, now: datetime | None = None) -> Decimal:
        """Recompute the score from fresh store state and persist it.

        The profile gets the new score and a history row with the same value
        and timestamp is appended, in one transaction.

        Raises:
            NotFoundError: If the user has no profile
            StoreUnavailableError: If the store timed out or is unreachable
        """
        now = now or datetime.now(UTC)
        async with self.locks.for_user(user_id):
            async with self.store.atomic():
                profile = await self.store.get_profile(user_id)
                if profile is None:
                    raise NotFoundError(f"Profile for user {user_id} not found")

                transactions = await self.store.list_transactions(user_id)
                holdings = await self.store.list_holdings(user_id)
                lessons = await self.store.list_completed_lessons(user_id)

                score = compute_score(profile, transactions, holdings, lessons, now=now)
                await self.store.update_profile_score(user_id, score)
                await self.store.append_score_history(user_id, score, now)

        logger.info(f"Confidence score of user {user_id} recalculated: {score}")
        return score

    async def recalculate_after_trade(
        self, user_id: str, *, now: datetime | None = None
    ) -> Decimal | None:
        """Best-effort recalculation after a trade or a lesson.

        Returns:
            The new score, or None if recalculation failed (the failure is
            logged and never propagated)
        """
        try:
            return await self.recalculate(user_id, now=now)
        except Exception:
            logger.exception(f"Confidence score recalculation failed for user {user_id}")
            return None

    async def seed_from_assessment(
        self, user_id: str, raw: int, *, now: datetime | None = None
    ) -> Decimal:
        """Store the onboarding score and its first history entry.

        The seed is kept apart from the current score so later recalculations
        always start from it.

        Raises:
            ValidationError: If raw is outside 1..10
            NotFoundError: If the user has no profile
        """
        score = seed_score_from_assessment(raw)
        now = now or datetime.now(UTC)
        async with self.locks.for_user(user_id):
            async with self.store.atomic():
                await self.store.set_assessment_score(user_id, score)
                await self.store.append_score_history(user_id, score, now)

        logger.info(f"User {user_id} completed the assessment ({raw}/10), score seeded at {score}")
        return score


async def load_score_breakdown(
    store: TradingStore, user_id: str, *, now: datetime | None = None
) -> ScoreBreakdown:
    """Read a user's activity from the store and break down their score.

    Raises:
        NotFoundError: If the user has no profile
    """
    profile = await store.get_profile(user_id)
    if profile is None:
        raise NotFoundError(f"Profile for user {user_id} not found")
    transactions = await store.list_transactions(user_id)
    holdings = await store.list_holdings(user_id)
    lessons = await store.list_completed_lessons(user_id)
    return get_score_breakdown(profile, transactions, holdings, lessons, now=now)
