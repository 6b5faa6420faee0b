"""Tests for the confidence scoring engine."""

import asyncio
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from papertrade.core.exceptions import NotFoundError, ValidationError
from papertrade.models.transaction import TradeType
from papertrade.schemas.records import (
    HoldingRecord,
    LessonCompletionRecord,
    ProfileRecord,
    TransactionRecord,
)
from papertrade.schemas.trade import TradeRequest
from papertrade.services.account_service import complete_assessment, complete_lesson, open_account
from papertrade.services.trading_service import execute_trade
from papertrade.services.scoring_service import (
    ScoreRecalculator,
    UserLocks,
    compute_score,
    get_score_breakdown,
    seed_score_from_assessment,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def make_profile(score: str | None = None, age_days: int = 0) -> ProfileRecord:
    return ProfileRecord(
        user_id="user-1",
        assessment_score=Decimal(score) if score is not None else None,
        created_at=NOW - timedelta(days=age_days),
    )


def make_trade(
    trade_type: TradeType = TradeType.BUY,
    symbol: str = "AAPL",
    profit_loss: str | None = None,
) -> TransactionRecord:
    return TransactionRecord(
        id=uuid.uuid4(),
        user_id="user-1",
        symbol=symbol,
        type=trade_type,
        shares=Decimal("1"),
        price=Decimal("100"),
        total=Decimal("100"),
        profit_loss=Decimal(profit_loss) if profit_loss is not None else None,
        timestamp=NOW,
    )


def make_holding(symbol: str) -> HoldingRecord:
    return HoldingRecord(
        user_id="user-1", symbol=symbol, shares=Decimal("1"), average_price=Decimal("100")
    )


def make_lesson(slug: str) -> LessonCompletionRecord:
    return LessonCompletionRecord(user_id="user-1", lesson_slug=slug, completed_at=NOW)


class TestSeedScore:
    """Tests for the onboarding transform."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(1, "2.7"), (5, "5.5"), (7, "6.9"), (10, "9.0")],
    )
    def test_transform(self, raw: int, expected: str) -> None:
        assert seed_score_from_assessment(raw) == Decimal(expected)

    @pytest.mark.parametrize("raw", [0, 11, -3])
    def test_out_of_range(self, raw: int) -> None:
        with pytest.raises(ValidationError):
            seed_score_from_assessment(raw)


class TestComputeScore:
    """Tests for compute_score and get_score_breakdown."""

    def test_scenario_one_buy_two_days(self) -> None:
        """Base 3.2, one trade, one holding, two days old."""
        profile = make_profile(age_days=2)

        breakdown = get_score_breakdown(
            profile, [make_trade()], [make_holding("AAPL")], [], now=NOW
        )

        assert breakdown.base_score == Decimal("3.2")
        assert breakdown.trade_bonus == Decimal("0.4")
        assert breakdown.diversification_bonus == Decimal("0.5")
        assert breakdown.lesson_bonus == Decimal("0")
        assert breakdown.profitable_bonus == Decimal("0")
        assert breakdown.activity_bonus == Decimal("0.2")
        assert breakdown.total_score == Decimal("4.3")
        assert compute_score(profile, [make_trade()], [make_holding("AAPL")], [], now=NOW) == (
            Decimal("4.3")
        )

    def test_no_activity_returns_base(self) -> None:
        """Holdings and account age do not count without trades or lessons."""
        profile = make_profile("5.5", age_days=30)
        holdings = [make_holding("AAPL"), make_holding("MSFT"), make_holding("VOO")]

        breakdown = get_score_breakdown(profile, [], holdings, [], now=NOW)

        assert breakdown.has_activity is False
        assert breakdown.total_score == Decimal("5.5")
        assert breakdown.diversification_bonus == Decimal("0")
        assert breakdown.activity_bonus == Decimal("0")
        assert breakdown.holdings_count == 3
        assert breakdown.days_active == 30

    def test_missing_assessment_uses_default_base(self) -> None:
        assert compute_score(make_profile(None), [], [], [], now=NOW) == Decimal("3.2")

    def test_lessons_alone_count_as_activity(self) -> None:
        lessons = [make_lesson("what-is-a-stock"), make_lesson("diversification")]

        assert compute_score(make_profile("4.0"), [], [], lessons, now=NOW) == Decimal("4.6")

    def test_trade_and_lesson_bonuses_are_capped(self) -> None:
        trades = [make_trade() for _ in range(12)]
        lessons = [make_lesson(f"lesson-{i}") for i in range(9)]

        breakdown = get_score_breakdown(make_profile("3.0"), trades, [], lessons, now=NOW)

        assert breakdown.trade_bonus == Decimal("2.0")
        assert breakdown.lesson_bonus == Decimal("1.5")

    @pytest.mark.parametrize(
        ("symbols", "expected_bonus"),
        [
            ([], "0"),
            (["AAPL"], "0.5"),
            (["AAPL", "MSFT"], "1.0"),
            (["AAPL", "MSFT", "VOO"], "1.5"),
            (["AAPL", "MSFT", "VOO", "QQQ", "TSLA"], "1.5"),
        ],
    )
    def test_diversification_steps(self, symbols: list[str], expected_bonus: str) -> None:
        holdings = [make_holding(s) for s in symbols]

        breakdown = get_score_breakdown(make_profile(), [make_trade()], holdings, [], now=NOW)

        assert breakdown.diversification_bonus == Decimal(expected_bonus)

    def test_profitable_bonus_is_binary(self) -> None:
        trades = [
            make_trade(TradeType.SELL, profit_loss="5"),
            make_trade(TradeType.SELL, profit_loss="500"),
            make_trade(TradeType.SELL, profit_loss="-20"),
        ]

        breakdown = get_score_breakdown(make_profile(), trades, [], [], now=NOW)

        assert breakdown.profitable_trades == 2
        assert breakdown.profitable_bonus == Decimal("1.0")

    @pytest.mark.parametrize(
        ("age_days", "expected"), [(0, "0"), (3, "0.3"), (7, "0.8"), (90, "0.8")]
    )
    def test_activity_bonus(self, age_days: int, expected: str) -> None:
        breakdown = get_score_breakdown(
            make_profile(age_days=age_days), [make_trade()], [], [], now=NOW
        )

        assert breakdown.activity_bonus == Decimal(expected)

    def test_naive_created_at_is_treated_as_utc(self) -> None:
        profile = ProfileRecord(
            user_id="user-1", created_at=(NOW - timedelta(days=3)).replace(tzinfo=None)
        )

        breakdown = get_score_breakdown(profile, [make_trade()], [], [], now=NOW)

        assert breakdown.days_active == 3

    def test_score_is_capped_at_ten(self) -> None:
        trades = [make_trade(TradeType.SELL, profit_loss="10") for _ in range(5)]
        holdings = [make_holding(s) for s in ("AAPL", "MSFT", "VOO")]
        lessons = [make_lesson(f"lesson-{i}") for i in range(5)]

        score = compute_score(make_profile("9.0", age_days=30), trades, holdings, lessons, now=NOW)

        assert score == Decimal("10.0")

    @settings(max_examples=200, deadline=None)
    @given(
        base=st.one_of(
            st.none(),
            st.decimals(min_value=0, max_value=10, places=1, allow_nan=False),
        ),
        trade_count=st.integers(min_value=0, max_value=30),
        winning=st.booleans(),
        holdings_count=st.integers(min_value=0, max_value=8),
        lessons_count=st.integers(min_value=0, max_value=12),
        age_days=st.integers(min_value=0, max_value=400),
    )
    def test_score_stays_within_bounds(
        self, base, trade_count, winning, holdings_count, lessons_count, age_days
    ) -> None:
        profile = ProfileRecord(
            user_id="user-1", assessment_score=base, created_at=NOW - timedelta(days=age_days)
        )
        trades = [
            make_trade(TradeType.SELL, profit_loss="1" if winning else "-1")
            for _ in range(trade_count)
        ]
        holdings = [make_holding(f"SYM{i}") for i in range(holdings_count)]
        lessons = [make_lesson(f"lesson-{i}") for i in range(lessons_count)]

        breakdown = get_score_breakdown(profile, trades, holdings, lessons, now=NOW)
        score = compute_score(profile, trades, holdings, lessons, now=NOW)

        assert Decimal("0") <= score <= Decimal("10")
        assert score == score.quantize(Decimal("0.1"))
        assert breakdown.total_score == score
        if base is not None:
            assert score >= base


@pytest.mark.asyncio
class TestScoreRecalculator:
    """Tests for ScoreRecalculator."""

    async def test_recalculate_writes_score_and_history(self, memory_store) -> None:
        await open_account(memory_store, "user-1")
        now = datetime.now(UTC)
        await memory_store.mark_lesson_completed("user-1", "what-is-a-stock", now)

        score = await ScoreRecalculator(memory_store).recalculate("user-1", now=now)

        assert score == Decimal("3.5")
        assert memory_store.profiles["user-1"].confidence_score == Decimal("3.5")
        history = await memory_store.list_score_history("user-1")
        assert [(h.score, h.recorded_at) for h in history] == [(Decimal("3.5"), now)]

    async def test_recalculate_unknown_user_raises(self, memory_store) -> None:
        with pytest.raises(NotFoundError):
            await ScoreRecalculator(memory_store).recalculate("ghost")

    async def test_after_trade_swallows_failures(self, memory_store, mocker) -> None:
        await open_account(memory_store, "user-1")
        mocker.patch.object(
            memory_store, "list_transactions", side_effect=RuntimeError("store exploded")
        )
        logger = mocker.patch("papertrade.services.scoring_service.logger")

        result = await ScoreRecalculator(memory_store).recalculate_after_trade("user-1")

        assert result is None
        assert memory_store.profiles["user-1"].confidence_score is None
        assert memory_store.score_history == []
        logger.exception.assert_called_once()
        assert "recalculation failed" in logger.exception.call_args.args[0]

    async def test_seed_from_assessment(self, memory_store) -> None:
        await open_account(memory_store, "user-1")

        score = await ScoreRecalculator(memory_store).seed_from_assessment("user-1", 7, now=NOW)

        assert score == Decimal("6.9")
        assert memory_store.profiles["user-1"].assessment_score == Decimal("6.9")
        assert memory_store.profiles["user-1"].confidence_score == Decimal("6.9")
        assert len(memory_store.score_history) == 1

    async def test_recalculate_twice_on_unchanged_history_is_stable(self, memory_store) -> None:
        await open_account(memory_store, "user-1")
        now = datetime.now(UTC)
        recalculator = ScoreRecalculator(memory_store)
        await recalculator.seed_from_assessment("user-1", 5, now=now)
        await memory_store.mark_lesson_completed("user-1", "what-is-a-stock", now)

        first = await recalculator.recalculate("user-1", now=now)
        second = await recalculator.recalculate("user-1", now=now)

        assert first == second == Decimal("5.8")
        assert memory_store.profiles["user-1"].assessment_score == Decimal("5.5")

    async def test_stored_score_matches_score_computed_from_seed(self, memory_store) -> None:
        """Seed, trade and complete a lesson, then compare against a fresh computation."""
        await open_account(memory_store, "user-1")
        memory_store.add_quote("AAPL", "180")
        memory_store.add_quote("MSFT", "400")
        await complete_assessment(memory_store, "user-1", 7)
        await execute_trade(
            memory_store, "user-1", TradeRequest(symbol="AAPL", shares=Decimal("2")), TradeType.BUY
        )
        await execute_trade(
            memory_store, "user-1", TradeRequest(symbol="MSFT", shares=Decimal("1")), TradeType.BUY
        )
        await complete_lesson(memory_store, "user-1", "what-is-a-stock")

        profile = await memory_store.get_profile("user-1")
        expected = compute_score(
            profile,
            await memory_store.list_transactions("user-1"),
            await memory_store.list_holdings("user-1"),
            await memory_store.list_completed_lessons("user-1"),
            now=datetime.now(UTC),
        )

        assert profile.assessment_score == Decimal("6.9")
        assert profile.confidence_score == expected
        history = await memory_store.list_score_history("user-1")
        assert history[-1].score == expected

    async def test_recalculations_for_one_user_do_not_interleave(self, memory_store) -> None:
        """The second recalculation only starts writing after the first finished."""
        await open_account(memory_store, "user-1")
        events: list[str] = []
        original = memory_store.update_profile_score

        async def slow_update(user_id, score):
            events.append("start")
            await asyncio.sleep(0.01)
            await original(user_id, score)
            events.append("end")

        memory_store.update_profile_score = slow_update
        recalculator = ScoreRecalculator(memory_store, locks=UserLocks())

        await asyncio.gather(
            recalculator.recalculate("user-1", now=NOW),
            recalculator.recalculate("user-1", now=NOW),
        )

        assert events == ["start", "end", "start", "end"]


def test_user_locks_reuse_lock_while_referenced() -> None:
    locks = UserLocks()
    first = locks.for_user("user-1")

    assert locks.for_user("user-1") is first
    assert locks.for_user("user-2") is not first
