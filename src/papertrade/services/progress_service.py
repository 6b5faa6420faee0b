"""Trading statistics and achievement badges for the progress page.

Badges are derived from the current state on every read; nothing here is
stored.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal

from papertrade.core.constants import AchievementConstants
from papertrade.models.transaction import TradeType
from papertrade.schemas.portfolio import PortfolioSnapshot
from papertrade.schemas.progress import Achievement, ProgressReport, TradingStatistics
from papertrade.schemas.records import HoldingRecord, ProfileRecord, TransactionRecord
from papertrade.schemas.score import ScoreHistoryResponse
from papertrade.services.account_service import get_profile_or_404
from papertrade.services.calculations import percent
from papertrade.services.portfolio_service import load_portfolio_snapshot
from papertrade.services.scoring_service import account_age_days
from papertrade.store.base import TradingStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# badge_type -> (name, description)
ACHIEVEMENTS: dict[str, tuple[str, str]] = {
    "first_trade": ("First Trade", "Made your first trade"),
    "diversifier": ("Diversifier", "Own 3+ different stocks"),
    "week_streak": ("Week Warrior", "Active for 7 days"),
    "profitable_trader": ("Profitable Trader", "Made a profitable sale"),
    "big_win": ("Big Win", "Made $100+ profit on a trade"),
    "portfolio_milestone": ("Portfolio Builder", "Portfolio value over $12,000"),
}


def _sell_results(transactions: Sequence[TransactionRecord]) -> list[Decimal]:
    return [t.profit_loss or ZERO for t in transactions if t.type == TradeType.SELL]


def compute_trading_statistics(
    transactions: Sequence[TransactionRecord],
    profile: ProfileRecord,
    now: datetime | None = None,
) -> TradingStatistics:
    """Aggregate a user's trade history.

    Args:
        transactions: All of the user's trades
        profile: Profile, for the account creation time
        now: Reference time (default: current UTC time)

    Returns:
        TradingStatistics; win rate, best trade and total profit are 0
        without sells, days active is at least 1
    """
    now = now or datetime.now(UTC)
    results = _sell_results(transactions)
    wins = sum(1 for r in results if r > 0)

    return TradingStatistics(
        total_trades=len(transactions),
        sell_count=len(results),
        win_rate=percent(Decimal(wins), Decimal(len(results))),
        best_trade=max(results, default=ZERO),
        total_profit=sum(results, ZERO),
        days_active=max(account_age_days(profile.created_at, now), 1),
    )


def evaluate_achievements(
    transactions: Sequence[TransactionRecord],
    holdings: Sequence[HoldingRecord],
    snapshot: PortfolioSnapshot,
    days_active: int,
) -> list[Achievement]:
    """Work out which badges the user has earned."""
    results = _sell_results(transactions)
    earned = {
        "first_trade": len(transactions) > 0,
        "diversifier": len(holdings) >= AchievementConstants.DIVERSIFIER_HOLDINGS,
        "week_streak": days_active >= AchievementConstants.WEEK_STREAK_DAYS,
        "profitable_trader": any(r > 0 for r in results),
        "big_win": any(r >= AchievementConstants.BIG_WIN_PROFIT for r in results),
        "portfolio_milestone": (
            snapshot.total_value > AchievementConstants.PORTFOLIO_MILESTONE_VALUE
        ),
    }
    return [
        Achievement(badge_type=badge, name=name, description=description)
        for badge, (name, description) in ACHIEVEMENTS.items()
        if earned[badge]
    ]


async def load_progress(
    store: TradingStore, user_id: str, *, now: datetime | None = None
) -> ProgressReport:
    """Build the progress report of a user.

    Raises:
        NotFoundError: If the user has no profile or portfolio
    """
    profile = await get_profile_or_404(store, user_id)
    transactions = await store.list_transactions(user_id)
    holdings = await store.list_holdings(user_id)
    snapshot = await load_portfolio_snapshot(store, user_id)
    history = await store.list_score_history(user_id)

    statistics = compute_trading_statistics(transactions, profile, now)
    achievements = evaluate_achievements(transactions, holdings, snapshot, statistics.days_active)

    return ProgressReport(
        confidence_score=profile.confidence_score,
        statistics=statistics,
        achievements=achievements,
        score_history=[
            ScoreHistoryResponse(score=h.score, recorded_at=h.recorded_at) for h in history
        ],
    )
