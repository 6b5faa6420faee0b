"""Domain constants for trading, scoring and progress tracking.

Every number that shapes a trade or a confidence score lives here so that
the score, its breakdown and the tests all read from a single source.
Constants are grouped by the component that consumes them.
"""

from decimal import Decimal


class TradingConstants:
    """Precision used when storing money and cost basis."""

    # Cash, totals and average prices are stored with 6 fractional digits
    MONEY_QUANTUM = Decimal("0.000001")

    # Percentages shown to users (gain/loss %, day change %)
    PERCENT_QUANTUM = Decimal("0.01")

    MAX_SYMBOL_LENGTH = 20

    # Shares and prices are stored with the same scale as money
    MAX_DECIMAL_PLACES = 6


class ScoringConstants:
    """Weights and caps of the confidence score."""

    SCORE_MIN = Decimal("0.0")
    SCORE_MAX = Decimal("10.0")
    SCORE_QUANTUM = Decimal("0.1")

    # Used when the onboarding assessment was never completed
    DEFAULT_BASE_SCORE = Decimal("3.2")

    # Onboarding transform: raw self-rating (1-10) * 0.7 + 2
    ASSESSMENT_MIN = 1
    ASSESSMENT_MAX = 10
    ASSESSMENT_WEIGHT = Decimal("0.7")
    ASSESSMENT_OFFSET = Decimal("2")

    # +0.4 per trade, capped at +2.0 (5 trades)
    TRADE_WEIGHT = Decimal("0.4")
    TRADE_CAP = Decimal("2.0")

    # +0.5 per distinct holding below the threshold, flat +1.5 at 3 or more
    DIVERSIFICATION_WEIGHT = Decimal("0.5")
    DIVERSIFICATION_THRESHOLD = 3
    DIVERSIFICATION_FLAT_BONUS = Decimal("1.5")

    # +0.3 per completed lesson, capped at +1.5 (5 lessons)
    LESSON_WEIGHT = Decimal("0.3")
    LESSON_CAP = Decimal("1.5")

    # Binary bonus for at least one profitable sell
    PROFITABLE_TRADE_BONUS = Decimal("1.0")

    # +0.1 per day of account age, flat +0.8 from day 7
    ACTIVITY_WEIGHT = Decimal("0.1")
    ACTIVITY_THRESHOLD_DAYS = 7
    ACTIVITY_FLAT_BONUS = Decimal("0.8")


class AchievementConstants:
    """Thresholds for progress badges."""

    DIVERSIFIER_HOLDINGS = 3
    WEEK_STREAK_DAYS = 7
    BIG_WIN_PROFIT = Decimal("100")
    PORTFOLIO_MILESTONE_VALUE = Decimal("12000")


class SizingConstants:
    """Trade sizing suggestions and position size levels."""

    # (minimum affordable shares, suggested lot sizes)
    LOT_SUGGESTIONS: tuple[tuple[int, tuple[int, ...]], ...] = (
        (10, (5, 10, 20)),
        (5, (1, 5, 10)),
        (1, (1, 2, 3)),
    )

    # Share of cash a suggested lot uses is shown with one decimal
    SUGGESTION_PERCENT_QUANTUM = Decimal("0.1")

    # Share of total portfolio value (percent) above which a level applies
    POSITION_LEVELS: tuple[tuple[Decimal, str, str], ...] = (
        (
            Decimal("50"),
            "oversized",
            "This would be over half your portfolio - consider buying less for better"
            " diversification",
        ),
        (
            Decimal("25"),
            "large",
            "This is a large position - make sure you're comfortable with the risk",
        ),
        (
            Decimal("15"),
            "moderate",
            "Moderate position size - reasonable for a concentrated portfolio",
        ),
        (Decimal("5"), "balanced", "Good position size for diversification"),
    )
    POSITION_LEVEL_DEFAULT = "small"
    POSITION_ADVICE_DEFAULT = "Small position - low risk but also limited impact on returns"

    # Price drops (percent) for the what-if loss scenarios
    LOSS_DROPS: tuple[Decimal, ...] = (Decimal("10"), Decimal("20"), Decimal("50"))
