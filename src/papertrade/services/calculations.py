"""Pure trade arithmetic shared by the engine, the snapshot and the API.

Nothing in this module touches the store. All inputs and outputs are
``Decimal``; money is rounded half-up to ``TradingConstants.MONEY_QUANTUM``
and percentages to ``TradingConstants.PERCENT_QUANTUM``.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from papertrade.core.constants import SizingConstants, TradingConstants
from papertrade.core.exceptions import ValidationError
from papertrade.schemas.portfolio import (
    AffordableShares,
    LossScenario,
    LossScenarios,
    PositionSizeAssessment,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def money(value: Decimal) -> Decimal:
    """Round an amount to the stored money precision."""
    return value.quantize(TradingConstants.MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def percent(
    part: Decimal, whole: Decimal, quantum: Decimal = TradingConstants.PERCENT_QUANTUM
) -> Decimal:
    """Return ``part / whole * 100`` rounded for display, 0 when whole is 0."""
    if whole == 0:
        return ZERO.quantize(quantum)
    return (part / whole * HUNDRED).quantize(quantum, rounding=ROUND_HALF_UP)


def validate_trade_inputs(symbol: str, shares: Decimal, price: Decimal) -> str:
    """Check a trade request before anything is read or written.

    Args:
        symbol: Security symbol, any case, surrounding whitespace ignored
        shares: Number of shares to trade
        price: Execution price per share

    Returns:
        The normalized (stripped, uppercased) symbol

    Raises:
        ValidationError: If the symbol is blank or too long, or shares or
            price is not a positive finite number with at most six decimal places
    """
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValidationError("Symbol must not be empty")
    if len(normalized) > TradingConstants.MAX_SYMBOL_LENGTH:
        raise ValidationError(
            f"Symbol must be at most {TradingConstants.MAX_SYMBOL_LENGTH} characters"
        )
    if not shares.is_finite() or shares <= 0:
        raise ValidationError(f"Shares must be greater than 0, got {shares}")
    if not price.is_finite() or price <= 0:
        raise ValidationError(f"Price must be greater than 0, got {price}")
    for name, value in (("Shares", shares), ("Price", price)):
        if value.normalize().as_tuple().exponent < -TradingConstants.MAX_DECIMAL_PLACES:
            raise ValidationError(
                f"{name} must have at most {TradingConstants.MAX_DECIMAL_PLACES} decimal places,"
                f" got {value}"
            )
    return normalized


def trade_total(shares: Decimal, price: Decimal) -> Decimal:
    """Cash value of a trade: shares x price."""
    return money(shares * price)


def weighted_average_price(
    old_shares: Decimal,
    old_average: Decimal,
    added_shares: Decimal,
    price: Decimal,
) -> Decimal:
    """Average cost per share after buying more of an existing position.

    Example:
        >>> weighted_average_price(Decimal("10"), Decimal("100"), Decimal("10"), Decimal("200"))
        Decimal('150.000000')
    """
    total_shares = old_shares + added_shares
    return money((old_shares * old_average + added_shares * price) / total_shares)


def realized_profit_loss(shares: Decimal, price: Decimal, average_price: Decimal) -> Decimal:
    """Profit or loss of selling ``shares`` at ``price`` against the average cost."""
    return money((price - average_price) * shares)


def calculate_affordable_shares(price: Decimal, cash: Decimal) -> AffordableShares:
    """Work out how many whole shares the available cash buys.

    Suggested lot sizes depend on how many shares are affordable and never
    exceed that maximum.

    Args:
        price: Current price per share
        cash: Available cash

    Returns:
        AffordableShares with the maximum, suggestions and the share of cash
        each suggestion would use

    Raises:
        ValidationError: If price is not positive
    """
    if price <= 0:
        raise ValidationError(f"Price must be greater than 0, got {price}")

    max_shares = int((max(cash, ZERO) / price).to_integral_value(rounding=ROUND_DOWN))

    suggestions: list[int] = []
    for minimum, lots in SizingConstants.LOT_SUGGESTIONS:
        if max_shares >= minimum:
            suggestions = [lot for lot in lots if lot <= max_shares]
            break

    return AffordableShares(
        price=price,
        cash=cash,
        max_shares=max_shares,
        suggestions=suggestions,
        suggestion_percentages=[
            percent(price * lot, cash, SizingConstants.SUGGESTION_PERCENT_QUANTUM)
            for lot in suggestions
        ],
        can_afford=max_shares > 0,
    )


def assess_position_size(
    shares: Decimal,
    price: Decimal,
    total_value: Decimal,
) -> PositionSizeAssessment:
    """Rate how big a purchase is compared to the whole portfolio.

    Args:
        shares: Shares to buy
        price: Price per share
        total_value: Current total portfolio value (cash + holdings)

    Returns:
        PositionSizeAssessment with the investment, its percentage of the
        portfolio and a level from "small" to "oversized" with advice text
    """
    investment = money(shares * price)
    percentage = percent(investment, total_value)

    level = SizingConstants.POSITION_LEVEL_DEFAULT
    advice = SizingConstants.POSITION_ADVICE_DEFAULT
    for threshold, name, text in SizingConstants.POSITION_LEVELS:
        if percentage > threshold:
            level, advice = name, text
            break

    return PositionSizeAssessment(
        investment=investment, percentage=percentage, level=level, advice=advice
    )


def calculate_loss_scenarios(symbol: str, shares: Decimal, price: Decimal) -> LossScenarios:
    """Show what a purchase would be worth after each drop in ``LOSS_DROPS``.

    Raises:
        ValidationError: If shares or price is not positive
    """
    if shares <= 0:
        raise ValidationError(f"Shares must be greater than 0, got {shares}")
    if price <= 0:
        raise ValidationError(f"Price must be greater than 0, got {price}")

    investment = money(shares * price)
    scenarios = []
    for drop in SizingConstants.LOSS_DROPS:
        loss = money(investment * drop / HUNDRED)
        scenarios.append(LossScenario(percent=drop, loss=loss, new_value=investment - loss))

    return LossScenarios(
        symbol=symbol, shares=shares, price=price, investment=investment, scenarios=scenarios
    )
