"""Portfolio snapshot and trade sizing schemas."""

from decimal import Decimal

from pydantic import BaseModel


class HoldingSnapshot(BaseModel):
    """A holding joined with its market quote.

    Market fields are None when the symbol has no current quote
    (``is_stale``); such holdings are left out of every portfolio aggregate.
    """

    symbol: str
    name: str | None = None
    shares: Decimal
    average_price: Decimal
    cost_basis: Decimal
    current_price: Decimal | None = None
    current_value: Decimal | None = None
    gain_loss: Decimal | None = None
    gain_loss_percent: Decimal | None = None
    change: Decimal | None = None
    change_percent: Decimal | None = None
    day_change: Decimal | None = None
    is_stale: bool = False


class PortfolioSnapshot(BaseModel):
    """Derived view of a user's portfolio at current prices."""

    cash: Decimal
    holdings: list[HoldingSnapshot]
    holdings_value: Decimal
    total_value: Decimal  # cash + holdings_value
    total_cost_basis: Decimal
    total_gain_loss: Decimal
    day_change: Decimal
    day_change_percent: Decimal
    stale_symbols: list[str] = []


class AffordableShares(BaseModel):
    """How many whole shares the available cash buys."""

    price: Decimal
    cash: Decimal
    max_shares: int
    suggestions: list[int]
    suggestion_percentages: list[Decimal]  # Share of cash each suggestion uses
    can_afford: bool


class PositionSizeAssessment(BaseModel):
    """How large a purchase would be relative to the whole portfolio."""

    investment: Decimal
    percentage: Decimal
    level: str
    advice: str


class LossScenario(BaseModel):
    """Value of a position after the price drops by a given percentage."""

    percent: Decimal
    loss: Decimal
    new_value: Decimal


class LossScenarios(BaseModel):
    """What a purchase would be worth after a few price drops."""

    symbol: str
    shares: Decimal
    price: Decimal
    investment: Decimal
    scenarios: list[LossScenario]
