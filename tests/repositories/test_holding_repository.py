"""Tests for HoldingRepository and PortfolioRepository."""

from decimal import Decimal

import pytest

from papertrade.models.holding import Holding
from papertrade.models.portfolio import Portfolio
from papertrade.models.profile import Profile
from papertrade.repositories.holding import HoldingRepository
from papertrade.repositories.portfolio import PortfolioRepository


@pytest.mark.asyncio
async def test_list_by_user_orders_by_symbol(test_db):
    """Test that holdings come back sorted by symbol and scoped to the user."""
    repo = HoldingRepository(Holding, test_db)
    test_db.add_all([Profile(user_id="user-1"), Profile(user_id="user-2")])
    await test_db.commit()

    for user_id, symbol in [("user-1", "VOO"), ("user-1", "AAPL"), ("user-2", "MSFT")]:
        await repo.create(
            obj_in={
                "user_id": user_id,
                "symbol": symbol,
                "shares": Decimal("1"),
                "average_price": Decimal("100"),
            }
        )
    await test_db.commit()

    holdings = await repo.list_by_user("user-1")

    assert [h.symbol for h in holdings] == ["AAPL", "VOO"]


@pytest.mark.asyncio
async def test_get_by_user_and_symbol_is_case_insensitive(test_db):
    """Test that lowercase symbols find the uppercase row."""
    repo = HoldingRepository(Holding, test_db)
    test_db.add(Profile(user_id="user-1"))
    await repo.create(
        obj_in={
            "user_id": "user-1",
            "symbol": "AAPL",
            "shares": Decimal("2.5"),
            "average_price": Decimal("150"),
        }
    )
    await test_db.commit()

    holding = await repo.get_by_user_and_symbol("user-1", "aapl")

    assert holding is not None
    assert holding.shares == Decimal("2.5")
    assert holding.version == 1
    assert await repo.get_by_user_and_symbol("user-1", "MSFT") is None


@pytest.mark.asyncio
async def test_update_if_version(test_db):
    """Test that only the expected version is updated and the version is bumped."""
    repo = HoldingRepository(Holding, test_db)
    test_db.add(Profile(user_id="user-1"))
    await repo.create(
        obj_in={
            "user_id": "user-1",
            "symbol": "AAPL",
            "shares": Decimal("1"),
            "average_price": Decimal("100"),
        }
    )
    await test_db.commit()

    assert await repo.update_if_version(
        "user-1", "AAPL", shares=Decimal("3"), average_price=Decimal("120"), expected_version=1
    )
    assert not await repo.update_if_version(
        "user-1", "AAPL", shares=Decimal("9"), average_price=Decimal("999"), expected_version=1
    )
    await test_db.commit()

    holding = await repo.get_by_user_and_symbol("user-1", "AAPL")
    assert holding.shares == Decimal("3")
    assert holding.version == 2


@pytest.mark.asyncio
async def test_delete_if_version(test_db):
    """Test that a stale delete leaves the holding in place."""
    repo = HoldingRepository(Holding, test_db)
    test_db.add(Profile(user_id="user-1"))
    await repo.create(
        obj_in={
            "user_id": "user-1",
            "symbol": "AAPL",
            "shares": Decimal("1"),
            "average_price": Decimal("100"),
        }
    )
    await test_db.commit()

    assert not await repo.delete_if_version("user-1", "AAPL", expected_version=2)
    assert await repo.delete_if_version("user-1", "AAPL", expected_version=1)
    await test_db.commit()

    assert await repo.list_by_user("user-1") == []


@pytest.mark.asyncio
async def test_update_cash_if_version(test_db):
    """Test compare-and-swap on the portfolio cash balance."""
    repo = PortfolioRepository(Portfolio, test_db)
    test_db.add(Profile(user_id="user-1"))
    await repo.create(obj_in={"user_id": "user-1", "cash": Decimal("10000")})
    await test_db.commit()

    assert await repo.update_cash_if_version("user-1", Decimal("8500"), 1)
    assert not await repo.update_cash_if_version("user-1", Decimal("0"), 1)
    await test_db.commit()

    portfolio = await repo.get("user-1")
    assert portfolio.cash == Decimal("8500")
    assert portfolio.version == 2
