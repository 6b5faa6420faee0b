"""Tests for the transactional context manager.

Tests verify that the context manager properly handles:
- Automatic commit on success
- Automatic rollback on exception
- commit=False leaving the work uncommitted
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from papertrade.core.exceptions import InsufficientFundsError
from papertrade.db.session import transactional
from papertrade.models.profile import Profile


@pytest.mark.asyncio
class TestTransactionalContextManager:
    """Tests for the transactional context manager."""

    async def test_transactional_commits_on_success(self, test_db: AsyncSession) -> None:
        """Test that transactional context commits changes on successful exit."""
        async with transactional(test_db):
            test_db.add(Profile(user_id="committed", display_name="Committed"))

        result = await test_db.execute(select(Profile).where(Profile.user_id == "committed"))
        profile = result.scalar_one_or_none()
        assert profile is not None
        assert profile.display_name == "Committed"

    async def test_transactional_rolls_back_on_exception(self, test_db: AsyncSession) -> None:
        """Test that transactional context rolls back on exception."""
        with pytest.raises(ValueError):
            async with transactional(test_db):
                test_db.add(Profile(user_id="rolled-back"))
                raise ValueError("Intentional error for testing")

        result = await test_db.execute(select(Profile).where(Profile.user_id == "rolled-back"))
        assert result.scalar_one_or_none() is None

    async def test_transactional_rolls_back_on_app_exception(self, test_db: AsyncSession) -> None:
        """Test that a rejected trade leaves nothing behind."""
        with pytest.raises(InsufficientFundsError):
            async with transactional(test_db):
                test_db.add(Profile(user_id="rejected"))
                await test_db.flush()
                raise InsufficientFundsError("need $100, have $10")

        result = await test_db.execute(select(Profile).where(Profile.user_id == "rejected"))
        assert result.scalar_one_or_none() is None

    async def test_transactional_commit_false_does_not_commit(self, test_db: AsyncSession) -> None:
        """Test that commit=False prevents commits."""
        async with transactional(test_db, commit=False):
            test_db.add(Profile(user_id="pending"))

        result = await test_db.execute(select(Profile).where(Profile.user_id == "pending"))
        assert result.scalar_one_or_none() is None
