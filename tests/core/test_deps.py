"""Tests for core dependencies."""

import pytest

from papertrade.core.config import settings
from papertrade.core.deps import get_store
from papertrade.store.sql import SqlAlchemyStore


@pytest.mark.integration
async def test_get_store_wraps_request_session(test_db):
    """Test that the store is bound to the request's session."""
    store = await get_store(test_db)

    assert isinstance(store, SqlAlchemyStore)
    assert store.db is test_db
    assert store.timeout == settings.STORE_TIMEOUT_SECONDS
