"""Shared test fixtures."""

from typing import Optional

import pytest

from market_feed.config.models import CollectorSettings
from market_feed.feed.collector import FeedCollector
from tests.fakes import FakeConnection, FakeConnector


@pytest.fixture
def make_collector():
    """Build a FeedCollector wired to a FakeConnector."""

    def _make(connection: Optional[FakeConnection] = None, error: Optional[BaseException] = None):
        connector = FakeConnector(connection, error)
        collector = FeedCollector(CollectorSettings(), connect=connector)
        return collector, connector

    return _make
