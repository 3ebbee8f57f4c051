"""
Shared fixtures: fresh stores and stubbed provider adapters.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from insightstream.models import (
    Analysis,
    Category,
    FetchResult,
    Item,
    Sentiment,
    SubscriptionConfig,
)
from insightstream.db.item_store import ItemStore
from insightstream.db.settings_store import SettingsStore


def make_item(item_id, category=Category.DEFENSIVE, published_at=None, title=None, snippet="", **kwargs):
    return Item(
        id=item_id,
        title=title or f"Item {item_id}",
        snippet=snippet,
        source=kwargs.pop("source", "Test Source"),
        published_at=published_at or datetime.now().astimezone(),
        category=category,
        **kwargs
    )


SAMPLE_ANALYSIS = Analysis(
    summary="Competitor cuts delivery fees.",
    sentiment=Sentiment.NEGATIVE,
    action_tip="Prepare a counter offer for key merchants.",
    keywords=["Pricing", "Competitor"],
)


@pytest.fixture
def store():
    return ItemStore()


@pytest.fixture
def settings_store(tmp_path):
    return SettingsStore(path=str(tmp_path / "settings.json"))


@pytest.fixture
def subscriptions():
    return [
        SubscriptionConfig(id="f1", name="Feed One", url="http://x"),
        SubscriptionConfig(id="f2", name="Feed Two", url="http://y"),
    ]


@pytest.fixture
def search_stub():
    """Search adapter returning two MACRO items."""
    stub = MagicMock()
    stub.search = AsyncMock(return_value=FetchResult.ok([
        make_item("S1", category=Category.MACRO),
        make_item("S2", category=Category.MACRO),
    ]))
    return stub


@pytest.fixture
def feed_stub():
    """Feed adapter returning one item per subscription."""
    async def poll(subscriptions):
        return FetchResult.ok([
            make_item(f"F-{s.id}", category=Category.SOCIAL, source=s.name)
            for s in subscriptions
        ])

    stub = MagicMock()
    stub.poll = AsyncMock(side_effect=poll)
    return stub


@pytest.fixture
def analyzer_stub():
    stub = MagicMock()
    stub.analyze = AsyncMock(return_value=SAMPLE_ANALYSIS)
    return stub


@pytest.fixture
def ten_day_collection():
    """Two items per day for ten days, cycling through every category."""
    categories = list(Category)
    start = datetime(2024, 1, 1, 12, 0).astimezone()
    items = []
    for day in range(10):
        for slot in range(2):
            index = day * 2 + slot
            items.append(make_item(
                f"d{index}",
                category=categories[index % len(categories)],
                published_at=start + timedelta(days=day, hours=slot),
            ))
    return items
