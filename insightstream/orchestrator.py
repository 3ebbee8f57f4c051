"""
Refresh orchestrator for the intelligence feed.
Runs live search and subscription polling concurrently, merges their results
and prepends them to the item store as one batch.
"""

import asyncio
import logging
from typing import Awaitable, List, Optional, Sequence

from insightstream.models import FetchResult, Item, SubscriptionConfig
from insightstream.db.item_store import ItemStore, get_item_store
from insightstream.db.settings_store import SettingsStore
from insightstream.scraper.live_search import LiveSearchClient
from insightstream.scraper.feed_simulator import FeedSimulator
from insightstream.utils.config import get_pipeline_config

logger = logging.getLogger(__name__)


class FeedAggregator:
    """
    Orchestrates one refresh cycle: Search + Poll → Merge → Store.
    """

    def __init__(
        self,
        store: ItemStore,
        search_client: Optional[LiveSearchClient] = None,
        feed_simulator: Optional[FeedSimulator] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the aggregator.

        Args:
            store: Item store receiving merged batches
            search_client: Live search adapter
            feed_simulator: Subscription poller
            timeout: Seconds allowed per source call. If None, uses config.
        """
        self.store = store
        self.search_client = search_client or LiveSearchClient()
        self.feed_simulator = feed_simulator or FeedSimulator()
        self.timeout = get_pipeline_config()["timeout"] if timeout is None else timeout

    async def refresh(
        self,
        keywords: Sequence[str],
        subscriptions: Sequence[SubscriptionConfig]
    ) -> List[Item]:
        """
        Fetch new items from every source and merge them into the store.

        Args:
            keywords: Search terms; no search runs when empty
            subscriptions: Feed subscriptions; no poll runs when empty

        Returns:
            Items inserted by this refresh, search results first
        """
        if not keywords and not subscriptions:
            return []

        # Collect from both sources in parallel
        results = await asyncio.gather(
            self._search(keywords),
            self._poll(subscriptions),
            return_exceptions=True
        )

        batch: List[Item] = []
        for result in results:
            if isinstance(result, list):
                batch.extend(result)
            elif isinstance(result, BaseException):
                logger.warning(f"Refresh source failed: {result}")

        inserted = self.store.append(batch)
        logger.info(f"Refresh merged {len(inserted)} new items")
        return inserted

    async def refresh_from_settings(self, settings_store: SettingsStore) -> List[Item]:
        """Refresh using the keywords and subscriptions currently configured."""
        return await self.refresh(
            settings_store.get_search_terms(),
            settings_store.get_subscriptions()
        )

    async def _search(self, keywords: Sequence[str]) -> List[Item]:
        """Search live news."""
        if not keywords:
            return []
        return await self._unwrap("Live search", self.search_client.search(list(keywords)))

    async def _poll(self, subscriptions: Sequence[SubscriptionConfig]) -> List[Item]:
        """Poll subscriptions."""
        if not subscriptions:
            return []
        return await self._unwrap("Subscription poll", self.feed_simulator.poll(list(subscriptions)))

    async def _unwrap(self, label: str, call: Awaitable[FetchResult]) -> List[Item]:
        """Await a source call and degrade every failure to an empty list."""
        try:
            result = await asyncio.wait_for(call, timeout=self.timeout or None)
        except asyncio.TimeoutError:
            logger.error(f"{label} timed out after {self.timeout}s")
            return []
        except Exception as e:
            logger.error(f"{label} failed: {e}")
            return []

        if not result.is_ok:
            logger.error(f"{label} error: {result.error_message}")
            return []
        return result.items


# Global aggregator instance
aggregator: Optional[FeedAggregator] = None


def get_aggregator() -> FeedAggregator:
    """
    Get the global aggregator instance.

    Returns:
        Feed aggregator bound to the global item store
    """
    global aggregator
    if aggregator is None:
        aggregator = FeedAggregator(get_item_store())
    return aggregator
