"""
Analyze-once cache in front of the item analyzer.
Each item is sent to the provider at most once; concurrent requests for the
same item share a single in-flight call.
"""

import asyncio
import logging
from typing import Dict, Optional

from insightstream.models import Item
from insightstream.ai.analyzer import ItemAnalyzer
from insightstream.db.item_store import ItemStore, get_item_store

logger = logging.getLogger(__name__)


class AnalysisCache:
    """
    Single-flight analysis per item id, with results stored on the item.
    """

    def __init__(self, store: ItemStore, analyzer: Optional[ItemAnalyzer] = None):
        self.store = store
        self.analyzer = analyzer or ItemAnalyzer()
        self._in_flight: Dict[str, "asyncio.Task[Item]"] = {}

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def ensure_analyzed(self, item: Item) -> Item:
        """
        Make sure an item carries analysis.

        Args:
            item: Item to analyze

        Returns:
            The analyzed item as held by the store
        """
        if item.analyzed:
            return item

        current = self.store.get(item.id)
        if current is not None and current.analyzed:
            return current

        task = self._in_flight.get(item.id)
        if task is None:
            task = asyncio.ensure_future(self._analyze_and_patch(item))
            self._in_flight[item.id] = task
            task.add_done_callback(lambda done: self._forget(item.id, done))
        else:
            logger.debug(f"Joining in-flight analysis for item {item.id}")

        # one caller going away must not cancel the call the others wait on
        return await asyncio.shield(task)

    async def ensure_analyzed_by_id(self, item_id: str) -> Item:
        """
        Analyze the stored item with this id.

        Raises:
            KeyError: If the store has no such item
        """
        item = self.store.get(item_id)
        if item is None:
            raise KeyError(item_id)
        return await self.ensure_analyzed(item)

    def _forget(self, item_id: str, task: "asyncio.Task[Item]") -> None:
        if self._in_flight.get(item_id) is task:
            del self._in_flight[item_id]

    async def _analyze_and_patch(self, item: Item) -> Item:
        logger.info(f"Analyzing item {item.id}")
        analysis = await self.analyzer.analyze(item.title, item.snippet)
        return self.store.patch(item.id, analysis)


# Global cache instance
analysis_cache: Optional[AnalysisCache] = None


def get_analysis_cache() -> AnalysisCache:
    """
    Get the global analysis cache instance.

    Returns:
        Analysis cache bound to the global item store
    """
    global analysis_cache
    if analysis_cache is None:
        analysis_cache = AnalysisCache(get_item_store())
    return analysis_cache
