"""
Subscription feed poller.
Stands in for fetching each subscribed feed: every poll yields one freshly
dated item per subscription, built from a rotating set of templates.
"""

import asyncio
import itertools
import logging
from typing import List, Optional, Sequence

from insightstream.models import Category, FetchResult, Item, SubscriptionConfig, next_item_id, utc_now
from insightstream.utils.config import get_pipeline_config

logger = logging.getLogger(__name__)

FEED_TEMPLATES = [
    (
        Category.SOCIAL,
        "Burger King 'secret menu' stacked burger goes viral on TikTok",
        "An influencer's ten-patty order sparked a challenge trend and store sales surged.",
    ),
    (
        Category.DEFENSIVE,
        "Food safety alert: imported chili powder tests positive for Sudan red dye",
        "A major spice supplier is recalling product; restaurants must check affected batch numbers.",
    ),
    (
        Category.OFFENSIVE,
        "Rival platform adds zero-commission onboarding for new merchants",
        "The promotion targets independent restaurants during their first three months.",
    ),
    (
        Category.MACRO,
        "Food prices index rises for third straight month",
        "Higher ingredient costs are expected to push menu prices up across the sector.",
    ),
]


class FeedSimulator:
    """
    Simulated poller for user subscriptions.
    """

    def __init__(self, latency: Optional[float] = None):
        """
        Initialize the simulator.

        Args:
            latency: Seconds each poll takes. If None, uses config.
        """
        self.latency = get_pipeline_config()["feed_latency"] if latency is None else latency
        self._rotation = itertools.cycle(range(len(FEED_TEMPLATES)))

    async def poll(self, subscriptions: Sequence[SubscriptionConfig]) -> FetchResult:
        """
        Poll every subscription once.

        Args:
            subscriptions: Subscriptions in configured order

        Returns:
            FetchResult with exactly one item per subscription, same order
        """
        if not subscriptions:
            return FetchResult.ok([])

        if self.latency > 0:
            await asyncio.sleep(self.latency)

        polled_at = utc_now()
        items: List[Item] = []

        for subscription in subscriptions:
            category, title, snippet = FEED_TEMPLATES[next(self._rotation)]
            items.append(Item(
                id=next_item_id("rss", subscription.id),
                title=f"[{subscription.name}] {title}",
                snippet=snippet,
                source=subscription.name,
                published_at=polled_at,
                category=category,
            ))

        logger.info(f"Polled {len(subscriptions)} subscriptions")
        return FetchResult.ok(items)
