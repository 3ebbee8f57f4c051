"""
Static seed data: the starting collection and the default settings used
when nothing has been persisted yet.
"""

from datetime import timedelta
from typing import List

from insightstream.models import (
    Analysis,
    Category,
    Item,
    KeywordConfig,
    Sentiment,
    SubscriptionConfig,
    utc_now,
)

DEFAULT_KEYWORDS = [
    KeywordConfig(id="1", term="McDonald's food safety", category=Category.DEFENSIVE),
    KeywordConfig(id="2", term="KFC new flavor", category=Category.DEFENSIVE),
    KeywordConfig(id="3", term="delivery platform regulation", category=Category.MACRO),
    KeywordConfig(id="4", term="Foodpanda exclusive", category=Category.OFFENSIVE),
    KeywordConfig(id="5", term="Taipei Michelin", category=Category.OFFENSIVE),
    KeywordConfig(id="6", term="bubble tea trends", category=Category.SOCIAL),
]

DEFAULT_SUBSCRIPTIONS = [
    SubscriptionConfig(id="r1", name="Business Next", url="https://www.bnext.com.tw/rss"),
    SubscriptionConfig(id="r2", name="Central News Agency", url="https://www.cna.com.tw/rss"),
]


def default_keywords() -> List[KeywordConfig]:
    return list(DEFAULT_KEYWORDS)


def default_subscriptions() -> List[SubscriptionConfig]:
    return list(DEFAULT_SUBSCRIPTIONS)


def initial_items() -> List[Item]:
    """Seed collection, newest first, dated relative to now."""
    now = utc_now()
    return [
        Item(
            id="n1",
            title="McDonald's partners with local farmers, targets 80% locally sourced lettuce by 2025",
            source="Business Next",
            published_at=now - timedelta(hours=2),
            snippet="The fast-food leader will sharply raise its share of locally sourced "
                    "ingredients to cut its carbon footprint and keep produce fresh.",
            category=Category.DEFENSIVE,
            analyzed=True,
            analysis=Analysis(
                summary="McDonald's commits to 80% locally sourced lettuce before 2025.",
                sentiment=Sentiment.POSITIVE,
                action_tip="Plan a 'local farmers' feature on the delivery platform "
                           "highlighting freshness and sustainability.",
                keywords=["ESG", "Supply chain"],
            ),
        ),
        Item(
            id="n2",
            title="Users debate: is a fried chicken chain quietly shrinking its drumsticks?",
            source="Dcard Food Board",
            published_at=now - timedelta(hours=5),
            snippet="Several trending threads discuss smaller portions at a well-known chain; "
                    "reactions are split and some users threaten a boycott.",
            category=Category.DEFENSIVE,
        ),
        Item(
            id="n3",
            title="Competitor X launches a student-only free delivery subscription",
            source="TechNews",
            published_at=now - timedelta(hours=24),
            snippet="To capture back-to-school demand the platform offers a free first month "
                    "and exclusive discount codes with a student ID.",
            category=Category.OFFENSIVE,
            analyzed=True,
            analysis=Analysis(
                summary="A competitor targets students with a free delivery subscription.",
                sentiment=Sentiment.NEGATIVE,
                action_tip="Counter with a late-night bundle promotion aimed at the student segment.",
                keywords=["Competitor analysis", "Pricing"],
            ),
        ),
        Item(
            id="n4",
            title="Labor ministry drafts courier insurance rules, expected next quarter",
            source="Central News Agency",
            published_at=now - timedelta(hours=48),
            snippet="The draft would require platforms to raise accident insurance coverage, "
                    "which may affect operating costs.",
            category=Category.MACRO,
        ),
    ]
