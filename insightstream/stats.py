"""
Collection statistics for the dashboard: item counts per category and the
sentiment breakdown over analyzed items.
"""

from collections import Counter
from typing import Any, Dict, Iterable

from insightstream.models import Category, Item, Sentiment


def collection_stats(items: Iterable[Item]) -> Dict[str, Any]:
    items = list(items)
    categories = Counter(item.category for item in items)
    analyzed = [item for item in items if item.analyzed and item.analysis is not None]
    sentiments = Counter(item.analysis.sentiment for item in analyzed)

    return {
        "total_items": len(items),
        "analyzed_items": len(analyzed),
        "categories": {c.value: categories.get(c, 0) for c in Category},
        "sentiments": {s.value: sentiments.get(s, 0) for s in Sentiment},
    }
