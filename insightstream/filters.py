"""
Filtering of the item collection.
Category, free-text and date range predicates, combined with AND.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Union

from insightstream.models import Category, Item

SHOW_ALL = "ALL"

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class FilterCriteria:
    """
    Active filter state. Every field left as None matches everything.
    """
    category: Optional[Union[Category, str]] = None
    query: Optional[str] = None
    date_from: Optional[Union[date, datetime]] = None
    date_to: Optional[Union[date, datetime]] = None


def _as_day(value: Union[date, datetime]) -> date:
    return value.astimezone().date() if isinstance(value, datetime) else value


def start_of_day(day: Union[date, datetime]) -> datetime:
    """Local 00:00:00.000 of the given calendar day."""
    return datetime.combine(_as_day(day), time.min).astimezone()


def end_of_day(day: Union[date, datetime]) -> datetime:
    """Local 23:59:59.999 of the given calendar day."""
    return datetime.combine(_as_day(day), END_OF_DAY).astimezone()


def apply_filters(items: Iterable[Item], criteria: FilterCriteria) -> List[Item]:
    """
    Select the items matching every active predicate.

    Args:
        items: Collection snapshot, in display order
        criteria: Filter state

    Returns:
        Matching items, in their original order
    """
    category = criteria.category
    if category is not None and category != SHOW_ALL:
        category = Category(category)
    else:
        category = None

    needle = (criteria.query or "").strip().lower()
    lower = start_of_day(criteria.date_from) if criteria.date_from else None
    upper = end_of_day(criteria.date_to) if criteria.date_to else None

    matched = []
    for item in items:
        if category is not None and item.category != category:
            continue
        if needle and needle not in item.title.lower() and needle not in item.snippet.lower():
            continue
        if lower is not None or upper is not None:
            published = item.published_at.astimezone()
            if lower is not None and published < lower:
                continue
            if upper is not None and published > upper:
                continue
        matched.append(item)
    return matched
