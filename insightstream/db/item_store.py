"""
In-memory item store.
Owns the ordered collection of intelligence items; append and patch are the
only mutators, and readers always get an immutable snapshot.
"""

import logging
import threading
from typing import List, Dict, Iterable, Optional, Tuple

from insightstream.models import Item, Analysis

logger = logging.getLogger(__name__)


class ItemStore:
    """
    Authoritative, insertion-recency ordered collection of items.

    Newest batches sit at the front. Mutations take the store lock so a
    reader never observes a half-inserted batch or a lost patch.
    """

    def __init__(self, items: Optional[Iterable[Item]] = None):
        """
        Initialize the store.

        Args:
            items: Optional seed collection, in display order
        """
        self._lock = threading.RLock()
        self._items: Tuple[Item, ...] = ()
        self._index: Dict[str, int] = {}
        if items:
            self.append(list(items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def snapshot(self) -> Tuple[Item, ...]:
        """Return the current collection. The tuple is never mutated afterwards."""
        return self._items

    def get(self, item_id: str) -> Optional[Item]:
        with self._lock:
            position = self._index.get(item_id)
            return self._items[position] if position is not None else None

    def append(self, batch: List[Item]) -> List[Item]:
        """
        Prepend a batch of items to the collection.

        The batch keeps its own order and lands in front of every existing
        item. Items whose id is already present (in the store or earlier in
        the same batch) are dropped and logged.

        Args:
            batch: Items to insert, in display order

        Returns:
            The items actually inserted
        """
        if not batch:
            return []

        with self._lock:
            accepted: List[Item] = []
            seen = set(self._index)
            for item in batch:
                if item.id in seen:
                    logger.error(f"Duplicate item id rejected: {item.id}")
                    continue
                seen.add(item.id)
                accepted.append(item)

            if accepted:
                self._replace(tuple(accepted) + self._items)
                logger.info(f"Inserted {len(accepted)} items, collection size {len(self._items)}")

            return accepted

    def patch(self, item_id: str, analysis: Analysis) -> Item:
        """
        Attach analysis to an item.

        Patching an already analyzed item is a no-op and returns it unchanged.

        Raises:
            KeyError: If no item with this id exists
        """
        with self._lock:
            position = self._index.get(item_id)
            if position is None:
                logger.error(f"Patch requested for unknown item id: {item_id}")
                raise KeyError(item_id)

            current = self._items[position]
            if current.analyzed:
                return current

            patched = current.with_analysis(analysis)
            items = list(self._items)
            items[position] = patched
            # positions are unchanged, only the tuple is swapped
            self._items = tuple(items)
            return patched

    def _replace(self, items: Tuple[Item, ...]) -> None:
        self._index = {item.id: position for position, item in enumerate(items)}
        self._items = items


# Global store instance
item_store: Optional[ItemStore] = None


def get_item_store() -> ItemStore:
    """
    Get the global item store, seeded on first use.

    Returns:
        Item store
    """
    global item_store
    if item_store is None:
        from insightstream.db.seed import initial_items
        item_store = ItemStore(initial_items())
    return item_store
