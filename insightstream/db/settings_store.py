"""
Persistent keyword and subscription settings.
Stores the two named collections in a JSON document and falls back to the
default seed collections when the document is missing or unreadable.
"""

import os
import json
import logging
from typing import List, Dict, Any, Optional, Callable, TypeVar

from insightstream.models import KeywordConfig, SubscriptionConfig
from insightstream.db.seed import default_keywords, default_subscriptions
from insightstream.utils.config import get_settings_store_path

logger = logging.getLogger(__name__)

KEYWORDS_KEY = "insightstream_keywords"
SUBSCRIPTIONS_KEY = "insightstream_rss"

T = TypeVar("T")


class SettingsStore:
    """
    Key/value settings document on local disk.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Initialize the settings store.

        Args:
            path: Location of the JSON document. If None, uses config.
        """
        self.path = path or get_settings_store_path()
        self._data: Dict[str, Any] = self._load_document()

    def get_keywords(self) -> List[KeywordConfig]:
        return self._restore(KEYWORDS_KEY, KeywordConfig.from_dict, default_keywords)

    def set_keywords(self, keywords: List[KeywordConfig]) -> None:
        self._data[KEYWORDS_KEY] = [k.to_dict() for k in keywords]
        self._save_document()

    def get_subscriptions(self) -> List[SubscriptionConfig]:
        return self._restore(SUBSCRIPTIONS_KEY, SubscriptionConfig.from_dict, default_subscriptions)

    def set_subscriptions(self, subscriptions: List[SubscriptionConfig]) -> None:
        self._data[SUBSCRIPTIONS_KEY] = [s.to_dict() for s in subscriptions]
        self._save_document()

    def get_search_terms(self) -> List[str]:
        """Keyword terms in configured order, blanks dropped."""
        return [k.term for k in self.get_keywords() if k.term.strip()]

    def _restore(
        self,
        key: str,
        parse: Callable[[Dict[str, Any]], T],
        default: Callable[[], List[T]]
    ) -> List[T]:
        raw = self._data.get(key)
        if raw is None:
            return default()

        try:
            if not isinstance(raw, list):
                raise ValueError(f"expected a list, got {type(raw).__name__}")
            return [parse(entry) for entry in raw]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse {key} from settings store: {e}")
            return default()

    def _load_document(self) -> Dict[str, Any]:
        """Load the settings document, or start empty."""
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings document is not an object")
            return data
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load settings from {self.path}: {e}")
            return {}

    def _save_document(self) -> None:
        """Write the settings document to disk."""
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            logger.debug(f"Settings saved to {self.path}")
        except OSError as e:
            logger.error(f"Failed to save settings to {self.path}: {e}")


# Global settings store instance
settings_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """
    Get the global settings store instance.

    Returns:
        Settings store
    """
    global settings_store
    if settings_store is None:
        settings_store = SettingsStore()
    return settings_store
