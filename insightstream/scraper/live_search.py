"""
Live keyword search through an LLM with web search enabled.
Sends every configured keyword in one query and parses the model's answer
into candidate items, attaching cited source URLs where the model gives them.
"""

import json
import logging
import re
from typing import List, Dict, Any, Optional, Sequence

from openai import AsyncOpenAI

from insightstream.models import Category, FetchResult, Item, NO_LINK, next_item_id, utc_now
from insightstream.utils.config import get_openai_config, get_pipeline_config

logger = logging.getLogger(__name__)

TERM_SEPARATOR = ", "

SEARCH_TEMPLATE = """
Search the web for the latest news about the following keywords: {terms}.
Focus on the food and beverage and food delivery industry.

Return up to {max_results} relevant, recent news items as a JSON array.
Each element must be an object with the fields "title", "source" and "snippet".
Return only the JSON array, with no commentary.
"""

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.IGNORECASE | re.DOTALL)


class LiveSearchClient:
    """
    Adapter over the OpenAI Responses API with the web search tool.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the search client.

        Args:
            client: Preconfigured client. If None, one is built from config
                when an API key is available.
        """
        config = get_openai_config()
        self.model = config["search_model"]
        self.max_results = get_pipeline_config()["max_search_results"]
        self.client = client
        if self.client is None and config["api_key"]:
            self.client = AsyncOpenAI(api_key=config["api_key"], timeout=config["timeout"])

    async def search(self, terms: Sequence[str]) -> FetchResult:
        """
        Search live news for a set of keywords.

        Args:
            terms: Keyword terms, in configured order

        Returns:
            FetchResult with MACRO items in the order the provider listed them
        """
        terms = [t.strip() for t in terms if t and t.strip()]
        if not terms:
            return FetchResult.ok([])

        if self.client is None:
            logger.warning("No OpenAI API key configured, skipping live search")
            return FetchResult.ok([])

        query = TERM_SEPARATOR.join(terms)

        try:
            response = await self.client.responses.create(
                model=self.model,
                tools=[{"type": "web_search"}],
                input=SEARCH_TEMPLATE.format(terms=query, max_results=self.max_results)
            )
        except Exception as e:
            logger.error(f"Live search failed: {e}")
            return FetchResult.error(str(e))

        entries = self._parse_entries(getattr(response, "output_text", "") or "")
        urls = self._extract_citation_urls(response)
        if entries and len(urls) != len(entries):
            logger.debug(f"Live search returned {len(entries)} items but {len(urls)} citations")

        fetched_at = utc_now()
        items = []
        for position, entry in enumerate(entries):
            items.append(Item(
                id=next_item_id("live", position),
                title=entry["title"],
                source=entry["source"],
                snippet=entry["snippet"],
                url=urls[position] if position < len(urls) else NO_LINK,
                published_at=fetched_at,
                category=Category.MACRO,
            ))

        logger.info(f"Live search for '{query}' returned {len(items)} items")
        return FetchResult.ok(items)

    def _parse_entries(self, text: str) -> List[Dict[str, str]]:
        """
        Parse the model answer as a JSON array of news objects.

        Anything that is not such an array yields no entries.
        """
        fenced = _FENCED_BLOCK.search(text)
        if fenced:
            text = fenced.group(1)

        # the model may wrap the array in prose
        start, end = text.find("["), text.rfind("]")
        if start == -1 or end < start:
            logger.warning("Live search response contains no JSON array")
            return []

        try:
            data = json.loads(text[start:end + 1])
        except ValueError:
            logger.warning("Live search response is not valid JSON")
            return []

        if not isinstance(data, list):
            logger.warning("Live search response is not a JSON array")
            return []

        entries = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            title = str(raw.get("title") or "").strip()
            if not title:
                continue
            entries.append({
                "title": title,
                "source": str(raw.get("source") or "Web").strip(),
                "snippet": str(raw.get("snippet") or "").strip(),
            })
        return entries

    def _extract_citation_urls(self, response: Any) -> List[str]:
        """Collect cited URLs in answer order, without duplicates."""
        urls: List[str] = []
        for output in getattr(response, "output", None) or []:
            if getattr(output, "type", None) != "message":
                continue
            for part in getattr(output, "content", None) or []:
                for annotation in getattr(part, "annotations", None) or []:
                    if getattr(annotation, "type", None) != "url_citation":
                        continue
                    url = getattr(annotation, "url", None)
                    if url and url not in urls:
                        urls.append(url)
        return urls
