"""
AI-powered item analysis using OpenAI chat models.
Turns a news headline and snippet into a short insight for account managers:
summary, sentiment, recommended action and keyword tags.
"""

import json
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from insightstream.models import Analysis, Sentiment
from insightstream.utils.config import get_openai_config

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = Analysis(
    summary="Analysis is unavailable right now, sorry. Please try again later.",
    sentiment=Sentiment.NEUTRAL,
    action_tip="Please review the original source manually.",
    keywords=["Error"],
)

ANALYSIS_TEMPLATE = """
You are an intelligence analyst serving account managers of a food delivery platform.
Analyze the following news headline and snippet.

Title: "{title}"
Snippet: "{snippet}"

Respond with a JSON object with exactly these fields:
- "summary": one sentence capturing the key point.
- "sentiment": one of "POSITIVE", "NEGATIVE" or "NEUTRAL".
- "actionTip": how the account manager should talk to merchants or respond internally.
- "keywords": an array of two short keyword tags.
"""


class AnalysisError(Exception):
    """Raised when the provider returns something that is not a valid analysis."""


class ItemAnalyzer:
    """
    Adapter over the OpenAI chat completions API.

    ``analyze`` never raises: provider failures, missing credentials and
    malformed responses all come back as ``FALLBACK_ANALYSIS``.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the analyzer with OpenAI configuration.

        Args:
            client: Preconfigured client. If None, one is built from config
                when an API key is available.
        """
        self.config = get_openai_config()
        self.model = self.config["analysis_model"]
        self.max_tokens = self.config["max_tokens"]
        self.client = client
        if self.client is None and self.config["api_key"]:
            self.client = AsyncOpenAI(
                api_key=self.config["api_key"],
                timeout=self.config["timeout"]
            )

    async def analyze(self, title: str, snippet: str) -> Analysis:
        """
        Analyze a single item.

        Args:
            title: Item headline
            snippet: Item snippet

        Returns:
            Provider analysis, or the fallback analysis on any failure
        """
        if self.client is None:
            logger.warning("No OpenAI API key configured, returning fallback analysis")
            return FALLBACK_ANALYSIS

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": "You are a concise market intelligence analyst. Always answer in JSON."
                    },
                    {
                        "role": "user",
                        "content": ANALYSIS_TEMPLATE.format(title=title, snippet=snippet)
                    }
                ],
                response_format={"type": "json_object"},
                max_tokens=self.max_tokens,
                temperature=0.3
            )

            text = response.choices[0].message.content
            if not text:
                raise AnalysisError("Empty response from provider")

            return self._parse_analysis(json.loads(text))

        except Exception as e:
            logger.error(f"Item analysis failed: {e}")
            return FALLBACK_ANALYSIS

    def _parse_analysis(self, data: Dict[str, Any]) -> Analysis:
        """
        Validate a provider payload.

        Raises:
            AnalysisError: If a required field is missing or invalid
        """
        if not isinstance(data, dict):
            raise AnalysisError("Analysis payload is not an object")

        missing = [f for f in ("summary", "sentiment", "actionTip", "keywords") if f not in data]
        if missing:
            raise AnalysisError(f"Analysis payload missing fields: {', '.join(missing)}")

        keywords = data["keywords"]
        if isinstance(keywords, str):
            keywords = [keywords]

        try:
            sentiment = Sentiment(str(data["sentiment"]).strip().upper())
        except ValueError:
            raise AnalysisError(f"Unknown sentiment: {data['sentiment']}")

        return Analysis(
            summary=str(data["summary"]).strip(),
            sentiment=sentiment,
            action_tip=str(data["actionTip"]).strip(),
            keywords=[str(k).strip() for k in keywords if str(k).strip()],
        )
