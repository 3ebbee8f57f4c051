"""
Core data model for the intelligence feed.
Items, their AI analysis, user-declared keywords and subscriptions,
and the tagged result returned at every adapter boundary.
"""

import itertools
from datetime import datetime, timezone
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Dict, Any, Optional

NO_LINK = "#"

_id_sequence = itertools.count(1)


class Category(str, Enum):
    """Classification tag driving filtering and display grouping."""
    DEFENSIVE = "DEFENSIVE"  # brand monitoring, negative news about us
    OFFENSIVE = "OFFENSIVE"  # competitor moves
    MACRO = "MACRO"          # market trends, regulation
    SOCIAL = "SOCIAL"        # social media trends


class Sentiment(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_item_id(prefix: str, *parts: Any) -> str:
    """
    Build an item id that is unique for the lifetime of the process.

    The millisecond timestamp keeps ids readable and sortable; the trailing
    sequence number separates ids minted within the same millisecond.
    """
    stamp = int(utc_now().timestamp() * 1000)
    segments = [prefix, *[str(p) for p in parts], str(stamp), str(next(_id_sequence))]
    return "-".join(segments)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime) into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        # naive timestamps are local wall-clock time
        parsed = parsed.astimezone()
    return parsed


@dataclass(frozen=True)
class Analysis:
    """
    AI-derived annotation attached to an item.
    """
    summary: str
    sentiment: Sentiment
    action_tip: str
    keywords: List[str] = field(default_factory=list)

    def __post_init__(self):
        object.__setattr__(self, "sentiment", Sentiment(self.sentiment))
        unique = list(dict.fromkeys(str(k) for k in self.keywords))
        object.__setattr__(self, "keywords", unique)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "sentiment": self.sentiment.value,
            "actionTip": self.action_tip,
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Analysis":
        return cls(
            summary=str(data["summary"]),
            sentiment=Sentiment(str(data["sentiment"]).upper()),
            action_tip=str(data.get("actionTip", data.get("action_tip", ""))),
            keywords=list(data.get("keywords") or []),
        )


@dataclass(frozen=True)
class Item:
    """
    A single intelligence entry in the collection.
    """
    id: str
    title: str
    snippet: str
    source: str
    published_at: datetime
    category: Category
    url: str = NO_LINK
    analyzed: bool = False
    analysis: Optional[Analysis] = None

    def __post_init__(self):
        object.__setattr__(self, "category", Category(self.category))
        if self.analyzed != (self.analysis is not None):
            raise ValueError(f"Item {self.id}: analysis must be present iff analyzed is set")

    def with_analysis(self, analysis: Analysis) -> "Item":
        """Return the analyzed copy of this item."""
        return replace(self, analyzed=True, analysis=analysis)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "snippet": self.snippet,
            "source": self.source,
            "url": self.url,
            "publishedAt": self.published_at.isoformat(),
            "category": self.category.value,
            "analyzed": self.analyzed,
        }
        if self.analysis is not None:
            data["analysis"] = self.analysis.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        analysis = data.get("analysis")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            snippet=str(data.get("snippet", "")),
            source=str(data.get("source", "")),
            url=str(data.get("url") or NO_LINK),
            published_at=parse_timestamp(data["publishedAt"]),
            category=Category(data["category"]),
            analyzed=analysis is not None,
            analysis=Analysis.from_dict(analysis) if analysis else None,
        )


@dataclass(frozen=True)
class KeywordConfig:
    """A user-declared search term bound to a category."""
    id: str
    term: str
    category: Category

    def __post_init__(self):
        object.__setattr__(self, "category", Category(self.category))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "term": self.term, "category": self.category.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeywordConfig":
        return cls(id=str(data["id"]), term=str(data["term"]), category=Category(data["category"]))


@dataclass(frozen=True)
class SubscriptionConfig:
    """A user-declared feed source. The url is opaque to the pipeline."""
    id: str
    name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscriptionConfig":
        return cls(id=str(data["id"]), name=str(data["name"]), url=str(data["url"]))


@dataclass
class FetchResult:
    """
    Outcome of a single adapter call.

    Adapters never raise past their boundary; they report failure here and
    the caller decides how to degrade.
    """
    items: List[Item]
    status: str = "ok"
    error_message: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def ok(cls, items: List[Item]) -> "FetchResult":
        return cls(items=list(items))

    @classmethod
    def error(cls, reason: str) -> "FetchResult":
        return cls(items=[], status="error", error_message=reason)
