"""
Test cases for item analysis and the analyze-once cache.
"""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from insightstream.models import Sentiment
from insightstream.ai.analyzer import ItemAnalyzer, FALLBACK_ANALYSIS
from insightstream.ai.analysis_cache import AnalysisCache
from insightstream.db.item_store import ItemStore

from conftest import make_item, SAMPLE_ANALYSIS


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def openai_stub(**kwargs):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**kwargs)
    return client


@pytest.mark.asyncio
async def test_analyzer_parses_provider_json():
    payload = {
        "summary": "Rival cuts fees.",
        "sentiment": "negative",
        "actionTip": "Call top merchants.",
        "keywords": ["Pricing", "Pricing", "Rival"],
    }
    client = openai_stub(return_value=completion(json.dumps(payload)))
    analyzer = ItemAnalyzer(client=client)

    analysis = await analyzer.analyze("Rival cuts fees", "Delivery fees drop to zero")

    assert analysis.sentiment == Sentiment.NEGATIVE
    assert analysis.summary == "Rival cuts fees."
    assert analysis.action_tip == "Call top merchants."
    assert analysis.keywords == ["Pricing", "Rival"]
    prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "Rival cuts fees" in prompt
    assert "Delivery fees drop to zero" in prompt


@pytest.mark.asyncio
async def test_analyzer_falls_back_on_provider_error():
    analyzer = ItemAnalyzer(client=openai_stub(side_effect=RuntimeError("boom")))
    assert await analyzer.analyze("t", "s") == FALLBACK_ANALYSIS


@pytest.mark.asyncio
async def test_analyzer_falls_back_on_malformed_response():
    analyzer = ItemAnalyzer(client=openai_stub(return_value=completion('{"summary": "only"}')))
    assert await analyzer.analyze("t", "s") == FALLBACK_ANALYSIS

    analyzer = ItemAnalyzer(client=openai_stub(return_value=completion("not json")))
    assert await analyzer.analyze("t", "s") == FALLBACK_ANALYSIS


def test_fallback_analysis_shape():
    assert FALLBACK_ANALYSIS.sentiment == Sentiment.NEUTRAL
    assert FALLBACK_ANALYSIS.keywords == ["Error"]


@pytest.mark.asyncio
async def test_ensure_analyzed_is_idempotent(store, analyzer_stub):
    store.append([make_item("a")])
    cache = AnalysisCache(store, analyzer=analyzer_stub)

    first = await cache.ensure_analyzed(store.get("a"))
    second = await cache.ensure_analyzed(store.get("a"))
    # a stale, unanalyzed copy must not trigger a second call either
    third = await cache.ensure_analyzed(make_item("a"))

    assert first.analyzed is True
    assert first.analysis == second.analysis == third.analysis == SAMPLE_ANALYSIS
    assert analyzer_stub.analyze.await_count == 1
    assert store.get("a").analysis == SAMPLE_ANALYSIS


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_call(store):
    store.append([make_item("a")])
    gate = asyncio.Event()
    calls = []

    async def slow_analyze(title, snippet):
        calls.append(title)
        await gate.wait()
        return SAMPLE_ANALYSIS

    analyzer = MagicMock()
    analyzer.analyze = slow_analyze
    cache = AnalysisCache(store, analyzer=analyzer)

    item = store.get("a")
    first = asyncio.ensure_future(cache.ensure_analyzed(item))
    second = asyncio.ensure_future(cache.ensure_analyzed(item))
    await asyncio.sleep(0)
    assert cache.in_flight_count == 1

    gate.set()
    results = await asyncio.gather(first, second)

    assert len(calls) == 1
    assert results[0] == results[1]
    assert results[0].analysis == SAMPLE_ANALYSIS
    await asyncio.sleep(0)
    assert cache.in_flight_count == 0


@pytest.mark.asyncio
async def test_failed_call_is_forgotten_and_can_be_retried(store):
    store.append([make_item("a")])
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(side_effect=[RuntimeError("down"), SAMPLE_ANALYSIS])
    cache = AnalysisCache(store, analyzer=analyzer)

    with pytest.raises(RuntimeError):
        await cache.ensure_analyzed(store.get("a"))
    await asyncio.sleep(0)
    assert cache.in_flight_count == 0
    assert store.get("a").analyzed is False

    retried = await cache.ensure_analyzed(store.get("a"))
    assert retried.analysis == SAMPLE_ANALYSIS
    assert analyzer.analyze.await_count == 2
    await asyncio.sleep(0)
    assert cache.in_flight_count == 0


@pytest.mark.asyncio
async def test_patch_of_vanished_item_is_forgotten(analyzer_stub):
    empty_store = ItemStore()
    cache = AnalysisCache(empty_store, analyzer=analyzer_stub)

    with pytest.raises(KeyError):
        await cache.ensure_analyzed(make_item("gone"))
    await asyncio.sleep(0)
    assert cache.in_flight_count == 0


@pytest.mark.asyncio
async def test_fallback_result_is_cached(store):
    store.append([make_item("a")])
    analyzer = ItemAnalyzer(client=openai_stub(side_effect=RuntimeError("down")))
    cache = AnalysisCache(store, analyzer=analyzer)

    first = await cache.ensure_analyzed(store.get("a"))
    second = await cache.ensure_analyzed(store.get("a"))

    assert first.analysis == FALLBACK_ANALYSIS
    assert second.analysis == FALLBACK_ANALYSIS
    assert analyzer.client.chat.completions.create.await_count == 1


@pytest.mark.asyncio
async def test_already_analyzed_item_skips_provider(store, analyzer_stub):
    analyzed = make_item("a", analyzed=True, analysis=SAMPLE_ANALYSIS)
    store.append([analyzed])
    cache = AnalysisCache(store, analyzer=analyzer_stub)

    assert await cache.ensure_analyzed(analyzed) is analyzed
    analyzer_stub.analyze.assert_not_awaited()


@pytest.mark.asyncio
async def test_ensure_analyzed_by_unknown_id_raises(store, analyzer_stub):
    cache = AnalysisCache(store, analyzer=analyzer_stub)
    with pytest.raises(KeyError):
        await cache.ensure_analyzed_by_id("missing")


@pytest.mark.asyncio
async def test_analyzer_without_api_key_returns_fallback():
    config = {"api_key": None, "analysis_model": "m", "max_tokens": 10, "timeout": 1.0}
    with patch("insightstream.ai.analyzer.get_openai_config", return_value=config):
        analyzer = ItemAnalyzer()

    assert analyzer.client is None
    assert await analyzer.analyze("t", "s") == FALLBACK_ANALYSIS
