"""
Test cases for the in-memory item store.
"""

import pytest

from insightstream.models import Analysis, Category, Sentiment
from insightstream.db.item_store import ItemStore

from conftest import make_item, SAMPLE_ANALYSIS


def ids(items):
    return [item.id for item in items]


def test_append_prepends_batch_in_order(store):
    store.append([make_item("old1"), make_item("old2")])
    inserted = store.append([make_item("new1"), make_item("new2")])

    assert ids(inserted) == ["new1", "new2"]
    assert ids(store.snapshot()) == ["new1", "new2", "old1", "old2"]


def test_append_rejects_duplicate_ids(store):
    store.append([make_item("a")])
    inserted = store.append([make_item("b"), make_item("a"), make_item("b")])

    assert ids(inserted) == ["b"]
    assert ids(store.snapshot()) == ["b", "a"]


def test_append_empty_batch_is_noop(store):
    before = store.snapshot()
    assert store.append([]) == []
    assert store.snapshot() is before


def test_snapshot_is_not_affected_by_later_writes(store):
    store.append([make_item("a")])
    snapshot = store.snapshot()

    store.append([make_item("b")])
    store.patch("a", SAMPLE_ANALYSIS)

    assert ids(snapshot) == ["a"]
    assert snapshot[0].analyzed is False


def test_patch_sets_analysis_once(store):
    store.append([make_item("a"), make_item("b")])

    patched = store.patch("b", SAMPLE_ANALYSIS)
    assert patched.analyzed is True
    assert patched.analysis == SAMPLE_ANALYSIS
    assert store.get("b") == patched
    assert ids(store.snapshot()) == ["a", "b"]

    other = Analysis(summary="x", sentiment=Sentiment.POSITIVE, action_tip="y")
    assert store.patch("b", other).analysis == SAMPLE_ANALYSIS


def test_patch_unknown_id_raises(store):
    with pytest.raises(KeyError):
        store.patch("missing", SAMPLE_ANALYSIS)


def test_seeded_store_keeps_seed_order():
    seeded = ItemStore([make_item("n1"), make_item("n2", category=Category.MACRO)])
    assert len(seeded) == 2
    assert "n2" in seeded
    assert ids(seeded.snapshot()) == ["n1", "n2"]
