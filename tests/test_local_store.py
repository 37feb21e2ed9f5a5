"""
Tests for the local disk tier.

Feature: agentnft-sdk
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from agentnft.addressing import merkle_root
from agentnft.exceptions import NotFoundError
from agentnft.storage.local import LocalStore


def test_store_layout_and_index(tmp_path) -> None:
    store = LocalStore(tmp_path)
    result = store.store(b"hello", {"fallbackReason": "test"})

    body = result.content_address[2:]
    assert result.content_address == merkle_root(b"hello")
    assert result.transaction_reference == f"local-{body}"
    assert result.is_local
    assert (tmp_path / "files" / body[:2] / f"{body}.bin").read_bytes() == b"hello"

    index = json.loads((tmp_path / "metadata.json").read_text())
    entry = index[result.content_address]
    assert entry["size"] == 5
    assert entry["filePath"] == f"files/{body[:2]}/{body}.bin"
    assert entry["fallbackReason"] == "test"
    assert "timestamp" in entry


def test_store_is_idempotent(tmp_path, caplog) -> None:
    """
    Property 4: Idempotent local store

    Storing identical bytes twice SHALL yield the same address and the
    second call SHALL short-circuit without rewriting the index.
    """
    store = LocalStore(tmp_path)
    first = store.store(b"same bytes")
    index_before = (tmp_path / "metadata.json").read_text()

    with caplog.at_level("INFO", logger="agentnft.storage"):
        second = store.store(b"same bytes", {"source": "ignored"})

    assert second == first
    assert (tmp_path / "metadata.json").read_text() == index_before
    assert "already exists" in caplog.text



def test_store_indexes_orphaned_file(tmp_path) -> None:
    store = LocalStore(tmp_path)
    first = store.store(b"orphan", {"source": "first"})
    (tmp_path / "metadata.json").write_text("{}")

    second = store.store(b"orphan", {"source": "second"})

    assert second == first
    index = store.load_index()
    assert set(index) == {first.content_address}
    assert index[first.content_address].size == 6
    assert index[first.content_address].provenance == {"source": "second"}
    assert store.retrieve(first.content_address) == b"orphan"

def test_retrieve_missing_raises_not_found(tmp_path) -> None:
    with pytest.raises(NotFoundError):
        LocalStore(tmp_path).retrieve(merkle_root(b"nothing"))


def test_corrupt_index_starts_fresh(tmp_path) -> None:
    store = LocalStore(tmp_path)
    (tmp_path / "metadata.json").write_text("{not json")

    assert store.load_index() == {}
    result = store.store(b"data")
    assert set(store.load_index()) == {result.content_address}


def test_cleanup_removes_only_old_entries(tmp_path) -> None:
    store = LocalStore(tmp_path)
    old = store.store(b"old data")
    fresh = store.store(b"fresh data!")

    index = store.load_index()
    index[old.content_address].timestamp = (
        datetime.now(timezone.utc) - timedelta(days=45)
    ).isoformat()
    store.save_index(index)

    result = store.cleanup(max_age_days=30)

    assert result.deleted_count == 1
    assert result.freed_bytes == len(b"old data")
    assert not store.exists(old.content_address)
    assert store.exists(fresh.content_address)
    assert set(store.load_index()) == {fresh.content_address}


def test_cleanup_keeps_entries_with_bad_timestamps(tmp_path) -> None:
    store = LocalStore(tmp_path)
    kept = store.store(b"data")
    index = store.load_index()
    index[kept.content_address].timestamp = "yesterday"
    store.save_index(index)

    assert store.cleanup(max_age_days=0).deleted_count == 0
    assert store.exists(kept.content_address)
