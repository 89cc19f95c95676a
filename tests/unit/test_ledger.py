"""
Unit tests for pos_inventory/persist/ledger.py

Tests fetch/update instants, the staleness gate, and monotonic recording.
"""
import pytest

from pos_inventory.errors import StorageError
from pos_inventory.persist import CollectionLedger, CollectionTimestamps, KVStore

KEY = "products_collection"


def test_defaults_to_epoch(ledger):
    stamps = ledger.get_collection_timestamps(KEY)

    assert stamps == CollectionTimestamps(0.0, 0.0)
    assert stamps.never_fetched
    assert not stamps.snapshot_is_fresh


def test_should_fetch_when_never_fetched(ledger):
    assert ledger.should_fetch_collection(KEY) is True


def test_should_not_fetch_right_after_fetch(ledger):
    ledger.save_collection_fetch_time(KEY)
    assert ledger.should_fetch_collection(KEY) is False


def test_should_fetch_after_max_age(ledger, clock):
    ledger.save_collection_fetch_time(KEY)

    clock.advance(300)
    assert ledger.should_fetch_collection(KEY) is False

    clock.advance(1)
    assert ledger.should_fetch_collection(KEY) is True


def test_max_age_override(ledger, clock):
    ledger.save_collection_fetch_time(KEY)
    clock.advance(30)

    assert ledger.should_fetch_collection(KEY, max_age_s=10) is True


def test_force_refresh(ledger):
    ledger.save_collection_fetch_time(KEY)
    assert ledger.should_fetch_collection(KEY, force=True) is True


def test_writes_do_not_gate_collection_fetch(ledger, clock):
    """The collection-level gate ignores writes; they are judged per document."""
    ledger.save_collection_fetch_time(KEY)
    clock.advance(1)
    ledger.save_collection_update_time(KEY)

    assert ledger.should_fetch_collection(KEY) is False
    assert not ledger.get_collection_timestamps(KEY).snapshot_is_fresh


def test_fetch_after_update_is_fresh(ledger, clock):
    ledger.save_collection_update_time(KEY)
    clock.advance(1)
    ledger.save_collection_fetch_time(KEY)

    stamps = ledger.get_collection_timestamps(KEY)
    assert stamps.last_fetch_time == clock.now
    assert stamps.snapshot_is_fresh


def test_update_strictly_after_fetch_with_frozen_clock(ledger):
    """Same-instant fetch then write must still invalidate the snapshot."""
    fetch = ledger.save_collection_fetch_time(KEY)
    update = ledger.save_collection_update_time(KEY)

    assert update > fetch
    assert not ledger.get_collection_timestamps(KEY).snapshot_is_fresh


def test_update_strictly_after_fetch_with_clock_skew(ledger, clock):
    ledger.save_collection_fetch_time(KEY)
    clock.advance(-120)

    ledger.save_collection_update_time(KEY)

    assert not ledger.get_collection_timestamps(KEY).snapshot_is_fresh


def test_instants_are_monotonic(ledger, clock):
    first = ledger.save_collection_fetch_time(KEY)
    clock.advance(-10)
    second = ledger.save_collection_fetch_time(KEY)

    assert second > first


def test_collections_are_partitioned(ledger):
    ledger.save_collection_fetch_time(KEY)

    assert ledger.get_collection_timestamps("users_collection").never_fetched


def test_clear(ledger):
    ledger.save_collection_fetch_time(KEY)
    ledger.save_collection_update_time(KEY)

    ledger.clear(KEY)

    assert ledger.get_collection_timestamps(KEY) == CollectionTimestamps()


def test_survives_restart(tmp_path, clock):
    db_path = tmp_path / "ledger.db"
    with KVStore(db_path) as kv:
        CollectionLedger(kv, clock=clock).save_collection_fetch_time(KEY)

    with KVStore(db_path) as kv:
        stamps = CollectionLedger(kv, clock=clock).get_collection_timestamps(KEY)

    assert stamps.last_fetch_time == clock.now


def test_unreadable_instant_treated_as_epoch(kv, ledger):
    kv.set("timestamps", f"{KEY}.lastFetchTime", b"garbage")

    assert ledger.get_collection_timestamps(KEY).last_fetch_time == 0.0


def test_write_failure_propagates(tmp_path, clock):
    kv = KVStore(tmp_path / "closed.db")
    ledger = CollectionLedger(kv, clock=clock)
    kv.close()

    with pytest.raises(StorageError):
        ledger.save_collection_update_time(KEY)
