"""
Tests for the local tier: key-value stores and the typed cache on top.
"""

import json

import pytest

from eden_wallet.config import UserRemoteConfig
from eden_wallet.models import Ledger, StorageEventType, Transaction
from eden_wallet.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    LocalCache,
    LocalStoreError,
)


class TestJsonFileKeyValueStore:
    """Disk persistence."""

    def test_values_survive_reopen(self, tmp_path):
        path = tmp_path / "cache.json"
        store = JsonFileKeyValueStore(path)
        store.set("a", "1")
        store.set("b", "2")
        store.delete("a")

        reopened = JsonFileKeyValueStore(path)
        assert reopened.get("a") is None
        assert reopened.get("b") == "2"
        assert list(reopened.keys()) == ["b"]

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "cache.json"
        JsonFileKeyValueStore(path).set("k", "v")

        assert path.exists()

    def test_corrupt_file_is_quarantined(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json", encoding="utf-8")

        store = JsonFileKeyValueStore(path)

        assert list(store.keys()) == []
        assert (tmp_path / "cache.json.corrupt").read_text(encoding="utf-8") == "{not json"

    def test_invalid_utf8_is_quarantined(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_bytes(b'{"k": "\xff\xfe"}')

        store = JsonFileKeyValueStore(path)

        assert list(store.keys()) == []
        assert not path.exists()
        assert (tmp_path / "cache.json.corrupt").read_bytes() == b'{"k": "\xff\xfe"}'

    def test_wrong_shape_is_quarantined(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        store = JsonFileKeyValueStore(path)

        assert store.get("0") is None
        assert (tmp_path / "cache.json.corrupt").exists()

    def test_non_string_values_are_dropped(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"good": "x", "bad": 5}), encoding="utf-8")

        store = JsonFileKeyValueStore(path)

        assert store.get("good") == "x"
        assert store.get("bad") is None

    def test_unwritable_location_raises(self, tmp_path):
        path = tmp_path / "cache.json"
        store = JsonFileKeyValueStore(path)
        # A directory where the temp file should go makes the write fail
        (tmp_path / "cache.json.tmp").mkdir()

        with pytest.raises(LocalStoreError):
            store.set("k", "v")

    def test_failed_set_keeps_previous_value(self, tmp_path):
        path = tmp_path / "cache.json"
        store = JsonFileKeyValueStore(path)
        store.set("kept", "old")
        (tmp_path / "cache.json.tmp").mkdir()

        with pytest.raises(LocalStoreError):
            store.set("kept", "new")
        with pytest.raises(LocalStoreError):
            store.set("fresh", "v")

        assert store.get("kept") == "old"
        assert store.get("fresh") is None

    def test_failed_delete_keeps_value(self, tmp_path):
        path = tmp_path / "cache.json"
        store = JsonFileKeyValueStore(path)
        store.set("kept", "old")
        (tmp_path / "cache.json.tmp").mkdir()

        with pytest.raises(LocalStoreError):
            store.delete("kept")

        assert store.get("kept") == "old"


class TestLocalCacheKeys:

    def test_key_layout(self):
        cache = LocalCache(InMemoryKeyValueStore())

        assert cache.transactions_key(Ledger.PERSONAL) == "eden_wallet_data_Personal"
        assert cache.settings_key(Ledger.JOINT) == "eden_wallet_data_settings_Joint"
        assert cache.outbox_key(Ledger.PERSONAL) == "eden_wallet_data_outbox_Personal"
        assert cache.remote_config_key == "eden_wallet_data_remote_config"


class TestLocalCache:
    """Typed reads never raise."""

    def test_transactions_round_trip(self, local_cache, lunch_draft):
        rows = [lunch_draft.with_id("a", Ledger.PERSONAL)]
        local_cache.put_transactions(Ledger.PERSONAL, rows)

        assert local_cache.get_transactions(Ledger.PERSONAL) == rows
        assert local_cache.get_transactions(Ledger.JOINT) == []

    def test_corrupt_json_reads_as_empty(self, kv_store, local_cache, audit):
        kv_store.set("test_Personal", "{oops")

        assert local_cache.get_transactions(Ledger.PERSONAL) == []
        [event] = audit.recent(event_type=StorageEventType.CACHE_CORRUPTED)
        assert event.entity_id == "test_Personal"

    def test_non_list_reads_as_empty(self, kv_store, local_cache):
        kv_store.set("test_Personal", json.dumps({"id": "a"}))

        assert local_cache.get_transactions(Ledger.PERSONAL) == []

    def test_malformed_entries_are_skipped(self, kv_store, local_cache, lunch_draft):
        good = lunch_draft.with_id("good", Ledger.PERSONAL).to_record()
        kv_store.set("test_Personal", json.dumps([good, {"id": "bad"}, "junk"]))

        assert [t.id for t in local_cache.get_transactions(Ledger.PERSONAL)] == ["good"]

    def test_entries_without_ledger_get_the_key_ledger(self, kv_store, local_cache, lunch_draft):
        record = lunch_draft.with_id("old", Ledger.PERSONAL).to_record()
        del record["ledger"]
        kv_store.set("test_Joint", json.dumps([record]))

        [transaction] = local_cache.get_transactions(Ledger.JOINT)
        assert transaction.ledger == Ledger.JOINT

    def test_empty_outbox_removes_key(self, kv_store, local_cache, lunch_draft):
        local_cache.put_outbox(Ledger.PERSONAL, [Transaction.new_local(lunch_draft, Ledger.PERSONAL)])
        assert "test_outbox_Personal" in kv_store.keys()

        local_cache.put_outbox(Ledger.PERSONAL, [])

        assert "test_outbox_Personal" not in kv_store.keys()
        assert local_cache.get_outbox(Ledger.PERSONAL) == []

    def test_settings_round_trip(self, local_cache, single_label_settings):
        local_cache.put_settings(Ledger.JOINT, single_label_settings)

        assert local_cache.get_settings(Ledger.JOINT) == single_label_settings
        assert local_cache.get_settings(Ledger.PERSONAL) is None

    def test_invalid_settings_read_as_missing(self, kv_store, local_cache):
        kv_store.set("test_settings_Personal", json.dumps({"categories": {}}))

        assert local_cache.get_settings(Ledger.PERSONAL) is None

    def test_remote_config_round_trip(self, local_cache):
        config = UserRemoteConfig(url="https://a.supabase.co", key="k" * 30)

        local_cache.put_remote_config(config)
        assert local_cache.get_remote_config() == config

        local_cache.clear_remote_config()
        assert local_cache.get_remote_config() is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
