"""Tests for state stores."""

import json
import threading
import pytest
from stackplan.ingest.models import (
    BoolValue,
    ListValue,
    MapValue,
    NumberValue,
    ReferenceValue,
    ResourceKind,
    SecretValue,
    StringValue,
)
from stackplan.state import InMemoryStateStore, JsonFileStateStore, StateRecord
from stackplan.utils.errors import StateStoreError


@pytest.fixture
def record():
    """A record using every kind of tagged value."""
    return StateRecord(
        resource_id="app_db",
        provider_id="db-0000000f",
        kind=ResourceKind.DB_INSTANCE,
        last_applied_attributes={
            "engine": StringValue(value="mysql"),
            "allocated_storage": NumberValue(value=20),
            "cpu_credits": NumberValue(value=0.5),
            "multi_az": BoolValue(value=False),
            "password": SecretValue(name="APP_DB_PASSWORD"),
            "subnet_ids": ListValue(items=[ReferenceValue(target="private_a"), ReferenceValue(target="private_b")]),
            "tags": MapValue(entries={"Name": StringValue(value="app-db")}),
        },
        depends_on=["private_a", "private_b"],
        position=14,
    )


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStateStore()
    return JsonFileStateStore(tmp_path / "state.json")


class TestStateStore:
    """Behaviour shared by every store."""
    
    def test_round_trip(self, store, record):
        store.put(record)
        
        loaded = store.get("app_db")
        assert loaded == record
        assert loaded.last_applied_attributes == record.last_applied_attributes
        assert isinstance(loaded.last_applied_attributes["allocated_storage"].value, int)
    
    def test_get_missing(self, store):
        assert store.get("nothing") is None
    
    def test_put_replaces(self, store, record):
        store.put(record)
        store.put(record.model_copy(update={"provider_id": "db-00000010"}))
        
        assert store.get("app_db").provider_id == "db-00000010"
        assert len(store.snapshot()) == 1
    
    def test_delete(self, store, record):
        store.put(record)
        store.delete("app_db")
        store.delete("app_db")
        
        assert store.get("app_db") is None
        assert store.snapshot() == []
    
    def test_returned_records_are_copies(self, store, record):
        store.put(record)
        store.get("app_db").depends_on.append("mutated")
        
        assert store.get("app_db").depends_on == ["private_a", "private_b"]
    
    def test_concurrent_writers_keep_every_record(self, store):
        def write(index):
            store.put(StateRecord(resource_id=f"r{index}", provider_id=f"p{index}", kind=ResourceKind.SUBNET))
        
        threads = [threading.Thread(target=write, args=(i,)) for i in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        
        assert sorted(r.resource_id for r in store.snapshot()) == sorted(f"r{i}" for i in range(20))


class TestJsonFileStateStore:
    """File-specific behaviour."""
    
    def test_persists_across_instances(self, tmp_path, record):
        path = tmp_path / "state.json"
        JsonFileStateStore(path).put(record)
        
        assert JsonFileStateStore(path).get("app_db") == record
    
    def test_unrelated_records_survive_other_writers(self, tmp_path, record):
        path = tmp_path / "state.json"
        first = JsonFileStateStore(path)
        second = JsonFileStateStore(path)
        
        first.put(record)
        second.put(StateRecord(resource_id="vpc", provider_id="vpc-1", kind=ResourceKind.NETWORK))
        first.delete("nothing")
        
        assert {r.resource_id for r in first.snapshot()} == {"app_db", "vpc"}
    
    def test_serial_increments_per_write(self, tmp_path, record):
        store = JsonFileStateStore(tmp_path / "state.json")
        store.put(record)
        store.put(record)
        store.delete("app_db")
        
        assert store.serial == 3
    
    def test_file_layout(self, tmp_path, record):
        path = tmp_path / "state.json"
        JsonFileStateStore(path).put(record)
        
        data = json.loads(path.read_text())
        assert data["version"] == 1
        assert data["resources"]["app_db"]["kind"] == "DbInstance"
        assert data["resources"]["app_db"]["last_applied_attributes"]["password"] == {
            "type": "secret",
            "name": "APP_DB_PASSWORD",
        }
    
    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        
        with pytest.raises(StateStoreError, match="not valid JSON"):
            JsonFileStateStore(path).snapshot()
    
    def test_wrong_version_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"version": 99, "serial": 1, "resources": {}}))
        
        with pytest.raises(StateStoreError, match="version"):
            JsonFileStateStore(path).get("x")
    
    def test_missing_file_is_empty_state(self, tmp_path):
        assert JsonFileStateStore(tmp_path / "nope" / "state.json").snapshot() == []
