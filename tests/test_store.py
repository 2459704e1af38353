import json
from datetime import datetime, timedelta, timezone

import pytest

from jsondb_mail.backup import BackupManager
from jsondb_mail.errors import CollectionNotFound, InvalidInput, StoreIOError
from jsondb_mail.store import PRODUCTIVITY_COLLECTION, CollectionStore


class TickingClock:
    """Clock advancing one second per call so every backup gets its own name."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def store(tmp_path):
    base = tmp_path / "database"
    store = CollectionStore(base, backups=BackupManager(base.resolve(), clock=TickingClock()))
    store.initialize()
    return store


def backup_files(store):
    backup_dir = store.base_path / "backups"
    return sorted(p.name for p in backup_dir.iterdir()) if backup_dir.exists() else []


def test_initialize_creates_base_directory(tmp_path):
    store = CollectionStore(tmp_path / "nested" / "db")
    store.initialize()
    store.initialize()
    assert (tmp_path / "nested" / "db").is_dir()


@pytest.mark.parametrize(
    "value",
    [
        {"theme": "dark", "nested": {"list": [1, 2.5, None, True]}},
        [{"id": 1, "hours": 8}],
        "plain string",
        42,
        False,
        {"unicode": "añadir ✓"},
    ],
)
def test_save_then_get_round_trip(store, value):
    store.save("settings", value)
    assert store.get("settings") == value


def test_save_writes_indented_json(store):
    store.save("settings", {"a": [1]})
    text = (store.base_path / "settings.json").read_text(encoding="utf-8")
    assert text == json.dumps({"a": [1]}, indent=2)


def test_save_returns_record_count_for_arrays(store):
    assert store.save("items", [1, 2, 3]) == 3
    assert store.save("settings", {"a": 1}) is None


def test_get_missing_returns_sentinels(store):
    assert store.get("nothing") is None
    assert store.get_productivity() == []


def test_save_productivity_rejects_non_array_without_side_effects(store):
    store.save_productivity([{"id": 1}])
    before = (store.base_path / f"{PRODUCTIVITY_COLLECTION}.json").read_text()
    backups_before = backup_files(store)

    with pytest.raises(InvalidInput):
        store.save_productivity({"id": 2})

    assert (store.base_path / f"{PRODUCTIVITY_COLLECTION}.json").read_text() == before
    assert backup_files(store) == backups_before


def test_save_backs_up_existing_file_once(store):
    store.save_productivity([{"id": 1}])
    assert backup_files(store) == []

    store.save_productivity([{"id": 1}, {"id": 2}])

    files = backup_files(store)
    assert len(files) == 1
    assert files[0].startswith(f"{PRODUCTIVITY_COLLECTION}_")
    snapshot = json.loads((store.base_path / "backups" / files[0]).read_text())
    assert snapshot == [{"id": 1}]
    assert store.get_productivity() == [{"id": 1}, {"id": 2}]


def test_delete_backs_up_and_removes(store):
    store.save("settings", {"a": 1})
    store.delete("settings")

    assert store.get("settings") is None
    files = backup_files(store)
    assert len(files) == 1 and files[0].startswith("settings_")


def test_delete_missing_raises_and_leaves_backups_unchanged(store):
    store.save("settings", {"a": 1})
    store.backup("settings")
    before = backup_files(store)

    with pytest.raises(CollectionNotFound):
        store.delete("ghost")

    assert backup_files(store) == before


def test_backup_missing_collection_is_silent_noop(store):
    assert store.backup("ghost") is None
    assert backup_files(store) == []


def test_backup_existing_collection(store):
    store.save("settings", {"a": 1})
    target = store.backup("settings")
    assert target is not None
    assert backup_files(store) == [target.name]


def test_list_collections_skips_backups(store):
    store.save_productivity([{"id": 1}, {"id": 2}])
    store.save("settings", {"theme": "dark"})
    store.backup("settings")

    collections = store.list_collections()

    assert [c["name"] for c in collections] == [PRODUCTIVITY_COLLECTION, "settings"]
    productivity, settings = collections
    assert productivity["records"] == 2
    assert settings["records"] == "N/A"
    assert settings["size"] == (store.base_path / "settings.json").stat().st_size
    assert settings["modified"].endswith("Z")
    datetime.fromisoformat(settings["modified"].replace("Z", "+00:00"))


def test_stats_aggregates_array_collections(store):
    store.save_productivity([1, 2, 3])
    store.save("other", [4, 5])
    store.save("settings", {"a": 1})
    store.backup("other")

    stats = store.stats()

    total = sum((store.base_path / f"{n}.json").stat().st_size for n in (PRODUCTIVITY_COLLECTION, "other", "settings"))
    assert stats["collections"] == 3
    assert stats["totalRecords"] == 5
    assert stats["totalSize"] == f"{total / 1024:.2f} KB"
    assert stats["path"] == str(store.base_path)


def test_stats_without_arrays(store):
    store.save("settings", {"a": 1})
    assert store.stats()["totalRecords"] == 0


def test_stats_on_empty_store(store):
    assert store.stats() == {
        "collections": 0,
        "totalSize": "0.00 KB",
        "totalRecords": 0,
        "path": str(store.base_path),
    }


def test_corrupt_file_surfaces_as_io_error(store):
    (store.base_path / "broken.json").write_text("{not json")

    with pytest.raises(StoreIOError):
        store.get("broken")
    with pytest.raises(StoreIOError):
        store.stats()


@pytest.mark.parametrize("name", ["", "   ", "..", ".", "../escape", "a/b", "a\\b", None, 12])
def test_invalid_collection_names(store, name):
    with pytest.raises(InvalidInput):
        store.save(name, {"a": 1})


def test_metrics_count_operations(store):
    store.save("settings", {"a": 1})
    store.save("settings", {"a": 2})
    store.backup("ghost")
    with pytest.raises(CollectionNotFound):
        store.delete("ghost")

    output = store.metrics.generate_latest()
    assert b'jdm_store_operations_total{operation="save"} 2.0' in output
    assert b'jdm_store_errors_total{operation="delete"} 1.0' in output
    assert b"jdm_backups_total 1.0" in output


def test_rejected_productivity_save_counts_operation_and_error(store):
    with pytest.raises(InvalidInput):
        store.save_productivity("not a list")

    output = store.metrics.generate_latest()
    assert b'jdm_store_operations_total{operation="save"} 1.0' in output
    assert b'jdm_store_errors_total{operation="save"} 1.0' in output
