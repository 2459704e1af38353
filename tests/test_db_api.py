import pytest
from fastapi.testclient import TestClient

from jsondb_mail.db_api import create_db_app
from jsondb_mail.store import CollectionStore


@pytest.fixture
def store(tmp_path):
    return CollectionStore(tmp_path / "database")


@pytest.fixture
def client(store):
    with TestClient(create_db_app(store)) as client:
        yield client


def backups(store):
    directory = store.base_path / "backups"
    return sorted(p.name for p in directory.iterdir()) if directory.exists() else []


def test_lifespan_initializes_store(client, store):
    assert store.base_path.is_dir()


def test_productivity_round_trip(client):
    response = client.post("/api/db/productividad/save", json={"data": [{"id": 1, "hours": 8}]})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 1
    assert body["message"]

    response = client.get("/api/db/productividad/get")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [{"id": 1, "hours": 8}], "count": 1}


def test_productivity_get_when_absent(client):
    assert client.get("/api/db/productividad/get").json() == {"success": True, "data": [], "count": 0}


@pytest.mark.parametrize("payload", [{"data": {"id": 1}}, {"data": "x"}, {}, {"data": None}])
def test_productivity_save_requires_array(client, store, payload):
    response = client.post("/api/db/productividad/save", json=payload)
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]
    assert not (store.base_path / "productividad.json").exists()
    assert backups(store) == []


def test_malformed_body_is_bad_request(client):
    response = client.post(
        "/api/db/productividad/save", content=b"{broken", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_config_round_trip(client):
    value = {"theme": "dark", "limits": [1, 2], "enabled": False}
    response = client.post("/api/db/config/save", json={"collection": "settings", "data": value})
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.get("/api/db/config/get/settings")
    assert response.json() == {"success": True, "data": value}


def test_config_get_absent_returns_null(client):
    response = client.get("/api/db/config/get/missing")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}


@pytest.mark.parametrize(
    "payload",
    [{"data": {"a": 1}}, {"collection": "settings"}, {"collection": "", "data": 1}, {"collection": "x", "data": None}],
)
def test_config_save_requires_fields(client, payload):
    response = client.post("/api/db/config/save", json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_config_save_rejects_traversal(client, store):
    response = client.post("/api/db/config/save", json={"collection": "../escape", "data": 1})
    assert response.status_code == 400
    assert not (store.base_path.parent / "escape.json").exists()


def test_list_collections(client):
    client.post("/api/db/productividad/save", json={"data": [1, 2]})
    client.post("/api/db/config/save", json={"collection": "settings", "data": {"a": 1}})
    client.post("/api/db/backup/settings")

    response = client.get("/api/db/collections")
    assert response.status_code == 200
    collections = response.json()["collections"]
    assert [c["name"] for c in collections] == ["productividad", "settings"]
    assert collections[0]["records"] == 2
    assert collections[1]["records"] == "N/A"
    assert set(collections[0]) == {"name", "size", "modified", "records"}


def test_delete_collection(client, store):
    client.post("/api/db/config/save", json={"collection": "settings", "data": {"a": 1}})

    response = client.delete("/api/db/delete/settings")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get("/api/db/config/get/settings").json()["data"] is None
    assert len(backups(store)) == 1


def test_delete_missing_collection_is_404(client, store):
    response = client.delete("/api/db/delete/ghost")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Collection not found"}
    assert backups(store) == []


def test_backup_endpoint(client, store):
    client.post("/api/db/config/save", json={"collection": "settings", "data": {"a": 1}})

    response = client.post("/api/db/backup/settings")
    assert response.status_code == 200
    assert response.json()["success"] is True
    names = backups(store)
    assert len(names) == 1 and names[0].startswith("settings_")


def test_backup_missing_collection_still_succeeds(client, store):
    response = client.post("/api/db/backup/ghost")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert backups(store) == []


def test_stats(client, store):
    client.post("/api/db/productividad/save", json={"data": [1, 2, 3]})
    client.post("/api/db/config/save", json={"collection": "settings", "data": {"a": 1}})

    response = client.get("/api/db/stats")
    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["collections"] == 2
    assert stats["totalRecords"] == 3
    assert stats["totalSize"].endswith(" KB")
    assert stats["path"] == str(store.base_path)


def test_io_errors_are_500(client, store):
    (store.base_path / "broken.json").write_text("{oops")

    response = client.get("/api/db/config/get/broken")
    assert response.status_code == 500
    assert response.json()["success"] is False
    assert client.get("/api/db/stats").status_code == 500
    assert client.get("/api/db/collections").status_code == 500


def test_oversized_body_is_rejected(store):
    app = create_db_app(store, max_body_bytes=10)
    with TestClient(app) as client:
        response = client.post("/api/db/productividad/save", json={"data": [1, 2, 3, 4, 5]})
    assert response.status_code == 413


def test_oversized_chunked_body_is_rejected(store):
    app = create_db_app(store, max_body_bytes=10)
    chunks = iter([b'{"data": ', b'[1, 2, 3, 4, 5]}'])
    with TestClient(app) as client:
        response = client.post(
            "/api/db/productividad/save", content=chunks, headers={"Content-Type": "application/json"}
        )
    assert response.status_code == 413
    assert store.get_productivity() == []


def test_small_chunked_body_reaches_the_route(client, store):
    chunks = iter([b'{"data": ', b'[{"id": 7}]}'])
    response = client.post(
        "/api/db/productividad/save", content=chunks, headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 200, response.text
    assert store.get_productivity() == [{"id": 7}]


def test_cors_allows_any_origin(client):
    response = client.get("/api/db/stats", headers={"Origin": "http://example.com"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_metrics_endpoint(client):
    client.get("/api/db/productividad/get")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert 'jdm_store_operations_total{operation="get"}' in response.text
