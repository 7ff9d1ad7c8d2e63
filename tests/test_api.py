import pytest
from fastapi.testclient import TestClient

from cn_recipient import main
from cn_recipient.parser.region_index import RegionTableError


@pytest.fixture
def client(region_index, monkeypatch):
    monkeypatch.setattr(main, "get_region_index", lambda: region_index)
    monkeypatch.setattr(main, "ALLOWED_API_KEYS", set())
    monkeypatch.setattr(main, "ALLOW_KEYLESS_ACCESS", True)
    return TestClient(main.app)


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_extract_endpoint(client):
    resp = client.post(
        "/extract",
        json={"raw_text": "张三,13800138000,广东省广州市天河区体育路1号"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "张三"
    assert body["tel"] == "13800138000"
    assert body["areaCode"] == "440106"
    assert body["addressDetail"] == "体育路1号"
    assert body["normalized_cn"] == "广东省广州市天河区体育路1号"


def test_extract_requires_api_key(client, monkeypatch):
    monkeypatch.setattr(main, "ALLOWED_API_KEYS", {"secret"})

    resp = client.post("/extract", json={"raw_text": "张三 13800138000"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "unauthorized"

    resp = client.post(
        "/extract",
        json={"raw_text": "张三 13800138000"},
        headers={"X-API-Key": "secret"},
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "张三"


def test_extract_auth_not_configured(client, monkeypatch):
    monkeypatch.setattr(main, "ALLOW_KEYLESS_ACCESS", False)

    resp = client.post("/extract", json={"raw_text": "张三"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "auth_not_configured"


def test_extract_validation_error(client):
    resp = client.post("/extract", json={})

    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_extract_region_table_unavailable(client, monkeypatch):
    def broken_index():
        raise RegionTableError("cannot load region table /nowhere/area.json")

    monkeypatch.setattr(main, "get_region_index", broken_index)

    resp = client.post("/extract", json={"raw_text": "张三 13800138000"})
    assert resp.status_code == 503
    body = resp.json()
    assert body["error"] == "region_table_unavailable"
    assert "/nowhere/area.json" in body["details"]["reason"]


def test_unexpected_error_payload(region_index, monkeypatch):
    def explode(*_):
        raise RuntimeError("boom")

    monkeypatch.setattr(main, "get_region_index", lambda: region_index)
    monkeypatch.setattr(main, "ALLOWED_API_KEYS", set())
    monkeypatch.setattr(main, "ALLOW_KEYLESS_ACCESS", True)
    monkeypatch.setattr(main, "extract_address", explode)
    client = TestClient(main.app, raise_server_exceptions=False)

    resp = client.post("/extract", json={"raw_text": "张三"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "internal_error"
