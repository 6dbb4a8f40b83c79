import time

from fastapi.testclient import TestClient
from loguru import logger

from app.core.deps import get_notice_repository
from main import create_app


def _create(client, title="公告", content="<p>内容</p>", **extra):
    resp = client.post("/api/notices", json={"title": title, "content": content, **extra})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["code"] == 0
    return body["data"]["id"]


def _list(client, **params):
    return client.get("/api/notices", params=params)


def test_create_and_get_roundtrip(client):
    notice_id = _create(client, title="  停水通知  ", content_delta='{"ops":[{"insert":"hi"}]}')
    resp = client.get(f"/api/notices/{notice_id}")
    body = resp.json()
    assert resp.status_code == 200
    assert body["code"] == 0 and body["msg"] == "ok"
    data = body["data"]
    assert data["title"] == "停水通知"
    assert data["status"] == "draft"
    assert data["publish_time"] is None
    assert data["content_delta"] == '{"ops":[{"insert":"hi"}]}'
    assert set(data) == {
        "id", "title", "content", "content_delta", "status",
        "publish_time", "created_at", "updated_at",
    }


def test_create_ignores_client_status(client):
    resp = client.post("/api/notices", json={"title": "t", "content": "c", "status": "published"})
    notice_id = resp.json()["data"]["id"]
    assert client.get(f"/api/notices/{notice_id}").json()["data"]["status"] == "draft"


def test_script_in_content_is_neutralized_but_delta_kept(client):
    script = "<script>alert(1)</script>"
    notice_id = _create(client, content=f"<p>hi</p>{script}", content_delta=script)
    data = client.get(f"/api/notices/{notice_id}").json()["data"]
    assert "<script>" not in data["content"]
    assert "&lt;script&gt;" in data["content"]
    assert data["content_delta"] == script


def test_json_delta_is_serialized(client):
    notice_id = _create(client, content_delta={"ops": [{"insert": "中文"}]})
    data = client.get(f"/api/notices/{notice_id}").json()["data"]
    assert data["content_delta"] == '{"ops": [{"insert": "中文"}]}'


def test_empty_delta_stored_as_null(client):
    notice_id = _create(client, content_delta="")
    assert client.get(f"/api/notices/{notice_id}").json()["data"]["content_delta"] is None


def test_create_validation_messages(guarded_client):
    cases = [
        ({}, "Title is required"),
        ({"title": "   ", "content": "c"}, "Title is required"),
        ({"title": "a" * 256, "content": "c"}, "Title is too long (max 255 characters)"),
        ({"title": "t"}, "Content is required"),
        ({"title": "t", "content": "x" * 50001}, "Content is too long (max 50000 characters)"),
    ]
    for payload, msg in cases:
        resp = guarded_client.post("/api/notices", json=payload)
        assert resp.status_code == 400
        assert resp.json() == {"code": 1, "msg": msg}


def test_create_without_body_requires_title(guarded_client):
    resp = guarded_client.post("/api/notices")
    assert resp.status_code == 400
    assert resp.json()["msg"] == "Title is required"


def test_malformed_body(guarded_client):
    resp = guarded_client.post(
        "/api/notices", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json() == {"code": 1, "msg": "invalid request body"}


def test_long_title_update_changes_nothing(client):
    notice_id = _create(client, title="原标题")
    resp = client.put(f"/api/notices/{notice_id}", json={"title": "a" * 256, "content": "c"})
    assert resp.status_code == 400
    assert resp.json()["msg"] == "Title is too long (max 255 characters)"
    assert client.get(f"/api/notices/{notice_id}").json()["data"]["title"] == "原标题"


def test_update_rewrites_fields_but_not_status(client):
    notice_id = _create(client, content_delta="d1")
    client.post(f"/api/notices/{notice_id}/publish")
    resp = client.put(
        f"/api/notices/{notice_id}",
        json={"title": "新标题", "content": "<b>新内容</b><script>x</script>"},
    )
    assert resp.json() == {"code": 0, "msg": "ok", "data": True}
    data = client.get(f"/api/notices/{notice_id}").json()["data"]
    assert data["title"] == "新标题"
    assert "<script>" not in data["content"]
    assert data["content_delta"] is None
    assert data["status"] == "published"


def test_update_and_publish_missing_id_are_silent(client):
    assert client.put("/api/notices/4242", json={"title": "t", "content": "c"}).json()["code"] == 0
    assert client.post("/api/notices/4242/publish").json()["code"] == 0


def test_get_missing_is_400_not_found(client):
    resp = client.get("/api/notices/4242")
    assert resp.status_code == 400
    assert resp.json() == {"code": 1, "msg": "not found"}


def test_invalid_ids_never_reach_storage(guarded_client):
    for bad in ("0", "-1", "abc", "1.5"):
        for method, url, kwargs in (
            ("GET", f"/api/notices/{bad}", {}),
            ("PUT", f"/api/notices/{bad}", {"json": {"title": "t", "content": "c"}}),
            ("POST", f"/api/notices/{bad}/publish", {}),
            ("DELETE", f"/api/notices/{bad}", {}),
        ):
            resp = guarded_client.request(method, url, **kwargs)
            assert resp.status_code == 400, (method, url)
            assert resp.json() == {"code": 1, "msg": "Invalid ID"}


def test_invalid_id_reported_before_body_errors(guarded_client):
    resp = guarded_client.put("/api/notices/0", json={})
    assert resp.json()["msg"] == "Invalid ID"


def test_publish_then_republish(client):
    notice_id = _create(client)
    assert client.post(f"/api/notices/{notice_id}/publish").json() == {"code": 0, "msg": "ok", "data": True}
    first = client.get(f"/api/notices/{notice_id}").json()["data"]
    assert first["status"] == "published"
    assert first["publish_time"] is not None

    time.sleep(0.01)
    client.post(f"/api/notices/{notice_id}/publish")
    second = client.get(f"/api/notices/{notice_id}").json()["data"]
    assert second["status"] == "published"
    assert second["publish_time"] != first["publish_time"]


def test_list_defaults_and_ordering(client):
    ids = [_create(client, title=f"n{i}") for i in range(12)]
    body = _list(client).json()
    assert body["code"] == 0
    data = body["data"]
    assert data["total"] == 12
    assert (data["page"], data["size"]) == (1, 10)
    assert [row["id"] for row in data["list"]] == list(reversed(ids))[:10]
    assert "content_delta" not in data["list"][0]

    data = _list(client, page=2, size=10).json()["data"]
    assert [row["id"] for row in data["list"]] == list(reversed(ids))[10:]


def test_list_status_filter(client):
    draft_id = _create(client)
    published_id = _create(client)
    client.post(f"/api/notices/{published_id}/publish")

    drafts = _list(client, status="draft").json()["data"]
    assert [r["id"] for r in drafts["list"]] == [draft_id]
    assert drafts["total"] == 1

    published = _list(client, status="published").json()["data"]
    assert [r["id"] for r in published["list"]] == [published_id]


def test_list_parameter_bounds(guarded_client):
    for params, msg in (
        ({"size": 101}, "page/size invalid"),
        ({"page": 0}, "page/size invalid"),
        ({"size": -1}, "page/size invalid"),
        ({"page": "abc"}, "page/size invalid"),
        ({"status": "deleted"}, "invalid status"),
    ):
        resp = _list(guarded_client, **params)
        assert resp.status_code == 400
        assert resp.json() == {"code": 1, "msg": msg}


def test_list_size_100_accepted(client):
    resp = _list(client, size=100)
    assert resp.status_code == 200
    assert resp.json()["data"]["size"] == 100


def test_delete_single(client):
    notice_id = _create(client)
    assert client.delete(f"/api/notices/{notice_id}").json()["data"] is True
    assert client.get(f"/api/notices/{notice_id}").json()["msg"] == "not found"


def test_batch_delete_validation_never_reaches_storage(guarded_client):
    for payload, msg in (
        (None, "ids required"),
        ({}, "ids required"),
        ({"ids": []}, "ids required"),
        ({"ids": "1,2"}, "ids required"),
        ({"ids": [0, -1, "x"]}, "ids invalid"),
        ({"ids": list(range(1, 102))}, "Too many IDs in batch operation (max 100)"),
    ):
        kwargs = {} if payload is None else {"json": payload}
        resp = guarded_client.post("/api/notices/batch_delete", **kwargs)
        assert resp.status_code == 400
        assert resp.json() == {"code": 1, "msg": msg}


def test_batch_delete_101_ids_deletes_nothing(client):
    ids = [_create(client, title=f"n{i}") for i in range(3)]
    resp = client.post("/api/notices/batch_delete", json={"ids": ids + list(range(1000, 1098))})
    assert resp.status_code == 400
    assert _list(client).json()["data"]["total"] == 3


def test_batch_delete_100_ids(client):
    ids = [_create(client, title=f"n{i}") for i in range(100)]
    keep = _create(client, title="keep")
    resp = client.post("/api/notices/batch_delete", json={"ids": [str(i) for i in ids]})
    assert resp.json() == {"code": 0, "msg": "ok", "data": True}
    data = _list(client).json()["data"]
    assert data["total"] == 1
    assert data["list"][0]["id"] == keep


def test_unmatched_route_is_404(client):
    for method, url in (("GET", "/api/nope"), ("PATCH", "/api/notices/1"), ("GET", "/")):
        resp = client.request(method, url)
        assert resp.status_code == 404
        assert resp.json() == {"code": 1, "msg": "not found"}


def test_storage_failure_is_generic_500(app):
    class BrokenRepository:
        async def list_notices(self, pagination):
            raise RuntimeError("connection refused: secret-host:5432")

    app.dependency_overrides[get_notice_repository] = lambda: BrokenRepository()
    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/api/notices")
    app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"code": 1, "msg": "server error"}
    assert "secret-host" not in resp.text


def test_storage_failure_logged_once(app):
    class BrokenRepository:
        async def publish_notice(self, notice_id):
            raise RuntimeError("deadlock detected")

    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="ERROR")
    app.dependency_overrides[get_notice_repository] = lambda: BrokenRepository()
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.post("/api/notices/7/publish")
    finally:
        app.dependency_overrides.clear()
        logger.remove(sink_id)

    assert resp.status_code == 500
    assert len(records) == 1
    assert "/api/notices/7/publish" in records[0]["message"]
    assert records[0]["exception"] is not None


def test_oversized_json_body_rejected(settings):
    settings.MAX_JSON_BODY_SIZE = 100
    with TestClient(create_app(settings)) as c:
        resp = c.post("/api/notices", json={"title": "t", "content": "x" * 200})
    assert resp.status_code == 413
    assert resp.json() == {"code": 1, "msg": "request entity too large"}


def test_oversized_json_body_carries_cors_headers(settings):
    settings.MAX_JSON_BODY_SIZE = 100
    origin = "http://localhost:8080"
    with TestClient(create_app(settings)) as c:
        resp = c.post(
            "/api/notices",
            json={"title": "t", "content": "x" * 200},
            headers={"Origin": origin},
        )
    assert resp.status_code == 413
    assert resp.headers.get("access-control-allow-origin") in ("*", origin)


def test_request_id_and_security_headers(client):
    resp = client.get("/api/notices", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_health(client):
    body = client.get("/health").json()
    assert body["code"] == 0
    assert body["data"]["database"] == "healthy"
