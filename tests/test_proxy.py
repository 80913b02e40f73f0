import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from devserver.app import create_app
from devserver.config import Listener, Upstream

HOSTNAME = "ci.example.org"


@pytest.fixture
def root(tmp_path):
    (tmp_path / "public").mkdir()
    (tmp_path / "public" / "index.html").write_bytes(b"<main>shell</main>")
    return tmp_path


@pytest.fixture
def seen():
    return []


@pytest.fixture
def upstream(seen):
    async def handler(request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        seen.append((request, body))
        return httpx.Response(
            201,
            headers=[
                ("x-upstream", "yes"),
                ("content-type", "application/json"),
                ("set-cookie", "a=1"),
                ("set-cookie", "b=2"),
            ],
            stream=httpx.ByteStream(b'{"ok": true}'),
        )
    return httpx.MockTransport(handler)


def make_client(root, transport):
    listener = Listener(
        name="proxy",
        port=0,
        root=root,
        fallback="/public/index.html",
        upstream=Upstream(prefix="/api/", hostname=HOSTNAME),
    )
    return TestClient(create_app(listener, transport=transport))


@pytest.fixture
def client(root, upstream):
    with make_client(root, upstream) as c:
        yield c


def test_relays_method_path_and_host(client, seen):
    r = client.get("/api/v1/info?limit=2", headers={"x-token": "abc"})
    assert r.status_code == 201
    request, body = seen[0]
    assert request.method == "GET"
    assert str(request.url) == f"https://{HOSTNAME}/api/v1/info?limit=2"
    assert request.headers["host"] == HOSTNAME
    assert request.headers["x-token"] == "abc"
    assert body == b""


def test_relays_response_verbatim(client):
    r = client.get("/api/v1/info")
    assert r.status_code == 201
    assert r.content == b'{"ok": true}'
    assert r.headers["x-upstream"] == "yes"
    assert r.headers["content-type"] == "application/json"
    assert r.headers.get_list("set-cookie") == ["a=1", "b=2"]


def test_relays_request_body(client, seen):
    r = client.put("/api/v1/teams/main", content=b'{"name": "main"}')
    assert r.status_code == 201
    request, body = seen[0]
    assert request.method == "PUT"
    assert body == b'{"name": "main"}'


def test_non_api_paths_are_static(client, seen):
    r = client.get("/api")
    assert r.status_code == 200
    assert r.content == b"<main>shell</main>"
    assert seen == []


def test_upstream_down_is_503(root, caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(root, httpx.MockTransport(handler)) as c:
        with caplog.at_level(logging.INFO, logger="devserver.access"):
            r = c.get("/api/v1/info")
    assert r.status_code == 503
    assert f"Failed to proxy to {HOSTNAME}. Is it down?" in r.text
    assert "connection refused" in r.text
    assert any("/api/v1/info 503 |" in record.getMessage() for record in caplog.records)


def test_logs_upstream_status(client, caplog):
    with caplog.at_level(logging.INFO, logger="devserver.access"):
        client.delete("/api/v1/builds/3")
    assert any(f"DELETE testserver /api/v1/builds/3 -> {HOSTNAME} 201 |" in record.getMessage()
               for record in caplog.records)
