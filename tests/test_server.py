"""Tests for the HTTP image server."""

from pathlib import Path
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from memebot.metrics import InvocationCounter
from memebot.repository import FileSystemItemRepository
from memebot.server import ItemServer, create_app

IMAGE_BYTES = b"0123456789abcdef"


@pytest.fixture
def repository(tmp_path: Path) -> FileSystemItemRepository:
    (tmp_path / "foo.jpg").write_bytes(IMAGE_BYTES)
    return FileSystemItemRepository(str(tmp_path))


@pytest.fixture
def item_server(repository: FileSystemItemRepository) -> ItemServer:
    return ItemServer(repository.find_item, public_host="example.com", display_port=8080)


@pytest.fixture
def client(item_server: ItemServer) -> TestClient:
    return TestClient(create_app(item_server))


@pytest.fixture
def item_id(repository: FileSystemItemRepository) -> str:
    return repository.load().find_by_keyword("foo")[0].id


def test_url_for(item_server: ItemServer, item_id: str) -> None:
    assert item_server.url_for(item_id) == f"http://example.com:8080/memes/{quote(item_id)}"


def test_serve_item(client: TestClient, item_id: str) -> None:
    response = client.get(f"/memes/{quote(item_id)}")

    assert response.status_code == 200
    assert response.content == IMAGE_BYTES
    assert response.headers["etag"] == f'"{item_id}"'
    assert response.headers["content-type"] == "image/jpeg"
    assert "last-modified" in response.headers
    assert "immutable" in response.headers["cache-control"]


def test_serve_item_is_stable(client: TestClient, item_id: str) -> None:
    first = client.get(f"/memes/{quote(item_id)}")
    second = client.get(f"/memes/{quote(item_id)}")

    assert first.content == second.content


def test_serve_range(client: TestClient, item_id: str) -> None:
    response = client.get(f"/memes/{quote(item_id)}", headers={"Range": "bytes=0-4"})

    assert response.status_code == 206
    assert response.content == IMAGE_BYTES[:5]


def test_if_none_match(client: TestClient, item_id: str) -> None:
    response = client.get(f"/memes/{quote(item_id)}", headers={"If-None-Match": f'"{item_id}"'})

    assert response.status_code == 304
    assert response.content == b""


def test_if_none_match_wildcard(client: TestClient, item_id: str) -> None:
    response = client.get(f"/memes/{quote(item_id)}", headers={"If-None-Match": "*"})

    assert response.status_code == 304


def test_if_modified_since(client: TestClient, item_id: str) -> None:
    first = client.get(f"/memes/{quote(item_id)}")

    response = client.get(
        f"/memes/{quote(item_id)}",
        headers={"If-Modified-Since": first.headers["last-modified"]},
    )

    assert response.status_code == 304


def test_unknown_id(client: TestClient) -> None:
    assert client.get("/memes/unknown.jpg").status_code == 404


def test_missing_id(client: TestClient) -> None:
    assert client.get("/memes/").status_code == 400


def test_health(item_server: ItemServer) -> None:
    counter = InvocationCounter()
    counter.increment_bot_invocations("T123")
    client = TestClient(create_app(item_server, counter=counter))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.text.startswith("Everything looks good!")
    assert "bot_invocations_total: 1" in response.text


def test_slack_route_only_with_handler(client: TestClient) -> None:
    assert client.post("/slack/events", json={}).status_code in (404, 405)
    assert client.get("/").json() == {"status": "ok"}
