"""HTTP tests for the sync endpoint (plumnote.daemon)."""

import json

import pytest

from plumnote.config import Settings
from plumnote.daemon import create_app
from plumnote.store import Store
from plumnote.sync import encode_batch

from conftest import make_note


@pytest.fixture()
def client(store: Store):
    app = create_app(store, Settings(notes_path=store.path, max_payload_bytes=4096))
    return app.test_client()


def post(client, body: bytes, **kwargs):
    return client.post("/sync", data=body, content_type="application/json", **kwargs)


class TestSyncEndpoint:
    def test_exchange(self, client, store: Store):
        store.save({1: make_note(1, text="waiting")})

        response = post(client, encode_batch([make_note(2).to_transfer()]))

        assert response.status_code == 200
        assert response.mimetype == "application/json"
        assert [n["id"] for n in response.get_json()] == [1]
        assert sorted(store.load()) == [1, 2]

    def test_empty_batch_on_empty_store(self, client, store: Store):
        response = post(client, b"[]")
        assert response.status_code == 200
        assert response.get_json() == []
        assert store.load() == {}

    def test_wrong_method(self, client):
        response = client.get("/sync")
        assert response.status_code == 405
        assert response.mimetype == "text/plain"
        assert response.get_data(as_text=True) == "method not allowed"

    def test_unknown_path(self, client):
        assert client.post("/elsewhere", data=b"[]").status_code == 404

    def test_malformed_body(self, client, store: Store):
        response = post(client, b'{"not": "a list"}')
        assert response.status_code == 400
        assert response.mimetype == "text/plain"
        assert not store.path.exists()

    def test_oversized_body(self, client):
        body = encode_batch([make_note(i, text="x" * 200).to_transfer() for i in range(1, 40)])
        assert len(body) > 4096
        response = post(client, body)
        assert response.status_code == 400
        assert "exceeds limit" in response.get_data(as_text=True)

    def test_missing_length(self, client):
        response = post(client, b"[]", headers={"Transfer-Encoding": "chunked"})
        assert response.status_code == 400
        assert "Content-Length" in response.get_data(as_text=True)

    def test_corrupt_store_is_internal_error(self, client, store: Store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{oops")
        response = post(client, b"[]")
        assert response.status_code == 500
        assert response.mimetype == "text/plain"

    def test_bad_request_does_not_break_later_requests(self, client, store: Store):
        assert post(client, b"garbage").status_code == 400
        response = post(client, encode_batch([make_note(3).to_transfer()]))
        assert response.status_code == 200
        assert json.loads(response.data) == []
        assert list(store.load()) == [3]
