"""Tests for plumnote.health."""

import httpx

from plumnote.config import Settings
from plumnote.health import (
    check_author,
    check_store,
    check_syncserver,
    check_unsynced,
    format_health_report,
    run_health_check,
)
from plumnote.store import Store

from conftest import make_note


def answering(status: int) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(status)))


class TestChecks:
    def test_store_missing(self, settings: Settings):
        status, message = check_store(settings)
        assert status == "✓"
        assert message.startswith("Empty")

    def test_store_counts(self, settings: Settings, store: Store):
        store.save({1: make_note(1), 2: make_note(2, synced=True)})
        assert check_store(settings) == ("✓", "OK (2 notes)")
        assert check_unsynced(settings) == ("!", "1 pending")

    def test_store_corrupt(self, settings: Settings, store: Store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("nope")
        assert check_store(settings)[0] == "✗"
        assert check_unsynced(settings)[0] == "-"

    def test_author(self, settings: Settings):
        assert check_author(settings) == ("✓", "ana")
        assert check_author(Settings(notes_path=settings.notes_path))[0] == "!"

    def test_syncserver_not_configured(self, settings: Settings):
        assert check_syncserver(settings) == ("-", "Not configured")

    def test_syncserver_live(self, settings: Settings):
        configured = Settings(notes_path=settings.notes_path, syncserver="peer:8080")
        with answering(405) as client:
            assert check_syncserver(configured, client) == ("✓", "OK (http://peer:8080/sync)")

    def test_syncserver_unexpected(self, settings: Settings):
        configured = Settings(notes_path=settings.notes_path, syncserver="peer:8080")
        with answering(404) as client:
            assert check_syncserver(configured, client)[0] == "!"

    def test_syncserver_unreachable(self, settings: Settings):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        configured = Settings(notes_path=settings.notes_path, syncserver="peer:8080")
        with httpx.Client(transport=httpx.MockTransport(refuse)) as client:
            assert check_syncserver(configured, client)[0] == "✗"


def test_report(settings: Settings):
    report = format_health_report(run_health_check(settings))
    lines = report.splitlines()
    assert lines[0] == "plumnote health check"
    assert [line.split(":")[0][2:] for line in lines[2:]] == ["Store", "Unsynced", "Author", "Sync server"]
