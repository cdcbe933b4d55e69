"""Tests for the plumnote MCP tool handlers."""

import asyncio

from plumnote.config import Settings, set_setting
from plumnote.store import Store
from plumnote_mcp.server import call_tool, list_tools

from conftest import make_note


def call(name: str, arguments: dict) -> str:
    result = asyncio.run(call_tool(name, arguments))
    return result[0].text


def test_lists_tools():
    names = [tool.name for tool in asyncio.run(list_tools())]
    assert names == ["plumnote_add", "plumnote_list", "plumnote_update", "plumnote_remove", "plumnote_sync"]


def test_add_and_list():
    set_setting("author", "ana")
    added = call("plumnote_add", {"kind": "todo", "text": "buy milk", "tags": "home"})
    assert added.startswith("Added: ")

    listed = call("plumnote_list", {"clauses": [{"mode": "tags-any", "value": "home"}]})
    assert "'buy milk'" in listed
    assert "by: ana" in listed


def test_add_requires_text():
    assert call("plumnote_add", {"kind": "todo"}) == "Error: kind and text are required"


def test_update_and_remove():
    store = Store(Settings.load().notes_path)
    store.save({1: make_note(1, synced=True)})

    assert call("plumnote_update", {"id": 1, "field": "tags", "value": "x,y"}) == "Updated: 1"
    assert store.load()[1].tags == ["x", "y"]
    assert store.load()[1].synced is False

    assert call("plumnote_remove", {"id": 1}) == "Removed: 1"
    assert call("plumnote_remove", {"id": 1}) == "Not found: 1"


def test_errors_are_returned_as_text():
    assert call("plumnote_list", {"clauses": [{"mode": "colour", "value": "red"}]}).startswith("Error: unknown filter mode")
    assert call("plumnote_update", {"id": 9, "field": "kind", "value": "x"}) == "Error: no note with id 9"
    assert call("plumnote_sync", {}).startswith("Error: no address given")
    assert call("plumnote_nothing", {}) == "Unknown tool: plumnote_nothing"


def test_sync_unreachable_is_returned_as_text():
    Store(Settings.load().notes_path).save({1: make_note(1)})
    # Port 9 on localhost (discard) is closed in the test environment
    assert call("plumnote_sync", {"address": "127.0.0.1:9"}).startswith("Error: cannot reach")
