"""
MCP Server for plumnote.

Exposes the note store as tools for an assistant.
"""

import asyncio

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from plumnote.config import Settings
from plumnote.display import format_notes, format_sync_result
from plumnote.errors import NotConfigured, PlumnoteError
from plumnote.models import parse_tags
from plumnote.query import run_query
from plumnote.store import Store
from plumnote.sync import SyncClient

# Create MCP server
server = Server("plumnote")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="plumnote_add",
            description="Add a note to plumnote. Notes have a kind (journal, todo, ...), optional tags and a text body.",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": {
                        "type": "string",
                        "description": "Short category, e.g. journal or todo",
                    },
                    "text": {
                        "type": "string",
                        "description": "The note body",
                    },
                    "tags": {
                        "type": "string",
                        "description": "Comma-separated tags (optional)",
                    },
                },
                "required": ["kind", "text"],
            },
        ),
        Tool(
            name="plumnote_list",
            description="List notes, narrowed by filter clauses applied left to right.",
            inputSchema={
                "type": "object",
                "properties": {
                    "clauses": {
                        "type": "array",
                        "description": "Filter clauses; every clause must match",
                        "items": {
                            "type": "object",
                            "properties": {
                                "mode": {
                                    "type": "string",
                                    "enum": ["id", "kind", "tags-any", "tags-all", "date-range", "author"],
                                },
                                "value": {
                                    "type": "string",
                                    "description": "Filter value; date-range is DD/MM/YYYY,DD/MM/YYYY",
                                },
                            },
                            "required": ["mode", "value"],
                        },
                    },
                },
            },
        ),
        Tool(
            name="plumnote_update",
            description="Replace the tags, kind or text of one of your own notes.",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "integer",
                        "description": "The note id",
                    },
                    "field": {
                        "type": "string",
                        "enum": ["tags", "kind", "text"],
                    },
                    "value": {
                        "type": "string",
                        "description": "New value; tags are comma-separated",
                    },
                },
                "required": ["id", "field", "value"],
            },
        ),
        Tool(
            name="plumnote_remove",
            description="Permanently delete a note.",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "integer",
                        "description": "The note id",
                    },
                },
                "required": ["id"],
            },
        ),
        Tool(
            name="plumnote_sync",
            description="Run one sync exchange with the configured peer, or with the given address.",
            inputSchema={
                "type": "object",
                "properties": {
                    "address": {
                        "type": "string",
                        "description": "host:port of the peer (optional)",
                    },
                },
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "plumnote_add":
            return await tool_add(arguments)
        elif name == "plumnote_list":
            return await tool_list(arguments)
        elif name == "plumnote_update":
            return await tool_update(arguments)
        elif name == "plumnote_remove":
            return await tool_remove(arguments)
        elif name == "plumnote_sync":
            return await tool_sync(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]
    except (PlumnoteError, ValueError, KeyError) as e:
        return [TextContent(type="text", text=f"Error: {e}")]


async def tool_add(args: dict) -> list[TextContent]:
    """Add a note."""
    kind = args.get("kind", "").strip()
    text = args.get("text", "").strip()
    if not kind or not text:
        return [TextContent(type="text", text="Error: kind and text are required")]

    settings = Settings.load()
    note = Store(settings.notes_path).add_note(
        kind, text, parse_tags(args.get("tags", "")), author=settings.author
    )
    return [TextContent(type="text", text=f"Added: {note.id}")]


async def tool_list(args: dict) -> list[TextContent]:
    """List notes."""
    clauses = [(clause["mode"], clause["value"]) for clause in args.get("clauses", [])]

    settings = Settings.load()
    notes = run_query(clauses, Store(settings.notes_path).load())
    return [TextContent(type="text", text=format_notes(notes))]


async def tool_update(args: dict) -> list[TextContent]:
    """Update a note."""
    field = args.get("field", "")
    value = args.get("value", "")
    new_value = parse_tags(value) if field == "tags" else value

    settings = Settings.load()
    note = Store(settings.notes_path).update_note(
        int(args["id"]), field, new_value, author=settings.author
    )
    return [TextContent(type="text", text=f"Updated: {note.id}")]


async def tool_remove(args: dict) -> list[TextContent]:
    """Remove a note."""
    note_id = int(args["id"])

    settings = Settings.load()
    if Store(settings.notes_path).remove_note(note_id):
        return [TextContent(type="text", text=f"Removed: {note_id}")]
    return [TextContent(type="text", text=f"Not found: {note_id}")]


async def tool_sync(args: dict) -> list[TextContent]:
    """Sync with the peer."""
    settings = Settings.load()
    address = (args.get("address") or settings.syncserver).strip()
    if not address:
        raise NotConfigured("no address given and settings.syncserver is not set")

    client = SyncClient(Store(settings.notes_path), address, timeout=settings.timeout)
    # The exchange blocks on httpx; keep it off the stdio event loop
    result = await asyncio.to_thread(client.sync)
    return [TextContent(type="text", text=format_sync_result(result))]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
