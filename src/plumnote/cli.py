"""
CLI for plumnote.

Minimal CLI using stdlib argument handling for fast startup.
Subcommands are imported lazily to avoid startup overhead.

Usage:
    plumnote add --kind journal "your note here"
    plumnote list --tags work
    plumnote --help
"""

import sys


def print_help() -> None:
    """Print help message."""
    print("""plumnote - tagged personal notes with two-way sync

Usage:
    plumnote <command> [options]

Commands:
    plumnote a[dd] --kind <kind> [--tags <a,b>] "text"    Add a note
    plumnote l[ist] [--<filter> <value>]...                List notes
    plumnote u[pdate] <id> --[tags, kind, note] <value>    Update a note
    plumnote r[emove] --id <id>                            Remove a note
    plumnote s[ettings] <author|syncserver> <value>        Change a setting
    plumnote d[sync] [port]                                Run the sync daemon
    plumnote p[sync] [host:port]                           Sync with a peer
    plumnote health                                        Show status

List filters (combined left to right):
    -i, --id <id>                 Exact id
    -k, --kind <kind>             Exact kind
    -t, --tags <a,b>              Any of the tags
    -e, --exact-tags <a,b>        All of the tags
    -d, --date <DD/MM/YYYY,DD/MM/YYYY>   Date range, both days included
    -a, --author <name>           Exact author

Options:
    plumnote --help, -h           Show this help
    plumnote --version, -v        Show version

Examples:
    plumnote add --kind todo --tags home,errands "buy milk"
    plumnote list --kind todo --exact-tags home,errands
    plumnote update 1718000000 --note "buy oat milk"
    plumnote psync 192.168.0.10:8080""")


def print_version() -> None:
    """Print version."""
    from plumnote import __version__
    print(f"plumnote {__version__}")


def usage_error(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def cmd_add(args: list[str]) -> int:
    """Add a note."""
    from plumnote.config import Settings
    from plumnote.models import parse_tags
    from plumnote.store import Store

    usage = 'usage: plumnote a[dd] --kind <kind> [--tags <tags>] "note text"'
    if len(args) < 3:
        return usage_error(usage)

    kind = ""
    tags: list[str] = []
    text = ""

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--kind", "-k") and i + 1 < len(args):
            kind = args[i + 1]
            i += 2
        elif arg in ("--tags", "-t") and i + 1 < len(args):
            tags = parse_tags(args[i + 1])
            i += 2
        elif arg.startswith("--"):
            return usage_error(f"unknown option: {arg}\n{usage}")
        else:
            text = arg
            i += 1

    if not kind or not text:
        return usage_error("you must provide --kind and the note text")

    settings = Settings.load()
    note = Store(settings.notes_path).add_note(kind, text, tags, author=settings.author)
    print(note.id)
    return 0


def cmd_list(args: list[str]) -> int:
    """List notes matching every filter clause."""
    from plumnote.config import Settings
    from plumnote.display import format_notes
    from plumnote.query import parse_clauses, run_query
    from plumnote.store import Store

    clauses = parse_clauses(args)
    settings = Settings.load()
    notes = run_query(clauses, Store(settings.notes_path).load())
    print(format_notes(notes))
    return 0


def cmd_update(args: list[str]) -> int:
    """Replace one field of a note."""
    from plumnote.config import Settings
    from plumnote.models import parse_tags
    from plumnote.store import Store

    usage = "usage: plumnote u[pdate] <id> --[tags, note, kind] <value>"
    if len(args) < 3:
        return usage_error(usage)

    try:
        note_id = int(args[0])
    except ValueError:
        return usage_error(f"invalid note id: {args[0]}")

    update_type, value = args[1], args[2]
    if update_type in ("--tags", "-t"):
        field, new_value = "tags", parse_tags(value)
    elif update_type in ("--kind", "-k"):
        field, new_value = "kind", value
    elif update_type in ("--note", "-n"):
        field, new_value = "text", value
    else:
        return usage_error(usage)

    settings = Settings.load()
    try:
        Store(settings.notes_path).update_note(note_id, field, new_value, author=settings.author)
    except ValueError as e:
        return usage_error(f"error: {e}")

    print(f"Updated: {note_id}")
    return 0


def cmd_remove(args: list[str]) -> int:
    """Hard-delete a note."""
    from plumnote.config import Settings
    from plumnote.store import Store

    usage = "usage: plumnote r[emove] --id <id>"
    if len(args) != 2 or args[0] not in ("--id", "-i"):
        return usage_error(usage)

    try:
        note_id = int(args[1])
    except ValueError:
        return usage_error(f"invalid note id: {args[1]}")

    settings = Settings.load()
    if Store(settings.notes_path).remove_note(note_id):
        print(f"Removed: {note_id}")
        return 0

    print(f"Not found: {note_id}", file=sys.stderr)
    return 1


def cmd_settings(args: list[str]) -> int:
    """Write a setting to config.toml."""
    from plumnote.config import set_setting

    usage = "usage: plumnote s[ettings] <key> <value>"
    if len(args) != 2:
        return usage_error(usage)

    try:
        path = set_setting(args[0], args[1])
    except ValueError as e:
        return usage_error(f"error: {e}\n{usage}")

    print(f"Set {args[0]} in {path}")
    return 0


def cmd_dsync(args: list[str]) -> int:
    """Run the sync daemon in the foreground."""
    from plumnote.config import Settings
    from plumnote.daemon import serve

    if len(args) > 1:
        return usage_error("usage: plumnote d[sync] [port]")

    port = None
    if args:
        try:
            port = int(args[0])
        except ValueError:
            return usage_error(f"invalid port: {args[0]}")

    settings = Settings.load()
    print(f"listening in port {port or settings.port}...")
    serve(settings, port=port)
    return 0


def cmd_psync(args: list[str]) -> int:
    """Run one exchange with the sync peer."""
    from plumnote.config import Settings
    from plumnote.display import format_sync_result
    from plumnote.errors import NotConfigured
    from plumnote.store import Store
    from plumnote.sync import SyncClient

    if len(args) > 1:
        return usage_error("usage: plumnote p[sync] [ip:port]")

    settings = Settings.load()
    address = args[0] if args else settings.syncserver
    if not address:
        raise NotConfigured(
            "settings.syncserver value not found. "
            "please set it with plumnote s syncserver [ip:port]."
        )

    client = SyncClient(Store(settings.notes_path), address, timeout=settings.timeout)
    print(format_sync_result(client.sync()))
    return 0


def cmd_health() -> int:
    """Show store and sync status."""
    from plumnote.config import Settings
    from plumnote.health import format_health_report, run_health_check

    print(format_health_report(run_health_check(Settings.load())))
    return 0


COMMANDS = {
    "a": cmd_add, "add": cmd_add,
    "l": cmd_list, "list": cmd_list,
    "u": cmd_update, "update": cmd_update,
    "r": cmd_remove, "remove": cmd_remove,
    "s": cmd_settings, "settings": cmd_settings,
    "d": cmd_dsync, "dsync": cmd_dsync,
    "p": cmd_psync, "psync": cmd_psync,
}


def main() -> int:
    """Main entry point."""
    from plumnote.errors import PlumnoteError

    args = sys.argv[1:]

    if not args:
        print("usage: plumnote <command> [options]")
        print("available commands: l[ist], a[dd], u[pdate], r[emove], s[ettings], d[sync], p[sync], health")
        return 1

    first_arg = args[0]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    try:
        if first_arg == "health":
            return cmd_health()

        command = COMMANDS.get(first_arg)
        if command is None:
            print(f"unknown command: {first_arg}", file=sys.stderr)
            return 1
        return command(args[1:])

    except PlumnoteError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
