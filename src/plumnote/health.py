"""
Health check module for plumnote.

Reports store and sync status.
"""

import httpx

from plumnote.config import Settings, get_config_path
from plumnote.errors import PlumnoteError
from plumnote.store import Store
from plumnote.sync import sync_url


def check_store(settings: Settings) -> tuple[str, str]:
    """Check the notes document."""
    path = settings.notes_path
    if not path.exists():
        return "✓", f"Empty (no {path.name} yet)"

    try:
        stats = Store(path).get_stats()
        return "✓", f"OK ({stats['total_notes']} notes)"
    except PlumnoteError as e:
        return "✗", f"Error: {e}"


def check_unsynced(settings: Settings) -> tuple[str, str]:
    """Check how many notes wait for the next exchange."""
    try:
        stats = Store(settings.notes_path).get_stats()
    except PlumnoteError:
        return "-", "N/A"

    pending = stats["unsynced"]
    if pending == 0:
        return "✓", "OK (0 pending)"
    return "!", f"{pending} pending"


def check_author(settings: Settings) -> tuple[str, str]:
    """Check the configured author."""
    if not settings.author:
        return "!", f"Not set (plumnote settings author <name>, {get_config_path()})"
    return "✓", settings.author


def check_syncserver(settings: Settings, client: httpx.Client | None = None) -> tuple[str, str]:
    """Check the sync peer is configured and answering."""
    if not settings.syncserver:
        return "-", "Not configured"

    try:
        url = sync_url(settings.syncserver)
    except PlumnoteError as e:
        return "✗", f"Invalid address: {e}"

    # A GET is rejected with 405 by a live daemon without touching its store
    try:
        if client is not None:
            response = client.get(url)
        else:
            with httpx.Client(timeout=5.0) as owned:
                response = owned.get(url)
    except httpx.HTTPError as e:
        return "✗", f"Unreachable ({url}): {e}"

    if response.status_code == 405:
        return "✓", f"OK ({url})"
    return "!", f"Unexpected answer {response.status_code} from {url}"


def run_health_check(settings: Settings, client: httpx.Client | None = None) -> dict[str, tuple[str, str]]:
    """Run all health checks."""
    return {
        "Store": check_store(settings),
        "Unsynced": check_unsynced(settings),
        "Author": check_author(settings),
        "Sync server": check_syncserver(settings, client),
    }


def format_health_report(checks: dict[str, tuple[str, str]]) -> str:
    """Format health check results."""
    lines = ["plumnote health check", "-" * 40]

    for name, (status, message) in checks.items():
        lines.append(f"{status} {name}: {message}")

    return "\n".join(lines)
