"""
Configuration management for plumnote.

Uses XDG base directories:
- Config: ~/.config/plumnote/config.toml
- Data: ~/.local/share/plumnote/ (the notes document)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any
import os

from plumnote.errors import PlumnoteError

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / ".local" / "share"

# Keys `plumnote settings` is allowed to write
SETTINGS_KEYS = ("author", "syncserver")

DEFAULT_PORT = 8080
DEFAULT_MAX_PAYLOAD_BYTES = 16 * 1024 * 1024
DEFAULT_TIMEOUT = 30.0


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/plumnote)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME") or DEFAULT_CONFIG_HOME)
    return base / "plumnote"


def get_data_dir() -> Path:
    """Get the data directory (PLUMNOTE_HOME, else XDG_DATA_HOME/plumnote)."""
    if env_home := os.environ.get("PLUMNOTE_HOME"):
        return Path(env_home)
    base = Path(os.environ.get("XDG_DATA_HOME") or DEFAULT_DATA_HOME)
    return base / "plumnote"


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_notes_path() -> Path:
    """Get the path to notes.json."""
    return get_data_dir() / "notes.json"


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Returns default config if file doesn't exist.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return get_default_config()

    # Lazy import tomli only when needed
    import tomli

    try:
        with open(config_path, "rb") as f:
            loaded = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise PlumnoteError(f"invalid config file {config_path}: {e}") from e

    config = get_default_config()
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key] = {**config[key], **value}
        else:
            config[key] = value

    try:
        check_config(config)
    except ValueError as e:
        raise PlumnoteError(f"invalid config file {config_path}: {e}") from e
    return config


def check_config(config: dict[str, Any]) -> None:
    """Validate the shape and value types of a merged config."""
    for key in SETTINGS_KEYS:
        if not isinstance(config.get(key), str):
            raise ValueError(f"{key} must be a string")

    sync = config.get("sync")
    if not isinstance(sync, dict):
        raise ValueError("[sync] must be a table")

    # bool is an int subclass; reject it explicitly
    for key in ("port", "max_payload_bytes"):
        value = sync.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError(f"sync.{key} must be a positive integer")

    timeout = sync.get("timeout")
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
        raise ValueError("sync.timeout must be a positive number")


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "author": "",
        "syncserver": "",
        "sync": {
            "port": DEFAULT_PORT,
            "max_payload_bytes": DEFAULT_MAX_PAYLOAD_BYTES,
            "timeout": DEFAULT_TIMEOUT,
        },
    }


def set_setting(key: str, value: str) -> Path:
    """
    Write a single top-level setting to config.toml.

    Only keys in SETTINGS_KEYS are accepted. Returns the config path.
    """
    if key not in SETTINGS_KEYS:
        raise ValueError(f"unknown setting: {key} (expected one of {', '.join(SETTINGS_KEYS)})")

    import tomli
    import tomli_w

    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    current: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                current = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise PlumnoteError(f"invalid config file {config_path}: {e}") from e

    current[key] = value
    with open(config_path, "wb") as f:
        tomli_w.dump(current, f)

    return config_path


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one command. Passed explicitly, never global."""

    notes_path: Path
    author: str = ""
    syncserver: str = ""
    port: int = DEFAULT_PORT
    max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_config(cls, config: dict[str, Any], notes_path: Path | None = None) -> "Settings":
        sync = config.get("sync", {})
        return cls(
            notes_path=notes_path or get_notes_path(),
            author=str(config.get("author", "")),
            syncserver=str(config.get("syncserver", "")),
            port=int(sync.get("port", DEFAULT_PORT)),
            max_payload_bytes=int(sync.get("max_payload_bytes", DEFAULT_MAX_PAYLOAD_BYTES)),
            timeout=float(sync.get("timeout", DEFAULT_TIMEOUT)),
        )

    @classmethod
    def load(cls) -> "Settings":
        """Resolve settings from config.toml and the environment."""
        return cls.from_config(load_config())
