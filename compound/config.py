"""Configuration loading for Compound.

Settings live in ``~/.config/compound/config.toml``. A missing or
unreadable file falls back to local-only defaults.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Optional

import toml

from compound.db.store import EntryStore
from compound.journal import Journal
from compound.remotes import BaseRemote, FileRemote, SupabaseRemote
from compound.remotes.supabase import DEFAULT_TABLE

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "compound"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "compound.db"

REMOTE_MODES = ("none", "supabase", "file")

DEFAULTS: dict[str, Any] = {
    "storage": {
        "db_path": str(DEFAULT_DB_PATH),
    },
    "remote": {
        "mode": "none",
        "url": "",
        "anon_key": "",
        "table": DEFAULT_TABLE,
        "path": "",
    },
}


def load_config(config_path: Optional[Path] = None) -> dict[str, Any]:
    """Load configuration merged over the defaults.

    Args:
        config_path: Config file to read. Uses the default location if not provided.

    Returns:
        Config dict with ``storage`` and ``remote`` sections.
    """
    config = copy.deepcopy(DEFAULTS)
    path = config_path or CONFIG_PATH

    if path.exists():
        try:
            loaded = toml.load(path)
        except (OSError, toml.TomlDecodeError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            loaded = {}
        for section, values in loaded.items():
            if isinstance(values, dict) and section in config:
                config[section].update(values)

    remote = config["remote"]
    if not remote.get("url"):
        remote["url"] = os.environ.get("SUPABASE_URL", "")
    if not remote.get("anon_key"):
        remote["anon_key"] = os.environ.get("SUPABASE_ANON_KEY", "")
    return config


def get_db_path(config: dict[str, Any]) -> Path:
    """Get the SQLite database path from config."""
    return Path(config["storage"]["db_path"]).expanduser()


def get_remote(config: dict[str, Any]) -> Optional[BaseRemote]:
    """Get the remote mirror selected by config.

    Args:
        config: Configuration dictionary.

    Returns:
        Remote mirror, or None for local-only mode.
    """
    remote = config.get("remote", {})
    mode = remote.get("mode", "none")

    if mode == "supabase":
        return SupabaseRemote(
            url=remote.get("url", ""),
            anon_key=remote.get("anon_key", ""),
            table=remote.get("table", DEFAULT_TABLE),
        )
    if mode == "file":
        path = remote.get("path", "")
        return FileRemote(Path(path).expanduser() if path else None)
    if mode != "none":
        logger.warning(f"Unknown remote mode '{mode}', running local-only")
    return None


def open_journal(config: Optional[dict[str, Any]] = None) -> Journal:
    """Open the journal described by config.

    Args:
        config: Configuration dictionary. Loaded from disk if not provided.

    Returns:
        Journal instance; close it when done.
    """
    config = config or load_config()
    return Journal(EntryStore(get_db_path(config)), get_remote(config))


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Args:
        config_path: Where to write. Uses the default location if not provided.

    Returns:
        Path of the written file.
    """
    path = config_path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    template = copy.deepcopy(DEFAULTS)
    template["remote"]["url"] = ""  # Leave empty to use SUPABASE_URL env var
    template["remote"]["anon_key"] = ""  # Leave empty to use SUPABASE_ANON_KEY env var

    with open(path, "w") as f:
        toml.dump(template, f)
    return path
