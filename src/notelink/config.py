"""Configuration management for notelink.

This module contains the configurable constants and the discovery of the
note store and the acting owner. Magic values are documented here rather
than scattered throughout the codebase.
"""

import os
from pathlib import Path


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    pass


# Name of the per-project config file discovered by walking up from cwd.
CONFIG_FILENAME = ".notelink"


def get_store_root() -> Path:
    """Get the note store root directory.

    Discovery order:
    1. NOTELINK_STORE_ROOT environment variable (explicit override)
    2. Walk up from cwd looking for a .notelink file with a store_path field
    3. Error with helpful message

    Raises:
        ConfigurationError: If no store can be found.
    """
    root = os.environ.get("NOTELINK_STORE_ROOT")
    if root:
        return Path(root)

    project_config = _discover_project_config()
    if project_config:
        config_path, data = project_config
        store_path = data.get("store_path")
        if store_path:
            return (config_path.parent / store_path).resolve()

    raise ConfigurationError(
        "No note store found. Options:\n"
        "  1. Set NOTELINK_STORE_ROOT to a directory of <id>.json notes\n"
        "  2. Add a .notelink file with 'store_path: notes' to your project\n"
        "  3. Pass --store PATH to nl"
    )


def get_owner_id() -> str | None:
    """Get the acting owner identifier, if one is configured.

    Discovery order:
    1. NOTELINK_OWNER_ID environment variable
    2. owner_id field of the nearest .notelink file
    """
    owner = os.environ.get("NOTELINK_OWNER_ID")
    if owner:
        return owner

    project_config = _discover_project_config()
    if project_config:
        _config_path, data = project_config
        value = data.get("owner_id")
        if value:
            return str(value)
    return None


def _discover_project_config(
    start_dir: Path | None = None, max_depth: int = 10
) -> tuple[Path, dict] | None:
    """Walk up from start_dir looking for a .notelink file.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        Tuple of (config_path, parsed_data) if found, None otherwise.
    """
    import yaml

    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth):
        config_file = current / CONFIG_FILENAME
        if config_file.is_file():
            try:
                data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            except (OSError, yaml.YAMLError):
                data = None
            if isinstance(data, dict):
                return (config_file, data)

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


# =============================================================================
# Note Model
# =============================================================================

# Element tag of note-link nodes in the editor's content tree.
NOTE_LINK_TYPE = "link"

# One JSON file per note in the store: <note id>.json
NOTE_FILE_SUFFIX = ".json"


# =============================================================================
# CLI Display
# =============================================================================

# Match contexts longer than this are truncated in table output.
# Paragraphs in notes are usually short; 60 chars keeps one match per line.
CONTEXT_PREVIEW_CHARS = 60
