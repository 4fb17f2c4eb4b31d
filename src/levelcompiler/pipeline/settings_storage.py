"""
Settings persistence layer for saved compiler configurations.

Handles save/load of named CompilerSettings to ~/.config/levelcompiler/settings/
"""

from __future__ import annotations
import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .compile_pipeline import CompilerSettings

logger = logging.getLogger(__name__)

NAME_KEY = "name"


def get_settings_dir() -> Path:
    """
    Get the directory for storing saved settings.

    Returns:
        Path to ~/.config/levelcompiler/settings/
        Creates the directory if it doesn't exist.
    """
    config_dir = Path.home() / ".config" / "levelcompiler" / "settings"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def _settings_to_dict(name: str, settings: CompilerSettings) -> Dict[str, Any]:
    data = asdict(settings)
    data[NAME_KEY] = name
    return data


def _dict_to_settings(data: Dict[str, Any]) -> CompilerSettings:
    """Create CompilerSettings from a dictionary; unknown keys are ignored."""
    known = {f.name for f in fields(CompilerSettings)}
    return CompilerSettings(**{k: v for k, v in data.items() if k in known})


def _sanitize_filename(name: str) -> str:
    """
    Sanitize a settings name for use as a filename.

    Args:
        name: The settings name

    Returns:
        A safe filename (lowercase, spaces replaced with underscores, special chars removed)
    """
    safe = name.lower().replace(" ", "_")
    safe = "".join(c for c in safe if c.isalnum() or c in "_-")
    return safe or "settings"


def _settings_path(name: str) -> Path:
    return get_settings_dir() / (_sanitize_filename(name) + ".json")


def save_settings(name: str, settings: CompilerSettings) -> Path:
    """
    Save settings under a name.

    Args:
        name: Name to save under
        settings: The CompilerSettings to save

    Returns:
        Path to the saved file

    Raises:
        OSError: If the file cannot be written
    """
    file_path = _settings_path(name)
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(_settings_to_dict(name, settings), f, indent=2, ensure_ascii=False)
    logger.debug("Saved settings '%s' to %s", name, file_path)
    return file_path


def load_settings_from_path(file_path: Path) -> Optional[CompilerSettings]:
    """
    Load settings from a specific file path.

    Returns:
        CompilerSettings if valid, None otherwise
    """
    if not file_path.exists():
        return None

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError("settings file does not hold an object")
        return _dict_to_settings(data)
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", file_path, e)
        return None


def load_settings(name: str) -> Optional[CompilerSettings]:
    """
    Load settings by name.

    Returns:
        CompilerSettings if found and valid, None otherwise
    """
    return load_settings_from_path(_settings_path(name))


def _saved_name(file_path: Path) -> Optional[str]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError:
        return None
    if isinstance(data, dict) and isinstance(data.get(NAME_KEY), str):
        return data[NAME_KEY]
    return file_path.stem


def list_saved_settings() -> List[str]:
    """
    List all saved settings names.

    Returns:
        Sorted list of names (without .json extension)
    """
    names = []
    for file_path in get_settings_dir().glob("*.json"):
        name = _saved_name(file_path)
        if name is not None and load_settings_from_path(file_path) is not None:
            names.append(name)
    return sorted(names)


def delete_settings(name: str) -> bool:
    """
    Delete saved settings by name.

    Returns:
        True if deleted, False if not found
    """
    file_path = _settings_path(name)
    if file_path.exists():
        file_path.unlink()
        return True

    # Also try to find by iterating (in case filename doesn't match)
    for fp in get_settings_dir().glob("*.json"):
        if _saved_name(fp) == name:
            fp.unlink()
            return True

    return False


def settings_exist(name: str) -> bool:
    return _settings_path(name).exists() or name in list_saved_settings()
