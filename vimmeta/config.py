"""Configuration loading for vimmeta (.vimmeta.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".vimmeta.yml"


@dataclass
class PluginConfig:
    """Settings for plugin directory discovery and parsing."""

    follow_links: bool = True
    max_workers: int = 1
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class VimMetaConfig:
    """Represents the settings defined in .vimmeta.yml."""

    root: Path
    plugin: PluginConfig = field(default_factory=PluginConfig)


def load_config(config_path: Path) -> VimMetaConfig:
    """Load configuration from a plugin directory or an explicit config file.

    ``root`` is the plugin directory: the given path itself, or the directory
    holding an explicit config file.
    """
    config_file, root = _resolve_config_path(config_path)

    if not config_file.exists():
        return VimMetaConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    plugin = PluginConfig()
    plugin_data = _as_dict(data.get("plugin"))
    if plugin_data:
        follow_links = _as_bool(plugin_data.get("follow_links"))
        if follow_links is not None:
            plugin.follow_links = follow_links
        max_workers = _as_int(plugin_data.get("max_workers"))
        if max_workers is not None:
            if max_workers < 1:
                raise ConfigError("plugin.max_workers must be a positive integer")
            plugin.max_workers = max_workers
        plugin.exclude_paths = _as_str_list(plugin_data.get("exclude_paths"))

    return VimMetaConfig(root=root, plugin=plugin)


def _resolve_config_path(config_path: Path) -> Tuple[Path, Path]:
    config_path = config_path.expanduser()
    if config_path.is_file():
        config_file = config_path.resolve()
        return config_file, config_file.parent
    root = config_path.resolve()
    return root / CONFIG_FILENAME, root


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "PluginConfig", "VimMetaConfig", "load_config"]
