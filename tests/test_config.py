"""Tests for vimmeta.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from vimmeta.config import PluginConfig, VimMetaConfig, load_config
from vimmeta.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, VimMetaConfig)
    assert config.root == tmp_path.resolve()
    assert config.plugin == PluginConfig()
    assert config.plugin.follow_links is True
    assert config.plugin.max_workers == 1
    assert config.plugin.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".vimmeta.yml"
    config_file.write_text(
        """
plugin:
  follow_links: false
  max_workers: 4
  exclude_paths:
    - "autoload/vendor/"
    - "after/*"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.plugin.follow_links is False
    assert config.plugin.max_workers == 4
    assert config.plugin.exclude_paths == ["autoload/vendor/", "after/*"]


def test_load_config_accepts_plugin_directory(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text("plugin:\n  max_workers: '2'\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.plugin.max_workers == 2


def test_load_config_single_exclude_string(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text("plugin:\n  exclude_paths: syntax/\n", encoding="utf-8")

    assert load_config(tmp_path).plugin.exclude_paths == ["syntax/"]


def test_load_config_ignores_values_of_wrong_type(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text(
        "plugin:\n  follow_links: maybe\n  max_workers: true\n", encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.plugin.follow_links is True
    assert config.plugin.max_workers == 1


def test_load_config_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).plugin == PluginConfig()


def test_load_config_rejects_non_positive_workers(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text("plugin:\n  max_workers: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="max_workers"):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text("- plugin\n- other\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_load_config_reports_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".vimmeta.yml").write_text("plugin: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse .vimmeta.yml"):
        load_config(tmp_path)


def test_load_config_root_of_missing_directory_is_the_path_itself(tmp_path: Path) -> None:
    config = load_config(tmp_path / "missing")

    assert config.root == (tmp_path / "missing").resolve()
    assert config.plugin == PluginConfig()
