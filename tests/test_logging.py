from __future__ import annotations

import logging
from pathlib import Path

import pytest

from vimmeta.logging import (
    DIAGNOSTICS_LOGGER_NAME,
    configure_logging,
    get_diagnostics_logger,
    get_logger,
)


def test_get_logger_uses_vimmeta_hierarchy() -> None:
    assert get_logger().name == "vimmeta"
    assert get_logger("parser").name == "vimmeta.parser"
    assert get_diagnostics_logger().name == DIAGNOSTICS_LOGGER_NAME == "vimmeta.classifier"


def test_configure_logging_sets_level_and_replaces_handlers() -> None:
    configure_logging(verbose=True)
    logger = configure_logging(verbose=False)

    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert len(get_diagnostics_logger().handlers) == 1


def test_diagnostics_are_printed_once_with_their_own_prefix(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging()

    get_diagnostics_logger().warning("Failed to find function name at line 1, column 1")
    get_logger("parser").info("Parsing plugin")

    err = capsys.readouterr().err.splitlines()
    assert err == [
        "[vimmeta] diagnostic: Failed to find function name at line 1, column 1",
        "[vimmeta] INFO Parsing plugin",
    ]


def test_diagnostics_can_be_silenced_but_still_reach_log_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log_file = tmp_path / "vimmeta.log"

    configure_logging(log_file=log_file, diagnostics=False)
    get_diagnostics_logger().warning("Syntax error at line 2, column 1 near 'x'")
    for handler in get_diagnostics_logger().handlers:
        handler.flush()

    assert "diagnostic" not in capsys.readouterr().err
    assert (
        "WARNING vimmeta.classifier: Syntax error at line 2, column 1 near 'x'"
        in log_file.read_text(encoding="utf-8")
    )


def test_configure_logging_writes_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "vimmeta.log"

    logger = configure_logging(verbose=True, log_file=log_file)
    get_logger("plugin_dir").debug("Discovered %d module files", 3)
    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    assert "DEBUG vimmeta.plugin_dir: Discovered 3 module files" in log_file.read_text(encoding="utf-8")
