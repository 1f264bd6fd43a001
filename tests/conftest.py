from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.plugin_builder import PluginBuilder
from vimmeta.grammar import grammar_available
from vimmeta.logging import DIAGNOSTICS_LOGGER_NAME
from vimmeta.parser import VimParser


@pytest.fixture
def plugin_builder(tmp_path: Path) -> PluginBuilder:
    """Provide a reusable plugin directory builder rooted at the pytest tmp_path."""
    return PluginBuilder(tmp_path)


@pytest.fixture
def vim_parser() -> VimParser:
    """Provide a parser backed by the real Vim grammar, skipping when it is unavailable."""
    if not grammar_available():
        pytest.skip("tree-sitter Vim grammar not available")
    return VimParser()


@pytest.fixture(autouse=True)
def _reset_vimmeta_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog keeps seeing vimmeta records."""
    yield
    for name in ("vimmeta", DIAGNOSTICS_LOGGER_NAME):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
