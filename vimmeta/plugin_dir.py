"""Discovery and deterministic ordering of modules in a Vim plugin directory."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path, PurePath
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Protocol, Sequence, Tuple

from .errors import PluginIOError
from .logging import get_logger
from .models import VimModule, VimPlugin

# Directories that can contain .vim files per `:help vimfiles`, plus instant/ used by some
# plugins. Every section may also appear under after/, which sorts after all of these.
SECTIONS: Tuple[str, ...] = (
    "plugin",
    "instant",
    "autoload",
    "syntax",
    "indent",
    "ftdetect",
    "ftplugin",
    "compiler",
    "spell",
    "lang",
    "colors",
)

AFTER_DIR = "after"
AUTOLOAD_SECTION = "autoload"
MENU_FILE = "menu.vim"
VIM_EXTENSION = ".vim"

SortKey = Tuple[int, int]

_logger = get_logger("plugin_dir")


def _section_key(parts: Tuple[str, ...], offset: int, depth: int) -> Optional[SortKey]:
    if not parts or parts == (MENU_FILE,):
        return (offset, depth)
    section = parts[0]
    # autoload/ may nest to any depth; other sections only hold files directly.
    if section == AUTOLOAD_SECTION or len(parts) <= 2:
        if section in SECTIONS:
            return (offset + SECTIONS.index(section), depth)
    return None


def order_in_sections(relative_path: PurePath | str, *, is_dir: bool = False) -> Optional[SortKey]:
    """Return the ``(section, depth)`` sort key for a path relative to the plugin root.

    Returns None when the path is outside every recognized section and must
    not be included at all. Directories count one level deeper so that a
    section's own files sort before the contents of its subdirectories.
    """
    parts = PurePath(relative_path).parts
    depth = len(parts) + (1 if is_dir else 0)
    candidates = [(parts, 0)]
    if parts and parts[0] == AFTER_DIR:
        candidates.append((parts[1:], len(SECTIONS)))
    for section_parts, offset in candidates:
        key = _section_key(section_parts, offset, depth)
        if key is not None:
            return key
    return None


@dataclass(frozen=True)
class PluginFile:
    """A module file discovered under a plugin root."""

    path: Path
    relative_path: Path
    key: SortKey


def _is_excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        cleaned = pattern.strip().rstrip("/")
        if not cleaned:
            continue
        if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
            return True
    return False


def _raise_walk_error(exc: OSError) -> None:
    filename = getattr(exc, "filename", None)
    path = Path(filename) if filename else None
    raise PluginIOError(f"I/O error: {exc}", path=path) from exc


def _iter_plugin_files(
    root: Path, *, follow_links: bool, exclude_paths: Sequence[str]
) -> Iterator[PluginFile]:
    # Real paths of each pending directory's ancestors; a directory whose real
    # path is already among them is a symlink loop.
    ancestors: Dict[str, FrozenSet[str]] = {}
    for dirpath, dirnames, filenames in os.walk(
        root, followlinks=follow_links, onerror=_raise_walk_error
    ):
        current_dir = Path(dirpath)
        real_dir = os.path.realpath(current_dir)
        chain = ancestors.pop(dirpath, frozenset())
        if real_dir in chain:
            _logger.warning("Skipping %s: symlink loops back to an ancestor directory", current_dir)
            dirnames[:] = []
            continue
        chain = chain | {real_dir}
        rel_dir = current_dir.relative_to(root)

        dir_keys: Dict[str, SortKey] = {}
        for name in dirnames:
            key = order_in_sections(rel_dir / name, is_dir=True)
            if key is not None and not _is_excluded((rel_dir / name).as_posix(), exclude_paths):
                dir_keys[name] = key
        dirnames[:] = sorted(dir_keys, key=lambda name: (dir_keys[name], name))
        for name in dirnames:
            ancestors[os.path.join(dirpath, name)] = chain

        file_keys: Dict[str, SortKey] = {}
        for name in filenames:
            if not name.endswith(VIM_EXTENSION):
                continue
            rel_path = rel_dir / name
            key = order_in_sections(rel_path)
            if key is None:
                _logger.debug("Ignoring %s: not inside a recognized section", rel_path.as_posix())
                continue
            if _is_excluded(rel_path.as_posix(), exclude_paths):
                _logger.debug("Ignoring %s: matches exclude_paths", rel_path.as_posix())
                continue
            if not (current_dir / name).is_file():
                continue
            file_keys[name] = key
        for name in sorted(file_keys, key=lambda name: (file_keys[name], name)):
            yield PluginFile(
                path=current_dir / name,
                relative_path=rel_dir / name,
                key=file_keys[name],
            )


def discover_plugin_files(
    root: Path | str,
    *,
    follow_links: bool = True,
    exclude_paths: Sequence[str] = (),
) -> List[PluginFile]:
    """Return the module files of a plugin in canonical load order."""
    root_path = Path(root)
    if not root_path.exists():
        raise PluginIOError(f"Plugin path not found: {root}", path=root_path)
    if not root_path.is_dir():
        raise PluginIOError(f"Plugin path is not a directory: {root}", path=root_path)
    return list(
        _iter_plugin_files(root_path, follow_links=follow_links, exclude_paths=exclude_paths)
    )


class ModuleFileParser(Protocol):
    def parse_module_file(self, path: Path | str) -> VimModule: ...


class PluginDirAssembler:
    """Parses every discovered module file and composes them into a :class:`VimPlugin`.

    With ``max_workers > 1`` files are parsed on a thread pool, each worker
    using its own parser from ``parser_factory``. Results always follow the
    discovery order.
    """

    def __init__(
        self,
        parser: ModuleFileParser,
        *,
        parser_factory: Optional[Callable[[], ModuleFileParser]] = None,
        follow_links: bool = True,
        exclude_paths: Sequence[str] = (),
        max_workers: int = 1,
    ) -> None:
        self.parser = parser
        self.parser_factory = parser_factory
        self.follow_links = follow_links
        self.exclude_paths = list(exclude_paths)
        self.max_workers = max(1, max_workers)

    def assemble(self, root: Path | str) -> VimPlugin:
        files = discover_plugin_files(
            root, follow_links=self.follow_links, exclude_paths=self.exclude_paths
        )
        _logger.debug("Discovered %d module files under %s", len(files), root)
        factory = self.parser_factory
        if self.max_workers > 1 and factory is not None and len(files) > 1:
            modules = self._parse_parallel(files, factory)
        else:
            modules = [self._parse_one(self.parser, plugin_file) for plugin_file in files]
        return VimPlugin.from_modules(modules)

    @staticmethod
    def _parse_one(parser: ModuleFileParser, plugin_file: PluginFile) -> VimModule:
        module = parser.parse_module_file(plugin_file.path)
        # Replace the absolute path with one relative to the plugin root.
        return module.with_path(plugin_file.relative_path)

    def _parse_parallel(
        self, files: List[PluginFile], factory: Callable[[], ModuleFileParser]
    ) -> List[VimModule]:
        local = threading.local()

        def _worker(index: int, plugin_file: PluginFile) -> Tuple[int, VimModule]:
            parser = getattr(local, "parser", None)
            if parser is None:
                parser = factory()
                local.parser = parser
            return index, self._parse_one(parser, plugin_file)

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="vimmeta-parse") as pool:
            futures = [pool.submit(_worker, index, plugin_file) for index, plugin_file in enumerate(files)]
            results = [future.result() for future in futures]
        return [module for _, module in sorted(results, key=lambda item: item[0])]


__all__ = [
    "AFTER_DIR",
    "MENU_FILE",
    "SECTIONS",
    "PluginDirAssembler",
    "PluginFile",
    "discover_plugin_files",
    "order_in_sections",
]
