"""CLI entrypoints for vimmeta commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from .config import load_config
from .errors import ConfigError, GrammarError, PluginIOError, VimMetaError
from .grammar import get_grammar
from .logging import configure_logging, get_logger
from .models import VimModule, VimNode
from .parser import VimParser

_SUMMARY_WIDTH = 72


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_format_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (defaults to text).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vimmeta",
        description="Extract documentation metadata from Vim plugins.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    parser.add_argument(
        "--no-diagnostics",
        dest="diagnostics",
        action="store_false",
        help="Do not print per-declaration diagnostics (they still go to --log-file).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    module_parser = subparsers.add_parser(
        "module",
        help="Parse a single Vim script file.",
    )
    _add_verbose_option(module_parser, suppress_default=True)
    _add_format_option(module_parser)
    module_parser.add_argument("path", help="Path to the .vim file.")

    plugin_parser = subparsers.add_parser(
        "plugin",
        help="Parse every module of a plugin directory.",
    )
    _add_verbose_option(plugin_parser, suppress_default=True)
    _add_format_option(plugin_parser)
    plugin_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the plugin root (defaults to current directory).",
    )
    plugin_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parse files on this many threads (overrides .vimmeta.yml).",
    )

    check_parser = subparsers.add_parser(
        "check-grammar",
        help="Verify the installed Vim grammar provides every node kind vimmeta uses.",
    )
    _add_verbose_option(check_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for vimmeta commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=args.log_file,
        diagnostics=args.diagnostics,
    )
    logger = get_logger("cli")

    if args.command == "check-grammar":
        try:
            grammar = get_grammar()
            grammar.check_vocabulary()
        except GrammarError as exc:
            parser.exit(1, f"{exc}\n")
        print(f"Grammar '{grammar.name}' provides every node kind vimmeta uses")
        return

    try:
        vim_parser = VimParser()
    except GrammarError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "module":
        try:
            module = vim_parser.parse_module_file(args.path)
        except PluginIOError as exc:
            parser.exit(1, f"{exc}\n")
        except VimMetaError as exc:
            parser.exit(1, f"vimmeta module failed: {exc}\nRun with --verbose for more details.\n")
        _print_modules([module], args.format)
    elif args.command == "plugin":
        root = Path(args.path).expanduser()
        try:
            config = load_config(root)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        settings = config.plugin
        if args.workers is not None:
            settings.max_workers = max(1, args.workers)
        logger.info("Parsing plugin at %s", config.root)
        try:
            plugin = vim_parser.parse_plugin_dir(config.root, config=settings)
        except PluginIOError as exc:
            parser.exit(1, f"{exc}\n")
        except VimMetaError as exc:
            parser.exit(1, f"vimmeta plugin failed: {exc}\nRun with --verbose for more details.\n")
        _print_modules(list(plugin.content), args.format)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_modules(modules: List[VimModule], output_format: str) -> None:
    if output_format == "json":
        payload: Dict[str, Any] = {"content": [module.to_dict() for module in modules]}
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    for line in render_text(modules):
        print(line)


def render_text(modules: List[VimModule]) -> List[str]:
    """Return a compact, human-readable outline of ``modules``."""
    lines: List[str] = []
    for module in modules:
        header = module.path.as_posix() if module.path is not None else "<string>"
        if module.doc:
            header = f"{header}: {_summarise(module.doc)}"
        lines.append(header)
        for node in module.nodes:
            lines.append(f"  {_describe(node)}")
    return lines


def _describe(node: VimNode) -> str:
    if isinstance(node, VimNode.StandaloneDocComment):
        return f"doc: {_summarise(node.doc)}"
    if isinstance(node, VimNode.Function):
        modifiers = f" {' '.join(node.modifiers)}" if node.modifiers else ""
        label = f"function {node.name}({', '.join(node.args)}){modifiers}"
    elif isinstance(node, VimNode.Command):
        modifiers = f"{' '.join(node.modifiers)} " if node.modifiers else ""
        label = f"command {modifiers}{node.name}"
    elif isinstance(node, VimNode.Variable):
        label = f"let {node.name} = {node.init_value_token}"
    elif isinstance(node, VimNode.Flag):
        default = f" = {node.default_value_token}" if node.default_value_token is not None else ""
        label = f"flag {node.name}{default}"
    else:  # pragma: no cover - closed set of node types
        label = repr(node)
    doc = getattr(node, "doc", None)
    if doc:
        label = f"{label}  -- {_summarise(doc)}"
    return label


def _summarise(doc: str) -> str:
    first_line = doc.strip().splitlines()[0] if doc.strip() else ""
    if len(first_line) > _SUMMARY_WIDTH:
        return first_line[: _SUMMARY_WIDTH - 3] + "..."
    return first_line


if __name__ == "__main__":
    main(sys.argv[1:])
