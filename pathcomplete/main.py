from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pathcomplete.config import CompletionOptions, ConfigManager
from pathcomplete.errors import ConfigError
from pathcomplete.sources import FileSystemSource, MappingSource, ModuleSource, complete_file

log = logging.getLogger("pathcomplete.main")

SOURCES = ("fs", "module", "json")


def get_prog_name() -> str:
    """Return the invoked program name (supports symlink renaming).

    Uses sys.argv[0] basename; if empty, falls back to 'pathcomplete'.
    """
    base = os.path.basename(sys.argv[0]) if sys.argv else ""
    if not base or base in ("__main__.py", "-c"):
        return "pathcomplete"
    return base


def configure_logging(log_level: str, log_file: str):
    """Send log records to a file so stdout only carries completions.

    Args:
        log_level: The log level to use (debug, info, warning, error, critical).
        log_file: Path of the log file.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)

    for logger_name in ('pathcomplete', 'textual'):
        logger = logging.getLogger(logger_name)
        logger.setLevel(numeric_level)
        logger.handlers.clear()
        logger.propagate = True

    logging.info(f"Logging configured with level: {log_level.upper()} -> {log_file}")


def parse_args(prog: str, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=prog, description="Complete path-like words level by level")
    parser.add_argument("word", nargs="?", default="", help="Word to complete (default: empty)")
    parser.add_argument(
        "--config",
        help="Path to a JSON file with completion options",
    )
    parser.add_argument(
        "--source",
        choices=SOURCES,
        default="fs",
        help="What to complete: filesystem paths, Python modules or keys of a JSON tree",
    )
    parser.add_argument(
        "--root",
        dest="root",
        type=str,
        help="Root directory for filesystem completion (default: current directory).",
    )
    parser.add_argument("--tree", help="JSON file holding the tree for --source json")
    parser.add_argument("--starting-path", default="", help="Base path the word is relative to")
    parser.add_argument("--sep", dest="path_sep", help="Path separator (default '/', '.' for modules)")
    parser.add_argument("--ci", action=argparse.BooleanOptionalAction, default=None,
                        help="Case-insensitive matching")
    parser.add_argument("--map-case", action=argparse.BooleanOptionalAction, default=None,
                        help="Treat '_' and '-' as the same")
    parser.add_argument("--exp-im-path", action=argparse.BooleanOptionalAction, default=None,
                        help="Expand short intermediate segments by prefix")
    parser.add_argument("--exp-im-path-max-len", type=int, default=None,
                        help="Longest intermediate segment that is still expanded")
    parser.add_argument("--result-prefix", default=None, help="String prepended to every result")
    parser.add_argument("--tui", action="store_true", help="Start the interactive completion UI")
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug level logging",
    )
    return parser.parse_args(argv)


def load_options(args: argparse.Namespace) -> CompletionOptions:
    """Options from defaults < environment < config file < command line."""
    options = ConfigManager(args.config).load_options()
    path_sep = args.path_sep
    if path_sep is None and args.source == "module":
        path_sep = ModuleSource.path_sep
    return options.merged(
        path_sep=path_sep,
        ci=args.ci,
        map_case=args.map_case,
        exp_im_path=args.exp_im_path,
        exp_im_path_max_len=args.exp_im_path_max_len,
        result_prefix=args.result_prefix,
    )


def build_source(args: argparse.Namespace, options: CompletionOptions):
    if args.source == "module":
        return ModuleSource()
    if args.source == "json":
        if not args.tree:
            raise ConfigError("--source json requires --tree")
        with open(args.tree, "r", encoding="utf-8") as f:
            try:
                tree = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in tree file {args.tree}: {e}") from e
        if not isinstance(tree, dict):
            raise ConfigError(f"Tree file must contain a JSON object: {args.tree}")
        return MappingSource(tree, options.path_sep)
    return FileSystemSource(args.root)


def run_completion(args: argparse.Namespace, options: CompletionOptions, source) -> list[str]:
    if isinstance(source, FileSystemSource) and not args.starting_path:
        return complete_file(args.word, root=source.root, options=options)
    if isinstance(source, ModuleSource):
        return source.complete(args.word, options=options)
    return source.complete(args.word, args.starting_path, options=options)


def run_tui(prog: str, source, options: CompletionOptions, starting_path: str) -> None:
    from pathcomplete.ui import CompleterUI, PathSuggester, CommandSuggester, CompositeAutocompleteProvider

    provider = CompositeAutocompleteProvider([
        PathSuggester(source, prefix="@", options=options, starting_path=starting_path),
        CommandSuggester("/", {"help", "quit", "exit", "clear"}),
    ])
    ui = CompleterUI(prog, provider, default_prefix="@")
    ui.run()


def main(argv: list[str] | None = None) -> int:
    prog = get_prog_name()
    args = parse_args(prog, argv)

    if args.debug or args.log_file:
        configure_logging("debug" if args.debug else "info", args.log_file or str(Path.cwd() / f"{prog}.log"))

    try:
        options = load_options(args)
        source = build_source(args, options)
    except (ConfigError, OSError) as e:
        log.error("Failed to load configuration: %s", e)
        print(f"{prog}: {e}", file=sys.stderr)
        return 2
    log.info("Completing %r from %s with %s", args.word, args.source, options)

    if args.tui:
        run_tui(prog, source, options, args.starting_path)
        return 0

    for result in run_completion(args, options, source):
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
