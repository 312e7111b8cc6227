"""
Command line entrypoint for the text file combinator.

Supports subcommands:
- merge: Concatenate matched files into a new output file
- read: Print the contents of matched files
- list (ls): Print the paths of matched files
- shell: Interactive prompt accepting the commands above
"""

import argparse
import json
import logging
import shlex
import sys
from pathlib import Path
from typing import Callable, List, Optional

from combinator.commands import Report, run_list, run_merge, run_read
from combinator.config import CONFIG
from combinator.errors import ValidationError
from combinator.logging_utils import METRICS, close_file_logger, configure_file_logger, get_logger

logger = get_logger("combinator")

SHELL_EXIT_WORDS = {"quit", "exit"}


def write_json_report(json_path: Optional[str], payload: dict, *, quiet: bool = False) -> None:
    """Persist the report payload to JSON if a path is provided."""

    if not json_path:
        return

    try:
        path = Path(json_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        if not quiet:
            print(f"Wrote JSON report to {path}", file=sys.stderr)
    except OSError as exc:
        print(f"Warning: Failed to write JSON output to {json_path}: {exc}", file=sys.stderr)


def _resolve_root(args) -> Optional[str]:
    """Accept the directory either positionally or via -p/--path."""

    path_opt = getattr(args, "path", None)
    path_pos = getattr(args, "path_arg", None)
    if path_opt and path_pos and path_opt != path_pos:
        print("Error: give the directory either positionally or with --path, not both")
        return None
    root = path_opt or path_pos
    if not root:
        print("Error: a directory path is required")
    return root


def _finish(args, report: Report) -> int:
    print(report.render())
    payload = report.to_dict()
    payload["metrics"] = METRICS.snapshot()
    write_json_report(getattr(args, "json_out", None), payload, quiet=getattr(args, "quiet", False))
    return 0


def _run(args, action: Callable[[str], Report]) -> int:
    root = _resolve_root(args)
    if root is None:
        return 1
    try:
        report = action(root)
    except ValidationError as exc:
        print(exc)
        return 1
    return _finish(args, report)


def merge_command(args) -> int:
    """Merge matched files into args.out."""
    if not args.out:
        print("Error: merge requires an output file (-o/--out)")
        return 1
    return _run(args, lambda root: run_merge(root, args.out, args.extension, args.charset))


def read_command(args) -> int:
    """Print the content of every matched file."""
    return _run(args, lambda root: run_read(root, args.extension, args.charset))


def list_command(args) -> int:
    """Print the path of every matched file."""
    return _run(args, lambda root: run_list(root, args.extension))


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path_arg", nargs="?", metavar="PATH",
                        help="Directory containing the files")
    parser.add_argument("-p", "--path",
                        help="Directory containing the files (alternative to PATH)")
    parser.add_argument("-e", "--ext", "--extension", dest="extension",
                        default=CONFIG["DEFAULT_EXTENSION"],
                        help=f"Literal path suffix of the files (default: {CONFIG['DEFAULT_EXTENSION']})")
    parser.add_argument("-c", "--charset", default=CONFIG["DEFAULT_CHARSET"],
                        help=f"Text encoding (default: {CONFIG['DEFAULT_CHARSET']}; ignored by list)")
    parser.add_argument("--quiet", action="store_true",
                        help="Suppress informational logging (warnings/errors still shown)")
    parser.add_argument("--log-file", action="store_true",
                        help=f"Also write JSON logs under {CONFIG['LOG_DIR']}/")
    parser.add_argument("--json-out",
                        help="Optional path to write the report as JSON")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="combinator", description="Text file combinator")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    merge_parser = subparsers.add_parser("merge", help="Merge files into a single file")
    _add_common_options(merge_parser)
    merge_parser.add_argument("-o", "--out", "--file", dest="out",
                              help="Output file; must not exist yet")
    merge_parser.set_defaults(handler=merge_command)

    read_parser = subparsers.add_parser("read", help="Show the contents of files")
    _add_common_options(read_parser)
    read_parser.set_defaults(handler=read_command)

    list_parser = subparsers.add_parser("list", aliases=["ls"], help="Show the list of files")
    _add_common_options(list_parser)
    list_parser.set_defaults(handler=list_command)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive prompt")
    shell_parser.add_argument("--prompt", default=CONFIG["SHELL_PROMPT"],
                              help="Prompt string")
    shell_parser.set_defaults(handler=None)

    return parser


def _apply_logging(args) -> None:
    level = logging.WARNING if getattr(args, "quiet", False) else getattr(logging, CONFIG["LOG_LEVEL"].upper())
    logger.setLevel(level)
    if getattr(args, "log_file", False):
        log_path = configure_file_logger(args.command, logger, CONFIG["LOG_DIR"])
        if not getattr(args, "quiet", False):
            print(f"Log file: {log_path}", file=sys.stderr)


def dispatch(parser: argparse.ArgumentParser, argv: List[str]) -> int:
    """Parse one command line and run it. Returns the exit code."""
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "shell":
        return shell_command(parser, args.prompt)

    METRICS.reset()
    _apply_logging(args)
    return args.handler(args)


def shell_command(parser: argparse.ArgumentParser, prompt: str) -> int:
    """Read commands from stdin until quit/exit/EOF."""
    print("Combinator shell. Type 'help' for commands, 'quit' to leave.")
    while True:
        try:
            line = input(prompt)
        except EOFError:
            break
        except KeyboardInterrupt:
            print()
            break
        line = line.strip()
        if not line:
            continue
        lowered = line.lower()
        if lowered in SHELL_EXIT_WORDS:
            break
        if lowered == "help":
            parser.print_help()
            continue
        try:
            argv = shlex.split(line)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if argv[0] == "shell":
            print("Already in the shell.")
            continue
        try:
            dispatch(parser, argv)
        except SystemExit:
            # argparse already printed the usage error
            continue
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint with subcommands."""
    parser = build_parser()
    try:
        return dispatch(parser, sys.argv[1:] if argv is None else argv)
    finally:
        close_file_logger(logger)


if __name__ == "__main__":
    sys.exit(main())
