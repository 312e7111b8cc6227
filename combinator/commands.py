"""merge / read / list commands.

Each command validates its inputs, discovers the file set once and then
processes the files strictly one after another, collecting one report line
per file. Validation failures end the command before any traversal; a file
that cannot be read or written gets a failure line in the report and the
command carries on with the next file.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from combinator.content import append_lines, read_lines, resolve_encoding
from combinator.errors import (
    FileProcessingError,
    OutputCreateError,
    OutputExistsError,
    ValidationError,
    WriteError,
)
from combinator.logging_utils import METRICS, get_logger
from combinator.walker import FileSet, ensure_directory

logger = get_logger("combinator")

DEFAULT_EXTENSION = "txt"
DEFAULT_CHARSET = "UTF-8"

MERGE_HEADER = "Merging files:"
MERGE_TRAILER = "Merge complete."
READ_HEADER = "Reading file contents:"
READ_TRAILER = "End of file contents."
LIST_HEADER = "Listing files:"
LIST_TRAILER = "End of list."


@dataclass(frozen=True)
class CommandContext:
    """Everything one command invocation needs, resolved up front."""

    root: Path
    extension: str = DEFAULT_EXTENSION
    encoding: str = "utf-8"
    output: Optional[Path] = None


@dataclass
class Report:
    command: str
    header: str
    trailer: str
    entries: List[str] = field(default_factory=list)
    files: int = 0
    lines: int = 0
    failures: int = 0

    def add(self, line: str) -> None:
        self.entries.append(line)

    def fail(self, exc: FileProcessingError) -> None:
        self.failures += 1
        self.entries.append(str(exc))

    def render(self) -> str:
        return "\n".join([self.header, *self.entries, self.trailer])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "files": self.files,
            "lines": self.lines,
            "failures": self.failures,
            "entries": list(self.entries),
        }

    def __str__(self) -> str:
        return self.render()


def format_lines(lines: List[str]) -> str:
    """Render file lines the way ``read`` reports them: ``[a, b, c]``."""

    return "[" + ", ".join(lines) + "]"


def _process(context: CommandContext, report: Report, unit: Callable[[Path], str]) -> Report:
    for path in FileSet(context.root, context.extension, exclude=context.output):
        try:
            report.add(unit(path))
            report.files += 1
            METRICS.counter("files_processed").inc()
        except FileProcessingError as exc:
            logger.warning("File skipped", extra={"command": report.command, "path": str(exc.path), "error": exc.reason})
            METRICS.counter("file_errors").inc()
            report.fail(exc)
    return report


def prepare_merge(root: Path | str, output: Path | str, extension: str = DEFAULT_EXTENSION,
                  charset: str = DEFAULT_CHARSET) -> CommandContext:
    """Validate merge inputs and create the empty output file.

    The charset is checked before the output is created so that a bad
    charset never leaves an empty output file behind.
    """

    base = ensure_directory(root)
    target = Path(output).absolute()
    try:
        exists = target.exists()
    except (OSError, ValueError) as exc:
        raise OutputCreateError(target, str(exc)) from exc
    if exists:
        raise OutputExistsError(target)
    encoding = resolve_encoding(charset)
    try:
        with target.open("x", encoding=encoding):
            pass
    except FileExistsError as exc:
        raise OutputExistsError(target) from exc
    except (OSError, ValueError) as exc:
        raise OutputCreateError(target, str(exc)) from exc
    return CommandContext(root=base, extension=extension, encoding=encoding, output=target)


def run_merge(root: Path | str, output: Path | str, extension: str = DEFAULT_EXTENSION,
              charset: str = DEFAULT_CHARSET) -> Report:
    """Append every matched file to ``output`` in file-set order.

    Raises
    ------
    ValidationError
        Invalid root, existing or uncreatable output, or unknown charset.
    """

    context = prepare_merge(root, output, extension, charset)
    report = Report("merge", MERGE_HEADER, MERGE_TRAILER)
    logger.info("Merge started", extra={"root": str(context.root), "output": str(context.output),
                                        "extension": extension, "encoding": context.encoding})

    def unit(path: Path) -> str:
        lines = read_lines(path, context.encoding)
        try:
            written = append_lines(context.output, lines, context.encoding)
        except WriteError as exc:
            raise WriteError(path, f"append to {context.output} failed: {exc.reason}") from exc
        report.lines += written
        METRICS.counter("lines_written").inc(written)
        return f"Added {written} lines from file {path}"

    _process(context, report, unit)
    logger.info("Merge finished", extra={"files": report.files, "lines": report.lines, "failures": report.failures})
    return report


def run_read(root: Path | str, extension: str = DEFAULT_EXTENSION, charset: str = DEFAULT_CHARSET) -> Report:
    context = CommandContext(root=ensure_directory(root), extension=extension, encoding=resolve_encoding(charset))
    report = Report("read", READ_HEADER, READ_TRAILER)

    def unit(path: Path) -> str:
        lines = read_lines(path, context.encoding)
        report.lines += len(lines)
        return format_lines(lines)

    return _process(context, report, unit)


def run_list(root: Path | str, extension: str = DEFAULT_EXTENSION) -> Report:
    context = CommandContext(root=ensure_directory(root), extension=extension)
    report = Report("list", LIST_HEADER, LIST_TRAILER)
    return _process(context, report, str)


def merge_files(root: Path | str, output: Path | str, extension: str = DEFAULT_EXTENSION,
                charset: str = DEFAULT_CHARSET) -> str:
    """Merge files and return the report text, or the validation message."""

    try:
        return run_merge(root, output, extension, charset).render()
    except ValidationError as exc:
        logger.warning("Merge rejected", extra={"error": str(exc)})
        return str(exc)


def read_files(root: Path | str, extension: str = DEFAULT_EXTENSION, charset: str = DEFAULT_CHARSET) -> str:
    """Return the contents of every matched file, one line per file."""

    try:
        return run_read(root, extension, charset).render()
    except ValidationError as exc:
        logger.warning("Read rejected", extra={"error": str(exc)})
        return str(exc)


def list_files(root: Path | str, extension: str = DEFAULT_EXTENSION) -> str:
    """Return the paths of every matched file, one per line."""

    try:
        return run_list(root, extension).render()
    except ValidationError as exc:
        logger.warning("List rejected", extra={"error": str(exc)})
        return str(exc)


__all__ = [
    "CommandContext",
    "Report",
    "format_lines",
    "list_files",
    "merge_files",
    "prepare_merge",
    "read_files",
    "run_list",
    "run_merge",
    "run_read",
]
