"""Error types raised by the file combinator.

Validation errors are raised before any file is read or written and their
``str()`` is the message shown to the operator. Per-file errors carry the
offending path so a command can report them without aborting the walk.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class CombinatorError(Exception):
    """Base class for every error raised by ``combinator``."""


class ValidationError(CombinatorError):
    """Command input rejected before traversal started."""


class InvalidRootError(ValidationError):
    def __init__(self, root: Path | str):
        self.root = Path(root).absolute()
        super().__init__(f"Directory does not exist: {self.root}")


class OutputExistsError(ValidationError):
    def __init__(self, output: Path | str):
        self.output = Path(output).absolute()
        super().__init__(f"File already exists: {self.output}")


class OutputCreateError(ValidationError):
    def __init__(self, output: Path | str, reason: Optional[str] = None):
        self.output = Path(output).absolute()
        self.reason = reason
        super().__init__(f"Unable to create file: {self.output}")


class InvalidEncodingError(ValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid charset: {name}")


class FileProcessingError(CombinatorError):
    """A single file could not be processed; other files are unaffected."""

    action = "process"

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to {self.action} file {self.path}: {reason}")


class ReadError(FileProcessingError):
    action = "read"


class WriteError(FileProcessingError):
    action = "write"


__all__ = [
    "CombinatorError",
    "ValidationError",
    "InvalidRootError",
    "OutputExistsError",
    "OutputCreateError",
    "InvalidEncodingError",
    "FileProcessingError",
    "ReadError",
    "WriteError",
]
