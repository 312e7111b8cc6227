"""Line-oriented reading and appending under an explicit text encoding."""
from __future__ import annotations

import codecs
from pathlib import Path
from typing import Iterable, List

from combinator.errors import InvalidEncodingError, ReadError, WriteError


def resolve_encoding(name: str) -> str:
    """Return the canonical codec name for ``name``.

    Only text encodings are accepted; codecs such as ``base64`` or
    ``rot13`` are rejected along with unknown names.

    Raises
    ------
    InvalidEncodingError
        If ``name`` does not name a text encoding.
    """

    try:
        info = codecs.lookup(name)
        "".encode(info.name)
    except (LookupError, TypeError, ValueError) as exc:
        raise InvalidEncodingError(name) from exc
    return info.name


def read_lines(path: Path | str, encoding: str) -> List[str]:
    """Return all lines of ``path`` decoded with ``encoding``.

    ``\\n``, ``\\r\\n`` and ``\\r`` all end a line and are not part of the
    returned strings. Nothing is returned when decoding fails part way.
    """

    target = Path(path)
    try:
        with target.open("r", encoding=encoding, errors="strict", newline=None) as handle:
            return [line[:-1] if line.endswith("\n") else line for line in handle]
    except UnicodeDecodeError as exc:
        raise ReadError(target, f"cannot decode as {encoding}: {exc.reason}") from exc
    except (OSError, LookupError) as exc:
        raise ReadError(target, str(exc)) from exc


def append_lines(output: Path | str, lines: Iterable[str], encoding: str) -> int:
    """Append ``lines`` to ``output``, each followed by the platform separator.

    The file is created when missing and never truncated. Lines written
    before a failure stay on disk.

    Returns
    -------
    int
        Number of lines written.
    """

    target = Path(output)
    written = 0
    try:
        with target.open("a", encoding=encoding, errors="strict", newline=None) as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
                written += 1
            handle.flush()
    except UnicodeEncodeError as exc:
        raise WriteError(target, f"cannot encode line {written + 1} as {encoding}: {exc.reason}") from exc
    except (OSError, LookupError) as exc:
        raise WriteError(target, str(exc)) from exc
    return written


__all__ = ["append_lines", "read_lines", "resolve_encoding"]
