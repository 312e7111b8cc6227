from __future__ import annotations

import json, logging, sys, time
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional

# LogRecord attributes that are not user supplied ``extra`` fields.
_RESERVED = frozenset((
    "name", "msg", "args", "exc_info", "exc_text", "stack_info", "stacklevel", "created",
    "msecs", "relativeCreated", "levelno", "levelname", "pathname", "filename",
    "module", "lineno", "funcName", "thread", "threadName", "processName", "process",
    "taskName", "message", "asctime",
))


def _jsonable(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` fields are copied alongside."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update({k: _jsonable(v) for k, v in vars(record).items() if k not in _RESERVED})
        return json.dumps(payload)


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is at emit time."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def get_logger(name: str = "combinator") -> logging.Logger:
    logger = logging.getLogger(name)
    if any(isinstance(h, _StderrHandler) for h in logger.handlers):
        return logger
    logger.setLevel(logging.INFO)
    # stdout carries command reports
    h = _StderrHandler()
    h.setFormatter(JsonFormatter())
    logger.addHandler(h)
    logger.propagate = False
    return logger


# Handlers created by configure_file_logger, keyed by logger name.
_FILE_HANDLERS: Dict[str, logging.FileHandler] = {}


def configure_file_logger(role: str, logger: logging.Logger, log_dir: Path | str = "logs") -> Path:
    """Attach a JSON file handler writing to ``<log_dir>/<role>-<timestamp>.log``.

    Calling it twice for the same logger reuses the handler created by the
    first call; file handlers attached by anything else are left alone.
    """
    existing = _FILE_HANDLERS.get(logger.name)
    if existing is not None and existing in logger.handlers:
        return Path(existing.baseFilename)
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{role}-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"
    h = logging.FileHandler(path, encoding="utf-8")
    h.setFormatter(JsonFormatter())
    logger.addHandler(h)
    _FILE_HANDLERS[logger.name] = h
    return Path(h.baseFilename)


def close_file_logger(logger: logging.Logger) -> None:
    """Detach and close the handler added by :func:`configure_file_logger`, if any."""
    h = _FILE_HANDLERS.pop(logger.name, None)
    if h is None:
        return
    logger.removeHandler(h)
    h.close()


class Counter:
    def __init__(self): self.value = 0
    def inc(self, n: int = 1): self.value += n


class Metrics:
    """Named counters for the command currently running.

    The CLI clears them before every command, so a snapshot only ever
    describes one invocation.
    """

    def __init__(self):
        self.counters: Dict[str, Counter] = {}

    def counter(self, name: str) -> Counter:
        return self.counters.setdefault(name, Counter())

    def snapshot(self) -> Dict[str, int]:
        return {k: c.value for k, c in sorted(self.counters.items())}

    def reset(self, names: Optional[Iterable[str]] = None) -> None:
        if names is None:
            self.counters.clear()
            return
        for k in names:
            self.counters.pop(k, None)


METRICS = Metrics()
