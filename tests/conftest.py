"""Shared fixtures for the combinator test suite."""

from pathlib import Path

import pytest

from combinator.logging_utils import METRICS


def write_lines(path: Path, lines, encoding: str = "utf-8") -> Path:
    """Write ``lines`` newline-terminated, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding=encoding)
    return path


@pytest.fixture(autouse=True)
def reset_metrics():
    METRICS.reset()
    yield
    METRICS.reset()


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """1.txt=[1,2,3], 2.txt=[4,5,6], test/3.txt=[7,8,9] under one root."""
    write_lines(tmp_path / "1.txt", ["1", "2", "3"])
    write_lines(tmp_path / "2.txt", ["4", "5", "6"])
    write_lines(tmp_path / "test" / "3.txt", ["7", "8", "9"])
    return tmp_path
