"""
Test the command line surface: subcommand dispatch, exit codes, JSON report
output and the interactive shell.
"""

import json
import logging
from pathlib import Path

import pytest

from combinator import run_cli
from combinator.run_cli import build_parser, main

from conftest import write_lines


def _scripted_input(lines):
    pending = list(lines)

    def fake_input(prompt=""):
        if not pending:
            raise EOFError
        return pending.pop(0)

    return fake_input


def test_merge_with_options(sample_tree: Path, capsys):
    output = sample_tree / "res.txt"
    assert main(["merge", "-p", str(sample_tree), "-o", str(output)]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Merging files:"
    assert out.splitlines()[-1] == "Merge complete."
    assert output.read_text(encoding="utf-8").splitlines() == [str(i) for i in range(1, 10)]


def test_merge_positional_path_and_long_options(sample_tree: Path):
    output = sample_tree / "res.md"
    write_lines(sample_tree / "notes.md", ["m"])
    assert main(["merge", str(sample_tree), "--file", str(output), "--extension", "md", "--charset", "utf8"]) == 0
    assert output.read_text(encoding="utf-8") == "m\n"


def test_merge_existing_output_exit_code(sample_tree: Path, capsys):
    output = write_lines(sample_tree / "res.txt", ["0"])
    assert main(["merge", "-p", str(sample_tree), "-o", str(output)]) == 1
    assert capsys.readouterr().out.strip() == f"File already exists: {output}"


def test_merge_bad_charset(sample_tree: Path, capsys):
    output = sample_tree / "res.txt"
    assert main(["merge", "-p", str(sample_tree), "-o", str(output), "-c", "bla"]) == 1
    assert capsys.readouterr().out.strip() == "Invalid charset: bla"
    assert not output.exists()


def test_merge_requires_output(sample_tree: Path, capsys):
    assert main(["merge", str(sample_tree)]) == 1
    assert "requires an output file" in capsys.readouterr().out


def test_read_positional(sample_tree: Path, capsys):
    assert main(["read", str(sample_tree)]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "Reading file contents:",
        "[1, 2, 3]",
        "[4, 5, 6]",
        "[7, 8, 9]",
        "End of file contents.",
    ]


@pytest.mark.parametrize("command", ["list", "ls"])
def test_list_and_alias(sample_tree: Path, capsys, command):
    assert main([command, str(sample_tree)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1:4] == [str(sample_tree / "1.txt"), str(sample_tree / "2.txt"), str(sample_tree / "test" / "3.txt")]


def test_missing_directory_exit_code(tmp_path: Path, capsys):
    bad_dir = tmp_path / "badDir"
    assert main(["ls", str(bad_dir)]) == 1
    assert capsys.readouterr().out.strip() == f"Directory does not exist: {bad_dir}"


def test_path_required(capsys):
    assert main(["list"]) == 1
    assert "directory path is required" in capsys.readouterr().out


def test_conflicting_paths_rejected(sample_tree: Path, tmp_path: Path, capsys):
    assert main(["list", str(sample_tree), "-p", str(tmp_path / "other")]) == 1
    assert "not both" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage:" in capsys.readouterr().out


def test_json_out_written(sample_tree: Path, tmp_path: Path):
    report_path = tmp_path / "reports" / "merge.json"
    output = sample_tree / "res.txt"
    assert main(["merge", "-p", str(sample_tree), "-o", str(output), "--json-out", str(report_path), "--quiet"]) == 0

    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["command"] == "merge"
    assert payload["files"] == 3
    assert payload["lines"] == 9
    assert payload["failures"] == 0
    assert payload["metrics"]["lines_written"] == 9


def test_log_file_option(sample_tree: Path, tmp_path: Path, monkeypatch):
    monkeypatch.setitem(run_cli.CONFIG, "LOG_DIR", str(tmp_path / "logs"))
    stray = logging.FileHandler(tmp_path / "elsewhere.log", encoding="utf-8")
    run_cli.logger.addHandler(stray)
    try:
        assert main(["list", str(sample_tree), "--log-file"]) == 0
    finally:
        run_cli.logger.removeHandler(stray)
        stray.close()

    logs = list((tmp_path / "logs").glob("list-*.log"))
    assert len(logs) == 1
    assert "Listing files" not in logs[0].read_text(encoding="utf-8")
    assert not any(isinstance(h, logging.FileHandler) for h in run_cli.logger.handlers)


def test_unknown_option_exits():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["merge", "--bogus"])


class TestShell:
    def test_shell_runs_commands_until_quit(self, sample_tree: Path, monkeypatch, capsys):
        output = sample_tree / "res.txt"
        monkeypatch.setattr("builtins.input", _scripted_input([
            f"ls {sample_tree}",
            "",
            f"merge -p '{sample_tree}' -o '{output}'",
            "quit",
            f"read {sample_tree}",
        ]))

        assert main(["shell"]) == 0

        out = capsys.readouterr().out
        assert "Listing files:" in out
        assert "Merge complete." in out
        assert "Reading file contents:" not in out
        assert output.exists()

    def test_shell_survives_bad_input(self, sample_tree: Path, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", _scripted_input([
            "frobnicate",
            "merge --bogus",
            "read 'unterminated",
            "shell",
            "help",
            f"list {sample_tree / 'missing'}",
        ]))

        assert main(["shell"]) == 0

        captured = capsys.readouterr()
        assert "Invalid input" in captured.out
        assert "Already in the shell." in captured.out
        assert "usage:" in captured.out
        assert "Directory does not exist" in captured.out
        assert "invalid choice" in captured.err

    def test_shell_custom_prompt(self, monkeypatch):
        prompts = []

        def fake_input(prompt=""):
            prompts.append(prompt)
            raise EOFError

        monkeypatch.setattr("builtins.input", fake_input)
        assert main(["shell", "--prompt", "$ "]) == 0
        assert prompts == ["$ "]


def test_list_accepts_and_ignores_charset(sample_tree: Path, capsys):
    assert main(["list", str(sample_tree), "-c", "cp1251"]) == 0
    assert capsys.readouterr().out.splitlines()[1] == str(sample_tree / "1.txt")


def test_uncreatable_output_reports_instead_of_crashing(sample_tree: Path, capsys):
    output = sample_tree / ("x" * 300 + ".txt")
    assert main(["merge", "-p", str(sample_tree), "-o", str(output)]) == 1
    assert capsys.readouterr().out.strip() == f"Unable to create file: {output}"


def test_shell_json_reports_cover_one_command_each(tmp_path: Path, monkeypatch):
    first = tmp_path / "first"
    second = tmp_path / "second"
    for root in (first, second):
        write_lines(root / "1.txt", ["1", "2", "3"])
        write_lines(root / "2.txt", ["4", "5", "6"])
    reports = tmp_path / "reports"
    monkeypatch.setattr("builtins.input", _scripted_input([
        f"merge {first} -o {first / 'res.out'} --json-out {reports / 'a.json'} --quiet",
        f"merge {second} -o {second / 'res.out'} --json-out {reports / 'b.json'} --quiet",
    ]))

    assert main(["shell"]) == 0

    for name in ("a.json", "b.json"):
        payload = json.loads((reports / name).read_text(encoding="utf-8"))
        assert payload["lines"] == 6
        assert payload["metrics"] == {"files_processed": 2, "lines_written": 6}
