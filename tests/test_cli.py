"""Tests for the demo dispatcher (lessons/cli.py).

Dispatch scenarios run against sentinel demos swapped into the registry,
so they check single-call discipline without depending on real demo output.
A few subprocess tests cover the real ``python -m lessons`` entry point.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from lessons import registry
from lessons.cli import EXIT_OK, EXIT_UNKNOWN_DEMO, build_parser, main
from lessons.registry import DemoEntry, build_registry

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Recorder:
    """Counts calls per demo name."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def demo(self, name: str):
        def run() -> None:
            self.calls.append(name)
            print(f"{name} ran")
        return run


@pytest.fixture()
def recorder(monkeypatch):
    rec = Recorder()
    table = build_registry([
        DemoEntry("Pointers", rec.demo("Pointers"), "basics", "sentinel"),
        DemoEntry("Goroutine", rec.demo("Goroutine"), "concurrency", "sentinel"),
        DemoEntry("JWTAuth", rec.demo("JWTAuth"), "web", "sentinel"),
    ])
    monkeypatch.setattr(registry, "DEMOS", table)
    return rec


def _run_module(*args: str, **env_overrides: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ, DELAY_SCALE="0", LOG_LEVEL="WARNING", **env_overrides)
    return subprocess.run(
        [sys.executable, "-m", "lessons", *args],
        cwd=PROJECT_ROOT, env=env, capture_output=True, text=True, timeout=120,
    )


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------

class TestUsage:
    def test_no_argument_prints_usage(self, recorder, capsys):
        assert main([], prog="learn") == EXIT_OK
        out = capsys.readouterr().out
        assert "usage: learn <demo-name>" in out
        assert "examples:" in out
        assert "3 demos registered" in out
        assert recorder.calls == []

    def test_usage_lists_every_name(self, recorder, capsys):
        main([], prog="learn")
        out = capsys.readouterr().out
        for name in ("Pointers", "Goroutine", "JWTAuth"):
            assert name in out

    def test_usage_groups_by_category(self, recorder, capsys):
        main([], prog="learn")
        out = capsys.readouterr().out
        for category in ("basics", "concurrency", "web"):
            assert category in out

    def test_usage_is_idempotent(self, recorder, capsys):
        main([], prog="learn")
        first = capsys.readouterr().out
        main([], prog="learn")
        second = capsys.readouterr().out
        assert first == second

    def test_real_registry_usage_lists_all(self, capsys):
        main([], prog="learn")
        out = capsys.readouterr().out
        for name in registry.demo_names():
            assert name in out
        assert f"{len(registry.DEMOS)} demos registered" in out


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_known_demo_runs_once(self, recorder, capsys):
        assert main(["Pointers"], prog="learn") == EXIT_OK
        assert recorder.calls == ["Pointers"]
        assert capsys.readouterr().out == "Pointers ran\n"

    def test_only_named_demo_runs(self, recorder):
        main(["Goroutine"], prog="learn")
        assert recorder.calls == ["Goroutine"]

    def test_extra_arguments_ignored(self, recorder, capsys):
        assert main(["JWTAuth", "extra-arg", "another"], prog="learn") == EXIT_OK
        assert recorder.calls == ["JWTAuth"]
        assert capsys.readouterr().out == "JWTAuth ran\n"

    def test_repeated_invocations_are_independent(self, recorder):
        main(["Pointers"], prog="learn")
        main(["Pointers"], prog="learn")
        assert recorder.calls == ["Pointers", "Pointers"]

    def test_demo_exception_propagates(self, monkeypatch):
        def boom() -> None:
            raise RuntimeError("demo failed")

        monkeypatch.setattr(registry, "DEMOS", build_registry([DemoEntry("Boom", boom, "misc", "x")]))
        with pytest.raises(RuntimeError, match="demo failed"):
            main(["Boom"], prog="learn")


# ---------------------------------------------------------------------------
# Unknown names
# ---------------------------------------------------------------------------

class TestUnknownDemo:
    def test_unknown_name_exits_nonzero(self, recorder, capsys):
        assert main(["NoSuchDemo"], prog="learn") == EXIT_UNKNOWN_DEMO
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "error: unknown demo 'NoSuchDemo'"
        assert recorder.calls == []

    def test_wrong_case_is_unknown(self, recorder, capsys):
        assert main(["pointers"], prog="learn") == EXIT_UNKNOWN_DEMO
        out = capsys.readouterr().out
        assert "error: unknown demo 'pointers'" in out
        assert "did you mean: Pointers?" in out
        assert recorder.calls == []

    def test_unknown_lists_known_names(self, recorder, capsys):
        main(["Nope"], prog="learn")
        out = capsys.readouterr().out
        assert "known demos: Goroutine, JWTAuth, Pointers" in out

    def test_unknown_output_is_stable(self, recorder, capsys):
        main(["NoSuchDemo"], prog="learn")
        first = capsys.readouterr().out
        main(["NoSuchDemo"], prog="learn")
        assert capsys.readouterr().out == first

    def test_markup_in_name_is_printed_literally(self, recorder, capsys):
        main(["[bold]x[/bold]"], prog="learn")
        assert "error: unknown demo '[bold]x[/bold]'" in capsys.readouterr().out

    def test_long_name_stays_on_one_line(self, recorder, capsys):
        name = "Demo" * 30
        assert main([name], prog="learn") == EXIT_UNKNOWN_DEMO
        out = capsys.readouterr().out
        assert out.splitlines()[0] == f"error: unknown demo '{name}'"
        assert "known demos: Goroutine, JWTAuth, Pointers" in out.splitlines()

    @pytest.mark.parametrize("flag", ["-x", "--verbose", "-"])
    def test_option_like_name_is_unknown(self, recorder, capsys, flag):
        assert main([flag], prog="learn") == EXIT_UNKNOWN_DEMO
        assert capsys.readouterr().out.splitlines()[0] == f"error: unknown demo '{flag}'"
        assert recorder.calls == []

    def test_option_before_a_real_name_is_unknown(self, recorder, capsys):
        assert main(["-x", "Pointers"], prog="learn") == EXIT_UNKNOWN_DEMO
        assert recorder.calls == []


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class TestParser:
    def test_demo_optional(self):
        args = build_parser("learn").parse_args([])
        assert args.demo is None
        assert args.extra == []

    def test_extra_collected(self):
        args = build_parser("learn").parse_args(["JWTAuth", "a", "b"])
        assert args.demo == "JWTAuth"
        assert args.extra == ["a", "b"]

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--help"], prog="learn")
        assert exc.value.code == 0
        assert "Demo name" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

class TestModuleEntryPoint:
    def test_usage_exit_zero(self):
        proc = _run_module()
        assert proc.returncode == 0
        assert "usage:" in proc.stdout

    def test_pointers_exit_zero(self):
        proc = _run_module("Pointers")
        assert proc.returncode == 0
        assert proc.stdout.strip()

    def test_unknown_exit_nonzero(self):
        proc = _run_module("NoSuchDemo")
        assert proc.returncode == EXIT_UNKNOWN_DEMO
        assert "error: unknown demo 'NoSuchDemo'" in proc.stdout

    def test_unknown_in_narrow_terminal_is_not_wrapped(self):
        name = "DemoDemo" * 12
        proc = _run_module(name, COLUMNS="20")
        assert proc.returncode == EXIT_UNKNOWN_DEMO
        assert proc.stdout.splitlines()[0] == f"error: unknown demo '{name}'"

    def test_short_unknown_in_narrow_terminal(self):
        proc = _run_module("NoSuchDemo", COLUMNS="20")
        assert proc.stdout.splitlines()[0] == "error: unknown demo 'NoSuchDemo'"

    def test_option_like_name_goes_to_stdout(self):
        proc = _run_module("-x")
        assert proc.returncode == EXIT_UNKNOWN_DEMO
        assert "error: unknown demo '-x'" in proc.stdout
        assert "unrecognized arguments" not in proc.stderr

    def test_lowercase_is_unknown(self):
        proc = _run_module("pointers")
        assert proc.returncode != 0

    def test_extras_ignored(self):
        proc = _run_module("Goroutine", "extra-arg", "another")
        assert proc.returncode == 0
        assert "Traceback" not in proc.stderr
