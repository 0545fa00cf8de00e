"""Smoke tests: every registered demo runs to completion and prints something."""

from __future__ import annotations

import threading

import pytest

from lessons.config import get_settings
from lessons.registry import DEMOS, demo_names, lookup


@pytest.mark.parametrize("name", demo_names())
def test_demo_runs(name, capsys):
    fn, found = lookup(name)
    assert found
    fn()
    out = capsys.readouterr().out
    assert out.strip(), f"{name} printed nothing"


THREADED = [e.name for e in DEMOS.values() if e.category in ("containers", "concurrency", "blockchain")]


@pytest.mark.parametrize("name", sorted(THREADED))
def test_demo_joins_its_threads(name, capsys):
    before = threading.active_count()
    DEMOS[name].run()
    capsys.readouterr()
    assert threading.active_count() <= before


@pytest.mark.parametrize("name", ["GlobalVariable", "Closure", "MapAsParameter", "SliceUsage", "Enums"])
def test_repeated_runs_print_the_same(name, capsys):
    DEMOS[name].run()
    first = capsys.readouterr().out
    DEMOS[name].run()
    assert capsys.readouterr().out == first


def test_demos_do_not_touch_settings(capsys):
    before = get_settings().model_dump()
    for name in ("RateLimit", "JWTAuth", "OrmBasics"):
        DEMOS[name].run()
    capsys.readouterr()
    assert get_settings().model_dump() == before


def test_global_variable_demo_does_not_leak_globals(capsys):
    import lessons.basics.scope as scope

    names_before = set(vars(scope))
    DEMOS["GlobalVariable"].run()
    capsys.readouterr()
    assert set(vars(scope)) == names_before
