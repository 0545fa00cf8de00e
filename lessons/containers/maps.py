"""Dictionaries: declaration, usage, passing and concurrent access."""

from __future__ import annotations

import threading
from collections import Counter, defaultdict, OrderedDict
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType


def map_declaration_demo() -> None:
    print("=== Ways to build a dict ===")
    literal = {"go": 2009, "python": 1991}
    from_pairs = dict([("a", 1), ("b", 2)])
    from_kwargs = dict(x=1, y=2)
    comprehension = {n: n * n for n in range(4)}
    from_keys = dict.fromkeys(["red", "green"], 0)
    for name, value in (
        ("literal", literal),
        ("dict(pairs)", from_pairs),
        ("dict(kwargs)", from_kwargs),
        ("comprehension", comprehension),
        ("fromkeys", from_keys),
    ):
        print(f"{name:<14} {value}")
    print()

    print("=== Keys must be hashable ===")
    coords = {(0, 0): "origin", (1, 2): "point"}
    print(f"tuple keys: {coords}")
    try:
        {[1, 2]: "nope"}
    except TypeError as exc:
        print(f"list key -> TypeError: {exc}")
    print()

    print("=== Specialised mappings ===")
    print(f"defaultdict(list): {dict(defaultdict(list, {'a': [1]}))}")
    print(f"Counter('banana'): {Counter('banana').most_common()}")
    print(f"OrderedDict keeps move_to_end: {list(OrderedDict(a=1, b=2).keys())}")
    print(f"MappingProxyType is read-only: {MappingProxyType({'k': 'v'})}")


def map_usage_demo() -> None:
    stock = {"apple": 5, "banana": 0}
    print("=== Read ===")
    print(f"stock['apple'] = {stock['apple']}")
    print(f"stock.get('cherry', 0) = {stock.get('cherry', 0)}")
    try:
        stock["cherry"]
    except KeyError as exc:
        print(f"stock['cherry'] -> KeyError: {exc}")
    print(f"'banana' in stock = {'banana' in stock}")
    print()

    print("=== Write ===")
    stock["cherry"] = 12
    stock.setdefault("apple", 100)
    stock.update(banana=3)
    print(f"after set/setdefault/update: {stock}")
    print()

    print("=== Delete ===")
    removed = stock.pop("banana")
    missing = stock.pop("durian", None)
    print(f"pop('banana') -> {removed}; pop('durian', None) -> {missing}")
    del stock["apple"]
    print(f"after del: {stock}")
    print()

    print("=== Merge ===")
    defaults = {"timeout": 30, "retries": 3}
    overrides = {"timeout": 5}
    print(f"defaults | overrides = {defaults | overrides}")
    print()

    print("=== Grouping with defaultdict ===")
    words = ["apple", "avocado", "banana", "blueberry", "cherry"]
    groups: defaultdict[str, list[str]] = defaultdict(list)
    for w in words:
        groups[w[0]].append(w)
    print(dict(groups))


def _add_bonus(salaries: dict[str, int], bonus: int) -> None:
    for name in salaries:
        salaries[name] += bonus


def _with_bonus(salaries: dict[str, int], bonus: int) -> dict[str, int]:
    return {name: pay + bonus for name, pay in salaries.items()}


def map_as_parameter_demo() -> None:
    print("=== A dict argument is the caller's dict ===")
    salaries = {"alice": 100, "bob": 90}
    _add_bonus(salaries, 10)
    print(f"after _add_bonus: {salaries}")
    print()

    print("=== Returning a new dict instead ===")
    original = {"alice": 100, "bob": 90}
    raised = _with_bonus(original, 10)
    print(f"original={original} raised={raised}")
    print()

    print("=== Read-only view for callers ===")
    view = MappingProxyType(original)
    try:
        view["carol"] = 1  # type: ignore[index]
    except TypeError as exc:
        print(f"writing through MappingProxyType -> TypeError: {exc}")
    print()

    print("=== Mutating while iterating ===")
    data = {"a": 1, "b": 2}
    try:
        for key in data:
            data[key + "x"] = 0
    except RuntimeError as exc:
        print(f"RuntimeError: {exc}")
    print("Iterate over list(data) when the loop adds or removes keys.")


class _SafeDict:
    """A dict guarded by one lock."""

    def __init__(self) -> None:
        self._data: dict[str, int] = {}
        self._lock = threading.Lock()

    def incr(self, key: str) -> None:
        with self._lock:
            self._data[key] = self._data.get(key, 0) + 1

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._data)


def count_concurrently(keys: list[str], workers: int = 8, rounds: int = 500) -> dict[str, int]:
    """Increment every key ``rounds`` times from ``workers`` threads."""
    counts = _SafeDict()

    def work() -> None:
        for _ in range(rounds):
            for key in keys:
                counts.incr(key)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for _ in range(workers):
            pool.submit(work)
    return counts.snapshot()


def map_concurrent_demo() -> None:
    print("=== Read-modify-write is not atomic ===")
    print("d[k] = d.get(k, 0) + 1 reads, computes and writes in separate steps;")
    print("two threads can interleave and lose an update.")
    print()

    print("=== Guard the dict with a lock ===")
    keys = ["a", "b", "c"]
    result = count_concurrently(keys, workers=8, rounds=500)
    expected = 8 * 500
    print(f"8 threads x 500 rounds -> {result} (expected {expected} each)")
    print(f"all correct: {all(v == expected for v in result.values())}")
    print()

    print("=== Alternatives ===")
    print("- give each worker its own dict and merge with Counter at the end")
    print("- send updates through a queue.Queue to one owner thread")
    print("- use collections.Counter.update on per-thread results")
