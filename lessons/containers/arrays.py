"""Fixed-size sequences: tuples and array.array."""

from __future__ import annotations

import copy
from array import array


def array_declaration_demo() -> None:
    print("=== Tuples: fixed length, immutable ===")
    empty: tuple[()] = ()
    single = (42,)
    triple = (1, 2, 3)
    print(f"empty={empty} single={single} triple={triple} len(triple)={len(triple)}")
    print(f"(42) is just {(42)!r}; the trailing comma makes the tuple")
    print()

    print("=== array.array: typed, compact storage ===")
    ints = array("i", [1, 2, 3, 4])
    floats = array("d", [0.5] * 3)
    print(f"array('i')  typecode={ints.typecode} itemsize={ints.itemsize} -> {ints.tolist()}")
    print(f"array('d')  typecode={floats.typecode} itemsize={floats.itemsize} -> {floats.tolist()}")
    try:
        ints.append(1.5)  # type: ignore[arg-type]
    except TypeError as exc:
        print(f"appending a float to array('i') -> TypeError: {exc}")
    print()

    print("=== Zero values ===")
    zeros = [0] * 5
    blanks = [""] * 3
    print(f"[0] * 5 = {zeros}")
    print(f"[''] * 3 = {blanks}")


def array_access_demo() -> None:
    scores = (90, 85, 77, 64, 100)
    print("=== Indexing ===")
    print(f"scores = {scores}")
    print(f"scores[0] = {scores[0]}, scores[-1] = {scores[-1]}")
    print(f"scores[1:3] = {scores[1:3]}, scores[::2] = {scores[::2]}")
    print()

    print("=== Out of range ===")
    try:
        scores[10]
    except IndexError as exc:
        print(f"scores[10] -> IndexError: {exc}")
    print(f"slices never raise: scores[3:99] = {scores[3:99]}")
    print()

    print("=== Searching ===")
    print(f"max={max(scores)} min={min(scores)} sum={sum(scores)}")
    print(f"index of 77 = {scores.index(77)}; 50 in scores = {50 in scores}")
    print()

    print("=== Updating a mutable array ===")
    buf = array("i", scores)
    buf[0] = 0
    print(f"array after buf[0] = 0: {buf.tolist()}")
    print(f"original tuple untouched: {scores}")


def multidimensional_array_demo() -> None:
    print("=== A 3x3 grid as nested lists ===")
    grid = [[r * 3 + c for c in range(3)] for r in range(3)]
    for row in grid:
        print(" ".join(f"{v:2d}" for v in row))
    print(f"grid[1][2] = {grid[1][2]}")
    print()

    print("=== The shared-row trap ===")
    bad = [[0] * 3] * 3
    bad[0][0] = 9
    print(f"[[0] * 3] * 3 then bad[0][0] = 9 -> {bad}")
    good = [[0] * 3 for _ in range(3)]
    good[0][0] = 9
    print(f"comprehension version          -> {good}")
    print()

    print("=== Transpose with zip ===")
    transposed = [list(col) for col in zip(*grid)]
    for row in transposed:
        print(" ".join(f"{v:2d}" for v in row))
    print()

    print("=== Jagged rows ===")
    triangle = [[1] * (i + 1) for i in range(4)]
    for row in triangle:
        print(row)


def _zero_first(values: list[int]) -> None:
    values[0] = 0


def _zero_first_copy(values: tuple[int, ...]) -> tuple[int, ...]:
    return (0,) + values[1:]


def array_as_parameter_demo() -> None:
    print("=== Lists are shared with the callee ===")
    data = [5, 6, 7]
    _zero_first(data)
    print(f"after _zero_first(data): {data}")
    print()

    print("=== Pass a copy to protect the caller ===")
    data = [5, 6, 7]
    _zero_first(data.copy())
    print(f"after _zero_first(data.copy()): {data}")
    print()

    print("=== Tuples force a value-style API ===")
    frozen = (5, 6, 7)
    updated = _zero_first_copy(frozen)
    print(f"original {frozen}, returned {updated}")
    print()

    print("=== Shallow vs deep copies ===")
    nested = [[1, 2], [3, 4]]
    shallow = copy.copy(nested)
    deep = copy.deepcopy(nested)
    nested[0][0] = 99
    print(f"nested={nested} shallow={shallow} deep={deep}")
