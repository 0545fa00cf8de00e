"""Lists as dynamic arrays and slice semantics."""

from __future__ import annotations

import sys


def slice_declaration_demo() -> None:
    print("=== Creating lists ===")
    empty: list[int] = []
    literal = [1, 2, 3]
    from_range = list(range(5))
    comprehension = [n * n for n in range(5)]
    print(f"empty={empty} literal={literal}")
    print(f"list(range(5))={from_range} squares={comprehension}")
    print()

    print("=== Slice syntax [start:stop:step] ===")
    letters = list("abcdefgh")
    print(f"letters       = {letters}")
    print(f"letters[2:5]  = {letters[2:5]}")
    print(f"letters[:3]   = {letters[:3]}")
    print(f"letters[5:]   = {letters[5:]}")
    print(f"letters[::-1] = {letters[::-1]}")
    print(f"letters[-3:]  = {letters[-3:]}")
    print()

    print("=== slice objects ===")
    middle = slice(2, 6, 2)
    print(f"slice(2, 6, 2) -> {letters[middle]}; indices for len 8: {middle.indices(8)}")


def slice_usage_demo() -> None:
    items = ["a", "b"]
    print("=== Growing ===")
    items.append("c")
    items.extend(["d", "e"])
    items.insert(0, "start")
    print(f"after append/extend/insert: {items}")
    print()

    print("=== Shrinking ===")
    last = items.pop()
    first = items.pop(0)
    items.remove("b")
    print(f"popped {last!r} and {first!r}, removed 'b' -> {items}")
    del items[0]
    print(f"del items[0] -> {items}")
    print()

    print("=== Slice assignment ===")
    nums = list(range(10))
    nums[2:5] = ["x"]
    print(f"nums[2:5] = ['x'] -> {nums}")
    nums[:] = [1, 2, 3]
    print(f"nums[:] = [1, 2, 3] replaces contents in place -> {nums}")
    del nums[::2]
    print(f"del nums[::2] -> {nums}")
    print()

    print("=== Sorting ===")
    words = ["banana", "Apple", "cherry"]
    print(f"sorted(words)              = {sorted(words)}")
    print(f"sorted(words, key=str.lower) = {sorted(words, key=str.lower)}")
    words.sort(key=len, reverse=True)
    print(f"words.sort(key=len, reverse=True) -> {words}")


def slice_underlying_principle_demo() -> None:
    print("=== Over-allocation on append ===")
    values: list[int] = []
    last_size = sys.getsizeof(values)
    print(f"len=0 bytes={last_size}")
    for i in range(17):
        values.append(i)
        size = sys.getsizeof(values)
        if size != last_size:
            print(f"len={len(values):<2} bytes={size} (buffer grew)")
            last_size = size
    print("Appends are amortised O(1): the buffer grows in chunks, not per item.")
    print()

    print("=== Slicing a list copies ===")
    base = [1, 2, 3, 4, 5]
    part = base[1:3]
    part[0] = 99
    print(f"base={base} part={part} (independent)")
    print()

    print("=== memoryview shares the buffer ===")
    raw = bytearray(b"hello world")
    view = memoryview(raw)[0:5]
    view[0] = ord("J")
    print(f"after view[0] = 'J': raw={raw.decode()} view={view.tobytes().decode()}")
    view.release()
    print()

    print("=== Aliasing vs copying ===")
    alias = base
    clone = base[:]
    base.append(6)
    print(f"alias sees the append: {alias}")
    print(f"clone does not: {clone}")
