"""Iteration over strings, sequences, queues and dicts."""

from __future__ import annotations

import queue
import threading
import unicodedata
from collections.abc import Iterator
from typing import Any

_CLOSED = object()


def range_string_demo() -> None:
    text = "héllo, 世界"
    print("=== Iterating characters (code points) ===")
    for i, ch in enumerate(text):
        print(f"{i:2d} {ch!r:6} U+{ord(ch):04X} {unicodedata.name(ch, '?')}")
    print()

    print("=== Iterating encoded bytes ===")
    data = text.encode("utf-8")
    print(f"len(text)={len(text)} len(utf-8 bytes)={len(data)}")
    print(" ".join(f"{b:02x}" for b in data))
    print()

    print("=== Useful string iteration helpers ===")
    print(f"reversed: {''.join(reversed('stressed'))}")
    print(f"words:    {'  split   on whitespace '.split()}")
    lines = "a\nb\nc".splitlines()
    print(f"lines:    {lines}")


def range_array_slice_demo() -> None:
    fruits = ["apple", "banana", "cherry"]
    print("=== Index and value ===")
    for i, fruit in enumerate(fruits):
        print(f"{i}: {fruit}")
    print()

    print("=== Values only / index only ===")
    print("values:", [f for f in fruits])
    print("indexes:", list(range(len(fruits))))
    print()

    print("=== Parallel iteration ===")
    prices = [1.2, 0.5]
    print("zip stops at the shortest:", list(zip(fruits, prices)))
    try:
        list(zip(fruits, prices, strict=True))
    except ValueError as exc:
        print(f"zip(strict=True) -> ValueError: {exc}")
    print()

    print("=== Reverse and sorted iteration ===")
    print("reversed:", list(reversed(fruits)))
    print("sorted by length:", sorted(fruits, key=len))
    print()

    print("=== The loop variable is a copy of the reference ===")
    nums = [1, 2, 3]
    for n in nums:
        n *= 10
    print(f"after 'n *= 10' in a for loop: {nums}")
    for i in range(len(nums)):
        nums[i] *= 10
    print(f"after 'nums[i] *= 10': {nums}")


def iter_queue(q: queue.Queue[Any]) -> Iterator[Any]:
    """Yield items from ``q`` until the close sentinel arrives."""
    while True:
        item = q.get()
        if item is _CLOSED:
            return
        yield item


def close_queue(q: queue.Queue[Any]) -> None:
    q.put(_CLOSED)


def range_channel_demo() -> None:
    print("=== A queue as a channel ===")
    print("The producer puts items then a close sentinel; the consumer iterates")
    print("until it sees the sentinel, like ranging over a closed channel.")
    print()

    jobs: queue.Queue[Any] = queue.Queue(maxsize=2)

    def producer() -> None:
        for n in range(1, 6):
            jobs.put(n)
        close_queue(jobs)

    t = threading.Thread(target=producer, name="producer")
    t.start()
    received = []
    for item in iter_queue(jobs):
        received.append(item)
        print(f"received {item}")
    t.join()
    print(f"channel closed after {len(received)} items")
    print()

    print("=== Bounded queues apply back-pressure ===")
    print("maxsize=2 means put() blocks while two items are unread")


def range_map_demo() -> None:
    ages = {"carol": 41, "alice": 30, "bob": 25}
    print("=== keys / values / items ===")
    for name in ages:
        print(f"key {name}")
    print(f"values: {list(ages.values())}")
    for name, age in ages.items():
        print(f"{name} -> {age}")
    print()

    print("=== Insertion order is preserved ===")
    print(list(ages))
    print()

    print("=== Sorted iteration ===")
    for name in sorted(ages):
        print(f"{name:<6} {ages[name]}")
    print("by age:", sorted(ages.items(), key=lambda kv: kv[1]))
    print()

    print("=== Changing a dict while iterating ===")
    for name in list(ages):
        if ages[name] < 30:
            del ages[name]
    print(f"iterate over list(ages) to delete safely -> {ages}")
