"""Queues as channels, and choosing between channels and locks."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from lessons.containers.ranges import close_queue, iter_queue
from lessons.pacing import pause


def channel_demo() -> None:
    print("=== Unbuffered hand-off ===")
    ch: queue.Queue[str] = queue.Queue(maxsize=1)
    t = threading.Thread(target=lambda: ch.put("ping"))
    t.start()
    print(f"received {ch.get()!r}")
    t.join()
    print()

    print("=== Buffered channel ===")
    buffered: queue.Queue[int] = queue.Queue(maxsize=3)
    for n in range(3):
        buffered.put_nowait(n)
    print(f"queued 3 items, full={buffered.full()}")
    try:
        buffered.put_nowait(99)
    except queue.Full:
        print("put_nowait on a full queue -> queue.Full")
    print(f"drained: {[buffered.get_nowait() for _ in range(3)]}")
    print()

    print("=== Receive with timeout (select with a timer) ===")
    empty: queue.Queue[int] = queue.Queue()
    try:
        empty.get(timeout=0.05)
    except queue.Empty:
        print("no message within 50ms -> queue.Empty")
    print()

    print("=== Producer / consumer pipeline ===")
    numbers: queue.Queue[Any] = queue.Queue(maxsize=2)
    squares: queue.Queue[Any] = queue.Queue(maxsize=2)

    def produce() -> None:
        for n in range(1, 6):
            numbers.put(n)
        close_queue(numbers)

    def square() -> None:
        for n in iter_queue(numbers):
            squares.put(n * n)
        close_queue(squares)

    stages = [threading.Thread(target=produce), threading.Thread(target=square)]
    for s in stages:
        s.start()
    print(f"pipeline output: {list(iter_queue(squares))}")
    for s in stages:
        s.join()


class Cache:
    """Lock-protected key/value cache."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> tuple[Any, bool]:
        with self._lock:
            if key in self._data:
                return self._data[key], True
            return None, False

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value


def count_with_channel(workers: int, per_worker: int) -> int:
    """One owner thread holds the count; workers send increments."""
    increments: queue.Queue[Any] = queue.Queue()
    total = 0

    def owner() -> None:
        nonlocal total
        for delta in iter_queue(increments):
            total += delta

    owner_thread = threading.Thread(target=owner)
    owner_thread.start()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        for _ in range(workers):
            pool.submit(lambda: [increments.put(1) for _ in range(per_worker)])
    close_queue(increments)
    owner_thread.join()
    return total


def count_with_lock(workers: int, per_worker: int) -> int:
    lock = threading.Lock()
    total = 0

    def work() -> None:
        nonlocal total
        for _ in range(per_worker):
            with lock:
                total += 1

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for _ in range(workers):
            pool.submit(work)
    return total


def lock_and_channel_demo() -> None:
    print("=== Channels: hand over ownership, distribute work, return results ===")
    tasks: queue.Queue[Any] = queue.Queue()
    done: list[str] = []
    done_lock = threading.Lock()

    def worker(name: str) -> None:
        for job in iter_queue(tasks):
            pause(0.01)
            with done_lock:
                done.append(f"{name}:{job}")

    workers = [threading.Thread(target=worker, args=(f"w{i}",)) for i in range(3)]
    for w in workers:
        w.start()
    for job in range(6):
        tasks.put(job)
    for _ in workers:
        close_queue(tasks)
    for w in workers:
        w.join()
    print(f"6 jobs handled by 3 workers: {len(done)} completions")

    with ThreadPoolExecutor(max_workers=2) as pool:
        future: Future[int] = pool.submit(lambda: sum(range(1000)))
        print(f"async result via Future: {future.result()}")
    print()

    print("=== Locks: guard shared state ===")
    cache = Cache()
    with ThreadPoolExecutor(max_workers=4) as pool:
        for i in range(8):
            pool.submit(cache.set, f"k{i}", i * i)
    value, ok = cache.get("k3")
    print(f"cache.get('k3') -> ({value}, {ok})")
    value, ok = cache.get("missing")
    print(f"cache.get('missing') -> ({value}, {ok})")
    print()

    print("=== The same counter both ways ===")
    print(f"with a channel: {count_with_channel(4, 250)}")
    print(f"with a lock:    {count_with_lock(4, 250)}")
    print()

    print("=== Choosing ===")
    print("- passing data or work between threads -> queue")
    print("- protecting a small piece of shared state -> lock")
    print("- collecting one result from a background call -> Future")
