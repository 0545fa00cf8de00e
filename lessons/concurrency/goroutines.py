"""Threads as the goroutine counterpart: start, join, races and locks."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from lessons.pacing import pause


class UnsafeCounter:
    def __init__(self) -> None:
        self.count = 0

    def increment(self) -> None:
        current = self.count
        time.sleep(0)  # yield so another thread can read the same value
        self.count = current + 1


class SafeCounter:
    def __init__(self) -> None:
        self.count = 0
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            current = self.count
            time.sleep(0)
            self.count = current + 1


def hammer(counter: UnsafeCounter | SafeCounter, workers: int = 8, per_worker: int = 200) -> int:
    """Increment ``counter`` from ``workers`` threads and return the final count."""

    def work() -> None:
        for _ in range(per_worker):
            counter.increment()

    threads = [threading.Thread(target=work) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return counter.count


def _say(word: str, times: int, out: list[str], lock: threading.Lock) -> None:
    for i in range(times):
        pause(0.01)
        with lock:
            out.append(f"{word}{i}")


def goroutine_demo() -> None:
    print("=== Starting threads ===")
    out: list[str] = []
    lock = threading.Lock()
    worker = threading.Thread(target=_say, args=("world", 3, out, lock))
    worker.start()
    _say("hello", 3, out, lock)
    worker.join()
    print(f"interleaved output ({len(out)} lines): {sorted(out)}")
    print("join() waits for the thread, like sync.WaitGroup.Wait().")
    print()

    print("=== Closures over loop variables ===")
    results: list[int] = []
    threads = [
        threading.Thread(target=lambda n=n: results.append(n * n))
        for n in range(5)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    print(f"bind the loop variable as a default argument -> {sorted(results)}")
    print()

    print("=== Data race on a shared counter ===")
    expected = 8 * 200
    unsafe = hammer(UnsafeCounter())
    print(f"UnsafeCounter: {unsafe} (expected {expected}; lost updates are likely)")
    safe = hammer(SafeCounter())
    print(f"SafeCounter:   {safe} (always {expected})")
    print()

    print("=== Thread pools ===")
    with ThreadPoolExecutor(max_workers=4) as pool:
        squares = list(pool.map(lambda x: x * x, range(8)))
    print(f"pool.map(square, range(8)) = {squares}")
    print()

    print("=== Summary ===")
    print("1. threading.Thread(target=...).start() runs a function concurrently")
    print("2. join() or an executor's with-block waits for completion")
    print("3. Shared mutable state needs a Lock")
    print("4. The GIL does not make read-modify-write sequences atomic")
