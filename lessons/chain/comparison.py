"""Threads or an event loop? The same node workloads both ways.

A thread pool and an asyncio event loop both overlap waiting on the
network. Neither runs pure-Python CPU work in parallel, because the GIL
lets one thread execute bytecode at a time; CPU-heavy work needs
processes.
"""

from __future__ import annotations

import asyncio
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from rich import box
from rich.console import Console
from rich.table import Table

from lessons.pacing import apause, pause

RPC_LATENCY = 0.05


def _rpc_result(node: str) -> str:
    return f"{node}: head=0x{sum(map(ord, node)) % 4096:03x}"


def _blocking_rpc(node: str, seen: set[int], lock: threading.Lock) -> str:
    with lock:
        seen.add(threading.get_ident())
    pause(RPC_LATENCY)
    return _rpc_result(node)


def fetch_with_threads(nodes: list[str]) -> tuple[list[str], int]:
    """Call every node from a thread pool; return results and threads used."""
    seen: set[int] = set()
    lock = threading.Lock()
    with ThreadPoolExecutor(max_workers=max(1, len(nodes)), thread_name_prefix="rpc") as pool:
        results = list(pool.map(lambda n: _blocking_rpc(n, seen, lock), nodes))
    return results, len(seen)


async def _async_rpc(node: str, seen: set[int]) -> str:
    seen.add(threading.get_ident())
    await apause(RPC_LATENCY)
    return _rpc_result(node)


async def _gather_rpcs(nodes: list[str], seen: set[int]) -> list[str]:
    return await asyncio.gather(*(_async_rpc(n, seen) for n in nodes))


def fetch_with_asyncio(nodes: list[str]) -> tuple[list[str], int]:
    """Call every node from one event loop; return results and threads used."""
    seen: set[int] = set()
    results = asyncio.run(_gather_rpcs(nodes, seen))
    return results, len(seen)


def sum_range(n: int) -> int:
    total = 0
    for i in range(n):
        total += i
    return total


def cpu_work_with_threads(jobs: int, n: int) -> list[int]:
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        return list(pool.map(sum_range, [n] * jobs))


def pipeline_with_threads(items: list[int]) -> list[int]:
    """Producer thread -> queue.Queue -> consumer thread."""
    q: queue.Queue[int | None] = queue.Queue(maxsize=2)
    out: list[int] = []

    def produce() -> None:
        for item in items:
            q.put(item)
        q.put(None)

    def consume() -> None:
        while (item := q.get()) is not None:
            out.append(item * item)

    threads = [threading.Thread(target=produce), threading.Thread(target=consume)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return out


async def _async_pipeline(items: list[int]) -> list[int]:
    q: asyncio.Queue[int | None] = asyncio.Queue(maxsize=2)
    out: list[int] = []

    async def produce() -> None:
        for item in items:
            await q.put(item)
        await q.put(None)

    async def consume() -> None:
        while (item := await q.get()) is not None:
            out.append(item * item)

    await asyncio.gather(produce(), consume())
    return out


def pipeline_with_asyncio(items: list[int]) -> list[int]:
    """Producer task -> asyncio.Queue -> consumer task, on one thread."""
    return asyncio.run(_async_pipeline(items))


def go_vs_nodejs_demo() -> None:
    nodes = [f"node{i}" for i in range(1, 6)]

    print("=== I/O-bound: five RPC calls ===")
    t0 = time.perf_counter()
    threaded, threads_used = fetch_with_threads(nodes)
    t_threads = time.perf_counter() - t0
    t0 = time.perf_counter()
    evented, loop_threads = fetch_with_asyncio(nodes)
    t_async = time.perf_counter() - t0
    print(f"thread pool : {len(threaded)} answers in {t_threads * 1000:.0f}ms on {threads_used} thread(s)")
    print(f"event loop  : {len(evented)} answers in {t_async * 1000:.0f}ms on {loop_threads} thread")
    print(f"same answers: {threaded == evented}")
    print("Both overlap the waiting; the event loop does it without extra threads.")
    print()

    print("=== CPU-bound: five pure-Python sums ===")
    n = 200_000
    t0 = time.perf_counter()
    sequential = [sum_range(n) for _ in range(5)]
    t_seq = time.perf_counter() - t0
    t0 = time.perf_counter()
    pooled = cpu_work_with_threads(5, n)
    t_pool = time.perf_counter() - t0
    print(f"sequential  : {t_seq * 1000:.0f}ms")
    print(f"5 threads   : {t_pool * 1000:.0f}ms (the GIL serialises bytecode)")
    print(f"same results: {sequential == pooled}")
    print("Use ProcessPoolExecutor, or native code that releases the GIL, for CPU work.")
    print()

    print("=== Passing data between workers ===")
    items = list(range(1, 8))
    print(f"queue.Queue between threads   : {pipeline_with_threads(items)}")
    print(f"asyncio.Queue between tasks   : {pipeline_with_asyncio(items)}")
    print()

    table = Table(title="Threads vs asyncio", box=box.ROUNDED)
    table.add_column("")
    table.add_column("threading")
    table.add_column("asyncio")
    table.add_row("Scheduling", "preemptive, by the OS", "cooperative, at each await")
    table.add_row("Cost per worker", "an OS thread and its stack", "a coroutine object")
    table.add_row("Shared state", "needs locks", "safe between awaits")
    table.add_row("Blocking call", "blocks one thread", "blocks the whole loop")
    table.add_row("Communication", "queue.Queue", "asyncio.Queue")
    table.add_row("Best for", "blocking libraries, modest fan-out", "thousands of sockets")
    Console(highlight=False, emoji=False).print(table)
