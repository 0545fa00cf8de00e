"""I/O patterns of a blockchain node, simulated with asyncio.

Network calls are simulated with ``asyncio.sleep``; block storage uses a
temporary directory that is removed before the demo returns.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import random
import tempfile
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from lessons.pacing import apause


@dataclass
class Block:
    number: int
    parent_hash: str
    transactions: list[str] = field(default_factory=list)
    node: str = ""

    @property
    def hash(self) -> str:
        payload = f"{self.number}:{self.parent_hash}:{','.join(self.transactions)}"
        return hashlib.sha256(payload.encode()).hexdigest()[:16]


async def fetch_block(node_url: str, number: int) -> Block:
    """Pretend to call ``eth_getBlockByNumber`` on one node."""
    await apause(random.uniform(0.02, 0.08))
    return Block(number=number, parent_hash=f"0x{number - 1:08x}",
                 transactions=[f"tx{number}-{i}" for i in range(3)], node=node_url)


async def fetch_from_all(nodes: list[str], number: int) -> list[Block]:
    return await asyncio.gather(*(fetch_block(n, number) for n in nodes))


async def fetch_first(nodes: list[str], number: int) -> Block:
    """Return whichever node answers first and cancel the rest."""
    tasks = [asyncio.create_task(fetch_block(n, number)) for n in nodes]
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    return done.pop().result()


def write_block(block: Block, directory: Path) -> Path:
    path = directory / f"block_{block.number:08d}.json"
    path.write_text(json.dumps(asdict(block) | {"hash": block.hash}, indent=2), encoding="utf-8")
    return path


def read_block(path: Path) -> Block:
    data = json.loads(path.read_text(encoding="utf-8"))
    data.pop("hash", None)
    return Block(**data)


async def _transaction_stream(count: int) -> list[str]:
    mempool: asyncio.Queue[str | None] = asyncio.Queue(maxsize=4)
    accepted: list[str] = []

    async def gossip() -> None:
        for i in range(count):
            await apause(0.005)
            await mempool.put(f"0x{i:04x}")
        await mempool.put(None)

    async def validator() -> None:
        while (tx := await mempool.get()) is not None:
            if int(tx, 16) % 5 != 0:
                accepted.append(tx)

    await asyncio.gather(gossip(), validator())
    return accepted


async def _run() -> None:
    nodes = [f"http://node{i}.local:8545" for i in range(1, 6)]

    print("=== Network I/O: the same call to many nodes ===")
    t0 = time.monotonic()
    sequential = [await fetch_block(n, 100) for n in nodes]
    t_seq = time.monotonic() - t0
    t0 = time.monotonic()
    concurrent = await fetch_from_all(nodes, 100)
    t_con = time.monotonic() - t0
    print(f"sequential: {len(sequential)} blocks in {t_seq * 1000:.0f}ms")
    print(f"concurrent: {len(concurrent)} blocks in {t_con * 1000:.0f}ms")
    hashes = {b.hash for b in concurrent}
    print(f"nodes agree on block 100: {len(hashes) == 1}")
    print()

    print("=== Racing nodes: first answer wins ===")
    first = await fetch_first(nodes, 101)
    print(f"block {first.number} served first by {first.node}")
    print()

    print("=== Disk I/O: persisting blocks ===")
    with tempfile.TemporaryDirectory(prefix="blocks-") as tmp:
        directory = Path(tmp)
        paths = [write_block(b, directory) for b in (concurrent[0], first)]
        for path in paths:
            restored = read_block(path)
            print(f"{path.name}: block {restored.number} hash {restored.hash} "
                  f"({path.stat().st_size} bytes)")
    print("temporary directory removed")
    print()

    print("=== Stream I/O: mempool -> validator ===")
    accepted = await _transaction_stream(12)
    print(f"validator accepted {len(accepted)} of 12 transactions: {accepted}")


def blockchain_io_demo() -> None:
    print("A node is mostly I/O: network calls to peers and RPC clients, disk")
    print("writes for blocks and state, and continuous streams of transactions.")
    print()
    asyncio.run(_run())
    print()
    print("=== Summary ===")
    print("1. asyncio.gather fans one request out to many peers")
    print("2. asyncio.wait(FIRST_COMPLETED) races peers and cancels the losers")
    print("3. asyncio.Queue connects a producer and a consumer with back-pressure")
