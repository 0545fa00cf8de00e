"""When does a service need to sync blocks into its own database?"""

from __future__ import annotations

import random
from collections import defaultdict
from dataclasses import dataclass

from rich import box
from rich.console import Console
from rich.table import Table


@dataclass(frozen=True)
class Transfer:
    block: int
    sender: str
    receiver: str
    amount: int


class RpcNode:
    """Answers point queries only; history means scanning every block."""

    def __init__(self, chain: list[list[Transfer]]) -> None:
        self._chain = chain
        self.calls = 0

    def block_count(self) -> int:
        self.calls += 1
        return len(self._chain)

    def get_block(self, number: int) -> list[Transfer]:
        self.calls += 1
        return self._chain[number]


class Indexer:
    """Syncs blocks once, then answers history queries locally."""

    def __init__(self) -> None:
        self.synced_to = -1
        self._history: dict[str, list[Transfer]] = defaultdict(list)

    def sync(self, node: RpcNode) -> int:
        head = node.block_count() - 1
        fetched = 0
        for number in range(self.synced_to + 1, head + 1):
            for tx in node.get_block(number):
                self._history[tx.sender].append(tx)
                self._history[tx.receiver].append(tx)
            fetched += 1
        self.synced_to = head
        return fetched

    def history(self, account: str) -> list[Transfer]:
        return list(self._history.get(account, []))


def build_chain(blocks: int, accounts: list[str], seed: int = 7) -> list[list[Transfer]]:
    rng = random.Random(seed)
    chain = []
    for number in range(blocks):
        txs = []
        for _ in range(rng.randint(0, 3)):
            sender, receiver = rng.sample(accounts, 2)
            txs.append(Transfer(number, sender, receiver, rng.randint(1, 100)))
        chain.append(txs)
    return chain


def history_via_rpc(node: RpcNode, account: str) -> list[Transfer]:
    found = []
    for number in range(node.block_count()):
        found.extend(tx for tx in node.get_block(number) if account in (tx.sender, tx.receiver))
    return found


def block_sync_necessity_demo() -> None:
    console = Console(highlight=False, emoji=False)
    accounts = ["alice", "bob", "carol", "dave"]
    chain = build_chain(200, accounts)

    print("=== Answering 'all transfers of alice' ===")
    node = RpcNode(chain)
    via_rpc = history_via_rpc(node, "alice")
    rpc_calls = node.calls
    print(f"RPC scan: {len(via_rpc)} transfers, {rpc_calls} RPC calls")

    node = RpcNode(chain)
    indexer = Indexer()
    fetched = indexer.sync(node)
    via_index = indexer.history("alice")
    print(f"Indexer: synced {fetched} blocks with {node.calls} RPC calls, "
          f"then {len(via_index)} transfers from the local index")
    print(f"same answer: {via_rpc == via_index}")
    print()

    print("=== Repeated queries ===")
    for account in accounts[1:]:
        before = node.calls
        result = indexer.history(account)
        print(f"{account:<6} {len(result):>3} transfers, RPC calls made: {node.calls - before}")
    print()

    print("=== Incremental sync ===")
    chain.append([Transfer(len(chain), "bob", "alice", 5)])
    before = node.calls
    print(f"new block -> fetched {indexer.sync(node)} block(s), "
          f"{node.calls - before} RPC calls; alice now has {len(indexer.history('alice'))} transfers")
    print()

    table = Table(title="Do you need your own block sync?", box=box.ROUNDED)
    table.add_column("Scenario")
    table.add_column("Sync?", justify="center")
    table.add_column("Typical approach")
    table.add_row("Wallet balance / send tx", "no", "third-party RPC")
    table.add_row("Account history, analytics", "yes", "indexer + database")
    table.add_row("Exchange deposit detection", "yes", "follow the head, confirm N blocks")
    table.add_row("React to one contract's events", "maybe", "log subscription or hosted indexer")
    table.add_row("Verify inclusion cheaply", "no", "light client proofs")
    console.print(table)
