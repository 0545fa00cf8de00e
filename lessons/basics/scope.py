"""Variable scope: local, enclosing, global, builtin (LEGB)."""

from __future__ import annotations

APP_NAME = "learning-demos"


def local_variable_demo() -> None:
    print("=== Local variables ===")
    x = 10
    print(f"x in the demo function: {x}")

    def inner() -> None:
        x = 20  # a new local, shadows the outer x
        print(f"x inside inner(): {x}")

    inner()
    print(f"x after inner(): {x}")
    print()

    print("=== Block statements do not create scope ===")
    for i in range(3):
        last = i * 10
    print(f"after the loop i={i} and last={last} are still visible")
    if True:
        inside_if = "set in if"
    print(f"inside_if = {inside_if!r}")
    print()

    print("=== Comprehensions do have their own scope ===")
    squares = [n * n for n in range(4)]
    print(f"squares={squares}; 'n' in locals(): {'n' in locals()}")
    print()

    print("=== UnboundLocalError ===")
    counter = 0

    def broken() -> None:
        print(counter)  # noqa: F823
        counter = 1  # noqa: F841

    try:
        broken()
    except UnboundLocalError as exc:
        print(f"UnboundLocalError: {exc}")
    print("Assigning anywhere in a function makes the name local everywhere in it.")


def global_variable_demo() -> None:
    print("=== Module globals ===")
    print(f"APP_NAME = {APP_NAME!r} (read without any declaration)")
    print()

    print("=== Rebinding a global needs `global` ===")
    namespace = {"hits": 0}
    code = (
        "def record():\n"
        "    global hits\n"
        "    hits += 1\n"
        "record(); record()\n"
    )
    exec(code, namespace)
    print(f"hits after two calls: {namespace['hits']}")
    print("(run in a throwaway namespace so the demo leaves no global behind)")
    print()

    print("=== nonlocal for enclosing scopes ===")

    def make_account(balance: int):
        def deposit(amount: int) -> int:
            nonlocal balance
            balance += amount
            return balance

        return deposit

    deposit = make_account(100)
    print(f"deposit(50) -> {deposit(50)}; deposit(25) -> {deposit(25)}")
    print()

    print("=== Builtins are the last lookup ===")
    print(f"len is a builtin: {len.__module__}")

    def shadow() -> int:
        len = lambda seq: -1  # noqa: E731
        return len([1, 2, 3])

    print(f"a local `len` shadows the builtin: shadow() -> {shadow()}")
