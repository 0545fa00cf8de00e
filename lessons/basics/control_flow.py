"""Control flow: branches, match, loops, break/continue and goto substitutes."""

from __future__ import annotations

from dataclasses import dataclass


def _grade(score: int) -> str:
    if score >= 90:
        return "A"
    elif score >= 80:
        return "B"
    elif score >= 60:
        return "C"
    return "F"


def if_statement_demo() -> None:
    print("=== if / elif / else ===")
    for score in (95, 85, 70, 30):
        print(f"score {score:>3} -> grade {_grade(score)}")
    print()

    print("=== Truthiness ===")
    for value in (0, 1, "", "text", [], [0], None):
        verdict = "truthy" if value else "falsy"
        print(f"{value!r:>8} is {verdict}")
    print()

    print("=== Assignment in a condition (walrus) ===")
    data = {"user": "alice"}
    if (user := data.get("user")) is not None:
        print(f"found user {user!r}")
    print()

    print("=== Conditional expression ===")
    n = 7
    print(f"{n} is {'even' if n % 2 == 0 else 'odd'}")


@dataclass
class _Point:
    x: int
    y: int


def _classify_command(command: str) -> str:
    match command.split():
        case ["go", direction]:
            return f"move {direction}"
        case ["pick", "up", *items] if items:
            return f"pick up {', '.join(items)}"
        case ["quit" | "exit"]:
            return "bye"
        case []:
            return "empty command"
        case _:
            return f"unknown command {command!r}"


def _where(point: _Point) -> str:
    match point:
        case _Point(x=0, y=0):
            return "origin"
        case _Point(x=0, y=y):
            return f"on the y axis at {y}"
        case _Point(x=x, y=0):
            return f"on the x axis at {x}"
        case _Point(x=x, y=y) if x == y:
            return f"on the diagonal at {x}"
        case _:
            return "somewhere else"


def switch_statement_demo() -> None:
    print("=== match on literals ===")
    for status in (200, 404, 500, 418):
        match status:
            case 200:
                text = "OK"
            case 404:
                text = "Not Found"
            case 500 | 502 | 503:
                text = "Server Error"
            case _:
                text = "Other"
        print(f"{status} -> {text}")
    print()

    print("=== match on sequences ===")
    for cmd in ("go north", "pick up key lamp", "quit", "", "dance"):
        print(f"{cmd!r:>20} -> {_classify_command(cmd)}")
    print()

    print("=== match on class patterns with guards ===")
    for p in (_Point(0, 0), _Point(0, 5), _Point(3, 0), _Point(2, 2), _Point(1, 9)):
        print(f"{p} -> {_where(p)}")
    print()

    print("No fallthrough: the first matching case wins and match ends.")


def for_loop_demo() -> None:
    print("=== for over a range ===")
    print("range(5):", list(range(5)))
    print("range(2, 10, 3):", list(range(2, 10, 3)))
    print()

    print("=== while loop ===")
    n, steps = 27, 0
    while n != 1:
        n = n // 2 if n % 2 == 0 else 3 * n + 1
        steps += 1
    print(f"Collatz(27) reaches 1 after {steps} steps")
    print()

    print("=== enumerate and zip ===")
    fruits = ["apple", "banana", "cherry"]
    prices = [1.2, 0.5, 3.0]
    for i, (fruit, price) in enumerate(zip(fruits, prices), start=1):
        print(f"{i}. {fruit:<7} ${price:.2f}")
    print()

    print("=== Nested loops: multiplication table ===")
    for i in range(1, 4):
        print("  ".join(f"{i}x{j}={i * j:<2}" for j in range(1, 4)))
    print()

    print("=== for ... else ===")
    for candidate in (4, 6, 8):
        if candidate % 2:
            print(f"found odd {candidate}")
            break
    else:
        print("no odd number found (else runs when the loop was not broken)")


def break_demo() -> None:
    print("=== break leaves the innermost loop ===")
    for i in range(10):
        if i == 4:
            print(f"break at {i}")
            break
        print(f"i = {i}")
    print()

    print("=== Leaving nested loops ===")
    grid = [[1, 2, 3], [4, 5, 6], [7, 8, 9]]
    target = 5
    found = None
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            if value == target:
                found = (r, c)
                break
        if found:
            break
    print(f"{target} found at {found} using a flag")

    def find(value: int) -> tuple[int, int] | None:
        for r, row in enumerate(grid):
            for c, cell in enumerate(row):
                if cell == value:
                    return r, c
        return None

    print(f"{target} found at {find(target)} using return from a helper")
    print()

    print("=== break inside while True ===")
    attempts = 0
    while True:
        attempts += 1
        if attempts ** 2 > 20:
            break
    print(f"stopped after {attempts} attempts")


def continue_demo() -> None:
    print("=== continue skips the rest of the iteration ===")
    odds = []
    for i in range(10):
        if i % 2 == 0:
            continue
        odds.append(i)
    print(f"odd numbers below 10: {odds}")
    print()

    print("=== Filtering bad records ===")
    records = ["alice,30", "bad-row", "bob,25", ",", "carol,41"]
    for line in records:
        name, sep, age = line.partition(",")
        if not sep or not name or not age:
            print(f"skip {line!r}")
            continue
        print(f"{name} is {age}")
    print()

    print("=== The comprehension equivalent ===")
    print([i for i in range(10) if i % 3 == 0])


class _Retry(Exception):
    pass


def goto_demo() -> None:
    print("=== There is no goto ===")
    print("Python has no goto. The jumps goto is used for have structured forms:")
    print("  - retry a block      -> while loop with continue")
    print("  - jump out of nests  -> return from a helper, or an exception")
    print("  - shared cleanup     -> try/finally or a with block")
    print()

    print("=== Retry loop ===")
    attempt = 0
    while True:
        attempt += 1
        if attempt < 3:
            print(f"attempt {attempt} failed, retrying")
            continue
        print(f"attempt {attempt} succeeded")
        break
    print()

    print("=== Jump out with an exception ===")
    try:
        for i in range(3):
            for j in range(3):
                if i * j == 2:
                    raise _Retry(f"{i}*{j}")
    except _Retry as jump:
        print(f"jumped out at {jump}")
    print()

    print("=== Cleanup with finally ===")
    steps = []
    try:
        steps.append("open")
        steps.append("work")
    finally:
        steps.append("close")
    print(" -> ".join(steps))
