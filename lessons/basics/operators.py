"""Operators: arithmetic, comparison, logical, bitwise and the rest."""

from __future__ import annotations

import operator
from decimal import Decimal
from fractions import Fraction


def arithmetic_operators_demo() -> None:
    a, b = 17, 5
    print("=== Integer arithmetic ===")
    print(f"{a} + {b}  = {a + b}")
    print(f"{a} - {b}  = {a - b}")
    print(f"{a} * {b}  = {a * b}")
    print(f"{a} / {b}  = {a / b}   (true division always gives a float)")
    print(f"{a} // {b} = {a // b}     (floor division)")
    print(f"{a} % {b}  = {a % b}")
    print(f"{a} ** 2 = {a ** 2}")
    print()

    print("=== Negative operands floor toward -inf ===")
    print(f"-17 // 5 = {-17 // 5}, -17 % 5 = {-17 % 5}")
    print(f"divmod(-17, 5) = {divmod(-17, 5)}")
    print()

    print("=== Integers never overflow ===")
    print(f"2 ** 100 = {2 ** 100}")
    print()

    print("=== Float precision and exact alternatives ===")
    print(f"0.1 + 0.2 = {0.1 + 0.2}")
    print(f"Decimal('0.1') + Decimal('0.2') = {Decimal('0.1') + Decimal('0.2')}")
    print(f"Fraction(1, 3) + Fraction(1, 6) = {Fraction(1, 3) + Fraction(1, 6)}")
    print()

    print("=== Division by zero raises ===")
    try:
        a / 0
    except ZeroDivisionError as exc:
        print(f"ZeroDivisionError: {exc}")


def operators_demo() -> None:
    print("=== Comparison (chainable) ===")
    x = 5
    print(f"1 < x < 10 -> {1 < x < 10}")
    print(f"[1, 2] == [1, 2] -> {[1, 2] == [1, 2]}; is -> {[1, 2] is [1, 2]}")
    print()

    print("=== Logical operators return operands ===")
    print(f"0 or 'default'  -> {0 or 'default'!r}")
    print(f"'a' and 'b'     -> {'a' and 'b'!r}")
    print(f"not []          -> {not []}")
    calls = []

    def touch(value: bool) -> bool:
        calls.append(value)
        return value

    touch(False) and touch(True)
    print(f"short circuit: only {len(calls)} call(s) made")
    print()

    print("=== Bitwise ===")
    a, b = 0b1100, 0b1010
    print(f"a={a:04b} b={b:04b}")
    print(f"a & b  = {a & b:04b}")
    print(f"a | b  = {a | b:04b}")
    print(f"a ^ b  = {a ^ b:04b}")
    print(f"~a     = {~a}")
    print(f"a << 2 = {a << 2:06b}")
    print(f"a >> 2 = {a >> 2:04b}")
    print()

    print("=== Assignment operators ===")
    total = 10
    total += 5
    total *= 2
    total //= 3
    print(f"10 += 5, *= 2, //= 3 -> {total}")
    print()

    print("=== Membership and identity ===")
    print(f"'py' in 'python' -> {'py' in 'python'}")
    print(f"3 not in {{1, 2}} -> {3 not in {1, 2}}")
    print()

    print("=== Precedence ===")
    print(f"2 + 3 * 4 ** 2 = {2 + 3 * 4 ** 2}")
    print(f"-2 ** 2 = {-2 ** 2} (power binds tighter than unary minus)")
    print(f"not 1 == 2 = {not 1 == 2}")
    print()

    print("=== Operators as functions ===")
    pairs = [(3, 4), (10, 2)]
    for op in (operator.add, operator.mul, operator.floordiv):
        print(f"{op.__name__}: {[op(p, q) for p, q in pairs]}")
