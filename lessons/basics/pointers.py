"""Pointers: what Python has instead.

Python names are references to objects. There is no address-of operator,
but the effects pointers are used for elsewhere (sharing, in-place
mutation, optional values, swapping) all have a Python spelling.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass
class Person:
    name: str
    age: int


def _rebind(x: int) -> None:
    x = 100  # rebinds the local name only


def _mutate(box: list[int]) -> None:
    box[0] = 100


def _birthday_copy(p: Person) -> Person:
    return replace(p, age=p.age + 1)


def _birthday_in_place(p: Person) -> None:
    p.age += 1


def _describe(name: str, age: int | None = None) -> str:
    if age is None:
        return f"{name} (age unknown)"
    return f"{name} ({age})"


def pointers_demo() -> None:
    print("=== Names are references ===")
    a = [1, 2, 3]
    b = a
    print(f"a = {a}, b = a")
    print(f"a is b: {a is b}  id(a) == id(b): {id(a) == id(b)}")
    b.append(4)
    print(f"after b.append(4): a = {a}")
    c = list(a)
    print(f"c = list(a) -> c is a: {c is a}, c == a: {c == a}")
    print()

    print("=== Rebinding vs mutating inside a function ===")
    n = 1
    _rebind(n)
    print(f"int after _rebind: {n} (ints are immutable, the caller is unaffected)")
    box = [1]
    _mutate(box)
    print(f"list after _mutate: {box} (the caller sees the change)")
    print()

    print("=== Objects passed to functions ===")
    alice = Person("Alice", 30)
    older = _birthday_copy(alice)
    print(f"copy approach: original={alice}, returned={older}")
    _birthday_in_place(alice)
    print(f"in-place approach: original is now {alice}")
    print()

    print("=== Optional values (None instead of a nil pointer) ===")
    print(_describe("Bob"))
    print(_describe("Carol", 41))
    print()

    print("=== Swapping without pointers ===")
    x, y = 10, 20
    x, y = y, x
    print(f"x, y = y, x -> x={x}, y={y}")
    print()

    print("=== Small-int caching and `is` ===")
    p, q = 256, int("256")
    print(f"256 is int('256'): {p is q} (implementation detail, compare with ==)")
    print(f"None is None: {None is None} (the one place `is` is the right test)")
    print()

    print("=== Summary ===")
    print("1. Mutating a shared object is visible to every reference")
    print("2. Rebinding a name never affects other names")
    print("3. Use None for 'no value' and `is None` to test it")
    print("4. Return new values or mutate explicitly; pick one per API")
