"""Interfaces: Protocols (structural) and ABCs (nominal)."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Shape(Protocol):
    def area(self) -> float: ...

    def perimeter(self) -> float: ...


@dataclass
class Circle:
    radius: float

    def area(self) -> float:
        return math.pi * self.radius ** 2

    def perimeter(self) -> float:
        return 2 * math.pi * self.radius


@dataclass
class Rect:
    width: float
    height: float

    def area(self) -> float:
        return self.width * self.height

    def perimeter(self) -> float:
        return 2 * (self.width + self.height)


def total_area(shapes: list[Shape]) -> float:
    return sum(s.area() for s in shapes)


def interface_basic_demo() -> None:
    print("=== A Protocol describes behaviour, not ancestry ===")
    shapes: list[Shape] = [Circle(1), Rect(2, 3)]
    for s in shapes:
        print(f"{s!r:<28} area={s.area():7.3f} perimeter={s.perimeter():7.3f}")
    print(f"total area = {total_area(shapes):.3f}")
    print()

    print("=== Structural checks at runtime ===")
    print(f"isinstance(Circle(1), Shape) = {isinstance(Circle(1), Shape)}")
    print(f"isinstance('text', Shape)   = {isinstance('text', Shape)}")
    print("Circle never names Shape; having the methods is enough.")


class Notifier(ABC):
    @abstractmethod
    def send(self, to: str, message: str) -> str: ...

    def broadcast(self, recipients: list[str], message: str) -> list[str]:
        return [self.send(r, message) for r in recipients]


class EmailNotifier(Notifier):
    def send(self, to: str, message: str) -> str:
        return f"email to {to}: {message}"


class SmsNotifier(Notifier):
    def send(self, to: str, message: str) -> str:
        return f"sms to {to}: {message[:20]}"


class _Incomplete(Notifier):
    pass


def interface_implementation_demo() -> None:
    print("=== Abstract base classes ===")
    for notifier in (EmailNotifier(), SmsNotifier()):
        for line in notifier.broadcast(["alice", "bob"], "Your order has shipped today"):
            print(line)
    print()

    print("=== Missing methods fail at construction ===")
    try:
        _Incomplete()  # type: ignore[abstract]
    except TypeError as exc:
        print(f"TypeError: {exc}")
    print()

    print("=== Nominal checks ===")
    print(f"issubclass(EmailNotifier, Notifier) = {issubclass(EmailNotifier, Notifier)}")
    print(f"issubclass(Circle, Notifier)        = {issubclass(Circle, Notifier)}")


@dataclass
class Counter:
    value: int = 0

    def incremented(self) -> Counter:
        """Value-style: returns a new counter."""
        return replace(self, value=self.value + 1)

    def increment(self) -> None:
        """Reference-style: mutates this counter."""
        self.value += 1


@dataclass(frozen=True)
class FrozenCounter:
    value: int = 0

    def incremented(self) -> FrozenCounter:
        return replace(self, value=self.value + 1)


def interface_receiver_demo() -> None:
    print("=== Methods that return a copy vs methods that mutate ===")
    c = Counter()
    c2 = c.incremented()
    print(f"c.incremented() -> c={c}, result={c2}")
    c.increment()
    print(f"c.increment()   -> c={c}")
    print()

    print("=== Frozen dataclasses only allow the copy style ===")
    f = FrozenCounter()
    try:
        f.value = 5  # type: ignore[misc]
    except AttributeError as exc:
        print(f"{type(exc).__name__}: {exc}")
    print(f"f.incremented() = {f.incremented()}")
    print()

    print("=== Frozen instances are hashable ===")
    print(f"{{FrozenCounter(1), FrozenCounter(1)}} has {len({FrozenCounter(1), FrozenCounter(1)})} element")


class Reader(Protocol):
    def read(self) -> str: ...


class Writer(Protocol):
    def write(self, data: str) -> int: ...


class ReadWriter(Reader, Writer, Protocol):
    pass


class Buffer:
    def __init__(self) -> None:
        self._chunks: list[str] = []

    def write(self, data: str) -> int:
        self._chunks.append(data)
        return len(data)

    def read(self) -> str:
        out = "".join(self._chunks)
        self._chunks.clear()
        return out


def copy_all(src: Reader, dst: Writer) -> int:
    return dst.write(src.read())


def interface_nesting_demo() -> None:
    print("=== Composing small protocols ===")
    print("ReadWriter = Reader + Writer; Buffer satisfies all three.")
    src, dst = Buffer(), Buffer()
    src.write("hello ")
    src.write("protocols")
    rw: ReadWriter = dst
    n = copy_all(src, rw)
    print(f"copied {n} chars -> dst.read() = {dst.read()!r}")
    print()

    print("=== Accept the narrowest interface you need ===")
    print("copy_all takes a Reader and a Writer, not a full ReadWriter,")
    print("so callers can pass read-only or write-only objects.")


def interface_empty_demo() -> None:
    print("=== object / Any accept everything ===")
    bag: list[Any] = [1, "two", 3.0, [4], {"five": 5}, None, len]
    for item in bag:
        print(f"{type(item).__name__:<20} {item!r}")
    print()

    print("=== Everything is an object ===")
    print(f"all(isinstance(x, object) for x in bag) = {all(isinstance(x, object) for x in bag)}")
    print()

    print("=== Prefer precise types ===")
    print("Use Any for truly heterogeneous data (decoded JSON, plugin payloads)")
    print("and narrow with isinstance or match before using a value.")
    decoded = {"name": "x", "tags": ["a", "b"], "count": 2}
    for key, value in decoded.items():
        if isinstance(value, list):
            print(f"{key}: list of {len(value)}")
        else:
            print(f"{key}: {value!r}")
