"""Functions, closures and methods."""

from __future__ import annotations

from collections.abc import Callable


def _divmod_named(a: int, b: int) -> tuple[int, int]:
    return a // b, a % b


def _greet(name: str, greeting: str = "Hello", *, punctuation: str = "!") -> str:
    return f"{greeting}, {name}{punctuation}"


def _total(*numbers: float, **options: float) -> float:
    result = sum(numbers)
    return result * options.get("scale", 1.0)


def functions_demo() -> None:
    print("=== Defining and calling functions ===")
    print(f"_greet('Go')                 -> {_greet('Go')}")
    print(f"_greet('Py', 'Hi')           -> {_greet('Py', 'Hi')}")
    print(f"_greet('Py', punctuation='?') -> {_greet('Py', punctuation='?')}")
    print()

    print("=== Multiple return values (a tuple) ===")
    q, r = _divmod_named(17, 5)
    print(f"17 // 5 = {q}, 17 % 5 = {r}")
    print()

    print("=== Variadic arguments ===")
    print(f"_total(1, 2, 3)            = {_total(1, 2, 3)}")
    print(f"_total(1, 2, 3, scale=10)  = {_total(1, 2, 3, scale=10)}")
    nums = [4, 5, 6]
    print(f"_total(*nums)              = {_total(*nums)}")
    print()

    print("=== Functions are values ===")
    ops: dict[str, Callable[[int, int], int]] = {
        "add": lambda a, b: a + b,
        "mul": lambda a, b: a * b,
    }
    for name, fn in ops.items():
        print(f"{name}(6, 7) = {fn(6, 7)}")
    print()

    print("=== Mutable default pitfall ===")

    def append_bad(item: int, bucket: list[int] = []) -> list[int]:  # noqa: B006
        bucket.append(item)
        return bucket

    def append_good(item: int, bucket: list[int] | None = None) -> list[int]:
        if bucket is None:
            bucket = []
        bucket.append(item)
        return bucket

    print(f"append_bad(1), append_bad(2)   -> {append_bad(1)}, {append_bad(2)}")
    print(f"append_good(1), append_good(2) -> {append_good(1)}, {append_good(2)}")


def _make_counter() -> Callable[[], int]:
    count = 0

    def increment() -> int:
        nonlocal count
        count += 1
        return count

    return increment


def _make_multiplier(factor: int) -> Callable[[int], int]:
    return lambda x: x * factor


def closure_demo() -> None:
    print("=== Closures capture variables ===")
    counter = _make_counter()
    print(f"counter() x3 -> {counter()}, {counter()}, {counter()}")
    other = _make_counter()
    print(f"a second counter starts fresh -> {other()}")
    print()

    print("=== Closure factories ===")
    double, triple = _make_multiplier(2), _make_multiplier(3)
    print(f"double(5)={double(5)} triple(5)={triple(5)}")
    print()

    print("=== Late binding in loops ===")
    late = [lambda: i for i in range(3)]
    print(f"[lambda: i for i in range(3)] -> {[f() for f in late]}")
    bound = [lambda i=i: i for i in range(3)]
    print(f"[lambda i=i: i ...]           -> {[f() for f in bound]}")
    print()

    print("=== Inspecting captured cells ===")
    cells = counter.__closure__ or ()
    print(f"counter captures {len(cells)} cell(s), current value {cells[0].cell_contents}")


class _Rectangle:
    sides = 4

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def area(self) -> float:
        return self.width * self.height

    def scale(self, factor: float) -> None:
        self.width *= factor
        self.height *= factor

    @classmethod
    def square(cls, size: float) -> "_Rectangle":
        return cls(size, size)

    @staticmethod
    def describe_units() -> str:
        return "all lengths in centimetres"


def method_demo() -> None:
    print("=== Instance methods ===")
    r = _Rectangle(3, 4)
    print(f"Rectangle(3, 4).area() = {r.area()}")
    r.scale(2)
    print(f"after scale(2): {r.width} x {r.height}, area {r.area()}")
    print()

    print("=== Bound methods are values ===")
    area = r.area
    print(f"area = r.area -> {area!r}")
    print(f"area() = {area()}")
    print(f"_Rectangle.area(r) = {_Rectangle.area(r)} (explicit self)")
    print()

    print("=== classmethod and staticmethod ===")
    sq = _Rectangle.square(5)
    print(f"_Rectangle.square(5).area() = {sq.area()}")
    print(f"_Rectangle.describe_units() = {_Rectangle.describe_units()!r}")
    print(f"class attribute sides = {_Rectangle.sides}")
