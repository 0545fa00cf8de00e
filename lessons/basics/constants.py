"""Constants and enumerations."""

from __future__ import annotations

import math
from enum import Enum, Flag, IntEnum, StrEnum, auto, unique
from typing import Final

MAX_RETRIES: Final = 3
DEFAULT_TIMEOUT_S: Final[float] = 2.5
KB: Final = 1 << 10
MB: Final = 1 << 20
GB: Final = 1 << 30


def constants_demo() -> None:
    print("=== Module-level constants ===")
    print(f"MAX_RETRIES       = {MAX_RETRIES}")
    print(f"DEFAULT_TIMEOUT_S = {DEFAULT_TIMEOUT_S}")
    print("UPPER_CASE names plus typing.Final tell readers and type checkers")
    print("that the name must not be rebound; the interpreter does not enforce it.")
    print()

    print("=== Sizes built from shifts ===")
    for name, value in (("KB", KB), ("MB", MB), ("GB", GB)):
        print(f"{name} = {value:,}")
    print()

    print("=== Constants from the standard library ===")
    print(f"math.pi  = {math.pi}")
    print(f"math.inf = {math.inf}")
    print(f"math.tau / 2 == math.pi: {math.tau / 2 == math.pi}")
    print()

    print("=== Immutable containers for constant tables ===")
    weekdays = ("Mon", "Tue", "Wed", "Thu", "Fri")
    allowed = frozenset({"GET", "HEAD"})
    print(f"weekdays={weekdays}")
    print(f"allowed methods={sorted(allowed)}")
    try:
        weekdays[0] = "Sun"  # type: ignore[index]
    except TypeError as exc:
        print(f"assigning into a tuple -> TypeError: {exc}")


@unique
class Weekday(IntEnum):
    MONDAY = 1
    TUESDAY = auto()
    WEDNESDAY = auto()
    THURSDAY = auto()
    FRIDAY = auto()
    SATURDAY = auto()
    SUNDAY = auto()

    @property
    def is_weekend(self) -> bool:
        return self >= Weekday.SATURDAY


class OrderStatus(StrEnum):
    PENDING = auto()
    PAID = auto()
    SHIPPED = auto()
    CANCELLED = auto()


class Permission(Flag):
    READ = auto()
    WRITE = auto()
    EXECUTE = auto()
    ALL = READ | WRITE | EXECUTE


class Color(Enum):
    RED = "#ff0000"
    GREEN = "#00ff00"
    BLUE = "#0000ff"


def enums_demo() -> None:
    print("=== IntEnum with auto() ===")
    for day in Weekday:
        print(f"{day.name:<9} = {day.value} weekend={day.is_weekend}")
    print(f"Weekday(3) -> {Weekday(3).name}")
    print()

    print("=== StrEnum values are strings ===")
    print([str(s) for s in OrderStatus])
    print(f"OrderStatus('paid') is OrderStatus.PAID: {OrderStatus('paid') is OrderStatus.PAID}")
    print()

    print("=== Flag combines bits ===")
    perms = Permission.READ | Permission.WRITE
    print(f"perms = {perms}")
    print(f"WRITE in perms: {Permission.WRITE in perms}")
    print(f"EXECUTE in perms: {Permission.EXECUTE in perms}")
    print(f"ALL contains perms: {perms in Permission.ALL}")
    print()

    print("=== Plain Enum with explicit values ===")
    for color in Color:
        print(f"{color.name:<5} {color.value}")
    try:
        Color("#123456")
    except ValueError as exc:
        print(f"unknown value -> ValueError: {exc}")
