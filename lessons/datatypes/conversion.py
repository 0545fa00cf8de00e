"""Type conversion: numbers, strings, runtime type checks and records."""

from __future__ import annotations

import json
import struct
from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ValidationError


def numeric_conversion_demo() -> None:
    print("=== int <-> float ===")
    print(f"int(3.99) = {int(3.99)} (truncates toward zero)")
    print(f"int(-3.99) = {int(-3.99)}")
    print(f"round(2.5) = {round(2.5)}, round(3.5) = {round(3.5)} (banker's rounding)")
    half_up = Decimal("2.5").quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    print(f"Decimal('2.5') ROUND_HALF_UP = {half_up}")
    print(f"float(7) = {float(7)}")
    print()

    print("=== Large integers and float precision ===")
    big = 2 ** 53 + 1
    print(f"2**53 + 1 = {big}; float(...) = {float(big):.0f} (precision lost)")
    print()

    print("=== Fixed-width wrap-around (what C/Go would do) ===")
    for value in (127, 128, 255, 256, -1):
        as_int8 = struct.unpack("b", struct.pack("B", value & 0xFF))[0]
        print(f"{value:>4} as uint8 -> {value & 0xFF:>3}, as int8 -> {as_int8:>4}")
    print()

    print("=== Bases ===")
    n = 255
    print(f"bin={bin(n)} oct={oct(n)} hex={hex(n)}")
    print(f"int('ff', 16)={int('ff', 16)} int('0b1010', 0)={int('0b1010', 0)}")


def string_conversion_demo() -> None:
    print("=== Numbers to strings ===")
    print(f"str(42)={str(42)!r} repr(3.0)={repr(3.0)!r} f'{{0.1:.3f}}'={0.1:.3f}")
    print(f"format(1234567, ',') = {format(1234567, ',')}")
    print()

    print("=== Strings to numbers ===")
    for raw in ("42", " 7 ", "3.14", "1e3", "abc"):
        try:
            print(f"int({raw!r}) = {int(raw)}")
        except ValueError:
            try:
                print(f"float({raw!r}) = {float(raw)}")
            except ValueError as exc:
                print(f"{raw!r} -> ValueError: {exc}")
    print()

    print("=== Booleans ===")
    print(f"bool('False') = {bool('False')} (any non-empty string is truthy)")
    truthy = {"1", "true", "yes", "on"}
    print(f"'yes' parsed explicitly -> {'yes'.lower() in truthy}")
    print()

    print("=== str <-> bytes ===")
    text = "naïve"
    data = text.encode("utf-8")
    print(f"{text!r}.encode('utf-8') = {data!r}")
    print(f"decoded back: {data.decode('utf-8')!r}")
    print(f"ascii with errors='replace': {text.encode('ascii', errors='replace')!r}")
    print()

    print("=== Characters and code points ===")
    print(f"ord('A')={ord('A')} chr(97)={chr(97)!r} list('abc')={list('abc')}")


def _describe(value: Any) -> str:
    if isinstance(value, bool):
        return f"bool {value}"
    if isinstance(value, int):
        return f"int {value}, doubled {value * 2}"
    if isinstance(value, str):
        return f"str of length {len(value)}"
    if isinstance(value, (list, tuple)):
        return f"sequence with {len(value)} items"
    if value is None:
        return "None"
    return f"other: {type(value).__name__}"


def interface_conversion_demo() -> None:
    print("=== Checking the runtime type ===")
    for value in (True, 42, "hello", [1, 2], (3,), None, 1.5):
        print(f"{value!r:>8} -> {_describe(value)}")
    print()

    print("=== bool is a subclass of int ===")
    print(f"isinstance(True, int) = {isinstance(True, int)} (check bool first)")
    print()

    print("=== EAFP: try the operation, handle the failure ===")
    for value in ("10", "ten"):
        try:
            print(f"int({value!r}) + 1 = {int(value) + 1}")
        except ValueError:
            print(f"{value!r} is not a number")
    print()

    print("=== Narrowing with match ===")
    for value in (3, "x", [1, 2, 3], {"id": 7}):
        match value:
            case int(n):
                print(f"int {n}")
            case str(s):
                print(f"str {s!r}")
            case [first, *rest]:
                print(f"list starting {first}, {len(rest)} more")
            case {"id": ident}:
                print(f"dict with id {ident}")


@dataclass
class _UserRow:
    id: int
    name: str
    email: str


class _UserOut(BaseModel):
    id: int
    name: str


class _UserIn(BaseModel):
    id: int
    name: str
    email: str


def struct_conversion_demo() -> None:
    print("=== dataclass -> dict -> JSON ===")
    row = _UserRow(1, "alice", "alice@example.com")
    as_dict = asdict(row)
    print(f"asdict: {as_dict}")
    print(f"json:   {json.dumps(as_dict)}")
    print()

    print("=== Converting between record types with the same fields ===")
    names = [f.name for f in fields(_UserRow)]
    print(f"_UserRow fields: {names}")
    public = _UserOut.model_validate(as_dict)
    print(f"_UserOut (drops extra fields): {public.model_dump()}")
    print()

    print("=== JSON -> validated model ===")
    raw = '{"id": "2", "name": "bob", "email": "bob@example.com"}'
    user = _UserIn.model_validate_json(raw)
    print(f"parsed {user!r} (id coerced from '2' to {user.id!r})")
    try:
        _UserIn.model_validate_json('{"id": "two", "name": "x"}')
    except ValidationError as exc:
        print(f"invalid JSON input -> {exc.error_count()} validation errors")
        for err in exc.errors():
            print(f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
