"""Public and private names: leading underscores, ``__all__`` and name mangling.

Python has no access modifiers. A leading underscore marks a name as
internal, ``__all__`` lists what ``from module import *`` exports, and a
double leading underscore on an attribute is rewritten to
``_ClassName__attr`` so subclasses cannot clash with it by accident.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass

__all__ = ["Account", "PublicRecord", "public_helper", "lowercase_struct_demo"]


@dataclass
class _InternalRecord:
    """Module-private: not exported, not part of the package API."""

    public_field: str
    _private_field: str

    def get_public_field(self) -> str:
        return self.public_field

    def _get_private_field(self) -> str:
        return self._private_field

    def _set_private_field(self, value: str) -> None:
        self._private_field = value


@dataclass
class PublicRecord:
    public_field: str
    _private_field: str = ""

    def get_public_field(self) -> str:
        return self.public_field


class Account:
    def __init__(self, owner: str, pin: str) -> None:
        self.owner = owner
        self.__pin = pin

    def check_pin(self, attempt: str) -> bool:
        return attempt == self.__pin


def public_helper() -> str:
    return "public helper"


def _private_helper() -> str:
    return "private helper"


def star_exports(module: object) -> list[str]:
    """Names ``from module import *`` would bind."""
    names = getattr(module, "__all__", None)
    if names is None:
        names = [n for n in vars(module) if not n.startswith("_")]
    return sorted(names)


def lowercase_struct_demo() -> None:
    this = sys.modules[__name__]

    print("=== A leading underscore is a convention ===")
    lower = _InternalRecord("public value", "private value")
    print(f"lower.public_field = {lower.public_field!r}")
    print(f"lower._private_field = {lower._private_field!r} (readable, but internal)")
    lower._set_private_field("changed through _set_private_field")
    print(f"lower._get_private_field() = {lower._get_private_field()!r}")
    print()

    print("=== Internal types can be wrapped by public ones ===")

    @dataclass
    class Wrapper:
        inner: _InternalRecord
        extra: str = "extra field"

    wrapper = Wrapper(lower)
    print(f"wrapper.inner.get_public_field() = {wrapper.inner.get_public_field()!r}")
    print(f"wrapper.extra = {wrapper.extra!r}")
    print()

    print("=== __all__ decides what a star import exports ===")
    print(f"__all__ = {this.__all__}")
    print(f"star exports include _InternalRecord: {'_InternalRecord' in star_exports(this)}")
    print(f"star exports include PublicRecord: {'PublicRecord' in star_exports(this)}")
    print()

    print("=== Double underscores are name-mangled ===")
    account = Account("alice", "1234")
    print(f"hasattr(account, '__pin') = {hasattr(account, '__pin')}")
    print(f"stored as: {[k for k in vars(account) if 'pin' in k]}")
    print(f"account.check_pin('1234') = {account.check_pin('1234')}")
    print()

    print("=== Summary ===")
    print("name       public API, exported, documented")
    print("_name      internal; importable, but callers take the risk")
    print("__name     class-private; mangled to _Class__name")
    print("__all__    the explicit export list for star imports")
