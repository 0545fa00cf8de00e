"""Using another module's internal names from inside the same package."""

from __future__ import annotations

from dataclasses import dataclass

import lessons.datatypes.visibility as visibility
from lessons.datatypes.visibility import (
    PublicRecord,
    _InternalRecord,
    _private_helper,
    public_helper,
    star_exports,
)


@dataclass
class AuditedRecord(_InternalRecord):
    audited_by: str = "system"


def cross_file_usage_demo() -> None:
    print("=== Importing internal names from a sibling module ===")
    record = _InternalRecord("set from visibility_usage", "private, set from visibility_usage")
    print(f"record._get_private_field() = {record._get_private_field()!r}")
    print(f"record.get_public_field() = {record.get_public_field()!r}")
    print(f"_private_helper() = {_private_helper()!r}")
    print(f"public_helper() = {public_helper()!r}")
    print()

    print("=== Subclassing an internal type ===")
    audited = AuditedRecord("shipment", "tracking-42", audited_by="bob")
    print(f"{audited}")
    print(f"inherited _get_private_field() = {audited._get_private_field()!r}")
    print()

    print("=== What a star import would see ===")
    namespace: dict[str, object] = {}
    for name in star_exports(visibility):
        namespace[name] = getattr(visibility, name)
    print(f"bound names: {sorted(namespace)}")
    print(f"PublicRecord bound: {namespace.get('PublicRecord') is PublicRecord}")
    print(f"_InternalRecord bound: {'_InternalRecord' in namespace}")
    print()

    print("=== Takeaways ===")
    print("The module, not the file, is the unit of privacy, and even that is advisory.")
    print("Explicit imports of _names work anywhere; linters flag them outside the package.")
    print("Keep internal helpers in _modules and re-export the public API from __init__.")
