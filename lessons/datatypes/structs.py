"""Records: dataclasses, namedtuples, composition, metadata."""

from __future__ import annotations

from collections import namedtuple
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from types import SimpleNamespace
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


def anonymous_struct_demo() -> None:
    print("=== One-off records ===")
    point = SimpleNamespace(x=1, y=2)
    point.z = 3
    print(f"SimpleNamespace: {point} -> x+y+z = {point.x + point.y + point.z}")

    Pair = namedtuple("Pair", "key value")
    pair = Pair("lang", "python")
    print(f"namedtuple: {pair}, pair.key={pair.key!r}, pair[1]={pair[1]!r}")
    print()

    print("=== Inline lists of records (table-driven tests) ===")
    cases = [
        {"name": "empty", "input": "", "want": 0},
        {"name": "word", "input": "go", "want": 2},
        {"name": "unicode", "input": "世界", "want": 2},
    ]
    for case in cases:
        got = len(case["input"])
        status = "ok" if got == case["want"] else "FAIL"
        print(f"{case['name']:<8} len={got} want={case['want']} {status}")
    print()

    print("=== Typed one-offs ===")

    class Config(NamedTuple):
        host: str
        port: int = 8080

    cfg = Config("localhost")
    print(f"{cfg} -> {cfg._replace(port=9000)}")


@dataclass
class Address:
    street: str
    city: str

    def one_line(self) -> str:
        return f"{self.street}, {self.city}"


@dataclass
class Timestamps:
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def age_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.created_at).total_seconds()


@dataclass
class Employee(Timestamps):
    name: str = ""
    address: Address = field(default_factory=lambda: Address("", ""))


def nested_struct_demo() -> None:
    print("=== Composition: a field holding another record ===")
    emp = Employee(name="alice", address=Address("1 Main St", "Springfield"))
    print(f"{emp.name} lives at {emp.address.one_line()}")
    print()

    print("=== Inheritance to reuse fields and methods ===")
    print(f"Employee fields: {[f.name for f in fields(Employee)]}")
    print(f"emp.age_seconds() >= 0: {emp.age_seconds() >= 0}")
    print()

    print("=== Nested conversion to dict ===")
    data = asdict(emp)
    data["created_at"] = "<timestamp>"
    print(data)
    print()

    print("=== Independent defaults per instance ===")
    a, b = Employee(name="a"), Employee(name="b")
    a.address.city = "Paris"
    print(f"a.address.city={a.address.city!r} b.address.city={b.address.city!r}")


@dataclass
class BankAccount:
    owner: str
    _balance: Decimal = Decimal("0")
    history: list[str] = field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        return self._balance

    def deposit(self, amount: Decimal) -> None:
        if amount <= 0:
            raise ValueError("deposit must be positive")
        self._balance += amount
        self.history.append(f"+{amount}")

    def withdraw(self, amount: Decimal) -> None:
        if amount > self._balance:
            raise ValueError(f"insufficient funds: balance {self._balance}, requested {amount}")
        self._balance -= amount
        self.history.append(f"-{amount}")

    def __str__(self) -> str:
        return f"{self.owner}: {self._balance}"


def struct_methods_demo() -> None:
    print("=== Methods on a dataclass ===")
    acct = BankAccount("alice")
    acct.deposit(Decimal("100.00"))
    acct.withdraw(Decimal("30.50"))
    print(f"{acct} history={acct.history}")
    print()

    print("=== Validation inside methods ===")
    for action, amount in (("deposit", Decimal("-5")), ("withdraw", Decimal("1000"))):
        try:
            getattr(acct, action)(amount)
        except ValueError as exc:
            print(f"{action}({amount}) -> ValueError: {exc}")
    print()

    print("=== Read-only property ===")
    try:
        acct.balance = Decimal("1")  # type: ignore[misc]
    except AttributeError as exc:
        print(f"AttributeError: {exc}")
    print()

    print("=== Generated methods ===")
    print(f"repr: {acct!r}")
    print(f"equality: {BankAccount('x') == BankAccount('x')}")


@dataclass
class Column:
    name: str = field(metadata={"db": "username", "max_len": 50})
    email: str | None = field(default=None, metadata={"db": "email", "json": "omitempty"})
    password_hash: str = field(default="", repr=False, metadata={"db": "password_hash", "json": "-"})


class UserSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userID")
    full_name: str = Field(alias="fullName", max_length=100)
    password_hash: str = Field(default="", exclude=True)


def struct_tags_demo() -> None:
    print("=== dataclass field metadata ===")
    for f in fields(Column):
        print(f"{f.name:<14} metadata={dict(f.metadata)}")
    print(f"repr hides password_hash: {Column('alice', None, 'secret')!r}")
    print()

    print("=== pydantic aliases act like JSON tags ===")
    user = UserSchema.model_validate({"userID": 7, "fullName": "Alice A", "password_hash": "x"})
    print(f"python names: {user.model_dump()}")
    print(f"json names:   {user.model_dump_json(by_alias=True)}")
    print("password_hash is excluded from every dump")


class OrderState(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"


@dataclass
class LineItem:
    sku: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Order:
    order_no: str
    items: list[LineItem] = field(default_factory=list)
    state: OrderState = OrderState.PENDING

    _TRANSITIONS = {
        OrderState.PENDING: {OrderState.PAID},
        OrderState.PAID: {OrderState.SHIPPED},
        OrderState.SHIPPED: set(),
    }

    @property
    def total(self) -> Decimal:
        return sum((i.subtotal for i in self.items), Decimal("0"))

    def add(self, sku: str, quantity: int, unit_price: str) -> None:
        if self.state is not OrderState.PENDING:
            raise ValueError(f"cannot add items to a {self.state} order")
        self.items.append(LineItem(sku, quantity, Decimal(unit_price)))

    def advance(self, to: OrderState) -> None:
        if to not in self._TRANSITIONS[self.state]:
            raise ValueError(f"illegal transition {self.state} -> {to}")
        self.state = to


def real_world_example_demo() -> None:
    print("=== A small order model ===")
    order = Order("ORD001")
    order.add("book", 2, "12.50")
    order.add("pen", 10, "0.99")
    for item in order.items:
        print(f"{item.sku:<5} {item.quantity:>3} x {item.unit_price:>6} = {item.subtotal:>7}")
    print(f"total = {order.total}")
    print()

    print("=== State transitions ===")
    order.advance(OrderState.PAID)
    print(f"state -> {order.state}")
    for attempt in (lambda: order.add("mug", 1, "5"), lambda: order.advance(OrderState.PENDING)):
        try:
            attempt()
        except ValueError as exc:
            print(f"ValueError: {exc}")
    order.advance(OrderState.SHIPPED)
    print(f"state -> {order.state}")
