"""SQLAlchemy fundamentals: models, sessions, CRUD and engine configuration."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import URL, delete, func, inspect, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import QueuePool

from lessons.orm.database import create_demo_engine, demo_database, health_check, session_scope
from lessons.orm.models import Order, User


def _hash(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def orm_basics_demo() -> None:
    print("=== Model -> table ===")
    for column in User.__table__.columns:
        flags = [name for name, on in (("pk", column.primary_key), ("unique", column.unique),
                                        ("nullable", column.nullable)) if on]
        print(f"  {User.__tablename__}.{column.name:<14} {str(column.type):<12} {' '.join(flags)}")
    print()

    with demo_database() as (engine, Session):
        print("=== Create ===")
        with session_scope(Session) as session:
            alice = User(username="alice", email="alice@example.com", password_hash=_hash("pw1"), full_name="Alice")
            bob = User(username="bob", password_hash=_hash("pw2"))
            session.add_all([alice, bob])
            session.flush()
            print(f"inserted ids: alice={alice.id} bob={bob.id} (status default={bob.status!r})")
            alice.orders.append(Order(order_no="ORD-0001", total_price=Decimal("99.90")))
            alice.orders.append(Order(order_no="ORD-0002", total_price=Decimal("15.00"), status="paid"))
        print()

        print("=== Read ===")
        with session_scope(Session) as session:
            user = session.scalars(select(User).where(User.username == "alice")).one()
            print(f"by username: {user}")
            print(f"optional email for bob: {session.scalar(select(User.email).where(User.username == 'bob'))}")
            print(f"get by primary key: {session.get(User, 2)}")
            print(f"missing row: {session.get(User, 999)}")
            total = session.scalar(select(func.sum(Order.total_price)).where(Order.user_id == user.id))
            print(f"alice's orders: {[o.order_no for o in user.orders]} total={total}")
        print()

        print("=== Update ===")
        with session_scope(Session) as session:
            user = session.scalars(select(User).where(User.username == "bob")).one()
            user.full_name = "Bob Builder"
            result = session.execute(update(Order).where(Order.status == "pending").values(status="cancelled"))
            print(f"attribute change flushed on commit; bulk update touched {result.rowcount} row(s)")
        print()

        print("=== Transactions ===")
        try:
            with session_scope(Session) as session:
                session.add(User(username="carol", password_hash=_hash("pw3")))
                session.add(User(username="alice", password_hash=_hash("dup")))
        except IntegrityError:
            print("duplicate username -> IntegrityError, whole transaction rolled back")
        with session_scope(Session) as session:
            names = session.scalars(select(User.username).order_by(User.id)).all()
            print(f"users after rollback: {names}")
        print()

        print("=== Delete ===")
        with session_scope(Session) as session:
            session.delete(session.scalars(select(User).where(User.username == "alice")).one())
        with session_scope(Session) as session:
            remaining = session.scalar(select(func.count()).select_from(Order))
            print(f"deleting alice cascades to her orders: {remaining} order(s) left")
            session.execute(delete(User).where(User.status == "inactive"))
    print()
    print("Sessions are units of work: changes are staged, then committed or rolled back together.")


@dataclass
class DatabaseConfig:
    driver: str = "mysql+pymysql"
    host: str = "localhost"
    port: int = 3306
    username: str = "app"
    password: str = "secret"
    database: str = "shop"
    pool_size: int = 10
    max_overflow: int = 20
    pool_recycle: int = 3600
    pool_timeout: float = 30.0

    def url(self) -> URL:
        return URL.create(
            self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query={"charset": "utf8mb4"},
        )

    def engine_options(self) -> dict[str, object]:
        return {
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_recycle": self.pool_recycle,
            "pool_timeout": self.pool_timeout,
            "pool_pre_ping": True,
        }


def orm_database_config_demo() -> None:
    print("=== Building a connection URL ===")
    config = DatabaseConfig()
    print(f"url:     {config.url().render_as_string(hide_password=True)}")
    print(f"options: {config.engine_options()}")
    print()

    print("=== Pool settings explained ===")
    print("pool_size      connections kept open")
    print("max_overflow   extra connections allowed under load")
    print("pool_recycle   seconds before a connection is replaced (beat server timeouts)")
    print("pool_timeout   seconds to wait for a free connection")
    print("pool_pre_ping  test connections before use, drop stale ones")
    print()

    print("=== A pooled engine in action (SQLite stands in for the server) ===")
    engine = create_demo_engine("sqlite+pysqlite://", poolclass=QueuePool,
                                pool_size=2, max_overflow=1, pool_timeout=1, pool_pre_ping=True)
    try:
        print(f"dialect: {engine.dialect.name}, healthy: {health_check(engine)}")
        first = engine.connect()
        second = engine.connect()
        print(f"two checked out -> {engine.pool.status()}")
        first.close()
        second.close()
        print(f"returned       -> {engine.pool.status()}")
    finally:
        engine.dispose()
    print()

    print("=== Configured database ===")
    with demo_database() as (engine, _):
        tables = sorted(inspect(engine).get_table_names())
        print(f"{engine.url.render_as_string(hide_password=True)} -> tables {tables}")
    print()
    print("Load the URL and pool sizes from the environment (DATABASE_URL), never hard-code secrets.")
