"""Relationships, query optimization and eager loading with SQLAlchemy."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from sqlalchemy import Engine, func, insert, inspect, select, text
from sqlalchemy.orm import Session, joinedload, selectinload, sessionmaker

from lessons.orm.database import StatementCounter, demo_database, session_scope
from lessons.orm.models import Offering, OfferingCategory, Order, OrderLog, Role, User

LoadStrategy = Literal["lazy", "selectin", "joined"]


def seed_shop(factory: sessionmaker[Session], users: int = 5, orders_per_user: int = 3) -> None:
    """Insert ``users`` users with ``orders_per_user`` orders each plus a small catalogue."""
    with session_scope(factory) as session:
        drinks = OfferingCategory(name="Drinks", sequence=1)
        drinks.offerings = [
            Offering(name="Espresso", unit_price=Decimal("2.50")),
            Offering(name="Latte", unit_price=Decimal("3.80")),
        ]
        food = OfferingCategory(name="Food", sequence=2)
        food.offerings = [Offering(name="Croissant", unit_price=Decimal("2.10"))]
        session.add_all([drinks, food])
        session.flush()
        catalogue = drinks.offerings + food.offerings

        admin, member = Role(name="admin"), Role(name="member")
        for u in range(1, users + 1):
            user = User(username=f"user{u}", password_hash="x", roles=[member] + ([admin] if u == 1 else []))
            for n in range(orders_per_user):
                offering = catalogue[(u + n) % len(catalogue)]
                user.orders.append(Order(
                    order_no=f"ORD-{u:03d}-{n}",
                    offering_id=offering.id,
                    total_price=offering.unit_price * (n + 1),
                    status="paid" if n % 2 == 0 else "pending",
                ))
            session.add(user)


def load_users_with_orders(engine: Engine, factory: sessionmaker[Session],
                           strategy: LoadStrategy) -> tuple[int, int]:
    """Read every user's orders; return ``(statements_executed, orders_seen)``."""
    stmt = select(User).order_by(User.id)
    if strategy == "selectin":
        stmt = stmt.options(selectinload(User.orders))
    elif strategy == "joined":
        stmt = stmt.options(joinedload(User.orders))
    with session_scope(factory) as session, StatementCounter(engine) as counter:
        users = session.scalars(stmt).unique().all()
        seen = sum(len(user.orders) for user in users)
    return counter.count, seen


def orm_relationships_demo() -> None:
    with demo_database() as (engine, Session):
        seed_shop(Session, users=3, orders_per_user=2)

        print("=== One-to-many: category -> offerings ===")
        with session_scope(Session) as session:
            for category in session.scalars(select(OfferingCategory).order_by(OfferingCategory.sequence)):
                names = ", ".join(f"{o.name} ({o.unit_price})" for o in category.offerings)
                print(f"{category.name}: {names}")
        print()

        print("=== Many-to-one: order -> user, offering ===")
        with session_scope(Session) as session:
            order = session.scalars(select(Order).where(Order.order_no == "ORD-001-0")).one()
            print(f"{order.order_no} placed by {order.user.username} for {order.offering.name}, "
                  f"category {order.offering.category.name}")
        print()

        print("=== Many-to-many: users <-> roles ===")
        with session_scope(Session) as session:
            for role in session.scalars(select(Role).order_by(Role.name)):
                print(f"{role.name:<7} {[u.username for u in role.users]}")
            user3 = session.scalars(select(User).where(User.username == "user3")).one()
            user3.roles.append(session.scalars(select(Role).where(Role.name == "admin")).one())
        with session_scope(Session) as session:
            admins = session.scalars(select(User.username).join(User.roles).where(Role.name == "admin")).all()
            print(f"after granting user3: admins = {admins}")
        print()

        print("=== Cascades ===")
        with session_scope(Session) as session:
            food = session.scalars(select(OfferingCategory).where(OfferingCategory.name == "Food")).one()
            croissant = food.offerings[0]
            session.execute(Order.__table__.update().where(Order.offering_id == croissant.id).values(offering_id=None))
            food.offerings.remove(croissant)
        with session_scope(Session) as session:
            left = session.scalar(select(func.count()).select_from(Offering))
            print(f"removing an offering from its category deletes it (delete-orphan): {left} offerings left")
    print()
    print("relationship(back_populates=...) keeps both sides in sync in memory;")
    print("foreign keys and the association table keep them in sync in the database.")


def orm_query_optimization_demo() -> None:
    with demo_database() as (engine, Session):
        seed_shop(Session, users=20, orders_per_user=5)

        print("=== Indexes ===")
        for index in inspect(engine).get_indexes("t_order"):
            print(f"t_order {index['name']}: {index['column_names']}")
        if engine.dialect.name == "sqlite":
            with engine.connect() as conn:
                plan = conn.execute(text("EXPLAIN QUERY PLAN SELECT * FROM t_order WHERE user_id = 3 AND status = 'paid'"))
                print(f"plan: {[row[-1] for row in plan]}")
        print()

        print("=== Select only the columns you need ===")
        with session_scope(Session) as session:
            rows = session.execute(
                select(Order.order_no, Order.total_price).where(Order.status == "paid").order_by(Order.id).limit(3)
            ).all()
            print(f"tuples, no ORM objects: {[tuple(r) for r in rows]}")
        print()

        print("=== Aggregate in the database ===")
        with session_scope(Session) as session:
            stmt = (
                select(User.username, func.count(Order.id), func.sum(Order.total_price))
                .join(User.orders)
                .group_by(User.id, User.username)
                .order_by(func.sum(Order.total_price).desc())
                .limit(3)
            )
            for username, count, total in session.execute(stmt):
                print(f"{username:<7} {count} orders, {total}")
        print()

        print("=== Pagination ===")
        with session_scope(Session) as session:
            page2 = session.scalars(select(Order.id).order_by(Order.id).limit(10).offset(10)).all()
            print(f"offset page 2: ids {page2[0]}..{page2[-1]} (the database still walks the skipped rows)")
            after = page2[-1]
            keyset = session.scalars(select(Order.id).where(Order.id > after).order_by(Order.id).limit(10)).all()
            print(f"keyset page 3: ids {keyset[0]}..{keyset[-1]} (seeks straight to id > {after})")
        print()

        print("=== Batch writes ===")
        with session_scope(Session) as session:
            order_ids = session.scalars(select(Order.id).where(Order.status == "pending")).all()
            with StatementCounter(engine) as counter:
                session.execute(insert(OrderLog), [
                    {"order_id": oid, "old_status": "pending", "new_status": "paid", "action": "batch-pay"}
                    for oid in order_ids
                ])
            print(f"{len(order_ids)} log rows written with {counter.count} statement(s)")
    print()
    print("Index the columns you filter and join on, fetch only what you use,")
    print("and let the database aggregate.")


def orm_preload_demo() -> None:
    users = 5
    with demo_database() as (engine, Session):
        seed_shop(Session, users=users, orders_per_user=3)

        print(f"=== Loading {users} users and their orders ===")
        results = {strategy: load_users_with_orders(engine, Session, strategy)
                   for strategy in ("lazy", "selectin", "joined")}
        for strategy, (statements, seen) in results.items():
            print(f"{strategy:<9} {statements:>2} statement(s), {seen} orders")
        print()

        print("=== What happened ===")
        print(f"lazy:     1 query for users + 1 per user = {1 + users} (the N+1 problem)")
        print("selectin: 1 query for users + 1 'WHERE user_id IN (...)' for all orders")
        print("joined:   1 query with a LEFT OUTER JOIN; rows repeat per order, .unique() folds them")
        print()

        print("=== Choosing ===")
        print("selectinload  collections (one-to-many, many-to-many)")
        print("joinedload    single objects (many-to-one) or small collections")
        print("lazy          only when you rarely touch the relation")
