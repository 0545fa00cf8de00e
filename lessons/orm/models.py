"""ORM models shared by the SQLAlchemy demos.

Invariants:
    - Table names carry the ``t_`` prefix used by the demo schema
    - Money columns are Numeric(10, 2), never float
    - Every order belongs to a user (user_id FK, indexed)
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String, Table, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())


user_roles = Table(
    "t_user_role",
    Base.metadata,
    Column("user_id", ForeignKey("t_sys_user.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("t_role.id", ondelete="CASCADE"), primary_key=True),
)


class User(TimestampMixin, Base):
    __tablename__ = "t_sys_user"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True)
    email: Mapped[str | None] = mapped_column(String(100), unique=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20), default="active", server_default="active")
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime)

    orders: Mapped[list[Order]] = relationship(back_populates="user", cascade="all, delete-orphan")
    roles: Mapped[list[Role]] = relationship(secondary=user_roles, back_populates="users")

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r}, status={self.status!r})"


class Role(Base):
    __tablename__ = "t_role"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(30), unique=True)

    users: Mapped[list[User]] = relationship(secondary=user_roles, back_populates="roles")


class OfferingCategory(TimestampMixin, Base):
    __tablename__ = "t_offering_category"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column("category_name", String(100))
    sequence: Mapped[int] = mapped_column(default=0)

    offerings: Mapped[list[Offering]] = relationship(
        back_populates="category", cascade="all, delete-orphan", order_by="Offering.id",
    )


class Offering(TimestampMixin, Base):
    __tablename__ = "t_offering"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("t_offering_category.id"), index=True)
    name: Mapped[str] = mapped_column("offering_name", String(100))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    category: Mapped[OfferingCategory] = relationship(back_populates="offerings")


class Order(TimestampMixin, Base):
    __tablename__ = "t_order"
    __table_args__ = (Index("ix_t_order_user_status", "user_id", "status"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    order_no: Mapped[str] = mapped_column(String(50), unique=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("t_sys_user.id"), index=True)
    offering_id: Mapped[int | None] = mapped_column(ForeignKey("t_offering.id"), index=True)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    status: Mapped[str] = mapped_column(String(20), default="pending", server_default="pending")

    user: Mapped[User] = relationship(back_populates="orders")
    offering: Mapped[Offering | None] = relationship()
    logs: Mapped[list[OrderLog]] = relationship(back_populates="order", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"Order(order_no={self.order_no!r}, total={self.total_price}, status={self.status!r})"


class OrderLog(Base):
    __tablename__ = "t_order_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("t_order.id"), index=True)
    old_status: Mapped[str | None] = mapped_column(String(20))
    new_status: Mapped[str] = mapped_column(String(20))
    action: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    order: Mapped[Order] = relationship(back_populates="logs")
