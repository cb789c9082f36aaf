import enum
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # hashed
    name = Column(String, nullable=False)
    role = Column(Enum(Role, native_enum=False), default=Role.CUSTOMER, nullable=False)

    orders = relationship("Order", back_populates="user")


class Grocery(Base):
    __tablename__ = "groceries"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_groceries_stock_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, default=0, server_default="0", nullable=False)


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    total_price = Column(Float, nullable=False)
    order_status = Column(
        Enum(OrderStatus, native_enum=False), default=OrderStatus.PENDING, nullable=False
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    grocery_id = Column(Integer, ForeignKey("groceries.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    # Unit price when the order was placed, independent of later price edits
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
