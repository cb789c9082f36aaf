"""Order placement, cancellation and delivery.

Every flow that touches stock runs in a single database transaction: the
order rows and all stock movements commit together or not at all.
"""

from typing import Dict, List, Sequence

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from .. import models
from ..errors import (
    ApiError,
    ForbiddenError,
    InsufficientStockError,
    InternalError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..schemas import OrderItemIn

logger = structlog.get_logger(__name__)


async def get_order(db: AsyncSession, order_id: int) -> models.Order:
    stmt = (
        select(models.Order)
        .where(models.Order.id == order_id)
        .options(selectinload(models.Order.items), selectinload(models.Order.user))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found.")
    return order


async def _fetch_groceries(db: AsyncSession, grocery_ids: List[int]) -> Dict[int, models.Grocery]:
    stmt = (
        select(models.Grocery)
        .where(models.Grocery.id.in_(grocery_ids))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return {grocery.id: grocery for grocery in result.scalars().all()}


async def _mark_status(db: AsyncSession, order_id: int, status: models.OrderStatus, action: str) -> None:
    # Only a PENDING order may move; a concurrent transition leaves no row to update
    stmt = (
        update(models.Order)
        .where(models.Order.id == order_id)
        .where(models.Order.order_status == models.OrderStatus.PENDING)
        .values(order_status=status)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        raise InvalidStateError(f"Only pending orders can be {action}.")


async def create_order(db: AsyncSession, user_id: int, order_items: Sequence[OrderItemIn]) -> models.Order:
    if not order_items:
        raise ValidationError("At least one order item is required.")
    grocery_ids = [item.grocery_id for item in order_items]
    if len(set(grocery_ids)) != len(grocery_ids):
        raise ValidationError("groceryId should be unique.")

    # 1. Groceries & stock check
    groceries = await _fetch_groceries(db, grocery_ids)
    if len(groceries) != len(grocery_ids):
        raise NotFoundError("Some groceries not found.")

    names = {grocery.id: grocery.name for grocery in groceries.values()}
    total_price = 0.0
    for item in order_items:
        grocery = groceries[item.grocery_id]
        if grocery.stock < item.quantity:
            raise InsufficientStockError(f"Insufficient stock for {grocery.name}.")
        total_price += grocery.price * item.quantity

    # 2. Transaction: order, items, stock decrement
    try:
        new_order = models.Order(
            user_id=user_id,
            total_price=total_price,
            order_status=models.OrderStatus.PENDING,
            items=[
                models.OrderItem(
                    grocery_id=item.grocery_id,
                    quantity=item.quantity,
                    price=groceries[item.grocery_id].price,
                )
                for item in order_items
            ],
        )
        db.add(new_order)
        await db.flush()

        for item in order_items:
            # Conditional decrement: stock read above may be stale by now
            stmt = (
                update(models.Grocery)
                .where(models.Grocery.id == item.grocery_id)
                .where(models.Grocery.stock >= item.quantity)
                .values(stock=models.Grocery.stock - item.quantity)
                .execution_options(synchronize_session=False)
            )
            update_result = await db.execute(stmt)
            if update_result.rowcount == 0:
                raise InsufficientStockError(f"Insufficient stock for {names[item.grocery_id]}.")

        await db.commit()
    except ApiError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise InternalError("Internal server error while creating order.") from exc

    logger.info(
        "order_created",
        order_id=new_order.id,
        user_id=user_id,
        total_price=total_price,
        items=len(order_items),
    )
    return await get_order(db, new_order.id)


async def cancel_order(db: AsyncSession, user_id: int, order_id: int) -> models.Order:
    order = await get_order(db, order_id)
    # State first: a settled order can never be cancelled, whoever asks
    if order.order_status != models.OrderStatus.PENDING:
        raise InvalidStateError("Only pending orders can be canceled.")
    if order.user_id != user_id:
        raise ForbiddenError("You can only cancel your own orders.")

    try:
        for item in order.items:
            stmt = (
                update(models.Grocery)
                .where(models.Grocery.id == item.grocery_id)
                .values(stock=models.Grocery.stock + item.quantity)
                .execution_options(synchronize_session=False)
            )
            await db.execute(stmt)

        await _mark_status(db, order_id, models.OrderStatus.CANCELLED, "canceled")
        await db.commit()
    except ApiError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise InternalError("Internal server error while canceling order.") from exc

    logger.info("order_cancelled", order_id=order_id, user_id=user_id)
    return await get_order(db, order_id)


async def deliver_order(db: AsyncSession, order_id: int) -> models.Order:
    order = await get_order(db, order_id)
    if order.order_status != models.OrderStatus.PENDING:
        raise InvalidStateError("Only pending orders can be delivered.")

    try:
        await _mark_status(db, order_id, models.OrderStatus.DELIVERED, "delivered")
        await db.commit()
    except ApiError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise InternalError("Internal server error while delivering order.") from exc

    logger.info("order_delivered", order_id=order_id)
    return await get_order(db, order_id)
