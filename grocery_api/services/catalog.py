from typing import Any, Dict, List

import structlog
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from .. import models
from ..errors import ConflictError, InternalError, NotFoundError

logger = structlog.get_logger(__name__)


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise InternalError(f"Internal server error while {action} grocery.") from exc


async def get_grocery(db: AsyncSession, grocery_id: int) -> models.Grocery:
    result = await db.execute(select(models.Grocery).where(models.Grocery.id == grocery_id))
    grocery = result.scalar_one_or_none()
    if not grocery:
        raise NotFoundError("Grocery not found.")
    return grocery


async def list_groceries(db: AsyncSession) -> List[models.Grocery]:
    result = await db.execute(select(models.Grocery))
    return list(result.scalars().all())


async def create_grocery(db: AsyncSession, fields: Dict[str, Any]) -> models.Grocery:
    # Drop an absent stock so the column default applies
    data = {key: value for key, value in fields.items() if value is not None}
    grocery = models.Grocery(**data)
    db.add(grocery)
    await _commit(db, "creating")
    await db.refresh(grocery)

    logger.info("grocery_created", grocery_id=grocery.id, stock=grocery.stock)
    return grocery


async def update_grocery(db: AsyncSession, grocery_id: int, fields: Dict[str, Any]) -> models.Grocery:
    """Apply only the provided fields to an existing grocery."""
    grocery = await get_grocery(db, grocery_id)
    for key, value in fields.items():
        setattr(grocery, key, value)
    await _commit(db, "updating")
    await db.refresh(grocery)

    logger.info("grocery_updated", grocery_id=grocery_id, fields=sorted(fields))
    return grocery


async def delete_grocery(db: AsyncSession, grocery_id: int) -> models.Grocery:
    """Delete a grocery that no order refers to.

    Orders keep their own price snapshot, but an order item must still point
    at a real grocery, so referenced groceries are refused with ConflictError.
    """
    grocery = await get_grocery(db, grocery_id)

    result = await db.execute(
        select(func.count(models.OrderItem.id)).where(models.OrderItem.grocery_id == grocery_id)
    )
    if result.scalar_one() > 0:
        raise ConflictError("Grocery is referenced by existing orders and cannot be deleted.")

    await db.delete(grocery)
    await _commit(db, "deleting")

    logger.info("grocery_deleted", grocery_id=grocery_id)
    return grocery
