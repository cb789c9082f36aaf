from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .. import schemas
from ..auth import AuthContext, get_current_user, require_admin
from ..cache import GroceryCache, get_cache
from ..database import get_db
from ..services import orders
from ..worker import OrderNotifier, get_notifier

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=201, response_model=schemas.OrderResponse)
async def create_order(
    body: schemas.OrderCreate,
    db: AsyncSession = Depends(get_db),
    cache: GroceryCache = Depends(get_cache),
    notifier: OrderNotifier = Depends(get_notifier),
    current_user: AuthContext = Depends(get_current_user),
):
    order = await orders.create_order(db, current_user.user_id, body.order_items)
    cache.invalidate()
    notifier.order_status_changed(order)
    return {"message": "Order created successfully.", "order": order}


@router.patch("/cancel/{order_id}", response_model=schemas.OrderResponse)
async def cancel_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    cache: GroceryCache = Depends(get_cache),
    notifier: OrderNotifier = Depends(get_notifier),
    current_user: AuthContext = Depends(get_current_user),
):
    order = await orders.cancel_order(db, current_user.user_id, order_id)
    cache.invalidate()
    notifier.order_status_changed(order)
    return {"message": "Order canceled successfully.", "order": order}


@router.patch("/deliver/{order_id}", response_model=schemas.OrderResponse)
async def deliver_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
    admin: AuthContext = Depends(require_admin),
):
    order = await orders.deliver_order(db, order_id)
    notifier.order_status_changed(order)
    return {"message": "Order delivered successfully.", "order": order}
