from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .. import schemas
from ..auth import AuthContext, require_admin
from ..cache import GroceryCache, get_cache
from ..database import get_db
from ..services import catalog

router = APIRouter(prefix="/groceries", tags=["groceries"])


@router.post("", status_code=201, response_model=schemas.GroceryResponse)
async def create_grocery(
    grocery: schemas.GroceryCreate,
    db: AsyncSession = Depends(get_db),
    cache: GroceryCache = Depends(get_cache),
    admin: AuthContext = Depends(require_admin),
):
    new_grocery = await catalog.create_grocery(db, grocery.model_dump())
    cache.invalidate()
    return {"message": "Grocery created successfully.", "grocery": new_grocery}


@router.patch("/{grocery_id}", response_model=schemas.GroceryResponse)
async def update_grocery(
    grocery_id: int,
    grocery: schemas.GroceryUpdate,
    db: AsyncSession = Depends(get_db),
    cache: GroceryCache = Depends(get_cache),
    admin: AuthContext = Depends(require_admin),
):
    updated = await catalog.update_grocery(db, grocery_id, grocery.model_dump(exclude_unset=True))
    cache.invalidate()
    return {"message": "Grocery updated successfully.", "grocery": updated}


@router.delete("/{grocery_id}", response_model=schemas.GroceryResponse)
async def delete_grocery(
    grocery_id: int,
    db: AsyncSession = Depends(get_db),
    cache: GroceryCache = Depends(get_cache),
    admin: AuthContext = Depends(require_admin),
):
    deleted = await catalog.delete_grocery(db, grocery_id)
    cache.invalidate()
    return {"message": "Grocery deleted successfully.", "grocery": deleted}


@router.get("/{grocery_id}", response_model=schemas.GroceryDetail)
async def get_grocery(grocery_id: int, db: AsyncSession = Depends(get_db)):
    return {"grocery": await catalog.get_grocery(db, grocery_id)}


@router.get("", response_model=schemas.GroceryList)
async def get_groceries(db: AsyncSession = Depends(get_db), cache: GroceryCache = Depends(get_cache)):
    cached = cache.get_list()
    if cached is not None:
        return {"groceries": cached}

    groceries = await catalog.list_groceries(db)
    payload = [schemas.GroceryOut.model_validate(g).model_dump(by_alias=True) for g in groceries]
    cache.set_list(payload)
    return {"groceries": payload}
