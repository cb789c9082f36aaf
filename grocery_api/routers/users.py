from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .. import schemas
from ..database import get_db
from ..services import users

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", status_code=201, response_model=schemas.RegisterResponse)
async def register(user: schemas.UserRegister, db: AsyncSession = Depends(get_db)):
    new_user = await users.register(db, user.email, user.password, user.name)
    return {"message": "User registered successfully.", "user": new_user}


@router.post("/login", response_model=schemas.LoginResponse)
async def login(credentials: schemas.UserLogin, request: Request, db: AsyncSession = Depends(get_db)):
    token = await users.login(db, credentials.email, credentials.password, request.app.state.settings)
    return {"message": "User logged in successfully.", "token": token}
