import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from .. import auth, models
from ..config import Settings
from ..errors import AuthError, ConflictError, NotFoundError

logger = structlog.get_logger(__name__)


async def register(db: AsyncSession, email: str, password: str, name: str) -> models.User:
    result = await db.execute(select(models.User).where(models.User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("User already exists.")

    new_user = models.User(
        email=email,
        password=auth.get_password_hash(password),
        name=name,
        role=models.Role.CUSTOMER,
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ConflictError("User already exists.") from exc
    await db.refresh(new_user)

    logger.info("user_registered", user_id=new_user.id)
    return new_user


async def login(db: AsyncSession, email: str, password: str, settings: Settings) -> str:
    """Check the credentials and return a signed access token."""
    result = await db.execute(select(models.User).where(models.User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found.")
    if not auth.verify_password(password, user.password):
        raise AuthError("Invalid credentials.")

    logger.info("user_logged_in", user_id=user.id)
    return auth.create_access_token(user.id, user.role, settings)
