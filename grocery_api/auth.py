from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings
from .errors import AuthError, ForbiddenError
from .models import Role

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, taken from a verified token."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, role: Role, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"id": user_id, "role": Role(role).value, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> AuthContext:
    """Verify a token and return the caller it was issued to.

    Raises AuthError for a bad signature, an expired token or unusable claims.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return AuthContext(user_id=int(payload["id"]), role=Role(payload["role"]))
    except (JWTError, KeyError, TypeError, ValueError) as exc:
        raise AuthError("Unauthorized.") from exc


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise ForbiddenError("Token not provided.")
    return decode_access_token(credentials.credentials, request.app.state.settings)


async def require_admin(current_user: AuthContext = Depends(get_current_user)) -> AuthContext:
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required.")
    return current_user
