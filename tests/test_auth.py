from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from grocery_api import auth
from grocery_api.errors import AuthError, ConflictError, NotFoundError
from grocery_api.models import Role
from grocery_api.services import users


class TestTokens:
    def test_round_trip_claims(self, settings):
        token = auth.create_access_token(7, Role.ADMIN, settings)

        context = auth.decode_access_token(token, settings)

        assert context == auth.AuthContext(user_id=7, role=Role.ADMIN)
        assert context.is_admin

    def test_wrong_secret(self, settings):
        token = auth.create_access_token(7, Role.CUSTOMER, settings)
        other = settings.model_copy(update={"jwt_secret": "another-secret"})

        with pytest.raises(AuthError):
            auth.decode_access_token(token, other)

    def test_expired(self, settings):
        expired = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = jwt.encode(
            {"id": 7, "role": "CUSTOMER", "exp": expired},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )

        with pytest.raises(AuthError):
            auth.decode_access_token(token, settings)

    def test_missing_claims(self, settings):
        token = jwt.encode({"sub": "7"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(AuthError):
            auth.decode_access_token(token, settings)

    def test_password_hash(self):
        hashed = auth.get_password_hash("secret")

        assert hashed != "secret"
        assert auth.verify_password("secret", hashed)
        assert not auth.verify_password("wrong", hashed)


class TestUsers:
    async def test_register_hashes_password(self, db):
        user = await users.register(db, "alice@example.com", "secret", "Alice")

        assert user.role == Role.CUSTOMER
        assert user.password != "secret"

    async def test_register_duplicate_email(self, db):
        await users.register(db, "alice@example.com", "secret", "Alice")

        with pytest.raises(ConflictError):
            await users.register(db, "alice@example.com", "other", "Alice Two")

    async def test_login_returns_token(self, db, settings):
        user = await users.register(db, "alice@example.com", "secret", "Alice")

        token = await users.login(db, "alice@example.com", "secret", settings)

        assert auth.decode_access_token(token, settings) == auth.AuthContext(user.id, Role.CUSTOMER)

    async def test_login_unknown_email(self, db, settings):
        with pytest.raises(NotFoundError):
            await users.login(db, "nobody@example.com", "secret", settings)

    async def test_login_wrong_password(self, db, settings):
        await users.register(db, "alice@example.com", "secret", "Alice")

        with pytest.raises(AuthError):
            await users.login(db, "alice@example.com", "wrong", settings)
