import pytest
from fastapi.testclient import TestClient

from grocery_api import auth
from grocery_api.config import Settings
from grocery_api.database import Database
from grocery_api.main import create_app
from grocery_api.models import Role


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'grocery.db'}",
        jwt_secret="test-secret",
        redis_url=None,
        broker_url=None,
        environment="test",
    )


@pytest.fixture()
async def database(settings):
    database = Database(settings.database_url)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture()
async def db(database):
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture()
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def admin_headers(settings):
    token = auth.create_access_token(1000, Role.ADMIN, settings)
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client, email="alice@example.com", password="secret", name="Alice"):
    """Helper: register a customer through the API and return (user, auth headers)."""
    response = client.post(
        "/api/v1/users/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201
    user = response.json()["user"]

    response = client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return user, {"Authorization": f"Bearer {response.json()['token']}"}
