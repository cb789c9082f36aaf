import fakeredis
import pytest
from fastapi.testclient import TestClient

from grocery_api.cache import GROCERIES_LIST_KEY, GroceryCache
from grocery_api.main import create_app


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


class TestGroceryCache:
    def test_disabled_without_url(self):
        cache = GroceryCache.from_url(None)

        assert not cache.enabled
        cache.set_list([{"id": 1}])
        assert cache.get_list() is None

    def test_set_get_invalidate(self, redis_client):
        cache = GroceryCache(redis_client, ttl=60)

        cache.set_list([{"id": 1, "name": "Apple"}])
        assert cache.get_list() == [{"id": 1, "name": "Apple"}]
        assert 0 < redis_client.ttl(GROCERIES_LIST_KEY) <= 60

        cache.invalidate()
        assert cache.get_list() is None

    def test_corrupt_value_is_a_miss(self, redis_client):
        cache = GroceryCache(redis_client)
        redis_client.set(GROCERIES_LIST_KEY, "{not json")

        assert cache.get_list() is None

        cache.set_list([{"id": 1}])
        assert cache.get_list() == [{"id": 1}]

    def test_outage_is_a_miss(self):
        server = fakeredis.FakeServer()
        server.connected = False
        cache = GroceryCache(fakeredis.FakeRedis(server=server, decode_responses=True))

        cache.set_list([{"id": 1}])
        cache.invalidate()
        assert cache.get_list() is None


class TestGroceryListCaching:
    def test_list_served_from_cache_and_invalidated(self, settings, redis_client, admin_headers):
        app = create_app(settings)
        app.state.cache = GroceryCache(redis_client)

        with TestClient(app) as client:
            assert client.get("/api/v1/groceries").json() == {"groceries": []}
            assert redis_client.get(GROCERIES_LIST_KEY) == "[]"

            response = client.post(
                "/api/v1/groceries",
                json={"name": "Apple", "description": "Fresh produce", "price": 10, "stock": 5},
                headers=admin_headers,
            )
            assert response.status_code == 201
            assert redis_client.get(GROCERIES_LIST_KEY) is None

            groceries = client.get("/api/v1/groceries").json()["groceries"]
            assert [g["name"] for g in groceries] == ["Apple"]
            assert redis_client.get(GROCERIES_LIST_KEY) is not None

    def test_corrupt_cached_list_falls_back_to_database(self, settings, redis_client):
        app = create_app(settings)
        app.state.cache = GroceryCache(redis_client)
        redis_client.set(GROCERIES_LIST_KEY, "{not json")

        with TestClient(app) as client:
            response = client.get("/api/v1/groceries")

        assert response.status_code == 200
        assert response.json() == {"groceries": []}
        assert redis_client.get(GROCERIES_LIST_KEY) == "[]"
