from unittest.mock import Mock

import pytest
import redis.exceptions

from shortlinks.db import repository
from shortlinks.services.cache import RedirectCache
from shortlinks.services.shortener import URLService


@pytest.fixture
def redis_client():
    return Mock()


@pytest.fixture
def cache(redis_client):
    return RedirectCache(redis_client, ttl=60)


def test_cache_hit(cache, redis_client):
    redis_client.get.return_value = "https://example.com"

    assert cache.get("abcd") == "https://example.com"
    redis_client.get.assert_called_once_with("url:abcd")


def test_cache_hit_bytes_are_decoded(cache, redis_client):
    redis_client.get.return_value = b"https://example.com"
    assert cache.get("abcd") == "https://example.com"


def test_cache_miss(cache, redis_client):
    redis_client.get.return_value = None
    assert cache.get("abcd") is None


def test_cache_put_sets_ttl(cache, redis_client):
    cache.put("abcd", "https://example.com")
    redis_client.setex.assert_called_once_with("url:abcd", 60, "https://example.com")


def test_cache_fails_open(cache, redis_client):
    redis_client.get.side_effect = redis.exceptions.ConnectionError("down")
    redis_client.setex.side_effect = redis.exceptions.ConnectionError("down")

    assert cache.get("abcd") is None
    cache.put("abcd", "https://example.com")


def test_resolve_prefers_cache(db_session, cache, redis_client):
    redis_client.get.return_value = "https://cached.example.com"
    assert URLService.resolve(db_session, "abcd", cache) == "https://cached.example.com"


def test_resolve_fills_cache_on_miss(db_session, cache, redis_client):
    redis_client.get.return_value = None
    shortlink = repository.lookup_or_create(db_session, "https://example.com")

    assert URLService.resolve(db_session, shortlink, cache) == "https://example.com"
    redis_client.setex.assert_called_once_with(f"url:{shortlink}", 60, "https://example.com")


def test_resolve_unknown_is_not_cached(db_session, cache, redis_client):
    redis_client.get.return_value = None

    assert URLService.resolve(db_session, "zzzz", cache) is None
    redis_client.setex.assert_not_called()


def test_redirect_through_cache(client, redis_client):
    """The cache fixture overrides the app's get_cache dependency via conftest."""
    redis_client.get.return_value = "https://cached.example.com"

    response = client.get("/abcd", follow_redirects=False)
    assert response.status_code == 301
    assert response.headers["location"] == "https://cached.example.com"


def test_shorten_populates_cache(client, redis_client):
    response = client.post("/", content="shorten=https://example.com")
    assert response.status_code == 200
    redis_client.setex.assert_called_once_with(f"url:{response.text}", 60, "https://example.com")
