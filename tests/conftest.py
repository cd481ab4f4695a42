"""
Shared fixtures: an in-memory Redis stand-in and a fake platform API served
through httpx.MockTransport.
"""
from typing import Any, Dict, List, Optional, Tuple

import httpx
import orjson
import pytest

from tawsila_admin.core import cache, http_client
from tawsila_admin.core.http_client import ApiClient

PLATFORM_URL = "https://platform.test/api"


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the session cache"""

    def __init__(self):
        self.store: Dict[str, str] = {}

    async def ping(self):
        return True

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def get(self, key):
        return self.store.get(key)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self):
        self.store.clear()


class FakePlatform:
    """Canned platform responses keyed by method and path, with a request log"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], httpx.Response] = {}
        self.requests: List[httpx.Request] = []
        self.unreachable: set = set()

    def add(self, method: str, path: str, status: int = 200, json: Any = None, content: Optional[bytes] = None):
        if content is None:
            content = orjson.dumps(json) if json is not None else b""
        self.routes[(method.upper(), "/api" + path)] = httpx.Response(status, content=content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, content=orjson.dumps({"message": "Not found"}))
        return httpx.Response(response.status_code, content=response.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        return orjson.loads(self.requests[index].content)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_redis(monkeypatch):
    redis = FakeRedis()
    monkeypatch.setattr(cache, "redis_client", redis)
    return redis


@pytest.fixture
def platform(monkeypatch):
    """Fake platform installed as the shared HTTP client"""
    fake = FakePlatform()
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))

    monkeypatch.setattr(http_client, "_HTTPX_ASYNC_CLIENT", http)
    monkeypatch.setattr(http_client.settings, "API_BASE_URL", PLATFORM_URL)
    return fake


@pytest.fixture
def api(platform, fake_redis):
    """ApiClient acting as a logged-in user against the fake platform"""
    return ApiClient(token="user-token", locale="en")
