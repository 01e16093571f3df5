import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.models.store import InMemoryKeyValueStore
from app.services.github import GitHubClient
from app.services.pin_client import PinServiceClient
from app.services.pinned import PinStore


class BrokenKeyValueStore:
    def get(self, key):
        raise RuntimeError("kv unavailable")

    def put(self, key, value):
        raise RuntimeError("kv unavailable")


class CountingKeyValueStore(InMemoryKeyValueStore):
    def __init__(self):
        super().__init__()
        self.reads = 0
        self.writes = 0

    def get(self, key):
        self.reads += 1
        return super().get(key)

    def put(self, key, value):
        self.writes += 1
        super().put(key, value)


def _unexpected(request):
    raise AssertionError(f"unexpected upstream call: {request.method} {request.url}")


@pytest.fixture
def kv():
    return CountingKeyValueStore()


@pytest.fixture
def broken_kv():
    return BrokenKeyValueStore()


@pytest.fixture
def pin_store(kv):
    return PinStore(kv)


@pytest.fixture
def make_client(kv):
    """Build a TestClient; upstream handlers default to failing the test."""

    def _make(
        kv_store=None, pin_handler=_unexpected, github_handler=_unexpected, cookies=None, raise_server_exceptions=True
    ):
        app = create_app(
            settings=Settings(),
            kv_store=kv_store or kv,
            pin_client=PinServiceClient("http://pins.test", transport=httpx.MockTransport(pin_handler)),
            github_client=GitHubClient("https://github.test", transport=httpx.MockTransport(github_handler)),
        )
        headers = {}
        if cookies:
            headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())
        return TestClient(app, headers=headers, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
