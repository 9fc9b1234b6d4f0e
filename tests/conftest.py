import httpx
import pytest
from fastapi.testclient import TestClient

from presentation.app import create_app
from tests.helpers import MockUpstream, make_settings


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def upstream() -> MockUpstream:
    return MockUpstream()


@pytest.fixture
def client(upstream: MockUpstream):
    app = create_app(make_settings(), transport=httpx.MockTransport(upstream.handler))
    with TestClient(app) as test_client:
        yield test_client
