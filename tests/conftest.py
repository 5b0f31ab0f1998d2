import json

import pytest
from fastapi.testclient import TestClient

from middleman.core.envelope import open_envelope, seal
from middleman.main import create_app
from middleman.shared import GatewayConfig

TEST_KEY = "0123456789abcdef0123456789abcdef"
BACKEND_URL = "http://backend.test"


@pytest.fixture
def key() -> bytes:
    return TEST_KEY.encode()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(encryption_key=TEST_KEY, sftp_server_url=BACKEND_URL)


@pytest.fixture
def app(gateway_config):
    return create_app(gateway_config)


@pytest.fixture
def client(app):
    # Context manager runs the lifespan, which builds the gateway
    with TestClient(app) as client:
        yield client


@pytest.fixture
def seal_json(key):
    def _seal(payload) -> dict:
        return {"data": seal(json.dumps(payload).encode(), key)}

    return _seal


@pytest.fixture
def open_json(key):
    def _open(response) -> dict:
        return json.loads(open_envelope(response.json()["data"], key))

    return _open
