import httpx
import pytest

from middleman.client import GatewayClient
from middleman.core.errors import AuthenticationError, TransportError
from middleman.models.requests import AddUserRequest, CreateAccountRequest

BACKEND_URL = "http://backend.test"


@pytest.fixture
def gateway_client(client, key):
    # TestClient is an httpx.Client, so it can stand in for the network
    return GatewayClient(key, http_client=client)


def test_create_account(gateway_client, respx_mock):
    route = respx_mock.post(f"{BACKEND_URL}/create-account").mock(
        return_value=httpx.Response(
            200,
            json={
                "success": True,
                "message": "Account created successfully",
                "data": {"api_key": "abc123", "quota_gb": 10},
            },
        )
    )

    reply = gateway_client.create_account(
        CreateAccountRequest(
            company_name="Acme",
            company_email="ops@acme.test",
            quota_gb=10,
            password="hunter2",
        )
    )

    assert reply.success is True
    assert reply.data == {"api_key": "abc123", "quota_gb": 10}
    assert b'"company_email":"ops@acme.test"' in route.calls.last.request.content


def test_add_user_rejected(gateway_client, respx_mock):
    respx_mock.post(f"{BACKEND_URL}/add-user").mock(
        return_value=httpx.Response(400, json={"success": False, "message": "Invalid API key"})
    )

    reply = gateway_client.add_user(
        AddUserRequest(
            company_name="Acme",
            api_key="wrong",
            username="bob",
            user_email="bob@acme.test",
            password="hunter2",
        )
    )

    assert reply.success is False
    assert reply.message == "Invalid API key"


def test_send_plain_dict(gateway_client, respx_mock):
    respx_mock.post(f"{BACKEND_URL}/health").mock(
        return_value=httpx.Response(200, json={"success": True, "message": "Server is healthy"})
    )

    reply = gateway_client.send("/health", {})

    assert reply.message == "Server is healthy"


def test_wrong_key_cannot_read_reply(client, respx_mock):
    gateway_client = GatewayClient(b"f" * 32, http_client=client)

    # The gateway cannot open the request and seals its refusal with its own key
    with pytest.raises(AuthenticationError):
        gateway_client.send("/health", {})

    assert not respx_mock.calls


def test_unknown_route_raises(gateway_client):
    with pytest.raises(TransportError):
        gateway_client.send("/not-a-route", {})


def test_health(gateway_client):
    assert gateway_client.health()["encryption_key"] == "01234567..."
