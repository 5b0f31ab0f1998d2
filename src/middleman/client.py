"""Caller side of the envelope protocol, as used by the website."""

import json
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from middleman.core.errors import TransportError
from middleman.models.requests import (
    AddUserRequest,
    CreateAccountRequest,
    EncryptedPayload,
)
from middleman.models.schema import GatewayReply
from middleman.shared import Logger

logger = Logger(__name__).get_logger()

DEFAULT_GATEWAY_URL = "http://localhost:8882"


class GatewayClient:
    """
    Seals requests for a middleman and opens its sealed replies.

    Logical failures (HTTP 400 with a sealed body) come back as a
    GatewayReply with success=False. Anything that cannot be opened raises.
    """

    def __init__(
        self,
        key: bytes,
        base_url: str = DEFAULT_GATEWAY_URL,
        api_prefix: str = "/api",
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ):
        self._key = key
        self._api_prefix = api_prefix
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def send(self, route: str, payload: dict[str, Any] | BaseModel) -> GatewayReply:
        if isinstance(payload, BaseModel):
            body = payload.model_dump_json().encode()
        else:
            body = json.dumps(payload).encode()

        sealed = EncryptedPayload.wrap(body, self._key)
        response = self._client.post(self._api_prefix + route, json=sealed.model_dump())
        logger.debug("Gateway replied %s for %s", response.status_code, route)

        if response.status_code not in (200, 400):
            raise TransportError(
                f"Gateway returned HTTP {response.status_code}: {response.text[:200]}"
            )

        plaintext = EncryptedPayload.parse(response.content).unwrap(self._key)
        try:
            return GatewayReply.model_validate_json(plaintext)
        except ValidationError as e:
            raise TransportError(f"Unexpected reply from gateway: {e}") from e

    def health(self) -> dict[str, Any]:
        response = self._client.get("/health")
        response.raise_for_status()
        return response.json()

    def create_account(self, request: CreateAccountRequest) -> GatewayReply:
        return self.send("/create-account", request)

    def add_user(self, request: AddUserRequest) -> GatewayReply:
        return self.send("/add-user", request)
