import asyncio
from collections.abc import Awaitable, Callable

from middleman.core.backend import BackendClient
from middleman.core.errors import (
    BackendError,
    ClientDisconnectedError,
    CryptoError,
    TransportError,
)
from middleman.models.requests import EncryptedPayload
from middleman.models.schema import BackendReply, GatewayReply
from middleman.shared import GatewayConfig, Logger

logger = Logger(__name__).get_logger()

DisconnectCheck = Callable[[], Awaitable[bool]]


class Gateway:
    """
    Unwraps an encrypted request, relays it to the backend and builds the reply.

    Holds no per-request state: the config is frozen and the backend client
    only wraps a connection pool, so one instance serves all requests
    concurrently.
    """

    def __init__(
        self,
        gateway_config: GatewayConfig,
        backend: BackendClient,
        api_prefix: str = "/api",
        disconnect_poll_interval: float = 0.1,
    ):
        self.config = gateway_config
        self.backend = backend
        self.api_prefix = api_prefix
        self.disconnect_poll_interval = disconnect_poll_interval

    def backend_route(self, path: str) -> str:
        return path.removeprefix(self.api_prefix)

    def unwrap(self, body: bytes) -> bytes:
        payload = EncryptedPayload.parse(body)
        return payload.unwrap(self.config.key)

    def seal_reply(self, reply: GatewayReply) -> EncryptedPayload:
        """Raises CryptoError when the reply cannot be sealed (bad key, no randomness)."""
        return EncryptedPayload.wrap(reply.model_dump_json().encode(), self.config.key)

    async def handle(
        self,
        path: str,
        body: bytes,
        is_disconnected: DisconnectCheck,
    ) -> GatewayReply:
        """
        Runs one request through unwrap, decrypt, forward and parse.

        Failures become a GatewayReply with a terse message; the detail is only
        logged. ClientDisconnectedError propagates, there is nobody to reply to.
        """
        try:
            plaintext = self.unwrap(body)
        except TransportError as e:
            logger.warning("Rejected request for %s: %s", path, e)
            return GatewayReply(success=False, message=e.public_message)
        except CryptoError as e:
            logger.warning("Decryption failed for %s: %s: %s", path, type(e).__name__, e)
            return GatewayReply(success=False, message=e.public_message)

        logger.info("Received encrypted request for: %s", path)

        try:
            backend_reply = await self._forward(path, plaintext, is_disconnected)
        except BackendError as e:
            logger.error("Backend call for %s failed: %s: %s", path, type(e).__name__, e)
            return GatewayReply(success=False, message=e.public_message)

        logger.info("Request processed successfully: %s", path)
        return GatewayReply(
            success=backend_reply.success,
            message=backend_reply.message,
            data=backend_reply.data,
        )

    async def _forward(
        self,
        path: str,
        plaintext: bytes,
        is_disconnected: DisconnectCheck,
    ) -> BackendReply:
        forward = asyncio.ensure_future(
            self.backend.forward(self.backend_route(path), plaintext)
        )
        try:
            while True:
                done, _ = await asyncio.wait(
                    {forward}, timeout=self.disconnect_poll_interval
                )
                if done:
                    return forward.result()

                if await is_disconnected():
                    raise ClientDisconnectedError(
                        f"Client disconnected while forwarding {path}"
                    )
        finally:
            if not forward.done():
                forward.cancel()
