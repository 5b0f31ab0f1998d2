import asyncio

import httpx

from middleman.core.errors import BackendUnavailableError
from middleman.models.schema import BackendReply
from middleman.shared import Logger

logger = Logger(__name__).get_logger()


class BackendClient:
    """Posts decrypted request bodies to the storage management service."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: float):
        """
        Args:
            http_client: Shared httpx AsyncClient, owned by the app lifespan
            base_url: Backend base URL, without a trailing slash
            timeout: Upper bound in seconds for the whole exchange
        """
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def url_for(self, route: str) -> str:
        return f"{self._base_url}{route}"

    async def forward(self, route: str, body: bytes) -> BackendReply:
        """
        Forwards `body` verbatim and parses the reply. No retries.

        Raises:
            BackendUnavailableError: backend unreachable, timed out or the
                transport failed mid-exchange
            BackendReplyError: reply is not the expected JSON object
        """
        url = self.url_for(route)
        logger.debug("Forwarding %s bytes to %s", len(body), url)

        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.post(
                    url,
                    content=body,
                    headers={"Content-Type": "application/json"},
                    timeout=self._timeout,
                )
        except TimeoutError as e:
            raise BackendUnavailableError(
                f"No reply from {url} within {self._timeout}s"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise BackendUnavailableError(
                f"Failed to forward request to {url}: {type(e).__name__}: {e}"
            ) from e

        logger.debug("Backend replied %s for %s", response.status_code, url)
        return BackendReply.from_body(response.content)
