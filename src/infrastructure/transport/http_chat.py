"""HTTP chat transport - streams the backend's frame feed for one user message."""

import logging
from collections.abc import AsyncIterator

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.domain.errors import TransportError
from src.domain.ports.config import BackendConfig

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.RemoteProtocolError)


class HttpChatTransport:
    """POSTs `{"message": ...}` to the backend and yields raw response chunks.

    Connection failures are retried; HTTP error statuses are not.
    """

    def __init__(
        self,
        config: BackendConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with backend config; `client` is injectable for tests."""
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._headers = {"Accept": "text/event-stream", "Content-Type": "application/json"}
        if config.api_key:
            self._headers["Authorization"] = f"Bearer {config.api_key}"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout, connect=self._config.connect_timeout),
                headers=self._headers,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client (call during app shutdown)."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _open(self, message: str, body_extra: dict) -> httpx.Response:
        client = self._get_client()
        body = {**body_extra, "message": message}
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self._config.max_retries)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying chat backend (attempt %d/%d)",
                        attempt.retry_state.attempt_number,
                        self._config.max_retries,
                    )
                request = client.build_request("POST", self._config.url, json=body, headers=self._headers)
                response = await client.send(request, stream=True)

        if response.status_code >= 400:
            err_body = await response.aread()
            await response.aclose()
            err_text = err_body.decode("utf-8", errors="replace")
            logger.error("Chat backend error %s: %s", response.status_code, err_text[:500])
            raise TransportError(
                f"Chat backend returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def stream(self, message: str, **body_extra) -> AsyncIterator[bytes]:
        """Yield response body chunks as they arrive."""
        try:
            response = await self._open(message, body_extra)
        except httpx.HTTPError as e:
            raise TransportError(f"Chat backend unreachable: {e}") from e
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise TransportError(f"Chat backend stream interrupted: {e}") from e
        finally:
            await response.aclose()
