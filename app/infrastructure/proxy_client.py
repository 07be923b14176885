"""Proxy Client — forwards agent HTTP requests through the external proxy backend.

Invariants:
    - Request goes to {backend}/proxy?target=<url> with the caller's method and headers
    - Body is sent only for methods other than GET/HEAD
    - Response is normalized to {status, content} (content = raw response text)
    - Transport failures raise ProxyRequestError; non-2xx statuses are data, not errors
"""

import logging

import httpx

from app.core.errors import ProxyRequestError

logger = logging.getLogger(__name__)

_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class HttpProxyClient:
    """httpx-based ProxyClient."""

    def __init__(
        self,
        backend_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.backend_url = backend_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def execute(
        self,
        url: str,
        method: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> dict:
        method = method.upper()
        content = body if body and method not in _BODYLESS_METHODS else None
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    f"{self.backend_url}/proxy",
                    params={"target": url},
                    headers=headers or {},
                    content=content,
                )
        except httpx.HTTPError as e:
            logger.warning(
                "Proxy request failed: %s %s via %s: %s",
                method, url, self.backend_url, e,
            )
            raise ProxyRequestError(
                f"could not reach {self.backend_url}: {e}",
            ) from e

        logger.info(
            "Proxy request %s %s -> %d", method, url, response.status_code,
        )
        return {"status": response.status_code, "content": response.text}
