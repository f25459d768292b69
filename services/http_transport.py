"""Plain HTTP retrieval for statically rendered pages"""

import logging
from typing import Optional, Dict

import httpx

from models import ReadinessWait
from .errors import FetchTimeout, TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    """Single-attempt page retrieval over httpx"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client
        self._owns_client = client is None

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def retrieve(
        self,
        url: str,
        headers: Dict[str, str],
        timeout: float,
        readiness: Optional[ReadinessWait] = None,
    ) -> str:
        """Fetch a page and return its HTML, raising FetchTimeout/TransportError on failure"""
        if self._client is None:
            raise RuntimeError("HttpTransport.retrieve called before open()")
        if readiness is not None:
            logger.warning(f"Readiness wait not supported over plain HTTP; fetching {url} without it")

        try:
            response = await self._client.get(
                url,
                headers=headers,
                timeout=httpx.Timeout(timeout),
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            raise FetchTimeout(f"Timeout fetching {url}: {e}", url) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Transport error for {url}: {e}", url) from e

        if response.status_code >= 400:
            raise TransportError(f"HTTP {response.status_code} for {url}", url, response.status_code)

        return response.text
