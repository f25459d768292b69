"""Retrying page fetcher with user-agent rotation"""

import asyncio
import logging
import random
from typing import Optional, Dict, List, Callable, Awaitable, Protocol

from tenacity import AsyncRetrying, RetryCallState, RetryError, retry_if_exception_type, stop_after_attempt

from config import (
    USER_AGENTS,
    SCRAPE_TIMEOUT_SECONDS,
    FETCH_MAX_ATTEMPTS,
    FETCH_RETRY_DELAY_SECONDS,
    FETCH_BACKOFF_MULTIPLIER,
    FETCH_JITTER_SECONDS,
)
from models import RetryPolicy, ReadinessWait
from .document import RenderedDocument
from .errors import FetchError, TransportError

logger = logging.getLogger(__name__)


def default_retry_policy(request_timeout: float = SCRAPE_TIMEOUT_SECONDS) -> RetryPolicy:
    """Retry policy built from environment configuration"""
    return RetryPolicy(
        max_attempts=FETCH_MAX_ATTEMPTS,
        base_delay=FETCH_RETRY_DELAY_SECONDS,
        request_timeout=request_timeout,
        backoff_multiplier=FETCH_BACKOFF_MULTIPLIER,
        jitter=(0.0, FETCH_JITTER_SECONDS) if FETCH_JITTER_SECONDS > 0 else None,
    )


class Transport(Protocol):
    """One retrieval attempt. Raises FetchTimeout or TransportError on failure."""

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def retrieve(
        self,
        url: str,
        headers: Dict[str, str],
        timeout: float,
        readiness: Optional[ReadinessWait] = None,
    ) -> str: ...


class IdentityPool:
    """Outbound identities (user agents) and the browser-like headers sent with them"""

    BASE_HEADERS = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
    }

    def __init__(
        self,
        user_agents: Optional[List[str]] = None,
        chooser: Callable[[List[str]], str] = random.choice,
    ):
        self.user_agents = list(user_agents if user_agents is not None else USER_AGENTS)
        if not self.user_agents:
            raise ValueError("IdentityPool needs at least one user agent")
        self._chooser = chooser

    def pick(self) -> str:
        return self._chooser(self.user_agents)

    def headers(self) -> Dict[str, str]:
        """Fresh header set with a newly chosen user agent"""
        return {"User-Agent": self.pick(), **self.BASE_HEADERS}


class RetryableFetcher:
    """
    Fetches one URL as a RenderedDocument, retrying transient failures.

    Each attempt goes through the transport with a new identity. Timeouts and
    transport errors (including anything unexpected the transport raises) are
    retried identically with linear backoff; once the
    policy's attempts are used up the URL is logged as failed and None is
    returned.

    Use as an async context manager so the transport's session (HTTP client
    or browser) is opened and always closed.
    """

    def __init__(
        self,
        transport: Transport,
        policy: Optional[RetryPolicy] = None,
        identities: Optional[IdentityPool] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.transport = transport
        self.policy = policy or default_retry_policy()
        self.identities = identities or IdentityPool()
        self._sleep = sleep

    async def __aenter__(self) -> "RetryableFetcher":
        await self.transport.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.transport.close()

    def _backoff(self, retry_state: RetryCallState) -> float:
        delay = self.policy.delay_for(retry_state.attempt_number)
        if self.policy.jitter:
            delay += random.uniform(*self.policy.jitter)
        return delay

    def _log_retry(self, url: str, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Error fetching {url}: {error}. "
            f"Retry {retry_state.attempt_number}/{self.policy.max_attempts} in {wait:.1f}s..."
        )

    async def _retrieve_once(self, url: str, readiness: Optional[ReadinessWait]) -> str:
        """One transport attempt; unexpected errors count as transport failures"""
        try:
            return await self.transport.retrieve(
                url,
                headers=self.identities.headers(),
                timeout=self.policy.request_timeout,
                readiness=readiness,
            )
        except FetchError:
            raise
        except Exception as e:
            raise TransportError(f"Unexpected error fetching {url}: {e!r}", url) from e

    async def fetch(self, url: str, readiness: Optional[ReadinessWait] = None) -> Optional[RenderedDocument]:
        """
        Fetch and parse a page.

        Args:
            url: Page to fetch
            readiness: Optional readiness wait for asynchronously rendered pages

        Returns:
            RenderedDocument, or None once every attempt has failed
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self._backoff,
            retry=retry_if_exception_type(FetchError),
            before_sleep=lambda state: self._log_retry(url, state),
            sleep=self._sleep,
        )

        html = None
        try:
            async for attempt in retrying:
                with attempt:
                    html = await self._retrieve_once(url, readiness)
        except RetryError as e:
            logger.error(
                f"Failed to fetch {url} after {self.policy.max_attempts} attempts: "
                f"{e.last_attempt.exception()}"
            )
            return None

        return RenderedDocument(url, html)
