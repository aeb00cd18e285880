"""
Base client for external data source clients.

Provides: request pacing through a shared rate gate, a lazily created
aiohttp session, structured logging, and typed failures.  Requests are
never retried and never cached.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp
from pydantic import BaseModel

from pubmed_scout.config import Settings
from pubmed_scout.constants import (
    DEFAULT_EMAIL,
    DEFAULT_TIMEOUT,
    DEFAULT_TOOL,
    RATE_LIMIT_DELAY_MS,
)

logger = logging.getLogger("pubmed_scout.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class RateLimitConfig(BaseModel):
    """Minimum spacing between outbound requests."""

    min_interval_seconds: float = RATE_LIMIT_DELAY_MS / 1000


class ClientConfig(BaseModel):
    """Top-level config aggregating rate limit, timeout and NCBI identity."""

    rate_limit: RateLimitConfig = RateLimitConfig()
    timeout_seconds: float = DEFAULT_TIMEOUT
    tool: str = DEFAULT_TOOL
    email: str = DEFAULT_EMAIL

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        return cls(
            rate_limit=RateLimitConfig(
                min_interval_seconds=settings.rate_limit_delay_ms / 1000
            ),
            timeout_seconds=settings.timeout_seconds,
            tool=settings.ncbi_tool,
            email=settings.ncbi_email,
        )


# ---------------------------------------------------------------------------
# Rate gate (fixed minimum interval)
# ---------------------------------------------------------------------------


class RateGate:
    """
    Serializes outbound calls through a single cooldown timer.

    Callers await `acquire()` before every request.  It sleeps until
    `min_interval` has passed since the previous caller was let through,
    then stamps the current instant.  The check-sleep-stamp sequence is
    held under a lock, so concurrent callers queue up instead of sharing
    one cooldown window.

    One gate may be shared by several clients; pass it in explicitly.
    `clock` and `sleep` are injectable so tests never wait on the wall clock.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        config = config or RateLimitConfig()
        self.min_interval = config.min_interval_seconds
        self.last_call: float | None = None
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            if self.last_call is not None:
                wait = self.min_interval - (self._clock() - self.last_call)
                if wait > 0:
                    logger.debug("Rate gate: sleeping %.3fs", wait)
                    await self._sleep(wait)
            self.last_call = self._clock()


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "pubmed"
    method: str  # e.g. "search", "fetch_details"
    params: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DataSourceError(Exception):
    """Base exception for data source failures."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class TransportError(DataSourceError):
    """Raised for a non-success HTTP status, connection error or timeout."""

    pass


class MalformedResponseError(DataSourceError):
    """Raised when a response is missing the fields a caller expects."""

    pass


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for REST data source clients.

    Subclasses implement `_source_name` and their own typed methods that
    call `_rest_get()`.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        rate_gate: RateGate | None = None,
    ):
        self.config = config or ClientConfig()
        self.rate_gate = rate_gate or RateGate(self.config.rate_limit)
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'pubmed'."""
        ...

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request with rate gating ---------------------------------------

    async def _rest_get(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> Any:
        """
        Make a single rate-gated GET request and return the decoded JSON body.

        Parameters
        ----------
        url : str
            Full URL.
        params : dict
            Query string parameters.
        context : RequestContext, optional
            Logging context.

        Raises
        ------
        TransportError
            On HTTP status >= 400, connection failure or timeout.
        MalformedResponseError
            When the body is not valid JSON or not valid UTF-8.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")

        await self.rate_gate.acquire()
        session = await self._get_session()
        start = time.monotonic()

        logger.info("Request [%s.%s] url=%s", ctx.source, ctx.method, url)

        try:
            resp = await session.get(url, params=params)

            if resp.status >= 400:
                body = await resp.text(errors="replace")
                logger.warning(
                    "HTTP %d from %s.%s: %s",
                    resp.status,
                    ctx.source,
                    ctx.method,
                    body[:200],
                )
                raise TransportError(
                    ctx.source,
                    f"HTTP {resp.status}: {body[:500]}",
                    status_code=resp.status,
                )

            data = await resp.json(content_type=None)

        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start
            raise TransportError(ctx.source, f"Timeout after {elapsed:.1f}s")

        except aiohttp.ClientError as e:
            raise TransportError(ctx.source, f"Connection error: {e}") from e

        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponseError(ctx.source, f"Invalid JSON: {e}") from e

        logger.info(
            "Success [%s.%s] elapsed=%.2fs",
            ctx.source,
            ctx.method,
            time.monotonic() - start,
        )
        return data
