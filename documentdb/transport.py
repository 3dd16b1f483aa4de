"""
HTTP transport collaborator.

Pure transport: no retry, no auth. The executor talks to any object with an
async ``send(method, url, headers, body)``; ``AiohttpTransport`` is the
default implementation.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Protocol

import aiohttp

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Connection-level failure: refused, reset, timeout, DNS."""


@dataclass
class HttpResponse:
    """Raw response as seen by the executor."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Sends one HTTP exchange."""

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = None
    ) -> HttpResponse:
        ...

    async def close(self) -> None:
        ...


class AiohttpTransport:
    """aiohttp-backed transport with a lazily created session."""

    def __init__(
        self,
        timeout: float = 60.0,
        connection_limit: int = 100,
        verify_ssl: bool = True
    ) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.connection_limit = connection_limit
        self.verify_ssl = verify_ssl
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=self.connection_limit, ssl=None if self.verify_ssl else False)
            self._session = aiohttp.ClientSession(timeout=self.timeout, connector=connector)
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = None
    ) -> HttpResponse:
        try:
            async with self.session.request(method, url, headers=dict(headers), data=body) as response:
                data = await response.read()
                return HttpResponse(
                    status=response.status,
                    headers={k: v for k, v in response.headers.items()},
                    body=data,
                )
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request timed out: {method} {url}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
