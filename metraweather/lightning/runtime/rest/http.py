"""HTTP client helper."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from ...constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from ...core.exceptions import NetworkError, ParseError


@dataclass(frozen=True)
class RawResponse:
    """Status, body and parsed ``Link`` relations of a response."""

    status: int
    reason: str
    text: str
    links: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _parse_links(response: aiohttp.ClientResponse) -> dict[str, str]:
    links: dict[str, str] = {}
    for rel, link in response.links.items():
        url = link.get("url")
        links[str(rel)] = str(url) if url is not None else ""
    return links


class HTTPClient:
    """Async HTTP client wrapper."""

    def __init__(self, base_url: str | None = None, timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def _url(self, url: str) -> str:
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def get(self, url: str, headers: dict[str, str] | None = None) -> RawResponse:
        """GET request returning the raw body.

        Non-2xx statuses are returned, not raised; transport failures raise.

        Raises:
            NetworkError: On connection errors and timeouts
            ParseError: If the body cannot be decoded with the response charset
        """
        return await self.request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> RawResponse:
        """POST a form body."""
        return await self.request("POST", url, data=data, headers=headers)

    async def request(self, method: str, url: str, **kwargs: Any) -> RawResponse:
        try:
            async with self.session.request(method, self._url(url), **kwargs) as response:
                try:
                    text = await response.text()
                except (UnicodeDecodeError, LookupError) as e:
                    raise ParseError(f"Body of {method} {url} could not be decoded: {e}") from e
                return RawResponse(
                    status=response.status,
                    reason=response.reason or "",
                    text=text,
                    links=_parse_links(response),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
