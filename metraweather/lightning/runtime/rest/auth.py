"""Credential resolution for strike requests.

Every strike request carries an ``Authorization`` header built from a
resolved token. API keys and JWTs are used as given; client credentials are
first exchanged for a JWT with an OAuth2 ``client_credentials`` grant.

Architecture:
    - CredentialResolver: protocol the fetcher depends on
    - StaticCredentialResolver: pass-through for API keys and JWTs
    - ClientCredentialsExchanger: token endpoint client with a JWT cache

Design Decisions:
    - The token endpoint is configuration, not a constant: deployments run
      their own identity provider
    - Exchanged tokens are cached until shortly before ``expires_in`` elapses;
      a lock keeps concurrent chunk fetches from exchanging in parallel
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Protocol

from ...constants import TOKEN_EXPIRY_MARGIN_SECONDS
from ...core.enums import CredentialType
from ...core.exceptions import CredentialExchangeError
from ...models.query import Credentials
from .http import HTTPClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedToken:
    """Token ready to be placed in an ``Authorization`` header."""

    type: CredentialType
    token: str

    @property
    def header(self) -> str:
        return f"{self.type.authorization_scheme} {self.token}"


def authorization_header(token: ResolvedToken) -> dict[str, str]:
    return {"Authorization": token.header}


class CredentialResolver(Protocol):
    """Turns stored credentials into a usable token."""

    async def resolve(self, credentials: Credentials) -> ResolvedToken: ...


class StaticCredentialResolver:
    """Uses API keys and JWTs as they are."""

    async def resolve(self, credentials: Credentials) -> ResolvedToken:
        if credentials.type is CredentialType.CLIENT_CREDENTIALS:
            raise ValueError(
                "Client credentials must be exchanged for a JWT; use ClientCredentialsExchanger"
            )
        return ResolvedToken(type=credentials.type, token=credentials.token or "")


class ClientCredentialsExchanger:
    """Exchanges client credentials for JWTs, caching them until expiry.

    API keys and JWTs pass straight through, so this resolver can be used
    for every credential type.
    """

    def __init__(
        self,
        token_url: str,
        http: HTTPClient | None = None,
        *,
        audience: str | None = None,
        expiry_margin: float = TOKEN_EXPIRY_MARGIN_SECONDS,
        clock=time.monotonic,
    ) -> None:
        self._token_url = token_url
        self._http = http or HTTPClient()
        self._owns_http = http is None
        self._audience = audience
        self._expiry_margin = expiry_margin
        self._clock = clock
        self._cache: dict[str, tuple[str, float | None]] = {}
        self._lock = asyncio.Lock()

    async def resolve(self, credentials: Credentials) -> ResolvedToken:
        if credentials.type is not CredentialType.CLIENT_CREDENTIALS:
            return await StaticCredentialResolver().resolve(credentials)

        client_id = credentials.client_id or ""
        async with self._lock:
            cached = self._cache.get(client_id)
            if cached is not None:
                token, expires_at = cached
                if expires_at is None or self._clock() < expires_at:
                    return ResolvedToken(type=CredentialType.JWT, token=token)

            token, expires_in = await self._exchange(credentials)
            expires_at = None
            if expires_in is not None:
                expires_at = self._clock() + max(0.0, expires_in - self._expiry_margin)
            self._cache[client_id] = (token, expires_at)
            return ResolvedToken(type=CredentialType.JWT, token=token)

    async def _exchange(self, credentials: Credentials) -> tuple[str, float | None]:
        form = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id or "",
            "client_secret": credentials.client_secret or "",
        }
        if self._audience:
            form["audience"] = self._audience

        response = await self._http.post(self._token_url, data=form)
        if not response.ok:
            logger.error(
                f"Client credentials exchange failed with {response.status} for client {credentials.client_id}"
            )
            raise CredentialExchangeError(response.status, response.reason, response.text)

        try:
            payload = json.loads(response.text)
            token = payload["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise CredentialExchangeError(
                response.status, response.reason, "Token response has no access_token"
            ) from e

        expires_in = payload.get("expires_in")
        return str(token), float(expires_in) if expires_in is not None else None

    def invalidate(self, client_id: str | None = None) -> None:
        """Forget cached tokens (all of them when ``client_id`` is None)."""
        if client_id is None:
            self._cache.clear()
        else:
            self._cache.pop(client_id, None)

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()
