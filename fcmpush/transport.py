# fcmpush/transport.py
"""aiohttp-backed HTTP transport returning raw status and body."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from ._typing import Headers
from .const import DEFAULT_TIMEOUT_S
from .exceptions import TransportError

_LOGGER = logging.getLogger(__name__)

_BODY_SNIPPET_MAX = 300


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status code and raw body of a completed HTTP exchange."""

    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON (raises ``ValueError`` on malformed bodies)."""
        return json.loads(self.body)

    def snippet(self) -> str:
        return self.text()[:_BODY_SNIPPET_MAX]


@dataclass(frozen=True, slots=True)
class TransportRequest:
    """A fully built POST request."""

    url: str
    headers: Mapping[str, str]
    body: bytes


class AiohttpTransport:
    """POST-only transport on top of an aiohttp ``ClientSession``.

    An injected session is reused and never closed here; otherwise a local
    session is created on first use and released by :meth:`close`.
    """

    def __init__(
        self,
        session: ClientSession | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._http_client_session = session
        self._local_session: ClientSession | None = None
        self._timeout = ClientTimeout(total=timeout)

    @property
    def _session(self) -> ClientSession:
        if self._http_client_session:
            return self._http_client_session
        if self._local_session is None:
            self._local_session = ClientSession()
        return self._local_session

    async def post(self, url: str, headers: Headers, body: bytes) -> TransportResponse:
        """POST ``body`` and return the response without interpreting the status.

        Raises:
            TransportError: on connection errors or timeouts.
        """
        try:
            async with self._session.post(
                url,
                headers=dict(headers),
                data=body,
                timeout=self._timeout,
            ) as resp:
                raw = await resp.read()
                return TransportResponse(
                    status=resp.status, body=raw, headers=dict(resp.headers)
                )
        except (ClientError, TimeoutError) as err:
            _LOGGER.warning("POST %s failed: %s", url, err.__class__.__name__)
            raise TransportError(url, str(err) or err.__class__.__name__) from err

    async def close(self) -> None:
        """Close the local aiohttp session if one was created."""
        session = self._local_session
        self._local_session = None
        if session:
            await session.close()


__all__ = ["AiohttpTransport", "TransportRequest", "TransportResponse"]
