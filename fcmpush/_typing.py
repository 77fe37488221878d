# fcmpush/_typing.py
"""Shared typing helpers for the FCM transport layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .transport import TransportResponse

type JSONDict = dict[str, Any]
type Headers = Mapping[str, str]


class Transport(Protocol):
    """Callable surface the client needs from an HTTP transport."""

    async def post(
        self, url: str, headers: Headers, body: bytes
    ) -> TransportResponse:
        """POST ``body`` to ``url`` and return the status and raw body."""


__all__ = [
    "Headers",
    "JSONDict",
    "Transport",
]
