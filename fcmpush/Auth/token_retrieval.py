# fcmpush/Auth/token_retrieval.py
"""Exchange a signed assertion for a short-lived OAuth2 bearer token."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from http import HTTPStatus
from urllib.parse import urlencode

from .._typing import Transport
from ..const import (
    ACCESS_TOKEN_LIFETIME_S,
    CONTENT_TYPE_FORM,
    FCM_SCOPE,
    JWT_BEARER_GRANT_TYPE,
    TOKEN_URL,
)
from ..exceptions import TokenAcquisitionError
from ..log_utils import redact
from .assertion import PrivateKeyInput, generate_assertion

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token with a fixed one-hour validity window.

    The client never refreshes tokens on its own; callers re-acquire before
    :attr:`expires_at`.
    """

    token: str
    issued_at: float

    @property
    def expires_at(self) -> float:
        return self.issued_at + ACCESS_TOKEN_LIFETIME_S

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at


async def async_acquire_token(
    transport: Transport,
    issuer: str,
    private_key: PrivateKeyInput,
    *,
    token_url: str = TOKEN_URL,
    scope: str = FCM_SCOPE,
    now: float | None = None,
) -> AccessToken:
    """Sign an assertion and trade it for an access token.

    Args:
        transport: HTTP transport used for the token request.
        issuer: Service account e-mail.
        private_key: RSA private key (PEM or loaded).
        token_url: OAuth2 token endpoint; also used as the assertion audience.
        scope: Scope requested for the token.
        now: Issue time override in Unix seconds.

    Returns:
        The acquired :class:`AccessToken`.

    Raises:
        SigningError: if the assertion cannot be signed.
        TokenAcquisitionError: on a non-200 status or a body without
            ``access_token``.
        TransportError: on network failures.
    """
    issued_at = time.time() if now is None else now
    assertion = generate_assertion(
        issuer, private_key, scope=scope, audience=token_url, now=issued_at
    )
    body = urlencode(
        {"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion}
    ).encode("ascii")

    resp = await transport.post(token_url, {"Content-Type": CONTENT_TYPE_FORM}, body)

    if resp.status != HTTPStatus.OK:
        _LOGGER.error(
            "Token request for %s rejected (status=%s): %s",
            issuer,
            resp.status,
            resp.snippet(),
        )
        raise TokenAcquisitionError(resp.status, resp.text())

    try:
        payload = resp.json()
    except ValueError as err:
        raise TokenAcquisitionError(resp.status, resp.text()) from err

    token = payload.get("access_token") if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token:
        _LOGGER.error("Token response for %s lacks 'access_token'", issuer)
        raise TokenAcquisitionError(resp.status, resp.text())

    _LOGGER.debug("Acquired access token %s for %s", redact(token), issuer)
    return AccessToken(token=token, issued_at=issued_at)


__all__ = ["AccessToken", "async_acquire_token"]
