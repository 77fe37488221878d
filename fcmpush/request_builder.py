# fcmpush/request_builder.py
"""Translate a message and credentials into concrete FCM HTTP requests."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass

from ._typing import JSONDict
from .const import (
    CONF_PROJECT_ID,
    CONTENT_TYPE_JSON,
    DEFAULT_API_URL,
    FCM_V1_URL_PREFIX,
    FCM_V1_URL_SUFFIX,
    TOPIC_PATH_PREFIX,
)
from .exceptions import (
    MissingConfigurationError,
    MissingCredentialsError,
    NoRecipientsError,
)
from .message import Message
from .transport import TransportRequest


@dataclass(frozen=True, slots=True)
class Credentials:
    """Either a legacy server key or an OAuth2 bearer token (bearer wins)."""

    api_key: str | None = None
    access_token: str | None = None

    @property
    def uses_bearer(self) -> bool:
        return bool(self.access_token)

    def authorization(self) -> str:
        if self.access_token:
            return f"Bearer {self.access_token}"
        if self.api_key:
            return f"key={self.api_key}"
        raise MissingCredentialsError()


@dataclass(frozen=True, slots=True)
class EndpointConfig:
    project_id: str | None = None
    proxy_url: str | None = None

    def v1_url(self) -> str:
        if self.proxy_url:
            return self.proxy_url
        if not self.project_id:
            raise MissingConfigurationError(CONF_PROJECT_ID)
        return f"{FCM_V1_URL_PREFIX}{self.project_id}{FCM_V1_URL_SUFFIX}"

    def legacy_url(self) -> str:
        return self.proxy_url or DEFAULT_API_URL


def _encode(payload: JSONDict) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _json_headers(authorization: str) -> dict[str, str]:
    return {"Authorization": authorization, "Content-Type": CONTENT_TYPE_JSON}


def build_request(
    message: Message, credentials: Credentials, endpoint: EndpointConfig
) -> TransportRequest:
    """Build the send request for ``message``.

    With a bearer token the HTTP v1 endpoint is used and the message must
    carry exactly one recipient; multi-recipient messages are split by the
    fan-out coordinator first. With only an API key the legacy endpoint is
    used and all recipients are batched into one request.

    Raises:
        MissingCredentialsError: if no credential is configured.
        MissingConfigurationError: if the v1 path lacks a project id.
        NoRecipientsError: if the message has no recipient.
        ValueError: if a v1 request is built for more than one recipient.
    """
    authorization = credentials.authorization()
    recipients = message.recipients()
    if not recipients:
        raise NoRecipientsError()

    if credentials.uses_bearer:
        if len(recipients) != 1:
            raise ValueError(
                f"HTTP v1 requests address exactly one target, got {len(recipients)}"
            )
        return TransportRequest(
            url=endpoint.v1_url(),
            headers=_json_headers(authorization),
            body=_encode(message.to_v1_payload(recipients[0])),
        )

    return TransportRequest(
        url=endpoint.legacy_url(),
        headers=_json_headers(authorization),
        body=_encode(message.to_legacy_payload()),
    )


def build_subscription_request(
    topic: str,
    tokens: str | Iterable[str],
    url: str,
    credentials: Credentials,
) -> TransportRequest:
    """Build an Instance ID batchAdd/batchRemove request.

    A single token string is treated as a one-element list.
    """
    if isinstance(tokens, str):
        tokens = [tokens]
    headers = _json_headers(
        f"key={credentials.api_key}"
        if credentials.api_key
        else credentials.authorization()
    )
    if not credentials.api_key:
        # IID only honours OAuth2 bearer tokens when told so explicitly.
        headers["access_token_auth"] = "true"
    return TransportRequest(
        url=url,
        headers=headers,
        body=_encode(
            {"to": f"{TOPIC_PATH_PREFIX}{topic}", "registration_tokens": list(tokens)}
        ),
    )


__all__ = [
    "Credentials",
    "EndpointConfig",
    "build_request",
    "build_subscription_request",
]
