# fcmpush/client.py
"""FCM client facade: configuration, send and topic subscription management."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Self

import voluptuous as vol
from aiohttp import ClientSession

from ._typing import Transport
from .Auth.assertion import PrivateKeyInput
from .Auth.service_account import ServiceAccount
from .Auth.token_retrieval import AccessToken, async_acquire_token
from .const import (
    CONF_ACCESS_TOKEN,
    CONF_API_KEY,
    CONF_LOG_DEBUG_VERBOSE,
    CONF_PROJECT_ID,
    CONF_PROXY_URL,
    CONF_STRATEGY,
    CONF_TIMEOUT,
    DEFAULT_TIMEOUT_S,
    DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL,
    DEFAULT_TOPIC_REMOVE_SUBSCRIPTION_API_URL,
    TOKEN_URL,
)
from .exceptions import (
    NoRecipientsError,
    SigningError,
    TokenAcquisitionError,
    TransportError,
)
from .fanout import FanoutStrategy, TopicFanoutCoordinator
from .log_utils import redact, redact_text
from .message import Message
from .request_builder import (
    Credentials,
    EndpointConfig,
    build_request,
    build_subscription_request,
)
from .result import SendResult
from .transport import AiohttpTransport, TransportRequest, TransportResponse

_LOGGER = logging.getLogger(__name__)

_OPTIONAL_STR = vol.Any(None, vol.All(str, vol.Length(min=1)))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_API_KEY, default=None): _OPTIONAL_STR,
        vol.Optional(CONF_ACCESS_TOKEN, default=None): _OPTIONAL_STR,
        vol.Optional(CONF_PROJECT_ID, default=None): _OPTIONAL_STR,
        vol.Optional(CONF_PROXY_URL, default=None): vol.Any(None, vol.Url()),
        vol.Optional(
            CONF_STRATEGY, default=FanoutStrategy.TOPIC_RELAY.value
        ): vol.In([s.value for s in FanoutStrategy]),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT_S): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_LOG_DEBUG_VERBOSE, default=False): bool,
    }
)


@dataclass
class FcmClientConfig:
    """Configuration held by an :class:`FcmClient` instance.

    Attributes:
        api_key: Legacy server key (``Authorization: key=...``).
        access_token: OAuth2 bearer token for the HTTP v1 API.
        project_id: Firebase project id, required for the v1 endpoint.
        proxy_url: Replaces the send endpoint when set.
        strategy: Multi-recipient delivery strategy for the v1 API.
        timeout: Total per-request timeout in seconds.
        log_debug_verbose: Log request bodies at debug level.
    """

    api_key: str | None = None
    access_token: str | None = None
    project_id: str | None = None
    proxy_url: str | None = None
    strategy: FanoutStrategy = FanoutStrategy.TOPIC_RELAY
    timeout: float = DEFAULT_TIMEOUT_S
    log_debug_verbose: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FcmClientConfig:
        """Build a config from e.g. parsed YAML/JSON.

        Raises:
            vol.Invalid: on unknown keys or invalid values.
        """
        validated = CONFIG_SCHEMA(dict(data))
        return cls(
            api_key=validated[CONF_API_KEY],
            access_token=validated[CONF_ACCESS_TOKEN],
            project_id=validated[CONF_PROJECT_ID],
            proxy_url=validated[CONF_PROXY_URL],
            strategy=FanoutStrategy(validated[CONF_STRATEGY]),
            timeout=validated[CONF_TIMEOUT],
            log_debug_verbose=validated[CONF_LOG_DEBUG_VERBOSE],
        )

    @property
    def credentials(self) -> Credentials:
        return Credentials(api_key=self.api_key, access_token=self.access_token)

    @property
    def endpoint(self) -> EndpointConfig:
        return EndpointConfig(project_id=self.project_id, proxy_url=self.proxy_url)


class FcmClient:
    """Send push notifications through Firebase Cloud Messaging.

    With an access token the HTTP v1 API is used and messages with several
    recipients are fanned out by :class:`TopicFanoutCoordinator`. With only an
    API key the legacy API receives every recipient in one request.

    Backend rejections are returned as :class:`SendResult` values; exceptions
    are raised for local faults and network failures only.
    """

    def __init__(
        self,
        config: FcmClientConfig | None = None,
        *,
        transport: Transport | None = None,
        http_client_session: ClientSession | None = None,
    ) -> None:
        self.config = config if config else FcmClientConfig()
        self._owned_transport: AiohttpTransport | None = None
        if transport is None:
            self._owned_transport = AiohttpTransport(
                http_client_session, timeout=self.config.timeout
            )
            transport = self._owned_transport
        self._transport: Transport = transport
        self._token: AccessToken | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_api_key(self, api_key: str | None) -> Self:
        self.config.api_key = api_key
        return self

    def set_access_token(self, access_token: str | None) -> Self:
        """Use a bearer token obtained elsewhere; its expiry is unknown."""
        self.config.access_token = access_token
        self._token = None
        return self

    def set_project_id(self, project_id: str | None) -> Self:
        self.config.project_id = project_id
        return self

    def set_proxy_api_url(self, url: str | None) -> Self:
        self.config.proxy_url = url
        return self

    def set_strategy(self, strategy: FanoutStrategy) -> Self:
        self.config.strategy = strategy
        return self

    @property
    def access_token(self) -> AccessToken | None:
        """The token from the last successful fetch, if any."""
        return self._token

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    async def async_fetch_access_token(
        self,
        issuer: str,
        private_key: PrivateKeyInput,
        *,
        token_url: str = TOKEN_URL,
    ) -> AccessToken:
        """Acquire a bearer token and make it the active credential.

        On failure the stored bearer token is dropped so that no later send
        goes out with a stale credential.
        """
        try:
            token = await async_acquire_token(
                self._transport, issuer, private_key, token_url=token_url
            )
        except (SigningError, TokenAcquisitionError, TransportError):
            self._token = None
            self.config.access_token = None
            raise
        self._token = token
        self.config.access_token = token.token
        _LOGGER.info("Access token for %s valid until %d", issuer, token.expires_at)
        return token

    async def async_fetch_access_token_for_service_account(
        self, account: ServiceAccount
    ) -> AccessToken:
        """Like :meth:`async_fetch_access_token`, adopting the project id if unset."""
        token = await self.async_fetch_access_token(
            account.client_email, account.private_key, token_url=account.token_uri
        )
        if not self.config.project_id:
            self.config.project_id = account.project_id
        return token

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------
    async def async_send(self, message: Message) -> SendResult:
        """Deliver ``message`` to all of its recipients.

        Returns:
            The terminal response, or the failing subscription response when
            relay setup was rejected.

        Raises:
            NoRecipientsError: if the message has no recipient.
            MissingCredentialsError: if no credential is configured.
            MissingConfigurationError: if the v1 API is used without project id.
            TransportError: on network failures.
        """
        recipients = message.recipients()
        if not recipients:
            raise NoRecipientsError()

        credentials = self.config.credentials
        if self._token is not None and self._token.is_expired():
            _LOGGER.warning(
                "Sending with an expired access token %s; fetch a new one first",
                redact(self._token.token),
            )

        if not credentials.uses_bearer or len(recipients) == 1:
            resp = await self._async_send_one(message)
            return SendResult(response=resp, responses=[resp])

        # Fail before any relay subscription is created.
        self.config.endpoint.v1_url()
        coordinator = TopicFanoutCoordinator(
            self._async_send_one,
            self.async_add_topic_subscription,
            self.async_remove_topic_subscription,
            strategy=self.config.strategy,
        )
        return await coordinator.async_send(message)

    async def _async_send_one(self, message: Message) -> TransportResponse:
        request = build_request(
            message, self.config.credentials, self.config.endpoint
        )
        return await self._async_execute(request)

    async def _async_execute(self, request: TransportRequest) -> TransportResponse:
        if self.config.log_debug_verbose:
            _LOGGER.debug(
                "POST %s: %s", request.url, redact_text(request.body.decode("utf-8"))
            )
        resp = await self._transport.post(request.url, request.headers, request.body)
        if resp.ok:
            _LOGGER.debug("POST %s -> %s", request.url, resp.status)
        else:
            _LOGGER.warning(
                "POST %s rejected (status=%s): %s",
                request.url,
                resp.status,
                redact_text(resp.snippet()),
            )
        return resp

    # ------------------------------------------------------------------
    # Topic subscriptions
    # ------------------------------------------------------------------
    async def async_add_topic_subscription(
        self, topic: str, tokens: str | Iterable[str]
    ) -> TransportResponse:
        return await self._async_process_topic_subscription(
            topic, tokens, DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL
        )

    async def async_remove_topic_subscription(
        self, topic: str, tokens: str | Iterable[str]
    ) -> TransportResponse:
        return await self._async_process_topic_subscription(
            topic, tokens, DEFAULT_TOPIC_REMOVE_SUBSCRIPTION_API_URL
        )

    async def _async_process_topic_subscription(
        self, topic: str, tokens: str | Iterable[str], url: str
    ) -> TransportResponse:
        """POST a batch subscription change; the status is not interpreted."""
        request = build_subscription_request(
            topic, tokens, url, self.config.credentials
        )
        return await self._async_execute(request)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def async_close(self) -> None:
        """Close the aiohttp session if this client created it."""
        if self._owned_transport is not None:
            await self._owned_transport.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.async_close()


__all__ = ["CONFIG_SCHEMA", "FcmClient", "FcmClientConfig"]
