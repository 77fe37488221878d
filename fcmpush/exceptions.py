# fcmpush/exceptions.py
"""Exception types raised by the FCM push client.

Backend rejections (HTTP 4xx/5xx on a send) are returned to the caller as
values on :class:`fcmpush.result.SendResult`. Exceptions are reserved for
local faults (bad key material, missing configuration) and for failures the
caller must handle before sending again (token exchange, network errors).
"""

from __future__ import annotations

_MISSING_CREDENTIALS = (
    "No credentials configured. Set an API key (legacy API) or fetch an "
    "access token (HTTP v1 API) before sending."
)

_NO_RECIPIENTS = "Message has no recipients; add at least one Device or Topic."


class FcmError(Exception):
    """Base exception for FCM client errors."""


class _HttpStatusError(FcmError):
    """Base for errors that wrap an HTTP status and response body."""

    _label = "HTTP error"

    def __init__(self, status: int, detail: str | None = None):
        super().__init__(f"{self._label} {status}: {detail or ''}".strip())
        self.status = status
        self.detail = detail


class SigningError(FcmError):
    """Raised when the private key is malformed or signing fails."""


class TokenAcquisitionError(_HttpStatusError):
    """Raised when the token endpoint does not return a usable access token."""

    _label = "Token endpoint error"


class SubscriptionError(_HttpStatusError):
    """Reported when a topic add/remove call is rejected by the backend."""

    _label = "Topic subscription error"


class TransportError(FcmError):
    """Raised on network-level failures (connection, timeout)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Request to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class MissingCredentialsError(FcmError):
    """Raised when neither an API key nor an access token is configured."""

    def __init__(self) -> None:
        super().__init__(_MISSING_CREDENTIALS)


class MissingConfigurationError(FcmError):
    """Raised when a required configuration value is absent."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Configuration value '{key}' is required")
        self.key = key


class NoRecipientsError(FcmError, ValueError):
    """Raised when a message is dispatched without any recipient."""

    def __init__(self) -> None:
        super().__init__(_NO_RECIPIENTS)


__all__ = [
    "FcmError",
    "MissingConfigurationError",
    "MissingCredentialsError",
    "NoRecipientsError",
    "SigningError",
    "SubscriptionError",
    "TokenAcquisitionError",
    "TransportError",
]
