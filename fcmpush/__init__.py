# fcmpush/__init__.py
"""Async Firebase Cloud Messaging client.

Supports the legacy server-key API and the HTTP v1 API with bearer tokens
obtained from a service-account assertion. Messages addressed to several
recipients on the v1 API are delivered through an ephemeral relay topic or
one request per recipient.
"""

from __future__ import annotations

from .Auth.assertion import generate_assertion
from .Auth.service_account import ServiceAccount
from .Auth.token_retrieval import AccessToken, async_acquire_token
from .client import FcmClient, FcmClientConfig
from .exceptions import (
    FcmError,
    MissingConfigurationError,
    MissingCredentialsError,
    NoRecipientsError,
    SigningError,
    SubscriptionError,
    TokenAcquisitionError,
    TransportError,
)
from .fanout import FanoutStrategy
from .message import Message, Notification
from .recipient import Device, Recipient, Topic
from .result import SendResult
from .transport import AiohttpTransport, TransportResponse

__all__ = [
    "AccessToken",
    "AiohttpTransport",
    "Device",
    "FanoutStrategy",
    "FcmClient",
    "FcmClientConfig",
    "FcmError",
    "Message",
    "MissingConfigurationError",
    "MissingCredentialsError",
    "NoRecipientsError",
    "Notification",
    "Recipient",
    "SendResult",
    "ServiceAccount",
    "SigningError",
    "SubscriptionError",
    "Topic",
    "TokenAcquisitionError",
    "TransportError",
    "TransportResponse",
    "async_acquire_token",
    "generate_assertion",
]
