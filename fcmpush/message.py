# fcmpush/message.py
"""Logical push message and its serialization to FCM request bodies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ._typing import JSONDict
from .const import PRIORITIES, PRIORITY_HIGH, PRIORITY_NORMAL
from .recipient import Device, Recipient, Topic, v1_target


@dataclass(frozen=True, slots=True)
class Notification:
    """User-visible part of a push message."""

    title: str | None = None
    body: str | None = None
    image: str | None = None

    def as_dict(self) -> dict[str, str]:
        payload: dict[str, str] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.body is not None:
            payload["body"] = self.body
        if self.image is not None:
            payload["image"] = self.image
        return payload


@dataclass(slots=True)
class Message:
    """A notification addressed to one or more recipients.

    Recipients are kept in insertion order. The client never mutates a
    caller's message during fan-out; it works on copies created through
    :meth:`with_recipients`.
    """

    notification: Notification | None = None
    data: Mapping[str, str] = field(default_factory=dict)
    priority: str = PRIORITY_NORMAL
    collapse_key: str | None = None
    time_to_live: int | None = None
    targets: tuple[Recipient, ...] = ()

    def __post_init__(self) -> None:
        if self.priority not in PRIORITIES:
            raise ValueError(
                f"priority must be one of {PRIORITIES}, got {self.priority!r}"
            )
        if self.time_to_live is not None and self.time_to_live < 0:
            raise ValueError("time_to_live must be >= 0")
        self.data = {str(k): str(v) for k, v in self.data.items()}
        self.targets = tuple(self.targets)

    def recipients(self) -> tuple[Recipient, ...]:
        return self.targets

    def add_recipient(self, recipient: Recipient) -> Message:
        if not isinstance(recipient, (Device, Topic)):
            raise TypeError(
                f"Unsupported recipient type: {type(recipient).__name__}"
            )
        self.targets = (*self.targets, recipient)
        return self

    def with_recipients(self, recipients: Iterable[Recipient]) -> Message:
        """Return a copy of this message addressed to ``recipients``."""
        return replace(self, targets=tuple(recipients))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_v1_payload(self, target: Recipient) -> JSONDict:
        """Build the HTTP v1 envelope ``{"message": {...}}`` for one target."""

        body: dict[str, Any] = dict(v1_target(target))
        if self.notification is not None:
            body["notification"] = self.notification.as_dict()
        if self.data:
            body["data"] = dict(self.data)

        android: dict[str, Any] = {
            "priority": "HIGH" if self.priority == PRIORITY_HIGH else "NORMAL"
        }
        if self.collapse_key is not None:
            android["collapse_key"] = self.collapse_key
        if self.time_to_live is not None:
            android["ttl"] = f"{self.time_to_live}s"
        body["android"] = android
        body["apns"] = {
            "headers": {"apns-priority": "10" if self.priority == PRIORITY_HIGH else "5"}
        }
        return {"message": body}

    def to_legacy_payload(self) -> JSONDict:
        """Build the flat legacy body, batching all recipients in one request.

        Raises:
            ValueError: if devices and topics are mixed, or no recipient is set.
        """

        devices = [r for r in self.targets if isinstance(r, Device)]
        topics = [r for r in self.targets if isinstance(r, Topic)]
        if devices and topics:
            raise ValueError("Mixing device and topic recipients is not supported")

        body: dict[str, Any] = {}
        if len(devices) == 1:
            body["to"] = devices[0].address_target()
        elif devices:
            body["registration_ids"] = [d.token for d in devices]
        elif len(topics) == 1:
            body["to"] = topics[0].address_target()
        elif topics:
            body["condition"] = " || ".join(f"'{t.name}' in topics" for t in topics)
        else:
            raise ValueError("Message has no recipients")

        if self.notification is not None:
            body["notification"] = self.notification.as_dict()
        if self.data:
            body["data"] = dict(self.data)
        body["priority"] = self.priority
        if self.collapse_key is not None:
            body["collapse_key"] = self.collapse_key
        if self.time_to_live is not None:
            body["time_to_live"] = self.time_to_live
        return body


__all__ = ["Message", "Notification"]
