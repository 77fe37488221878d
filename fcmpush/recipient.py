# fcmpush/recipient.py
"""Message recipients: a device registration token or a named topic."""

from __future__ import annotations

from dataclasses import dataclass

from .const import TOPIC_PATH_PREFIX


@dataclass(frozen=True, slots=True)
class Device:
    """A single device addressed by its FCM registration token."""

    token: str

    def get_token(self) -> str:
        return self.token

    def address_target(self) -> str:
        """Return the legacy ``to`` value for this device."""
        return self.token


@dataclass(frozen=True, slots=True)
class Topic:
    """A backend-side topic; every subscribed device receives the message."""

    name: str

    def get_name(self) -> str:
        return self.name

    def address_target(self) -> str:
        """Return the ``/topics/<name>`` path used by the legacy and IID APIs."""
        return f"{TOPIC_PATH_PREFIX}{self.name}"


type Recipient = Device | Topic


def v1_target(recipient: Recipient) -> dict[str, str]:
    """Return the HTTP v1 target field for a recipient."""

    if isinstance(recipient, Device):
        return {"token": recipient.token}
    if isinstance(recipient, Topic):
        return {"topic": recipient.name}
    raise TypeError(f"Unsupported recipient type: {type(recipient).__name__}")


def device_tokens(recipients: tuple[Recipient, ...] | list[Recipient]) -> list[str]:
    """Return the registration tokens of all Device recipients, in order."""

    return [r.token for r in recipients if isinstance(r, Device)]


__all__ = ["Device", "Recipient", "Topic", "device_tokens", "v1_target"]
