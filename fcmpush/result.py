# fcmpush/result.py
"""Outcome of a send operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from .exceptions import FcmError, SubscriptionError
from .transport import TransportResponse


@dataclass(slots=True)
class SendResult:
    """Terminal response of a send plus fan-out side information.

    Attributes:
        response: The terminal transport response. For the topic relay this
            is the delivery response, or the add-subscription response when
            group setup failed. For sequential fan-out it is the last
            response observed.
        responses: Every delivery response in recipient order.
        error: Set when group setup failed and nothing was delivered.
        teardown_error: Set when removing the relay subscription failed after
            delivery. Never changes :attr:`response`.
        relay_topic: Name of the ephemeral topic used for relaying, if any.
    """

    response: TransportResponse
    responses: list[TransportResponse] = field(default_factory=list)
    error: SubscriptionError | None = None
    teardown_error: FcmError | None = None
    relay_topic: str | None = None

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def body(self) -> bytes:
        return self.response.body

    @property
    def ok(self) -> bool:
        return self.error is None and self.response.ok

    @property
    def failed(self) -> list[TransportResponse]:
        return [r for r in self.responses if not r.ok]


__all__ = ["SendResult"]
