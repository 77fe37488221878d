# fcmpush/fanout.py
"""Multi-recipient delivery on top of the single-target HTTP v1 API.

The v1 ``messages:send`` endpoint accepts one token or one topic per call.
Two strategies serve a message addressed to several recipients:

- ``TOPIC_RELAY`` subscribes every device token to a throw-away topic,
  sends once to that topic and unsubscribes the tokens again.
- ``SEQUENTIAL`` sends one request per recipient, in order.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from http import HTTPStatus

from .const import (
    EPHEMERAL_TOPIC_PREFIX,
    EPHEMERAL_TOPIC_SUFFIX_MAX,
    EPHEMERAL_TOPIC_SUFFIX_MIN,
)
from .exceptions import FcmError, SubscriptionError, TransportError
from .message import Message
from .recipient import Device, Topic, device_tokens
from .result import SendResult
from .transport import TransportResponse

_LOGGER = logging.getLogger(__name__)

type SendOneCallable = Callable[[Message], Awaitable[TransportResponse]]
type SubscriptionCallable = Callable[[str, Sequence[str]], Awaitable[TransportResponse]]


class FanoutStrategy(Enum):
    TOPIC_RELAY = "topic_relay"
    SEQUENTIAL = "sequential"


def ephemeral_topic_name(
    now: float | None = None, rng: random.Random | None = None
) -> str:
    """Return a fresh ``Topic_<timestamp>_<4 digits>`` relay topic name."""
    timestamp = int(time.time() if now is None else now)
    suffix = (rng or random).randint(
        EPHEMERAL_TOPIC_SUFFIX_MIN, EPHEMERAL_TOPIC_SUFFIX_MAX
    )
    return f"{EPHEMERAL_TOPIC_PREFIX}_{timestamp}_{suffix}"


class TopicFanoutCoordinator:
    """Deliver one message to several recipients through single-target sends."""

    def __init__(
        self,
        send_one: SendOneCallable,
        add_subscription: SubscriptionCallable,
        remove_subscription: SubscriptionCallable,
        *,
        strategy: FanoutStrategy = FanoutStrategy.TOPIC_RELAY,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self._send_one = send_one
        self._add_subscription = add_subscription
        self._remove_subscription = remove_subscription
        self.strategy = strategy
        self._clock = clock
        self._rng = rng

    def _effective_strategy(self, message: Message) -> FanoutStrategy:
        # Topics cannot be subscribed to another topic.
        if self.strategy is FanoutStrategy.TOPIC_RELAY and any(
            not isinstance(r, Device) for r in message.recipients()
        ):
            _LOGGER.debug(
                "Message addresses topics directly; using sequential fan-out"
            )
            return FanoutStrategy.SEQUENTIAL
        return self.strategy

    async def async_send(self, message: Message) -> SendResult:
        if self._effective_strategy(message) is FanoutStrategy.TOPIC_RELAY:
            return await self.async_send_via_topic(message)
        return await self.async_send_sequentially(message)

    async def async_send_via_topic(self, message: Message) -> SendResult:
        """Relay ``message`` through an ephemeral topic.

        When the add-subscription call is rejected nothing is delivered and
        its response is returned with :attr:`SendResult.error` set.
        """
        tokens = device_tokens(message.recipients())
        topic = ephemeral_topic_name(self._clock(), self._rng)

        setup = await self._add_subscription(topic, tokens)
        if setup.status != HTTPStatus.OK:
            _LOGGER.warning(
                "Subscribing %d tokens to relay topic %s failed (status=%s): %s",
                len(tokens),
                topic,
                setup.status,
                setup.snippet(),
            )
            return SendResult(
                response=setup,
                error=SubscriptionError(setup.status, setup.text()),
                relay_topic=topic,
            )

        relay = message.with_recipients([Topic(topic)])
        try:
            delivery = await self._send_one(relay)
        finally:
            # Runs on cancellation too; the relay topic must not outlive send.
            teardown_error = await self._async_teardown(topic, tokens)
        return SendResult(
            response=delivery,
            responses=[delivery],
            teardown_error=teardown_error,
            relay_topic=topic,
        )

    async def _async_teardown(
        self, topic: str, tokens: Sequence[str]
    ) -> FcmError | None:
        """Unsubscribe ``tokens`` from the relay topic; report, never raise."""
        try:
            resp = await self._remove_subscription(topic, tokens)
        except TransportError as err:
            _LOGGER.warning("Relay topic %s teardown failed: %s", topic, err)
            return err
        if resp.status != HTTPStatus.OK:
            _LOGGER.warning(
                "Relay topic %s teardown rejected (status=%s): %s",
                topic,
                resp.status,
                resp.snippet(),
            )
            return SubscriptionError(resp.status, resp.text())
        return None

    async def async_send_sequentially(self, message: Message) -> SendResult:
        """Send one request per recipient, preserving recipient order."""
        responses: list[TransportResponse] = []
        for recipient in message.recipients():
            resp = await self._send_one(message.with_recipients([recipient]))
            if not resp.ok:
                _LOGGER.debug(
                    "Delivery to one of %d recipients failed (status=%s)",
                    len(message.recipients()),
                    resp.status,
                )
            responses.append(resp)

        failed = sum(1 for r in responses if not r.ok)
        if failed:
            _LOGGER.warning(
                "Sequential fan-out: %d of %d deliveries failed",
                failed,
                len(responses),
            )
        return SendResult(response=responses[-1], responses=responses)


__all__ = ["FanoutStrategy", "TopicFanoutCoordinator", "ephemeral_topic_name"]
