# tests/test_fanout.py
"""Tests for the multi-recipient fan-out coordinator."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from collections.abc import Sequence
from typing import Any

import pytest

from fcmpush.exceptions import SubscriptionError, TransportError
from fcmpush.fanout import FanoutStrategy, TopicFanoutCoordinator, ephemeral_topic_name
from fcmpush.message import Message
from fcmpush.recipient import Device, Topic
from fcmpush.transport import TransportResponse
from tests.helpers import response


class _Backend:
    """Records coordinator callbacks and replays canned responses."""

    def __init__(
        self,
        *,
        add: list[TransportResponse] | None = None,
        send: list[TransportResponse | BaseException] | None = None,
        remove: list[TransportResponse | Exception] | None = None,
    ) -> None:
        self._add = list(add or [])
        self._send = list(send or [])
        self._remove = list(remove or [])
        self.events: list[tuple[str, Any]] = []

    async def send_one(self, message: Message) -> TransportResponse:
        self.events.append(("send", message.recipients()))
        return self._next(self._send)

    async def add(self, topic: str, tokens: Sequence[str]) -> TransportResponse:
        self.events.append(("add", (topic, list(tokens))))
        return self._next(self._add)

    async def remove(self, topic: str, tokens: Sequence[str]) -> TransportResponse:
        self.events.append(("remove", (topic, list(tokens))))
        return self._next(self._remove)

    @staticmethod
    def _next(queue: list[Any]) -> TransportResponse:
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def coordinator(self, strategy: FanoutStrategy) -> TopicFanoutCoordinator:
        return TopicFanoutCoordinator(
            self.send_one,
            self.add,
            self.remove,
            strategy=strategy,
            clock=lambda: 1_700_000_000.4,
            rng=random.Random(7),
        )


def _message(*tokens: str) -> Message:
    return Message(targets=[Device(t) for t in tokens])


def test_ephemeral_topic_name_format() -> None:
    name = ephemeral_topic_name(1_700_000_000.9, random.Random(1))

    assert re.fullmatch(r"Topic_1700000000_\d{4}", name)
    assert 1000 <= int(name.rsplit("_", 1)[1]) <= 9999


def test_topic_relay_subscribes_sends_and_tears_down() -> None:
    backend = _Backend(add=[response(200)], send=[response(200, {"name": "m/1"})], remove=[response(200)])
    message = _message("tok1", "tok2")

    result = asyncio.run(backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(message))

    topic = ephemeral_topic_name(1_700_000_000.4, random.Random(7))
    assert backend.events == [
        ("add", (topic, ["tok1", "tok2"])),
        ("send", (Topic(topic),)),
        ("remove", (topic, ["tok1", "tok2"])),
    ]
    assert result.status == 200
    assert result.ok
    assert result.relay_topic == topic
    assert result.teardown_error is None
    assert message.recipients() == (Device("tok1"), Device("tok2"))


@pytest.mark.parametrize("status", [400, 401, 500, 503])
def test_failed_subscription_aborts_without_delivery(status: int) -> None:
    backend = _Backend(add=[response(status, "denied")])

    result = asyncio.run(
        backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(_message("a", "b"))
    )

    assert [kind for kind, _ in backend.events] == ["add"]
    assert result.status == status
    assert isinstance(result.error, SubscriptionError)
    assert result.error.status == status
    assert result.responses == []
    assert not result.ok


def test_teardown_failure_does_not_mask_delivery(caplog: pytest.LogCaptureFixture) -> None:
    backend = _Backend(add=[response(200)], send=[response(200)], remove=[response(500, "oops")])

    with caplog.at_level(logging.WARNING):
        result = asyncio.run(
            backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(_message("a", "b"))
        )

    assert result.status == 200
    assert result.ok
    assert isinstance(result.teardown_error, SubscriptionError)
    assert result.teardown_error.status == 500
    assert any("teardown rejected" in r.getMessage() for r in caplog.records)


def test_teardown_transport_error_is_reported() -> None:
    backend = _Backend(
        add=[response(200)],
        send=[response(200)],
        remove=[TransportError("https://iid.googleapis.com/iid/v1:batchRemove", "reset")],
    )

    result = asyncio.run(
        backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(_message("a", "b"))
    )

    assert result.status == 200
    assert isinstance(result.teardown_error, TransportError)


def test_relay_delivery_failure_still_tears_down() -> None:
    backend = _Backend(add=[response(200)], send=[response(500)], remove=[response(200)])

    result = asyncio.run(
        backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(_message("a", "b"))
    )

    assert [kind for kind, _ in backend.events] == ["add", "send", "remove"]
    assert result.status == 500


def test_relay_transport_error_tears_down_and_propagates() -> None:
    backend = _Backend(
        add=[response(200)],
        send=[TransportError("https://fcm.googleapis.com", "timeout")],
        remove=[response(200)],
    )

    with pytest.raises(TransportError):
        asyncio.run(
            backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(_message("a", "b"))
        )

    assert [kind for kind, _ in backend.events] == ["add", "send", "remove"]


@pytest.mark.parametrize(
    "failure", [asyncio.CancelledError(), RuntimeError("custom transport broke")]
)
def test_relay_tears_down_on_any_delivery_exception(failure: BaseException) -> None:
    backend = _Backend(add=[response(200)], send=[failure], remove=[response(200)])

    with pytest.raises(type(failure)):
        asyncio.run(
            backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(_message("a", "b"))
        )

    assert [kind for kind, _ in backend.events] == ["add", "send", "remove"]
    add_args, remove_args = backend.events[0][1], backend.events[2][1]
    assert remove_args == add_args


def test_sequential_sends_each_recipient_in_order() -> None:
    backend = _Backend(send=[response(200), response(404), response(200)])
    message = _message("a", "b", "c")

    result = asyncio.run(
        backend.coordinator(FanoutStrategy.SEQUENTIAL).async_send(message)
    )

    assert backend.events == [
        ("send", (Device("a"),)),
        ("send", (Device("b"),)),
        ("send", (Device("c"),)),
    ]
    assert [r.status for r in result.responses] == [200, 404, 200]
    assert result.status == 200
    assert [r.status for r in result.failed] == [404]


def test_topic_recipients_force_sequential_strategy() -> None:
    backend = _Backend(send=[response(200), response(200)])

    asyncio.run(
        backend.coordinator(FanoutStrategy.TOPIC_RELAY).async_send(
            Message(targets=[Device("a"), Topic("news")])
        )
    )

    assert [kind for kind, _ in backend.events] == ["send", "send"]
