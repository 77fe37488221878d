# tests/test_request_builder.py
"""Tests for endpoint, header and body selection."""

from __future__ import annotations

import json

import pytest

from fcmpush.const import (
    DEFAULT_API_URL,
    DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL,
)
from fcmpush.exceptions import (
    MissingConfigurationError,
    MissingCredentialsError,
    NoRecipientsError,
)
from fcmpush.message import Message, Notification
from fcmpush.recipient import Device, Topic
from fcmpush.request_builder import (
    Credentials,
    EndpointConfig,
    build_request,
    build_subscription_request,
)

V1_URL = "https://fcm.googleapis.com/v1/projects/demo/messages:send"


def test_bearer_builds_single_v1_request() -> None:
    message = Message(notification=Notification(body="hello"), targets=[Device("tok1")])

    request = build_request(
        message, Credentials(access_token="ya29"), EndpointConfig(project_id="demo")
    )

    assert request.url == V1_URL
    assert request.headers == {
        "Authorization": "Bearer ya29",
        "Content-Type": "application/json",
    }
    body = json.loads(request.body)
    assert body["message"]["token"] == "tok1"
    assert "topic" not in body["message"]


def test_bearer_wins_over_api_key() -> None:
    request = build_request(
        Message(targets=[Device("t")]),
        Credentials(api_key="k", access_token="ya29"),
        EndpointConfig(project_id="demo"),
    )

    assert request.url == V1_URL
    assert request.headers["Authorization"] == "Bearer ya29"


def test_api_key_builds_legacy_request() -> None:
    request = build_request(
        Message(targets=[Device("a"), Device("b")]),
        Credentials(api_key="server-key"),
        EndpointConfig(),
    )

    assert request.url == DEFAULT_API_URL
    assert request.headers["Authorization"] == "key=server-key"
    assert json.loads(request.body)["registration_ids"] == ["a", "b"]


@pytest.mark.parametrize(
    "credentials",
    [Credentials(api_key="k"), Credentials(access_token="ya29")],
)
def test_proxy_url_replaces_endpoint(credentials: Credentials) -> None:
    request = build_request(
        Message(targets=[Device("t")]),
        credentials,
        EndpointConfig(project_id="demo", proxy_url="https://proxy.local/send"),
    )

    assert request.url == "https://proxy.local/send"


def test_v1_requires_exactly_one_recipient() -> None:
    with pytest.raises(ValueError, match="exactly one"):
        build_request(
            Message(targets=[Device("a"), Device("b")]),
            Credentials(access_token="ya29"),
            EndpointConfig(project_id="demo"),
        )


def test_v1_requires_project_id() -> None:
    with pytest.raises(MissingConfigurationError) as err:
        build_request(
            Message(targets=[Topic("news")]),
            Credentials(access_token="ya29"),
            EndpointConfig(),
        )
    assert err.value.key == "project_id"


def test_missing_credentials_and_recipients() -> None:
    with pytest.raises(MissingCredentialsError):
        build_request(Message(targets=[Device("a")]), Credentials(), EndpointConfig())
    with pytest.raises(NoRecipientsError):
        build_request(Message(), Credentials(api_key="k"), EndpointConfig())


def test_subscription_request_normalizes_single_token() -> None:
    request = build_subscription_request(
        "news", "tok1", DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL, Credentials(api_key="k")
    )

    assert request.url == DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL
    assert request.headers["Authorization"] == "key=k"
    assert "access_token_auth" not in request.headers
    assert json.loads(request.body) == {
        "to": "/topics/news",
        "registration_tokens": ["tok1"],
    }


def test_subscription_request_with_bearer_flags_oauth() -> None:
    request = build_subscription_request(
        "news",
        ("a", "b"),
        DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL,
        Credentials(access_token="ya29"),
    )

    assert request.headers["Authorization"] == "Bearer ya29"
    assert request.headers["access_token_auth"] == "true"
    assert json.loads(request.body)["registration_tokens"] == ["a", "b"]
