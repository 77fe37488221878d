# fcmpush/__main__.py
"""Command line entry point: ``python -m fcmpush {send,token} ...``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import voluptuous as vol

from .Auth.service_account import ServiceAccount
from .client import FcmClient, FcmClientConfig
from .const import PRIORITIES, PRIORITY_NORMAL
from .exceptions import FcmError
from .fanout import FanoutStrategy
from .message import Message, Notification
from .recipient import Device, Topic


def _parse_data(items: Sequence[str]) -> dict[str, str]:
    data: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--data expects key=value, got {item!r}")
        data[key] = value
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fcmpush", description="Send Firebase Cloud Messaging notifications."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    auth = argparse.ArgumentParser(add_help=False)
    auth.add_argument(
        "--service-account",
        type=Path,
        help="Service-account JSON key file (HTTP v1 API).",
    )

    token = sub.add_parser(
        "token", parents=[auth], help="Print a bearer token for the service account."
    )
    token.set_defaults(handler=_async_cmd_token)

    send = sub.add_parser("send", parents=[auth], help="Send one notification.")
    send.add_argument("--api-key", help="Legacy server key (used without --service-account).")
    send.add_argument("--project-id", help="Override the service account's project id.")
    send.add_argument("--proxy-url", help="Send to this URL instead of the FCM endpoint.")
    send.add_argument("--token", action="append", default=[], help="Device registration token.")
    send.add_argument("--topic", action="append", default=[], help="Topic name.")
    send.add_argument("--title")
    send.add_argument("--body")
    send.add_argument("--data", action="append", default=[], metavar="KEY=VALUE")
    send.add_argument("--priority", choices=PRIORITIES, default=PRIORITY_NORMAL)
    send.add_argument(
        "--strategy",
        choices=[s.value for s in FanoutStrategy],
        default=FanoutStrategy.TOPIC_RELAY.value,
        help="Multi-recipient strategy for the HTTP v1 API.",
    )
    send.set_defaults(handler=_async_cmd_send)
    return parser


async def _async_cmd_token(args: argparse.Namespace) -> int:
    if args.service_account is None:
        print("token requires --service-account", file=sys.stderr)
        return 2
    account = ServiceAccount.from_file(args.service_account)
    async with FcmClient() as client:
        token = await client.async_fetch_access_token_for_service_account(account)
    print(token.token)
    return 0


async def _async_cmd_send(args: argparse.Namespace) -> int:
    if args.service_account is None and not args.api_key:
        print("send requires --service-account or --api-key", file=sys.stderr)
        return 2
    if not args.token and not args.topic:
        print("send requires at least one --token or --topic", file=sys.stderr)
        return 2

    message = Message(
        notification=Notification(title=args.title, body=args.body),
        data=_parse_data(args.data),
        priority=args.priority,
    )
    for token in args.token:
        message.add_recipient(Device(token))
    for topic in args.topic:
        message.add_recipient(Topic(topic))

    config = FcmClientConfig(
        api_key=args.api_key,
        project_id=args.project_id,
        proxy_url=args.proxy_url,
        strategy=FanoutStrategy(args.strategy),
        log_debug_verbose=args.verbose,
    )
    async with FcmClient(config) as client:
        if args.service_account is not None:
            account = ServiceAccount.from_file(args.service_account)
            await client.async_fetch_access_token_for_service_account(account)
        result = await client.async_send(message)

    print(f"{result.status} {result.response.text()}")
    if result.teardown_error is not None:
        print(f"warning: relay teardown failed: {result.teardown_error}", file=sys.stderr)
    return 0 if result.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(args.handler(args))
    except argparse.ArgumentTypeError as err:
        parser.error(str(err))
    except (FcmError, OSError, ValueError, vol.Invalid) as err:
        print(f"error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
