# fcmpush/Auth/service_account.py
"""Load Google service-account credentials used for the HTTP v1 API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import voluptuous as vol

from ..const import TOKEN_URL

SERVICE_ACCOUNT_SCHEMA = vol.Schema(
    {
        vol.Required("client_email"): vol.All(str, vol.Length(min=1)),
        vol.Required("private_key"): vol.All(str, vol.Length(min=1)),
        vol.Required("project_id"): vol.All(str, vol.Length(min=1)),
        vol.Optional("token_uri", default=TOKEN_URL): vol.All(str, vol.Length(min=1)),
    },
    extra=vol.ALLOW_EXTRA,
)


@dataclass(frozen=True, slots=True)
class ServiceAccount:
    """The fields of a service-account key file the client needs."""

    client_email: str
    private_key: str
    project_id: str
    token_uri: str = TOKEN_URL

    def __repr__(self) -> str:
        return (
            f"ServiceAccount(client_email={self.client_email!r}, "
            f"project_id={self.project_id!r})"
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ServiceAccount:
        """Validate a parsed key file.

        Raises:
            vol.Invalid: if a required field is missing or empty.
        """
        validated = SERVICE_ACCOUNT_SCHEMA(dict(data))
        return cls(
            client_email=validated["client_email"],
            private_key=validated["private_key"],
            project_id=validated["project_id"],
            token_uri=validated["token_uri"],
        )

    @classmethod
    def from_file(cls, path: str | Path) -> ServiceAccount:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise vol.Invalid("Service account file must contain a JSON object")
        return cls.from_mapping(data)


__all__ = ["SERVICE_ACCOUNT_SCHEMA", "ServiceAccount"]
