"""tests/conftest.py: Common fixtures for the FCM client tests."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from fcmpush.client import FcmClient, FcmClientConfig
from tests.helpers import RecordingTransport
from tests.helpers.constants import PROJECT_ID


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    """PKCS#8 PEM, the format used in service-account key files."""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def ec_pem() -> str:
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def make_client():
    """Factory returning (client, transport) wired to canned responses."""

    def _factory(responses, **config_kwargs) -> tuple[FcmClient, RecordingTransport]:
        transport = RecordingTransport(responses)
        config_kwargs.setdefault("project_id", PROJECT_ID)
        client = FcmClient(FcmClientConfig(**config_kwargs), transport=transport)
        return client, transport

    return _factory
