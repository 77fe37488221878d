# fcmpush/Auth/assertion.py
"""RS256-signed JWT assertions for the OAuth2 service-account flow."""

from __future__ import annotations

import time
from typing import Any

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..const import ASSERTION_LIFETIME_S, FCM_SCOPE, TOKEN_URL
from ..exceptions import SigningError

type PrivateKeyInput = str | bytes | rsa.RSAPrivateKey

_ALGORITHM = "RS256"


def load_private_key(private_key: PrivateKeyInput) -> rsa.RSAPrivateKey:
    """Load a PEM-encoded RSA private key.

    Service-account JSON files store the key with literal ``\\n`` escapes when
    copied through environment variables; those are normalized first.

    Raises:
        SigningError: if the key cannot be parsed or is not an RSA key.
    """
    if isinstance(private_key, rsa.RSAPrivateKey):
        return private_key

    pem = private_key.encode("utf-8") if isinstance(private_key, str) else private_key
    if b"\\n" in pem and b"\n" not in pem:
        pem = pem.replace(b"\\n", b"\n")

    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as err:
        raise SigningError(f"Malformed private key: {err}") from err

    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningError(
            f"RS256 requires an RSA private key, got {type(key).__name__}"
        )
    return key


def build_claims(
    issuer: str,
    *,
    scope: str = FCM_SCOPE,
    audience: str = TOKEN_URL,
    now: float | None = None,
) -> dict[str, Any]:
    """Return the claim set for an assertion issued at ``now``."""
    issued_at = int(time.time() if now is None else now)
    return {
        "iss": issuer,
        "scope": scope,
        "aud": audience,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_S,
    }


def generate_assertion(
    issuer: str,
    private_key: PrivateKeyInput,
    *,
    scope: str = FCM_SCOPE,
    audience: str = TOKEN_URL,
    now: float | None = None,
) -> str:
    """Build a signed ``header.claims.signature`` assertion.

    Args:
        issuer: Service account e-mail (``client_email``).
        private_key: PEM string/bytes or a loaded RSA private key.
        scope: OAuth scope requested for the bearer token.
        audience: Token endpoint the assertion is presented to.
        now: Issue time in Unix seconds; defaults to the current time.

    Returns:
        The compact-serialized JWT.

    Raises:
        SigningError: if the key is malformed or signing fails.
    """
    if not issuer:
        raise SigningError("Assertion issuer must not be empty")

    key = load_private_key(private_key)
    claims = build_claims(issuer, scope=scope, audience=audience, now=now)

    try:
        return jwt.encode(
            claims, key, algorithm=_ALGORITHM, headers={"typ": "JWT"}
        )
    except (jwt.PyJWTError, ValueError, TypeError) as err:
        raise SigningError(f"Failed to sign assertion: {err}") from err


def decode_assertion_claims(assertion: str) -> dict[str, Any]:
    """Return the claim set of an assertion without verifying its signature.

    Raises:
        jwt.DecodeError: if ``assertion`` is not a compact-serialized JWT.
    """
    return jwt.decode(assertion, options={"verify_signature": False})


__all__ = [
    "build_claims",
    "decode_assertion_claims",
    "generate_assertion",
    "load_private_key",
]
