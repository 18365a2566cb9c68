"""Authentication claim sets for custody API requests.

Each request carries a claim set binding:
1. The request URI (e.g. /v1/transactions)
2. A SHA-256 digest of the exact body bytes sent on the wire
3. A random 64-bit nonce and issued/expiry times in epoch seconds

Claims are built fresh for every request and never reused.
"""

import hashlib
import json
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from vaultsigner.exceptions import ClockError, EncodingError

DEFAULT_EXPIRY_SECONDS = 55

# Body-less requests (GETs) digest the JSON unit value
EMPTY_BODY = b"null"


@dataclass(frozen=True)
class AuthClaims:
    """Claim set signed into a request token.

    Attributes:
        uri: Request path including the version prefix
        nonce: Random 64-bit value
        issued_at: Issue time in epoch seconds
        expires_at: issued_at + expiry window
        subject: API key of the caller
        body_digest: Lowercase hex SHA-256 of the serialized body
    """
    uri: str
    nonce: int
    issued_at: int
    expires_at: int
    subject: str
    body_digest: str

    def to_payload(self) -> dict:
        """Claim set with the field names the service expects."""
        return {
            "uri": self.uri,
            "nonce": self.nonce,
            "iat": self.issued_at,
            "exp": self.expires_at,
            "sub": self.subject,
            "bodyHash": self.body_digest,
        }


def serialize_body(body: Any) -> bytes:
    """Serialize a request body to the bytes sent on the wire.

    Args:
        body: None, raw bytes, a pydantic contract, or a JSON-compatible value

    Returns:
        Canonical body bytes

    Raises:
        EncodingError: If the body cannot be serialized
    """
    if body is None:
        return EMPTY_BODY
    if isinstance(body, bytes):
        return body

    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        return json.dumps(body, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Could not serialize request body: {e}") from e


def body_digest(serialized_body: bytes) -> str:
    return hashlib.sha256(serialized_body).hexdigest()


def random_nonce() -> int:
    return secrets.randbits(64)


def build_claims(
    uri: str,
    serialized_body: bytes,
    subject: str,
    expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
    clock: Callable[[], float] = time.time,
    nonce_source: Callable[[], int] = random_nonce,
) -> AuthClaims:
    """Build the claim set for one request.

    Args:
        uri: Request path including the version prefix
        serialized_body: Exact bytes that will be transmitted
        subject: API key of the caller
        expiry_seconds: Token validity window
        clock: Wall-clock source in epoch seconds
        nonce_source: Source of 64-bit nonces

    Returns:
        AuthClaims for the request

    Raises:
        ClockError: If the clock reports a time before the epoch
        EncodingError: If the body is not bytes
    """
    if not isinstance(serialized_body, (bytes, bytearray)):
        raise EncodingError(
            f"Request body must be serialized to bytes, got {type(serialized_body).__name__}"
        )

    now = clock()
    if now < 0:
        raise ClockError(f"System clock reports a time before the epoch: {now}")
    issued_at = int(now)

    return AuthClaims(
        uri=uri,
        nonce=nonce_source(),
        issued_at=issued_at,
        expires_at=issued_at + expiry_seconds,
        subject=subject,
        body_digest=body_digest(bytes(serialized_body)),
    )
