"""RS256 request token signer.

Signs per-request claim sets with the local RSA key. The key only
authenticates API calls; transaction keys stay inside the custody service.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Union

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from vaultsigner.auth.claims import (
    DEFAULT_EXPIRY_SECONDS,
    AuthClaims,
    build_claims,
    random_nonce,
    serialize_body,
)
from vaultsigner.exceptions import SigningError

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"


def parse_private_key(pem: Union[bytes, str]) -> RSAPrivateKey:
    """Parse a PEM encoded RSA private key.

    Raises:
        SigningError: If the PEM is malformed or not an RSA key
    """
    if isinstance(pem, str):
        pem = pem.encode("utf-8")

    try:
        key = load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SigningError(f"Could not parse RSA private key: {e}") from e

    if not isinstance(key, RSAPrivateKey):
        raise SigningError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


def load_private_key(path: Union[str, Path]) -> RSAPrivateKey:
    """Load the RSA private key from a PEM file.

    Args:
        path: Path to the PEM file (~ is expanded)

    Returns:
        Parsed RSA private key

    Raises:
        SigningError: If the file is missing or the key is malformed
    """
    key_path = Path(path).expanduser()
    try:
        pem = key_path.read_bytes()
    except OSError as e:
        raise SigningError(f"Could not read RSA key file {key_path}: {e}") from e

    logger.debug(f"Loaded request signing key from {key_path}")
    return parse_private_key(pem)


class RequestSigner:
    """Produces a fresh bearer token for every request.

    Tokens are never cached: two identical requests get different nonces
    and the service rejects replays.
    """

    def __init__(
        self,
        key: Union[RSAPrivateKey, bytes, str],
        api_key: str,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.time,
        nonce_source: Callable[[], int] = random_nonce,
    ):
        """Initialize signer.

        Args:
            key: RSA private key object or its PEM encoding
            api_key: API key sent as the token subject and X-API-Key header
            expiry_seconds: Token validity window
            clock: Wall-clock source in epoch seconds
            nonce_source: Source of 64-bit nonces
        """
        self._key = key if isinstance(key, RSAPrivateKey) else parse_private_key(key)
        self.api_key = api_key
        self.expiry_seconds = expiry_seconds
        self._clock = clock
        self._nonce_source = nonce_source

    def claims_for(self, uri: str, body: Any) -> AuthClaims:
        return build_claims(
            uri,
            serialize_body(body),
            self.api_key,
            expiry_seconds=self.expiry_seconds,
            clock=self._clock,
            nonce_source=self._nonce_source,
        )

    def encode(self, claims: AuthClaims) -> str:
        """Sign a claim set into a compact RS256 token."""
        try:
            return jwt.encode(claims.to_payload(), self._key, algorithm=ALGORITHM)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(f"Could not sign request token: {e}") from e

    def sign(self, uri: str, body: Any = None) -> str:
        """Build and sign the token for one request.

        Args:
            uri: Request path including the version prefix
            body: Request body (bytes are digested as-is)

        Returns:
            Compact JWT to send as a bearer token
        """
        return self.encode(self.claims_for(uri, body))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(api_key={self.api_key[:4]}***)"
