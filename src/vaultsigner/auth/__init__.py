"""Request authentication for the custody API."""

from vaultsigner.auth.claims import AuthClaims, build_claims, serialize_body
from vaultsigner.auth.jwt_signer import RequestSigner, load_private_key, parse_private_key

__all__ = [
    "AuthClaims",
    "RequestSigner",
    "build_claims",
    "load_private_key",
    "parse_private_key",
    "serialize_body",
]
