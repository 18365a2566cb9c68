"""Signature decoding and remote signing.

Provides:
- Signature: canonical (r, s, v)
- decode_signature: turns a completed transaction into a Signature
- RemoteSigner: EVM signing through a custody vault account
"""

from vaultsigner.signing.base import Signature
from vaultsigner.signing.codec import decode_signature, encode_v
from vaultsigner.signing.remote import RemoteSigner

__all__ = [
    "RemoteSigner",
    "Signature",
    "decode_signature",
    "encode_v",
]
