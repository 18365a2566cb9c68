"""vaultsigner - sign with a remote custody vault.

Authenticates requests to a custodial signing API and drives signing
transactions to a recoverable ECDSA signature.
"""

from vaultsigner.address_book import AddressBook
from vaultsigner.auth import RequestSigner
from vaultsigner.client import CustodyClient
from vaultsigner.services import TransactionOrchestrator, classify_status
from vaultsigner.signing import RemoteSigner, Signature, decode_signature

__version__ = "0.1.0"

__all__ = [
    "AddressBook",
    "CustodyClient",
    "RemoteSigner",
    "RequestSigner",
    "Signature",
    "TransactionOrchestrator",
    "classify_status",
    "decode_signature",
]
