"""Request and response contracts for the custody API.

These Pydantic models mirror the remote JSON schema.
"""

from vaultsigner.contracts.transactions import (
    ContractCallData,
    CreateTransactionResponse,
    ExtraParameters,
    OneTimeAddress,
    PeerPath,
    PeerType,
    RawMessageData,
    SignatureBlock,
    SignedMessage,
    SigningRequest,
    TransactionArguments,
    TransactionOperation,
    TransactionState,
    TransactionStatus,
    UnsignedMessage,
)
from vaultsigner.contracts.vaults import (
    CreateVaultRequest,
    CreateVaultResponse,
    DepositAddress,
    VaultAccount,
    VaultAccountsPage,
    VaultAsset,
)

__all__ = [
    # Transaction contracts
    "ContractCallData",
    "CreateTransactionResponse",
    "ExtraParameters",
    "OneTimeAddress",
    "PeerPath",
    "PeerType",
    "RawMessageData",
    "SignatureBlock",
    "SignedMessage",
    "SigningRequest",
    "TransactionArguments",
    "TransactionOperation",
    "TransactionState",
    "TransactionStatus",
    "UnsignedMessage",
    # Vault contracts
    "CreateVaultRequest",
    "CreateVaultResponse",
    "DepositAddress",
    "VaultAccount",
    "VaultAccountsPage",
    "VaultAsset",
]
