"""Transaction contracts for the custody API.

Field aliases are the camelCase names the service sends and expects. Enum
vocabularies are closed: a value outside them fails validation.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class TransactionOperation(str, Enum):
    """Kind of transaction submitted to the custody service."""
    TRANSFER = "TRANSFER"
    RAW = "RAW"
    CONTRACT_CALL = "CONTRACT_CALL"
    MINT = "MINT"
    BURN = "BURN"
    SUPPLY_TO_COMPOUND = "SUPPLY_TO_COMPOUND"
    REDEEM_FROM_COMPOUND = "REDEEM_FROM_COMPOUND"


class PeerType(str, Enum):
    """Kind of source or destination inside the custody system."""
    VAULT_ACCOUNT = "VAULT_ACCOUNT"
    EXCHANGE_ACCOUNT = "EXCHANGE_ACCOUNT"
    INTERNAL_WALLET = "INTERNAL_WALLET"
    EXTERNAL_WALLET = "EXTERNAL_WALLET"
    ONE_TIME_ADDRESS = "ONE_TIME_ADDRESS"
    NETWORK_CONNECTION = "NETWORK_CONNECTION"
    FIAT_ACCOUNT = "FIAT_ACCOUNT"
    COMPOUND = "COMPOUND"


class TransactionStatus(str, Enum):
    """Remote transaction status."""
    SUBMITTED = "SUBMITTED"
    QUEUED = "QUEUED"
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    PENDING_AUTHORIZATION = "PENDING_AUTHORIZATION"
    PENDING_3RD_PARTY_MANUAL_APPROVAL = "PENDING_3RD_PARTY_MANUAL_APPROVAL"
    PENDING_3RD_PARTY = "PENDING_3RD_PARTY"
    PENDING = "PENDING"  # deprecated
    BROADCASTING = "BROADCASTING"
    CONFIRMING = "CONFIRMING"
    CONFIRMED = "CONFIRMED"  # deprecated, replaced by COMPLETED
    COMPLETED = "COMPLETED"
    PENDING_AML_SCREENING = "PENDING_AML_SCREENING"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"
    CANCELLING = "CANCELLING"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"
    BLOCKED = "BLOCKED"


class WireModel(BaseModel):
    """Base for contracts that accept both field names and wire aliases."""

    model_config = ConfigDict(populate_by_name=True)


class OneTimeAddress(WireModel):
    """Ad-hoc blockchain address used as a transfer destination."""

    address: str = Field(..., description="Destination address")
    tag: Optional[str] = Field(None, description="Memo/tag for chains that need one")


class PeerPath(WireModel):
    """Source or destination of a transfer."""

    peer_type: PeerType = Field(..., alias="type", description="Peer kind")
    id: Optional[str] = Field(None, description="Peer ID inside the custody system")
    one_time_address: Optional[OneTimeAddress] = Field(None, alias="oneTimeAddress")

    @classmethod
    def vault_account(cls, account_id: str) -> "PeerPath":
        return cls(peer_type=PeerType.VAULT_ACCOUNT, id=account_id)

    @classmethod
    def external_wallet(cls, wallet_id: str) -> "PeerPath":
        return cls(peer_type=PeerType.EXTERNAL_WALLET, id=wallet_id)

    @classmethod
    def one_time(cls, address: str, tag: Optional[str] = None) -> "PeerPath":
        return cls(
            peer_type=PeerType.ONE_TIME_ADDRESS,
            one_time_address=OneTimeAddress(address=address, tag=tag),
        )


class UnsignedMessage(WireModel):
    """A message (usually a 32-byte hash) to be signed with the RAW operation."""

    content: bytes = Field(..., description="Message bytes, sent hex encoded")

    @field_serializer("content")
    def serialize_content(self, content: bytes) -> str:
        return content.hex()


class RawMessages(WireModel):
    messages: list[UnsignedMessage]


class ContractCallData(WireModel):
    """Calldata for a CONTRACT_CALL operation."""

    contract_call_data: str = Field(..., alias="contractCallData", description="Hex calldata")


class RawMessageData(WireModel):
    """Messages for a RAW signing operation."""

    raw_message_data: RawMessages = Field(..., alias="rawMessageData")

    @classmethod
    def from_payloads(cls, *payloads: bytes) -> "RawMessageData":
        return cls(
            raw_message_data=RawMessages(
                messages=[UnsignedMessage(content=p) for p in payloads]
            )
        )


# Exactly one variant is sent in extraParameters
ExtraParameters = Union[ContractCallData, RawMessageData]


class SigningRequest(WireModel):
    """Arguments for creating a transaction (POST /transactions)."""

    asset_id: str = Field(..., alias="assetId", description="Custody asset ID, e.g. ETH")
    operation: TransactionOperation = Field(..., description="Operation type")
    source: PeerPath = Field(..., description="Where funds or keys come from")
    destination: Optional[PeerPath] = Field(None, description="Transfer destination")
    amount: str = Field(default="", description="Decimal amount as a string")
    extra_parameters: Optional[ExtraParameters] = Field(None, alias="extraParameters")
    gas_price: Optional[str] = Field(None, alias="gasPrice")
    gas_limit: Optional[str] = Field(None, alias="gasLimit")
    note: str = Field(default="", description="Free-form note shown in the console")


# Alias kept for the name used by the custody API documentation
TransactionArguments = SigningRequest


class CreateTransactionResponse(WireModel):
    id: str
    status: TransactionStatus


class SignatureBlock(WireModel):
    """Signature components as returned by the service."""

    full_sig: str = Field(..., alias="fullSig")
    r: str
    s: str
    v: int = Field(..., description="Raw recovery indicator")


class SignedMessage(WireModel):
    content: str
    algorithm: str
    derivation_path: list[int] = Field(..., alias="derivationPath")
    signature: SignatureBlock
    public_key: str = Field(..., alias="publicKey")


class TransactionState(WireModel):
    """Transaction details (GET /transactions/{id})."""

    id: str
    asset_id: str = Field(..., alias="assetId")
    status: TransactionStatus
    sub_status: str = Field(..., alias="subStatus")
    tx_hash: Optional[str] = Field(None, alias="txHash")
    signed_messages: list[SignedMessage] = Field(..., alias="signedMessages")
