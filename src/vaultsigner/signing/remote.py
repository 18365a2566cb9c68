"""Remote signer for EVM chains.

Signs hashes, messages and transactions through the custody service instead
of a local private key.

Note: RAW signing (sign_hash, sign_message, sign_transaction) bypasses the
custody service's contextual policy engine. send_transaction submits a
CONTRACT_CALL, which is subject to policy.
"""

import logging
from typing import Optional, Union

from eth_account.messages import defunct_hash_message

from vaultsigner.address_book import AddressBook
from vaultsigner.client import CustodyClient
from vaultsigner.config import Settings, get_settings
from vaultsigner.contracts import (
    ContractCallData,
    PeerPath,
    RawMessageData,
    SigningRequest,
    TransactionOperation,
    TransactionState,
)
from vaultsigner.exceptions import DecodeError
from vaultsigner.services.orchestrator import TransactionOrchestrator
from vaultsigner.signing.base import Signature
from vaultsigner.signing.codec import decode_signature

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 60_000


class RemoteSigner:
    """EVM signer backed by a custody vault account.

    You must register every whitelisted destination in the address book;
    unknown destinations are sent as one-time addresses.
    """

    def __init__(
        self,
        orchestrator: TransactionOrchestrator,
        account_id: str,
        asset_id: str,
        address: str,
        chain_id: int,
        address_book: Optional[AddressBook] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ):
        """Initialize signer.

        Args:
            orchestrator: Transaction orchestrator bound to a custody client
            account_id: Vault account that holds the signing key
            asset_id: Custody asset ID for the chain
            address: Address controlled by the vault account
            chain_id: Chain ID used for chain-bound signatures
            address_book: Address -> peer ID mapping for destinations
            timeout_ms: How long to wait for approval of each request
        """
        self.orchestrator = orchestrator
        self.account_id = account_id
        self.asset_id = asset_id
        self.address = address
        self.chain_id = chain_id
        self.address_book = address_book if address_book is not None else AddressBook()
        self.timeout_ms = timeout_ms

    @classmethod
    async def connect(
        cls,
        client: CustodyClient,
        settings: Optional[Settings] = None,
        address_book: Optional[AddressBook] = None,
    ) -> "RemoteSigner":
        """Create a signer for the configured vault account.

        Looks up the vault's deposit address for the configured chain.

        Raises:
            ValueError: If the configured chain is not supported
            DecodeError: If the vault has no deposit address
        """
        settings = settings or get_settings()
        asset_id = settings.get_asset_id()

        addresses = await client.vault_addresses(settings.vault_account_id, asset_id)
        if not addresses:
            raise DecodeError(
                f"Vault account {settings.vault_account_id} has no {asset_id} deposit address"
            )

        signer = cls(
            TransactionOrchestrator(client, poll_interval=settings.poll_interval),
            account_id=settings.vault_account_id,
            asset_id=asset_id,
            address=addresses[0].address,
            chain_id=settings.chain_id,
            address_book=address_book,
            timeout_ms=settings.transaction_timeout_ms,
        )
        logger.info(f"Remote signer ready: vault {signer.account_id}, address {signer.address}")
        return signer

    def set_timeout(self, timeout_ms: int) -> None:
        """Set how long to wait for a request to be approved, in milliseconds."""
        self.timeout_ms = timeout_ms

    def add_account(self, peer_id: str, address: str) -> None:
        """Register the custody peer ID of a destination address."""
        self.address_book.add(peer_id, address)

    async def sign_hash(self, message_hash: bytes, chain_id: Optional[int] = None) -> Signature:
        """Sign a 32-byte hash with the RAW operation.

        Args:
            message_hash: Hash to sign
            chain_id: Chain to bind v to, or None for 27/28 encoding

        Returns:
            Decoded signature
        """
        if len(message_hash) != 32:
            raise ValueError(f"Expected a 32-byte hash, got {len(message_hash)} bytes")

        args = SigningRequest(
            asset_id=self.asset_id,
            operation=TransactionOperation.RAW,
            source=PeerPath.vault_account(self.account_id),
            extra_parameters=RawMessageData.from_payloads(bytes(message_hash)),
        )
        return await self.orchestrator.execute(
            args,
            self.timeout_ms,
            lambda state: decode_signature(state, chain_id),
        )

    async def sign_message(self, message: Union[bytes, str]) -> Signature:
        """Sign a message with the EIP-191 personal message prefix."""
        if isinstance(message, str):
            message_hash = defunct_hash_message(text=message)
        else:
            message_hash = defunct_hash_message(primitive=message)
        return await self.sign_hash(bytes(message_hash))

    async def sign_transaction(self, sighash: bytes) -> Signature:
        """Sign a transaction sighash with a chain-bound v."""
        return await self.sign_hash(sighash, self.chain_id)

    def destination_for(self, address: str) -> PeerPath:
        """Build the destination peer for an address.

        Registered addresses become external wallets; anything else is sent
        as a one-time address.
        """
        peer_id = self.address_book.get(address)
        if peer_id is None:
            logger.debug(f"No peer registered for {address}, using one-time address")
            return PeerPath.one_time(address)
        return PeerPath.external_wallet(peer_id)

    async def send_transaction(
        self,
        to: str,
        data: Optional[Union[bytes, str]] = None,
        value: int = 0,
        note: str = "",
    ) -> str:
        """Submit a contract call and wait for its transaction hash.

        Args:
            to: Destination address
            data: Calldata as bytes or a hex string
            value: Amount in wei
            note: Note shown in the custody console

        Returns:
            Transaction hash
        """
        extra = None
        if data:
            call_data = data if isinstance(data, str) else f"0x{data.hex()}"
            extra = ContractCallData(contract_call_data=call_data)

        args = SigningRequest(
            asset_id=self.asset_id,
            operation=TransactionOperation.CONTRACT_CALL,
            source=PeerPath.vault_account(self.account_id),
            destination=self.destination_for(to),
            amount=str(value),
            extra_parameters=extra,
            note=note,
        )
        return await self.orchestrator.execute(args, self.timeout_ms, _transaction_hash)


def _transaction_hash(state: TransactionState) -> str:
    if not state.tx_hash:
        raise DecodeError(f"Transaction {state.id} completed without a transaction hash")
    return state.tx_hash
