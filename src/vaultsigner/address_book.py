"""Local address to remote peer ID mapping.

Destinations registered here are sent as whitelisted wallets; any other
address is sent as a one-time address. The book is owned by the caller and
passed to the signer explicitly.
"""

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Lowercase hex address with a 0x prefix."""
    address = address.strip().lower()
    if not address.startswith("0x"):
        address = f"0x{address}"
    return address


class AddressBook:
    """Mapping of blockchain addresses to custody peer IDs.

    Reads do not lock and may run concurrently with an administrative
    writer. Writes are serialized; the last write for an address wins.

    Example:
        book = AddressBook()
        book.add("ext-wallet-1", "0xcbe74e21b070a979b9d6426b11e876d4cb618daf")
        peer_id = book.get("0xCBE74E21B070A979B9D6426B11E876D4CB618DAF")
    """

    def __init__(self, entries: Optional[dict[str, str]] = None):
        """Initialize the book.

        Args:
            entries: Optional initial mapping of address -> peer ID
        """
        self._entries: dict[str, str] = {}
        self._write_lock = threading.Lock()
        for address, peer_id in (entries or {}).items():
            self.add(peer_id, address)

    def add(self, peer_id: str, address: str) -> None:
        """Register the peer ID for an address."""
        key = normalize_address(address)
        with self._write_lock:
            previous = self._entries.get(key)
            self._entries[key] = peer_id

        if previous is not None and previous != peer_id:
            logger.info(f"Address {key} remapped from peer {previous} to {peer_id}")
        else:
            logger.debug(f"Address {key} mapped to peer {peer_id}")

    def get(self, address: str) -> Optional[str]:
        """Look up the peer ID for an address, or None if unknown."""
        return self._entries.get(normalize_address(address))

    def snapshot(self) -> dict[str, str]:
        """Copy of the current mapping."""
        with self._write_lock:
            return dict(self._entries)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and self.get(address) is not None

    def __len__(self) -> int:
        return len(self._entries)
