"""Signature decoding for completed custody transactions.

The service reports v as a raw recovery indicator (0 or 1). Only its low bit
is used, so a v already encoded as 27/28 is not supported. It is encoded as:
- chain-bound (EIP-155): v = recovery_id + chain_id * 2 + 35
- message signature:     v = recovery_id + 27
"""

import logging
import re
from typing import Optional

from vaultsigner.contracts import TransactionState
from vaultsigner.exceptions import DecodeError
from vaultsigner.signing.base import (
    CHAIN_V_OFFSET,
    MESSAGE_V_OFFSET,
    UINT256_MAX,
    Signature,
)

logger = logging.getLogger(__name__)

HEX_PATTERN = re.compile(r"(0x)?[0-9a-fA-F]+")


def parse_component(name: str, value: str) -> int:
    """Parse a hex-encoded signature component (0x prefix optional).

    Raises:
        DecodeError: If the value is not hex or exceeds 256 bits
    """
    if not isinstance(value, str) or not HEX_PATTERN.fullmatch(value):
        raise DecodeError(f"Could not parse signature component {name}", raw=str(value))

    parsed = int(value, 16)
    if parsed > UINT256_MAX:
        raise DecodeError(f"Signature component {name} out of range", raw=value)
    return parsed


def encode_v(recovery_id: int, chain_id: Optional[int] = None) -> int:
    """Encode a recovery id as v, bound to a chain when chain_id is given."""
    if chain_id is not None:
        return recovery_id + chain_id * 2 + CHAIN_V_OFFSET
    return recovery_id + MESSAGE_V_OFFSET


def decode_signature(state: TransactionState, chain_id: Optional[int] = None) -> Signature:
    """Decode the first signed message of a completed transaction.

    Args:
        state: Transaction details in a success-class status
        chain_id: Chain to bind v to, or None for a message signature

    Returns:
        Canonical Signature

    Raises:
        DecodeError: If no signature was returned or r/s do not parse
    """
    if not state.signed_messages:
        raise DecodeError(f"No signature returned for transaction {state.id}")

    block = state.signed_messages[0].signature
    r = parse_component("r", block.r)
    s = parse_component("s", block.s)
    recovery_id = block.v % 2

    signature = Signature(r=r, s=s, v=encode_v(recovery_id, chain_id))
    logger.debug(f"Decoded signature for {state.id} (v={signature.v}, chain_id={chain_id})")
    return signature
