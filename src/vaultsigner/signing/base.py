"""Canonical recoverable signature.

Signing flow:
1. Submit a RAW or CONTRACT_CALL transaction to the custody service
2. Poll until the service reports a terminal status
3. Decode the returned signature block into (r, s, v)
4. Hand the signature to the caller (never mutated afterwards)
"""

from dataclasses import dataclass

UINT256_MAX = 2**256 - 1

# v offsets for the two encodings
MESSAGE_V_OFFSET = 27
CHAIN_V_OFFSET = 35


@dataclass(frozen=True)
class Signature:
    """ECDSA signature with recovery indicator.

    Attributes:
        r: R component (256-bit unsigned)
        s: S component (256-bit unsigned)
        v: Encoded recovery indicator (27/28 or chain-bound)
    """
    r: int
    s: int
    v: int

    @property
    def vrs(self) -> tuple[int, int, int]:
        return self.v, self.r, self.s

    def to_bytes(self) -> bytes:
        """Encode as r (32 bytes) || s (32 bytes) || v (big-endian, minimal width)."""
        v_len = max(1, (self.v.bit_length() + 7) // 8)
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + self.v.to_bytes(v_len, "big")

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()
