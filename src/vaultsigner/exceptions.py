"""Exception hierarchy for custody API operations.

Callers can tell apart three outcomes:
- no usable signature was obtained (SigningError, TransportError, DecodeError)
- the remote service explicitly refused (TerminalFailureError)
- we gave up waiting (TransactionTimeoutError)
"""

from typing import Optional


class VaultSignerError(Exception):
    """Base class for all vaultsigner errors."""
    pass


class ClockError(VaultSignerError):
    """Raised when the local clock reports a time before the epoch."""
    pass


class EncodingError(VaultSignerError):
    """Raised when a request body or claim set cannot be serialized."""
    pass


class SigningError(VaultSignerError):
    """Raised when the RSA key is invalid or token signing fails."""
    pass


class TransportError(VaultSignerError):
    """Raised when an HTTP call fails or returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, text: str = ""):
        self.status_code = status_code
        self.text = text
        super().__init__(message)


class DecodeError(VaultSignerError):
    """Raised when a response does not parse into the expected shape.

    Attributes:
        raw: The offending response text or value, kept for diagnostics
    """

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(f"{message}. Response: {raw}" if raw else message)


class TerminalFailureError(VaultSignerError):
    """Raised when a transaction reaches a failure-class status."""

    def __init__(self, status, sub_status: str):
        self.status = status
        self.sub_status = sub_status
        status_name = getattr(status, "value", status)
        super().__init__(
            f"Transaction was not completed successfully. "
            f"Final status: {status_name}. Sub status: {sub_status}"
        )


class TransactionTimeoutError(VaultSignerError, TimeoutError):
    """Raised when the local polling budget runs out while still pending."""

    def __init__(self, tx_id: str, timeout_ms: int):
        self.tx_id = tx_id
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for transaction {tx_id} to complete"
        )


class TransactionCancelledError(VaultSignerError):
    """Raised when a caller-supplied cancel event stops the polling loop."""

    def __init__(self, tx_id: str):
        self.tx_id = tx_id
        super().__init__(f"Stopped waiting for transaction {tx_id}: cancelled by caller")
