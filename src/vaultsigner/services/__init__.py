"""Transaction lifecycle services."""

from vaultsigner.services.orchestrator import (
    RequestHandle,
    StatusClass,
    TransactionOrchestrator,
    classify_status,
)

__all__ = [
    "RequestHandle",
    "StatusClass",
    "TransactionOrchestrator",
    "classify_status",
]
