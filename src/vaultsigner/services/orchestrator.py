"""Transaction lifecycle orchestration.

Flow:
1. submit() creates the transaction and returns a handle
2. run_to_completion() polls the transaction status until it is terminal
3. On a success-class status the caller's callback turns the state into a result

The status partition below is the only input to the loop exit decision,
apart from the local timeout which depends on elapsed time alone.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from vaultsigner.client import CustodyClient
from vaultsigner.contracts import SigningRequest, TransactionState, TransactionStatus
from vaultsigner.exceptions import (
    TerminalFailureError,
    TransactionCancelledError,
    TransactionTimeoutError,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class StatusClass(str, Enum):
    """Outcome class of a remote transaction status."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


PENDING_STATUSES = frozenset({
    TransactionStatus.SUBMITTED,
    TransactionStatus.QUEUED,
    TransactionStatus.PENDING_SIGNATURE,
    TransactionStatus.PENDING_AUTHORIZATION,
    TransactionStatus.PENDING_3RD_PARTY_MANUAL_APPROVAL,
    TransactionStatus.PENDING_3RD_PARTY,
    TransactionStatus.PENDING,
    TransactionStatus.BROADCASTING,
    TransactionStatus.CONFIRMING,
    TransactionStatus.PENDING_AML_SCREENING,
    TransactionStatus.PARTIALLY_COMPLETED,
    TransactionStatus.CANCELLING,
})

SUCCESS_STATUSES = frozenset({
    TransactionStatus.COMPLETED,
    TransactionStatus.CONFIRMED,
})

FAILURE_STATUSES = frozenset({
    TransactionStatus.BLOCKED,
    TransactionStatus.CANCELLED,
    TransactionStatus.REJECTED,
    TransactionStatus.FAILED,
    TransactionStatus.TIMEOUT,
})

_STATUS_CLASSES = {
    **{status: StatusClass.PENDING for status in PENDING_STATUSES},
    **{status: StatusClass.SUCCESS for status in SUCCESS_STATUSES},
    **{status: StatusClass.FAILURE for status in FAILURE_STATUSES},
}


def classify_status(status: TransactionStatus) -> StatusClass:
    """Map a transaction status to pending, success or failure."""
    return _STATUS_CLASSES[status]


@dataclass(frozen=True)
class RequestHandle:
    """Reference to a submitted transaction.

    Attributes:
        id: Transaction ID assigned by the service
        status: Status reported at creation
        submitted_at: Monotonic time the creation call returned
    """
    id: str
    status: TransactionStatus
    submitted_at: float


SuccessCallback = Callable[[TransactionState], Union[R, Awaitable[R]]]


class TransactionOrchestrator:
    """Submits transactions and polls them to a terminal outcome.

    Nothing is retried: a transport error during submission or polling
    propagates to the caller unchanged.
    """

    def __init__(
        self,
        client: CustodyClient,
        poll_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize orchestrator.

        Args:
            client: Custody API client
            poll_interval: Seconds to wait between status polls
            clock: Monotonic time source in seconds
            sleep: Coroutine used to wait between polls
        """
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        self.client = client
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    async def submit(self, args: SigningRequest) -> RequestHandle:
        """Create a transaction.

        Args:
            args: Transaction arguments

        Returns:
            Handle for polling the transaction
        """
        response = await self.client.create_transaction(args)
        logger.info(
            f"Submitted {args.operation.value} transaction {response.id} "
            f"for {args.asset_id} (status: {response.status.value})"
        )
        return RequestHandle(id=response.id, status=response.status, submitted_at=self._clock())

    async def run_to_completion(
        self,
        handle: RequestHandle,
        timeout_ms: int,
        on_success: SuccessCallback,
        cancel: Optional[asyncio.Event] = None,
    ) -> R:
        """Poll a transaction until it completes, fails or the timeout elapses.

        Args:
            handle: Handle returned by submit()
            timeout_ms: Local budget measured from submission
            on_success: Called with the terminal state; its result is returned
            cancel: Optional event that stops the loop when set

        Returns:
            Result of on_success

        Raises:
            TransactionTimeoutError: Still pending when the budget ran out
            TerminalFailureError: Service reported a failure-class status
            TransactionCancelledError: The cancel event was set
        """
        polls = 0
        while True:
            if cancel is not None and cancel.is_set():
                logger.warning(f"Stopped polling transaction {handle.id}: cancelled")
                raise TransactionCancelledError(handle.id)

            elapsed_ms = (self._clock() - handle.submitted_at) * 1000
            if elapsed_ms >= timeout_ms:
                logger.warning(
                    f"Transaction {handle.id} still pending after {polls} polls, "
                    f"timed out after {timeout_ms}ms"
                )
                raise TransactionTimeoutError(handle.id, timeout_ms)

            state = await self.client.get_transaction(handle.id)
            polls += 1
            status_class = classify_status(state.status)
            logger.debug(f"Transaction {handle.id} poll #{polls}: {state.status.value}")

            if status_class is StatusClass.SUCCESS:
                logger.info(f"Transaction {handle.id} completed with {state.status.value}")
                result = on_success(state)
                if inspect.isawaitable(result):
                    result = await result
                return result

            if status_class is StatusClass.FAILURE:
                logger.warning(
                    f"Transaction {handle.id} failed: {state.status.value} ({state.sub_status})"
                )
                raise TerminalFailureError(state.status, state.sub_status)

            remaining = timeout_ms / 1000 - (self._clock() - handle.submitted_at)
            await self._pause(min(self.poll_interval, max(remaining, 0)), cancel)

    async def execute(
        self,
        args: SigningRequest,
        timeout_ms: int,
        on_success: SuccessCallback,
        cancel: Optional[asyncio.Event] = None,
    ) -> R:
        """Submit a transaction and poll it to completion."""
        handle = await self.submit(args)
        return await self.run_to_completion(handle, timeout_ms, on_success, cancel=cancel)

    async def _pause(self, delay: float, cancel: Optional[asyncio.Event]) -> None:
        """Wait up to delay seconds, waking early if cancel is set."""
        if cancel is None or delay <= 0:
            await self._sleep(delay)
            return

        sleeper = asyncio.ensure_future(self._sleep(delay))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()
            await asyncio.gather(sleeper, waiter, return_exceptions=True)
