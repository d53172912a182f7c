"""Client-side orchestration of a ticket transfer.

One attempt walks a fixed sequence of backend round-trips::

    IDLE -> VALIDATING_SESSION -> CHECKING_ELIGIBILITY -> RESOLVING_TARGET
         -> TRANSFERRING -> SUCCEEDED | REJECTED

Each step only starts once the previous one has answered. The eligibility
answer is informative: the atomic transfer re-validates on the backend and is
the only source of truth. Nothing is retried automatically.
"""

import enum
import re
import typing as t
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from events.exceptions import (
    InvalidEmail,
    NotAuthenticated,
    NotTransferable,
    SelfTransfer,
    TargetNotFound,
    TransferError,
    TransferFailed,
    TransferRejected,
)
from events.schema import AccountRecord

if t.TYPE_CHECKING:
    from accounts.models import Account
    from events.service.ticket_backend import TicketBackend

logger = structlog.get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

T = t.TypeVar("T")


class TransferState(enum.StrEnum):
    IDLE = "idle"
    VALIDATING_SESSION = "validating_session"
    CHECKING_ELIGIBILITY = "checking_eligibility"
    RESOLVING_TARGET = "resolving_target"
    TRANSFERRING = "transferring"
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TransferOutcome:
    success: bool
    message: str
    state: TransferState
    target: AccountRecord | None = None
    failed_step: TransferState | None = None
    error: TransferError | None = field(default=None, compare=False)


StateListener = t.Callable[[TransferState], None]


class TransferProtocol:
    """Runs transfer attempts against a ``TicketBackend``.

    The instance keeps no per-attempt state, so concurrent attempts are sent
    independently and the backend decides which one wins.
    """

    def __init__(self, backend: "TicketBackend", *, on_state: StateListener | None = None) -> None:
        self.backend = backend
        self.on_state = on_state

    def _enter(self, state: TransferState, trace: list[TransferState]) -> None:
        trace.append(state)
        if self.on_state is not None:
            self.on_state(state)

    async def _call(self, step: str, awaitable: t.Awaitable[T]) -> T:
        """Await a backend round-trip, turning infrastructure errors into ``TransferFailed``."""
        try:
            return await awaitable
        except TransferError:
            raise
        except Exception as e:
            logger.exception("ticket_transfer_backend_error", step=step)
            raise TransferFailed() from e

    async def transfer(self, ticket_id: UUID, email: str, current_user: "Account | None") -> TransferOutcome:
        """Move ``ticket_id`` to the account registered under ``email``.

        Never raises a ``TransferError``: every failure comes back as an outcome
        with ``success=False`` and a message meant for the user.
        """
        trace: list[TransferState] = []
        self._enter(TransferState.IDLE, trace)
        target: AccountRecord | None = None
        try:
            email = (email or "").strip()
            if not EMAIL_RE.match(email):
                raise InvalidEmail()

            self._enter(TransferState.VALIDATING_SESSION, trace)
            if current_user is None or not current_user.is_authenticated:
                raise NotAuthenticated()

            self._enter(TransferState.CHECKING_ELIGIBILITY, trace)
            eligibility = await self._call("eligibility", self.backend.can_transfer_ticket(ticket_id, current_user.id))
            if not eligibility.can_transfer:
                raise NotTransferable(eligibility.message or None)

            self._enter(TransferState.RESOLVING_TARGET, trace)
            target = await self._call("resolve_target", self.backend.find_account_by_email(email))
            if target is None:
                raise TargetNotFound()
            if target.id == current_user.id:
                raise SelfTransfer()

            self._enter(TransferState.TRANSFERRING, trace)
            result = await self._call(
                "transfer", self.backend.transfer_ticket(ticket_id, target.email, current_user.id)
            )
            if not result.success:
                raise TransferRejected(result.message or None)

        except TransferError as e:
            failed_step = trace[-1]
            self._enter(TransferState.REJECTED, trace)
            logger.info(
                "ticket_transfer_attempt_rejected",
                ticket_id=str(ticket_id),
                error=type(e).__name__,
                failed_step=str(failed_step),
            )
            return TransferOutcome(
                success=False,
                message=e.message,
                state=TransferState.REJECTED,
                target=target,
                failed_step=failed_step,
                error=e,
            )

        self._enter(TransferState.SUCCEEDED, trace)
        logger.info("ticket_transfer_attempt_succeeded", ticket_id=str(ticket_id), target_id=str(target.id))
        return TransferOutcome(
            success=True,
            message=f"Ticket transferred successfully to {target.display_name or target.email}!",
            state=TransferState.SUCCEEDED,
            target=target,
        )
