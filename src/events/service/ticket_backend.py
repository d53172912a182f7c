"""Backing store for the ticket screen and the transfer protocol.

The transfer protocol and the ticket screen only talk to the store through
the ``TicketBackend`` protocol, so the whole client-side flow can be driven
against a fake in tests. ``DjangoTicketBackend`` is the real implementation
over the ORM.
"""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

import structlog
from asgiref.sync import sync_to_async

from events.models import Ticket
from events.service import holder_service, transfer_service

if TYPE_CHECKING:
    from events.models import TicketTransfer
    from events.schema import AccountRecord, AssignHolderSchema, TransferEligibility, TransferResult

logger = structlog.get_logger(__name__)


class TicketBackend(Protocol):
    """Remote operations the ticket flows depend on.

    Every call is a round-trip and a suspension point for the caller.
    """

    async def can_transfer_ticket(self, ticket_id: UUID, user_id: UUID) -> "TransferEligibility":
        """Eligibility predicate.

        Returns:
            ``can_transfer`` plus a human-readable reason.
        """
        ...

    async def find_account_by_email(self, email: str) -> "AccountRecord | None":
        """Resolve an account by contact email, or None when nobody matches."""
        ...

    async def transfer_ticket(self, ticket_id: UUID, new_user_email: str, current_user_id: UUID) -> "TransferResult":
        """The atomic ownership change.

        Callers must branch on ``success``; a returned result is not a success by itself.
        """
        ...

    async def get_ticket_details(self, ticket_id: UUID) -> Ticket | None:
        """Read a ticket with its event, owner and holder."""
        ...

    async def assign_holder(self, ticket_id: UUID, user_id: UUID, payload: "AssignHolderSchema") -> Ticket:
        """Create the ticket's first holder and activate it."""
        ...

    async def get_transfer_history(self, ticket_id: UUID) -> list["TicketTransfer"]:
        """Transfer log, newest first."""
        ...


class DjangoTicketBackend:
    """``TicketBackend`` over the Django ORM."""

    async def can_transfer_ticket(self, ticket_id: UUID, user_id: UUID) -> "TransferEligibility":
        return await sync_to_async(transfer_service.check_transfer_eligibility)(ticket_id, user_id)

    async def find_account_by_email(self, email: str) -> "AccountRecord | None":
        return await sync_to_async(transfer_service.find_account_by_email)(email)

    async def transfer_ticket(self, ticket_id: UUID, new_user_email: str, current_user_id: UUID) -> "TransferResult":
        return await sync_to_async(transfer_service.transfer_ticket)(ticket_id, new_user_email, current_user_id)

    async def get_ticket_details(self, ticket_id: UUID) -> Ticket | None:
        return await Ticket.objects.with_details().filter(pk=ticket_id).afirst()

    async def assign_holder(self, ticket_id: UUID, user_id: UUID, payload: "AssignHolderSchema") -> Ticket:
        return await sync_to_async(holder_service.assign_holder)(ticket_id, user_id, payload)

    async def get_transfer_history(self, ticket_id: UUID) -> list["TicketTransfer"]:
        return await sync_to_async(transfer_service.get_transfer_history)(ticket_id)


_ticket_backend: TicketBackend | None = None


def get_ticket_backend() -> TicketBackend:
    """Get the process-wide ticket backend, creating it on first use."""
    global _ticket_backend
    if _ticket_backend is None:
        _ticket_backend = DjangoTicketBackend()
        logger.debug("ticket_backend_initialized", backend=type(_ticket_backend).__name__)
    return _ticket_backend


def set_ticket_backend(backend: TicketBackend | None) -> None:
    """Swap the process-wide backend. ``None`` resets it to the default on next use."""
    global _ticket_backend
    _ticket_backend = backend
