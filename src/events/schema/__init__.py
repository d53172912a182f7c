"""Events schema package."""

from .ticket import (
    AssignHolderSchema,
    EventSchema,
    TicketHolderSchema,
    TicketSchema,
    TicketScreenSchema,
)
from .transfer import (
    AccountRecord,
    CheckInPayload,
    CheckInResultSchema,
    TicketTransferSchema,
    TransferEligibility,
    TransferOutcomeSchema,
    TransferPayload,
    TransferResult,
)

__all__ = [
    "AccountRecord",
    "AssignHolderSchema",
    "CheckInPayload",
    "CheckInResultSchema",
    "EventSchema",
    "TicketHolderSchema",
    "TicketSchema",
    "TicketScreenSchema",
    "TicketTransferSchema",
    "TransferEligibility",
    "TransferOutcomeSchema",
    "TransferPayload",
    "TransferResult",
]
