from .event import Event
from .ticket import Ticket, TicketHolder, TicketTransfer

__all__ = [
    "Event",
    "Ticket",
    "TicketHolder",
    "TicketTransfer",
]
