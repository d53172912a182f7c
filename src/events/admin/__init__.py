"""Events admin.

Django autodiscover imports this module, which registers the admin classes
of the submodules.
"""

from events.admin.event import EventAdmin
from events.admin.ticket import TicketAdmin, TicketHolderAdmin, TicketTransferAdmin

__all__ = ["EventAdmin", "TicketAdmin", "TicketHolderAdmin", "TicketTransferAdmin"]
