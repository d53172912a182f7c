import typing as t
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import Account
from events.models import Ticket
from events.service.ticket_code import is_canonical_scan_code, normalize_scan_code

logger = structlog.get_logger(__name__)

CheckInStatus = t.Literal["checked_in", "duplicate", "invalid"]


@dataclass(frozen=True)
class CheckInResult:
    status: CheckInStatus
    message: str
    ticket_id: UUID | None = None
    holder_name: str | None = None
    checked_in_at: datetime | None = None


def _find_ticket_id(scan_code: str) -> UUID | None:
    """Resolve a scan code to a ticket.

    A stored code wins. Otherwise the code is matched against the code derived
    from the ticket id, which only needs the last six id characters.
    """
    stored = Ticket.objects.filter(qr_code=scan_code).values_list("id", flat=True).first()
    if stored is not None:
        return stored
    suffix = scan_code[-6:].lower()
    for ticket_id, qr_code in Ticket.objects.filter(id__iendswith=suffix).values_list("id", "qr_code"):
        if normalize_scan_code(qr_code, ticket_id) == scan_code:
            return ticket_id
    return None


@transaction.atomic
def check_in_by_scan_code(scan_code: str, operator: Account) -> CheckInResult:
    """Check in the ticket behind a scanned code.

    Used tickets are terminal: a second scan reports a duplicate and changes nothing.
    """
    scan_code = scan_code.strip().upper()
    if not is_canonical_scan_code(scan_code):
        return CheckInResult(status="invalid", message=str(_("Invalid ticket code.")))

    ticket_id = _find_ticket_id(scan_code)
    if ticket_id is None:
        logger.info("ticket_checkin_unknown_code", scan_code=scan_code)
        return CheckInResult(status="invalid", message=str(_("Ticket not found.")))

    ticket = Ticket.objects.select_for_update().select_related("holder").get(pk=ticket_id)
    holder_name = ticket.holder.name if ticket.holder else None

    if ticket.is_checked_in:
        return CheckInResult(
            status="duplicate",
            message=str(_("This ticket has already been checked in.")),
            ticket_id=ticket.id,
            holder_name=holder_name,
            checked_in_at=ticket.checked_in_at,
        )
    if ticket.status in (Ticket.TicketStatus.CANCELLED, Ticket.TicketStatus.EXPIRED):
        return CheckInResult(
            status="invalid",
            message=str(_("Invalid ticket status: {status}")).format(status=ticket.status),
            ticket_id=ticket.id,
            holder_name=holder_name,
        )

    ticket.status = Ticket.TicketStatus.USED
    ticket.is_used = True
    ticket.checked_in_at = timezone.now()
    ticket.checked_in_by = operator
    ticket.save(update_fields=["status", "is_used", "checked_in_at", "checked_in_by", "updated_at"])
    logger.info("ticket_checked_in", ticket_id=str(ticket.id), operator_id=str(operator.id))

    return CheckInResult(
        status="checked_in",
        message=str(_("Check-in successful.")),
        ticket_id=ticket.id,
        holder_name=holder_name,
        checked_in_at=ticket.checked_in_at,
    )
