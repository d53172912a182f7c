import re
from uuid import UUID

import structlog
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError

from events.exceptions import HolderValidationError
from events.models import Ticket, TicketHolder
from events.schema import AssignHolderSchema

logger = structlog.get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DOCUMENT_LENGTHS = (11, 14)  # CPF, CNPJ


def clean_document(document: str) -> str:
    """Keep only the digits of a CPF/CNPJ."""
    return re.sub(r"\D", "", document or "")


def validate_holder_payload(payload: AssignHolderSchema) -> AssignHolderSchema:
    """Check the holder form and return a cleaned copy.

    Raises:
        HolderValidationError: with one message per offending field.
    """
    errors: dict[str, str] = {}
    if len(payload.name) < 2:
        errors["name"] = str(_("Name must have at least 2 characters."))
    if not EMAIL_RE.match(payload.email):
        errors["email"] = str(_("Enter a valid email address."))
    document = clean_document(payload.document)
    if document and len(document) not in DOCUMENT_LENGTHS:
        errors["document"] = str(_("Document must be a CPF (11 digits) or CNPJ (14 digits)."))
    if errors:
        raise HolderValidationError(errors)
    return payload.model_copy(update={"document": document, "email": payload.email.lower()})


@transaction.atomic
def assign_holder(ticket_id: UUID, user_id: UUID, payload: AssignHolderSchema) -> Ticket:
    """Assign the first holder of a ticket and activate it.

    Holders are never edited: once a ticket has one, only a transfer can change it.
    """
    cleaned = validate_holder_payload(payload)
    ticket = get_object_or_404(Ticket.objects.select_for_update(), pk=ticket_id, user_id=user_id)

    if ticket.has_holder:
        raise HttpError(400, str(_("This ticket already has a holder. Transfer it instead.")))
    if ticket.is_checked_in or ticket.status in (Ticket.TicketStatus.CANCELLED, Ticket.TicketStatus.EXPIRED):
        raise HttpError(400, str(_("A holder cannot be assigned to this ticket.")))

    holder = TicketHolder.objects.create(
        ticket=ticket,
        name=cleaned.name,
        email=cleaned.email,
        document=cleaned.document,
    )
    ticket.holder = holder
    ticket.status = Ticket.TicketStatus.ACTIVE
    ticket.save(update_fields=["holder", "status", "updated_at"])
    logger.info("ticket_holder_assigned", ticket_id=str(ticket.id), holder_id=str(holder.id))
    return Ticket.objects.with_details().get(pk=ticket.pk)
