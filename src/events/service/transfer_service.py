"""Server-side ticket transfer rules.

These functions are the backing store's side of a transfer: the eligibility
predicate, the account lookup by email and the atomic ownership change. The
atomic operation re-validates everything under a row lock and never trusts an
earlier eligibility answer.
"""

import re
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from accounts.models import Account
from events.models import Ticket, TicketHolder, TicketTransfer
from events.schema import AccountRecord, TransferEligibility, TransferResult

logger = structlog.get_logger(__name__)

DEFAULT_DISPLAY_NAME = "Pulakatraca User"
_LOCAL_PART_SEPARATORS = re.compile(r"[._\-]+")


def display_name_from_email(email: str) -> str:
    """Derive a readable name from an email's local part (``joao_silva@x.com`` -> ``Joao Silva``)."""
    if not email or "@" not in email:
        return DEFAULT_DISPLAY_NAME
    local_part = email.split("@", 1)[0]
    parts = [part for part in _LOCAL_PART_SEPARATORS.split(local_part) if part]
    return " ".join(part.capitalize() for part in parts) or DEFAULT_DISPLAY_NAME


def _ineligibility_reason(ticket: Ticket | None, user_id: UUID) -> str | None:
    """The reason a ticket cannot be transferred by this user, or None if it can."""
    if ticket is None:
        return str(_("Ticket not found."))
    if ticket.user_id != user_id:
        return str(_("You do not own this ticket."))
    if ticket.is_checked_in:
        return str(_("Ticket already used"))
    if ticket.status == Ticket.TicketStatus.CANCELLED:
        return str(_("This ticket has been cancelled."))
    if ticket.status == Ticket.TicketStatus.EXPIRED:
        return str(_("This ticket has expired."))
    if ticket.event.has_ended:
        return str(_("This event has already ended."))
    if ticket.transfer_count >= settings.TICKET_MAX_TRANSFERS:
        return str(_("This ticket has no transfers remaining."))
    return None


def check_transfer_eligibility(ticket_id: UUID, user_id: UUID) -> TransferEligibility:
    """Read-only eligibility predicate.

    Informative only: ``transfer_ticket`` runs the same checks again under a lock.
    """
    ticket = Ticket.objects.select_related("event").filter(pk=ticket_id).first()
    reason = _ineligibility_reason(ticket, user_id)
    if reason is not None:
        return TransferEligibility(can_transfer=False, message=reason)
    return TransferEligibility(can_transfer=True, message=str(_("Ticket can be transferred.")))


def _holder_name_for(email: str) -> str | None:
    holder = TicketHolder.objects.filter(email__iexact=email).order_by("-created_at").first()
    return holder.name if holder else None


def _account_display_name(account: Account) -> str:
    return (
        account.preferred_name
        or account.get_full_name()
        or _holder_name_for(account.email)
        or display_name_from_email(account.email)
    )


def find_account_by_email(email: str) -> AccountRecord | None:
    """Case-insensitive account lookup by contact email."""
    email = email.strip()
    if not email:
        return None
    account = Account.objects.by_email(email).filter(is_active=True).first()
    if account is None:
        return None
    return AccountRecord(
        id=account.id,
        display_name=_account_display_name(account),
        email=account.email,
        is_registered=TicketHolder.objects.filter(email__iexact=account.email).exists(),
    )


def _record_failure(ticket: Ticket, from_user_id: UUID, target: Account, reason: str) -> TicketTransfer:
    return TicketTransfer.objects.create(
        ticket=ticket,
        from_user_id=from_user_id,
        to_user=target,
        to_email=target.email,
        status=TicketTransfer.TransferStatus.FAILED,
        reason=reason,
    )


def transfer_ticket(ticket_id: UUID, new_user_email: str, current_user_id: UUID) -> TransferResult:
    """Atomically move a ticket to the account registered under ``new_user_email``.

    The ticket row is locked for the whole operation. Once the caller is known to
    own the ticket and the target account is resolved, every decision is appended
    to the transfer log, successful or not.
    """
    email = new_user_email.strip()
    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().select_related("event").filter(pk=ticket_id).first()
        if ticket is None:
            return TransferResult(success=False, message=str(_("Ticket not found.")))
        if ticket.user_id != current_user_id:
            logger.warning("ticket_transfer_not_owner", ticket_id=str(ticket_id), user_id=str(current_user_id))
            return TransferResult(success=False, message=str(_("You do not own this ticket.")))

        target = Account.objects.by_email(email).filter(is_active=True).first()
        if target is None:
            return TransferResult(success=False, message=str(_("No account was found with this email.")))

        reason = _ineligibility_reason(ticket, current_user_id)
        if reason is None and target.pk == current_user_id:
            reason = str(_("You cannot transfer a ticket to yourself."))
        if reason is not None:
            failed = _record_failure(ticket, current_user_id, target, reason)
            logger.info(
                "ticket_transfer_rejected",
                ticket_id=str(ticket.id),
                transfer_id=str(failed.id),
                reason=reason,
            )
            return TransferResult(success=False, message=reason, transfer_id=failed.id)

        holder = TicketHolder.objects.create(
            ticket=ticket,
            account=target,
            name=_account_display_name(target),
            email=target.email,
            document=target.document,
        )
        ticket.holder = holder
        ticket.user = target
        ticket.transfer_count += 1
        ticket.status = Ticket.TicketStatus.ACTIVE
        ticket.save(update_fields=["holder", "user", "transfer_count", "status", "updated_at"])

        completed = TicketTransfer.objects.create(
            ticket=ticket,
            from_user_id=current_user_id,
            to_user=target,
            to_email=target.email,
            status=TicketTransfer.TransferStatus.COMPLETED,
        )

    logger.info(
        "ticket_transfer_completed",
        ticket_id=str(ticket.id),
        transfer_id=str(completed.id),
        from_user_id=str(current_user_id),
        to_user_id=str(target.id),
    )
    return TransferResult(
        success=True,
        message=str(_("Ticket transferred successfully to {name}.")).format(name=holder.name),
        transfer_id=completed.id,
    )


def get_transfer_history(ticket_id: UUID) -> list[TicketTransfer]:
    """Transfer log of a ticket, newest first."""
    return list(
        TicketTransfer.objects.filter(ticket_id=ticket_id)
        .select_related("from_user", "to_user")
        .order_by("-transferred_at", "-created_at")
    )
