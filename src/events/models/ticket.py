import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import Account


class TicketQuerySet(models.QuerySet["Ticket"]):
    def with_details(self) -> t.Self:
        """Select everything the ticket screen and the export need."""
        return self.select_related("event", "user", "holder", "checked_in_by")

    def owned_by(self, user: "Account") -> t.Self:
        """Tickets currently owned by the given account."""
        return self.filter(user=user)


class TicketManager(models.Manager["Ticket"]):
    def get_queryset(self) -> TicketQuerySet:
        """Get base queryset for tickets."""
        return TicketQuerySet(self.model, using=self._db)

    def with_details(self) -> TicketQuerySet:
        """Select everything the ticket screen and the export need."""
        return self.get_queryset().with_details()

    def owned_by(self, user: "Account") -> TicketQuerySet:
        """Tickets currently owned by the given account."""
        return self.get_queryset().owned_by(user)


class Ticket(TimeStampedModel):
    """One purchased admission to one event.

    The purchasing account (``user``) owns the ticket; the ``holder`` is the
    natural person allowed to use it. A ticket becomes ``active`` once a
    holder is assigned and ``used`` once it is checked in.
    """

    class TicketStatus(models.TextChoices):
        VALID = "valid", "Valid"
        ACTIVE = "active", "Active"
        USED = "used", "Used"
        CANCELLED = "cancelled", "Cancelled"
        EXPIRED = "expired", "Expired"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tickets")
    holder = models.OneToOneField(
        "events.TicketHolder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_ticket",
        help_text="The person currently allowed to use this ticket.",
    )
    status = models.CharField(max_length=20, choices=TicketStatus.choices, default=TicketStatus.VALID, db_index=True)
    qr_code = models.CharField(max_length=64, blank=True, default="", db_index=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    is_used = models.BooleanField(default=False)
    transfer_count = models.PositiveIntegerField(default=0)
    checked_in_at = models.DateTimeField(null=True, blank=True, editable=False)
    checked_in_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checked_in_tickets",
        editable=False,
    )

    objects = TicketManager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Ticket {self.id} ({self.status})"

    @property
    def has_holder(self) -> bool:
        """Whether a holder has been assigned."""
        return self.holder_id is not None

    @property
    def is_checked_in(self) -> bool:
        """Used tickets are terminal for transfers."""
        return self.is_used or self.checked_in_at is not None or self.status == self.TicketStatus.USED


class TicketHolder(TimeStampedModel):
    """The named person a ticket is assigned to.

    Holder records are never edited: each assignment or transfer creates a new
    one and re-points ``Ticket.holder``, so the rows double as assignment history.
    """

    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="holders")
    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="held_tickets",
        help_text="Set when the holder was created from a registered account (e.g. by a transfer).",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField()
    document = models.CharField(max_length=18, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


class TicketTransfer(TimeStampedModel):
    """Append-only provenance of an ownership change decided by the backend."""

    class TransferStatus(models.TextChoices):
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="transfers")
    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="outgoing_ticket_transfers",
    )
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="incoming_ticket_transfers",
    )
    to_email = models.EmailField()
    status = models.CharField(max_length=20, choices=TransferStatus.choices, db_index=True)
    reason = models.CharField(max_length=255, blank=True, default="")
    transferred_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-transferred_at"]

    def __str__(self) -> str:
        return f"Transfer of {self.ticket_id} to {self.to_email} ({self.status})"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Transfer records are written once and never mutated."""
        if not self._state.adding:
            raise DjangoValidationError("Ticket transfers are append-only.")
        super().save(*args, **kwargs)
