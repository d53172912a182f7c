"""Tests for the server-side transfer rules."""

import typing as t
import uuid
from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from freezegun import freeze_time

from accounts.models import Account
from conftest import AccountFactory
from events.models import Event, Ticket, TicketHolder, TicketTransfer
from events.service import transfer_service

pytestmark = pytest.mark.django_db


# ---------------------------------------------------------------------------
# display_name_from_email
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "email,expected",
    [
        ("joao_silva@example.com", "Joao Silva"),
        ("maria-santos@example.com", "Maria Santos"),
        ("ana.costa@example.com", "Ana Costa"),
        ("MARCOS@example.com", "Marcos"),
        ("not-an-email", "Pulakatraca User"),
        ("", "Pulakatraca User"),
    ],
)
def test_display_name_from_email(email: str, expected: str) -> None:
    assert transfer_service.display_name_from_email(email) == expected


# ---------------------------------------------------------------------------
# check_transfer_eligibility
# ---------------------------------------------------------------------------


class TestCheckTransferEligibility:
    def test_owner_can_transfer_fresh_ticket(self, ticket: Ticket, owner: Account) -> None:
        result = transfer_service.check_transfer_eligibility(ticket.id, owner.id)
        assert result.can_transfer is True

    def test_unknown_ticket(self, owner: Account) -> None:
        result = transfer_service.check_transfer_eligibility(uuid.uuid4(), owner.id)
        assert result.can_transfer is False
        assert result.message == "Ticket not found."

    def test_not_owner(self, ticket: Ticket, recipient: Account) -> None:
        result = transfer_service.check_transfer_eligibility(ticket.id, recipient.id)
        assert result.can_transfer is False
        assert result.message == "You do not own this ticket."

    def test_used_ticket(self, ticket: Ticket, owner: Account) -> None:
        ticket.is_used = True
        ticket.save()
        result = transfer_service.check_transfer_eligibility(ticket.id, owner.id)
        assert result.can_transfer is False
        assert result.message == "Ticket already used"

    @pytest.mark.parametrize(
        "status,message",
        [
            (Ticket.TicketStatus.CANCELLED, "This ticket has been cancelled."),
            (Ticket.TicketStatus.EXPIRED, "This ticket has expired."),
            (Ticket.TicketStatus.USED, "Ticket already used"),
        ],
    )
    def test_terminal_statuses(self, ticket: Ticket, owner: Account, status: str, message: str) -> None:
        ticket.status = status
        ticket.save()
        result = transfer_service.check_transfer_eligibility(ticket.id, owner.id)
        assert result.can_transfer is False
        assert result.message == message

    def test_event_already_ended(self, ticket: Ticket, owner: Account, event: Event) -> None:
        with freeze_time(event.end + timedelta(minutes=1)):
            result = transfer_service.check_transfer_eligibility(ticket.id, owner.id)
        assert result.can_transfer is False
        assert result.message == "This event has already ended."

    def test_no_transfers_remaining(self, ticket: Ticket, owner: Account, settings: t.Any) -> None:
        settings.TICKET_MAX_TRANSFERS = 1
        ticket.transfer_count = 1
        ticket.save()
        result = transfer_service.check_transfer_eligibility(ticket.id, owner.id)
        assert result.can_transfer is False
        assert result.message == "This ticket has no transfers remaining."


# ---------------------------------------------------------------------------
# find_account_by_email
# ---------------------------------------------------------------------------


class TestFindAccountByEmail:
    def test_case_insensitive_lookup(self, recipient: Account) -> None:
        record = transfer_service.find_account_by_email("  JOAO_SILVA@Example.com ")
        assert record is not None
        assert record.id == recipient.id
        assert record.email == recipient.email

    def test_unknown_email(self) -> None:
        assert transfer_service.find_account_by_email("nobody@example.com") is None

    def test_inactive_accounts_are_not_found(self, account_factory: AccountFactory) -> None:
        account_factory(email="gone@example.com", is_active=False)
        assert transfer_service.find_account_by_email("gone@example.com") is None

    def test_display_name_falls_back_to_email_local_part(self, recipient: Account) -> None:
        record = transfer_service.find_account_by_email(recipient.email)
        assert record is not None
        assert record.display_name == "Joao Silva"
        assert record.is_registered is False

    def test_display_name_prefers_latest_holder_name(self, recipient: Account, ticket: Ticket) -> None:
        TicketHolder.objects.create(ticket=ticket, name="João da Silva", email="joao_silva@example.com")
        record = transfer_service.find_account_by_email(recipient.email)
        assert record is not None
        assert record.display_name == "João da Silva"
        assert record.is_registered is True

    def test_display_name_prefers_account_name(self, account_factory: AccountFactory) -> None:
        account = account_factory(email="named@example.com", preferred_name="Dona Benta")
        record = transfer_service.find_account_by_email("named@example.com")
        assert record is not None
        assert record.id == account.id
        assert record.display_name == "Dona Benta"


# ---------------------------------------------------------------------------
# transfer_ticket
# ---------------------------------------------------------------------------


class TestTransferTicket:
    def test_successful_transfer_moves_ownership(self, held_ticket: Ticket, owner: Account, recipient: Account) -> None:
        previous_holder_id = held_ticket.holder_id

        result = transfer_service.transfer_ticket(held_ticket.id, recipient.email, owner.id)

        assert result.success is True
        assert "Joao Silva" in result.message
        held_ticket.refresh_from_db()
        assert held_ticket.user_id == recipient.id
        assert held_ticket.transfer_count == 1
        assert held_ticket.status == Ticket.TicketStatus.ACTIVE
        assert held_ticket.holder_id != previous_holder_id
        assert held_ticket.holder is not None
        assert held_ticket.holder.account_id == recipient.id
        assert held_ticket.holder.email == recipient.email
        # The previous holder record is kept, not edited.
        assert TicketHolder.objects.filter(pk=previous_holder_id, name="Olivia Owner").exists()

        transfer = TicketTransfer.objects.get(pk=result.transfer_id)
        assert transfer.status == TicketTransfer.TransferStatus.COMPLETED
        assert transfer.from_user_id == owner.id
        assert transfer.to_user_id == recipient.id

    def test_transfer_works_without_holder(self, ticket: Ticket, owner: Account, recipient: Account) -> None:
        result = transfer_service.transfer_ticket(ticket.id, recipient.email, owner.id)
        assert result.success is True
        ticket.refresh_from_db()
        assert ticket.has_holder
        assert ticket.status == Ticket.TicketStatus.ACTIVE

    def test_revalidates_eligibility(self, ticket: Ticket, owner: Account, recipient: Account) -> None:
        assert transfer_service.check_transfer_eligibility(ticket.id, owner.id).can_transfer
        # State changes between the eligibility check and the transfer.
        Ticket.objects.filter(pk=ticket.pk).update(is_used=True)

        result = transfer_service.transfer_ticket(ticket.id, recipient.email, owner.id)

        assert result.success is False
        assert result.message == "Ticket already used"
        ticket.refresh_from_db()
        assert ticket.user_id == owner.id
        failed = TicketTransfer.objects.get(ticket=ticket)
        assert failed.status == TicketTransfer.TransferStatus.FAILED
        assert failed.reason == "Ticket already used"

    def test_second_transfer_is_rejected(
        self, ticket: Ticket, owner: Account, recipient: Account, account_factory: AccountFactory
    ) -> None:
        third = account_factory(email="third@example.com")
        assert transfer_service.transfer_ticket(ticket.id, recipient.email, owner.id).success

        result = transfer_service.transfer_ticket(ticket.id, third.email, recipient.id)

        assert result.success is False
        assert result.message == "This ticket has no transfers remaining."

    def test_self_transfer_is_rejected(self, ticket: Ticket, owner: Account) -> None:
        result = transfer_service.transfer_ticket(ticket.id, "OWNER@example.com", owner.id)
        assert result.success is False
        assert result.message == "You cannot transfer a ticket to yourself."
        assert TicketTransfer.objects.get(ticket=ticket).status == TicketTransfer.TransferStatus.FAILED

    def test_unknown_target(self, ticket: Ticket, owner: Account) -> None:
        result = transfer_service.transfer_ticket(ticket.id, "nobody@example.com", owner.id)
        assert result.success is False
        assert result.message == "No account was found with this email."
        assert not TicketTransfer.objects.exists()

    def test_non_owner_cannot_transfer(self, ticket: Ticket, recipient: Account, owner: Account) -> None:
        result = transfer_service.transfer_ticket(ticket.id, owner.email, recipient.id)
        assert result.success is False
        assert result.message == "You do not own this ticket."
        assert not TicketTransfer.objects.exists()

    def test_unknown_ticket(self, owner: Account, recipient: Account) -> None:
        result = transfer_service.transfer_ticket(uuid.uuid4(), recipient.email, owner.id)
        assert result.success is False
        assert result.message == "Ticket not found."


class TestTransferHistory:
    def test_newest_first(self, ticket: Ticket, owner: Account, recipient: Account) -> None:
        transfer_service.transfer_ticket(ticket.id, "owner@example.com", owner.id)
        transfer_service.transfer_ticket(ticket.id, recipient.email, owner.id)

        history = transfer_service.get_transfer_history(ticket.id)

        assert [t.status for t in history] == [
            TicketTransfer.TransferStatus.COMPLETED,
            TicketTransfer.TransferStatus.FAILED,
        ]

    def test_transfer_records_are_append_only(self, ticket: Ticket, owner: Account, recipient: Account) -> None:
        transfer_service.transfer_ticket(ticket.id, recipient.email, owner.id)
        record = TicketTransfer.objects.get(ticket=ticket)
        record.reason = "edited"
        with pytest.raises(DjangoValidationError):
            record.save()
