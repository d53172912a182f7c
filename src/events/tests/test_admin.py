import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import Account
from events.models import Ticket, TicketTransfer
from events.service import transfer_service
from events.service.ticket_code import scan_code_for

pytestmark = pytest.mark.django_db


def test_ticket_changelist_shows_scan_code(admin_client: Client, held_ticket: Ticket) -> None:
    response = admin_client.get(reverse("admin:events_ticket_changelist"))

    assert response.status_code == 200
    assert scan_code_for(held_ticket) in response.content.decode()


def test_ticket_change_page(admin_client: Client, held_ticket: Ticket) -> None:
    response = admin_client.get(reverse("admin:events_ticket_change", args=[held_ticket.id]))

    assert response.status_code == 200
    assert "Olivia Owner" in response.content.decode()


def test_transfer_log_is_read_only(
    admin_client: Client, ticket: Ticket, owner: Account, recipient: Account
) -> None:
    transfer_service.transfer_ticket(ticket.id, recipient.email, owner.id)
    transfer = TicketTransfer.objects.get(ticket=ticket)

    changelist = admin_client.get(reverse("admin:events_tickettransfer_changelist"))
    add = admin_client.get(reverse("admin:events_tickettransfer_add"))
    delete = admin_client.post(reverse("admin:events_tickettransfer_delete", args=[transfer.id]), {"post": "yes"})

    assert changelist.status_code == 200
    assert add.status_code == 403
    assert delete.status_code == 403
    assert TicketTransfer.objects.filter(pk=transfer.pk).exists()
