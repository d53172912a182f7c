"""Fixtures for the events app tests."""

import io
import typing as t
from uuid import UUID, uuid4

import pytest
from PIL import Image

from events.models import Ticket, TicketTransfer
from events.schema import AccountRecord, AssignHolderSchema, TransferEligibility, TransferResult
from events.service.ticket_export import ImageBlock, ImageState, RenderTarget, Spacer, TextBlock


class FakeTicketBackend:
    """In-memory ``TicketBackend`` that records every call in order."""

    def __init__(
        self,
        *,
        eligibility: TransferEligibility | None = None,
        accounts: dict[str, AccountRecord] | None = None,
        transfer_result: TransferResult | None = None,
        tickets: dict[UUID, Ticket] | None = None,
    ) -> None:
        self.eligibility = eligibility or TransferEligibility(can_transfer=True, message="ok")
        self.accounts = accounts or {}
        self.transfer_result = transfer_result or TransferResult(success=True, message="done", transfer_id=uuid4())
        self.tickets = tickets or {}
        self.calls: list[tuple[str, tuple[t.Any, ...]]] = []
        self.errors: dict[str, Exception] = {}

    def _record(self, name: str, *args: t.Any) -> None:
        self.calls.append((name, args))
        if name in self.errors:
            raise self.errors[name]

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def can_transfer_ticket(self, ticket_id: UUID, user_id: UUID) -> TransferEligibility:
        self._record("can_transfer_ticket", ticket_id, user_id)
        return self.eligibility

    async def find_account_by_email(self, email: str) -> AccountRecord | None:
        self._record("find_account_by_email", email)
        return self.accounts.get(email.lower())

    async def transfer_ticket(self, ticket_id: UUID, new_user_email: str, current_user_id: UUID) -> TransferResult:
        self._record("transfer_ticket", ticket_id, new_user_email, current_user_id)
        return self.transfer_result

    async def get_ticket_details(self, ticket_id: UUID) -> Ticket | None:
        self._record("get_ticket_details", ticket_id)
        return self.tickets.get(ticket_id)

    async def assign_holder(self, ticket_id: UUID, user_id: UUID, payload: AssignHolderSchema) -> Ticket:
        self._record("assign_holder", ticket_id, user_id, payload)
        return self.tickets[ticket_id]

    async def get_transfer_history(self, ticket_id: UUID) -> list[TicketTransfer]:
        self._record("get_transfer_history", ticket_id)
        return []


def png_bytes(width: int = 40, height: int = 20, color: str = "#336699") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fake_backend() -> FakeTicketBackend:
    return FakeTicketBackend()


@pytest.fixture
def render_target() -> RenderTarget:
    """A small ticket face with one already loaded image."""
    image = ImageBlock(source="inline", width=100, height=100)
    image.image = Image.open(io.BytesIO(png_bytes(100, 100)))
    image.state = ImageState.LOADED
    return RenderTarget(
        blocks=[TextBlock("Festa Junina", size=32, bold=True), Spacer(10), image, TextBlock("PLKTK0A1B2C")],
        style={"width": "600px", "position": "relative"},
        width=600,
    )
