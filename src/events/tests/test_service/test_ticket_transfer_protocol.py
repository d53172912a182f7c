"""Sequencing and failure handling of the client-side transfer protocol."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from events.exceptions import (
    InvalidEmail,
    NotAuthenticated,
    NotTransferable,
    SelfTransfer,
    TargetNotFound,
    TransferFailed,
    TransferRejected,
)
from events.schema import AccountRecord, TransferEligibility, TransferResult
from events.service.ticket_transfer_protocol import TransferProtocol, TransferState
from events.tests.conftest import FakeTicketBackend

TICKET_ID = uuid4()


@pytest.fixture
def current_user() -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), is_authenticated=True)


@pytest.fixture
def target() -> AccountRecord:
    return AccountRecord(id=uuid4(), display_name="Joao Silva", email="joao_silva@example.com")


@pytest.fixture
def backend(target: AccountRecord) -> FakeTicketBackend:
    return FakeTicketBackend(accounts={target.email: target})


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_calls_backend_in_order(
        self, backend: FakeTicketBackend, current_user: SimpleNamespace, target: AccountRecord
    ) -> None:
        states: list[TransferState] = []
        protocol = TransferProtocol(backend, on_state=states.append)

        outcome = await protocol.transfer(TICKET_ID, " Joao_Silva@Example.com ", current_user)

        assert outcome.success is True
        assert outcome.state == TransferState.SUCCEEDED
        assert outcome.message == "Ticket transferred successfully to Joao Silva!"
        assert outcome.target == target
        assert backend.call_names == ["can_transfer_ticket", "find_account_by_email", "transfer_ticket"]
        # The resolved email is sent to the atomic transfer, not the raw input.
        assert backend.calls[2] == ("transfer_ticket", (TICKET_ID, target.email, current_user.id))
        assert states == [
            TransferState.IDLE,
            TransferState.VALIDATING_SESSION,
            TransferState.CHECKING_ELIGIBILITY,
            TransferState.RESOLVING_TARGET,
            TransferState.TRANSFERRING,
            TransferState.SUCCEEDED,
        ]

    @pytest.mark.asyncio
    async def test_falls_back_to_email_when_target_has_no_name(
        self, current_user: SimpleNamespace
    ) -> None:
        nameless = AccountRecord(id=uuid4(), display_name="", email="x@example.com")
        backend = FakeTicketBackend(accounts={nameless.email: nameless})

        outcome = await TransferProtocol(backend).transfer(TICKET_ID, nameless.email, current_user)

        assert outcome.message == "Ticket transferred successfully to x@example.com!"


class TestRejections:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "   ", "joao", "joao@", "joao silva@example.com", "joao@example"])
    async def test_invalid_email_never_reaches_backend(
        self, backend: FakeTicketBackend, current_user: SimpleNamespace, email: str
    ) -> None:
        outcome = await TransferProtocol(backend).transfer(TICKET_ID, email, current_user)

        assert outcome.success is False
        assert isinstance(outcome.error, InvalidEmail)
        assert outcome.failed_step == TransferState.IDLE
        assert backend.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user", [None, SimpleNamespace(id=uuid4(), is_authenticated=False)])
    async def test_requires_a_session(self, backend: FakeTicketBackend, user: SimpleNamespace | None) -> None:
        outcome = await TransferProtocol(backend).transfer(TICKET_ID, "joao_silva@example.com", user)

        assert isinstance(outcome.error, NotAuthenticated)
        assert outcome.failed_step == TransferState.VALIDATING_SESSION
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_ineligible_ticket_never_resolves_target(
        self, backend: FakeTicketBackend, current_user: SimpleNamespace
    ) -> None:
        backend.eligibility = TransferEligibility(can_transfer=False, message="Ticket already used")

        outcome = await TransferProtocol(backend).transfer(TICKET_ID, "joao_silva@example.com", current_user)

        assert outcome.success is False
        assert outcome.message == "Ticket already used"
        assert isinstance(outcome.error, NotTransferable)
        assert outcome.failed_step == TransferState.CHECKING_ELIGIBILITY
        assert backend.call_names == ["can_transfer_ticket"]

    @pytest.mark.asyncio
    async def test_unknown_target(self, backend: FakeTicketBackend, current_user: SimpleNamespace) -> None:
        outcome = await TransferProtocol(backend).transfer(TICKET_ID, "nobody@example.com", current_user)

        assert isinstance(outcome.error, TargetNotFound)
        assert outcome.failed_step == TransferState.RESOLVING_TARGET
        assert "transfer_ticket" not in backend.call_names

    @pytest.mark.asyncio
    async def test_self_transfer_never_calls_transfer(self, current_user: SimpleNamespace) -> None:
        me = AccountRecord(id=current_user.id, display_name="Me", email="me@example.com")
        backend = FakeTicketBackend(accounts={me.email: me})

        outcome = await TransferProtocol(backend).transfer(TICKET_ID, "ME@example.com", current_user)

        assert isinstance(outcome.error, SelfTransfer)
        assert outcome.message == "You cannot transfer a ticket to yourself."
        assert backend.call_names == ["can_transfer_ticket", "find_account_by_email"]

    @pytest.mark.asyncio
    async def test_backend_rejection_is_reported(
        self, backend: FakeTicketBackend, current_user: SimpleNamespace, target: AccountRecord
    ) -> None:
        backend.transfer_result = TransferResult(success=False, message="This ticket has no transfers remaining.")
        states: list[TransferState] = []

        outcome = await TransferProtocol(backend, on_state=states.append).transfer(
            TICKET_ID, target.email, current_user
        )

        assert outcome.success is False
        assert outcome.state == TransferState.REJECTED
        assert outcome.message == "This ticket has no transfers remaining."
        assert isinstance(outcome.error, TransferRejected)
        assert outcome.failed_step == TransferState.TRANSFERRING
        assert outcome.target == target
        assert states[-2:] == [TransferState.TRANSFERRING, TransferState.REJECTED]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("step", ["can_transfer_ticket", "find_account_by_email", "transfer_ticket"])
    async def test_infrastructure_errors_become_generic_failures(
        self, backend: FakeTicketBackend, current_user: SimpleNamespace, target: AccountRecord, step: str
    ) -> None:
        backend.errors[step] = ConnectionError("backend unreachable")

        outcome = await TransferProtocol(backend).transfer(TICKET_ID, target.email, current_user)

        assert outcome.success is False
        assert isinstance(outcome.error, TransferFailed)
        assert outcome.message == TransferFailed.default_message
        assert backend.call_names[-1] == step


class TestIndependentAttempts:
    @pytest.mark.asyncio
    async def test_protocol_can_be_reused_after_failure(
        self, backend: FakeTicketBackend, current_user: SimpleNamespace, target: AccountRecord
    ) -> None:
        protocol = TransferProtocol(backend)
        backend.eligibility = TransferEligibility(can_transfer=False, message="nope")
        first = await protocol.transfer(TICKET_ID, target.email, current_user)

        backend.eligibility = TransferEligibility(can_transfer=True, message="ok")
        second = await protocol.transfer(TICKET_ID, target.email, current_user)

        assert first.success is False
        assert second.success is True
