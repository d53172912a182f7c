"""Fixtures shared by every app's tests."""

import secrets
import string
import typing as t
from datetime import timedelta

import faker
import pytest
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken

from accounts.models import Account
from events.models import Event, Ticket, TicketHolder
from events.service.ticket_backend import set_ticket_backend


class AccountFactory:
    """Factory for creating Account instances for testing."""

    fake = faker.Faker()

    def create_account(self, **kwargs: t.Any) -> Account:
        username = kwargs.pop("username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)))
        email = kwargs.pop("email", f"{username}@example.com")
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return Account.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> Account:
        return self.create_account(**kwargs)


def auth_client(account: Account) -> Client:
    """Django test client authenticated with a JWT for ``account``."""
    refresh = RefreshToken.for_user(account)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def account_factory() -> AccountFactory:
    return AccountFactory()


@pytest.fixture
def owner(account_factory: AccountFactory) -> Account:
    """The account that bought the ticket."""
    return account_factory(username="owner", email="owner@example.com", first_name="Olivia", last_name="Owner")


@pytest.fixture
def recipient(account_factory: AccountFactory) -> Account:
    """Another registered account, the usual transfer target."""
    return account_factory(username="joao_silva", email="joao_silva@example.com", first_name="", last_name="")


@pytest.fixture
def staff_user(account_factory: AccountFactory) -> Account:
    return account_factory(username="doorman", is_staff=True)


@pytest.fixture
def owner_client(owner: Account) -> Client:
    return auth_client(owner)


@pytest.fixture
def recipient_client(recipient: Account) -> Client:
    return auth_client(recipient)


@pytest.fixture
def staff_client(staff_user: Account) -> Client:
    return auth_client(staff_user)


@pytest.fixture
def event() -> Event:
    start = timezone.now() + timedelta(days=7)
    return Event.objects.create(
        title="Festa Junina",
        start=start,
        end=start + timedelta(hours=6),
        location_name="Arena Pulakatraca",
        location_city="Recife",
        location_state="PE",
    )


@pytest.fixture
def ticket(event: Event, owner: Account) -> Ticket:
    """A purchased ticket without holder."""
    return Ticket.objects.create(event=event, user=owner)


@pytest.fixture
def held_ticket(ticket: Ticket) -> Ticket:
    """A ticket with an assigned holder."""
    holder = TicketHolder.objects.create(
        ticket=ticket, name="Olivia Owner", email="olivia@example.com", document="12345678901"
    )
    ticket.holder = holder
    ticket.status = Ticket.TicketStatus.ACTIVE
    ticket.save()
    return ticket


@pytest.fixture(autouse=True)
def reset_ticket_backend() -> t.Iterator[None]:
    """Every test starts from the default ticket backend."""
    set_ticket_backend(None)
    yield
    set_ticket_backend(None)
