"""Ticket, holder and ticket screen schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field

from common.schema import StrippedString
from events.models import Event, Ticket, TicketHolder
from events.service.ticket_code import scan_code_for

TicketAction = t.Literal["assign_holder", "transfer", "export"]


class EventSchema(ModelSchema):
    id: UUID
    location: str
    start: AwareDatetime
    end: AwareDatetime

    class Meta:
        model = Event
        fields = ["id", "title", "description", "start", "end", "location_name", "location_city", "location_state"]


class TicketHolderSchema(ModelSchema):
    id: UUID
    created_at: AwareDatetime

    class Meta:
        model = TicketHolder
        fields = ["id", "name", "email", "document", "created_at"]


class TicketSchema(ModelSchema):
    id: UUID
    event: EventSchema
    holder: TicketHolderSchema | None = None
    scan_code: str
    checked_in_at: AwareDatetime | None = None

    class Meta:
        model = Ticket
        fields = ["id", "status", "is_used", "transfer_count", "checked_in_at"]

    @staticmethod
    def resolve_scan_code(obj: Ticket) -> str:
        """The canonical scan code, never the raw stored value."""
        return scan_code_for(obj)


class TicketScreenSchema(Schema):
    ticket: TicketSchema
    scan_code: str
    available_actions: list[TicketAction]
    is_exporting: bool = False


class AssignHolderSchema(Schema):
    """Holder data as typed in the assignment form.

    Field rules (name length, email shape, document digits) are checked by the
    screen controller so the form gets one message per field.
    """

    name: StrippedString = Field(..., max_length=255)
    email: StrippedString = Field(..., max_length=254)
    document: StrippedString = Field("", max_length=18)
