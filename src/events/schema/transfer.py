"""Transfer, account lookup and check-in schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field

from accounts.schema import MinimalAccountSchema
from common.schema import StrippedString
from events.models import TicketTransfer


class TransferEligibility(Schema):
    can_transfer: bool
    message: str = ""


class AccountRecord(Schema):
    """Normalized account returned by the email lookup."""

    id: UUID
    display_name: str
    email: str
    is_registered: bool = True


class TransferResult(Schema):
    success: bool
    message: str
    transfer_id: UUID | None = None


class TransferPayload(Schema):
    email: StrippedString = Field(..., max_length=254)


class TransferOutcomeSchema(Schema):
    success: bool
    message: str
    state: str
    target: AccountRecord | None = None


class TicketTransferSchema(ModelSchema):
    id: UUID
    from_user: MinimalAccountSchema | None = None
    to_user: MinimalAccountSchema | None = None
    transferred_at: AwareDatetime

    class Meta:
        model = TicketTransfer
        fields = ["id", "status", "reason", "to_email", "transferred_at"]


class CheckInPayload(Schema):
    scan_code: StrippedString = Field(..., min_length=1, max_length=64)


class CheckInResultSchema(Schema):
    status: t.Literal["checked_in", "duplicate", "invalid"]
    message: str
    ticket_id: UUID | None = None
    holder_name: str | None = None
    checked_in_at: AwareDatetime | None = None
