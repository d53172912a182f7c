"""Ticket screen endpoints: holder assignment, transfer and PDF export."""

import typing as t
from uuid import UUID

from asgiref.sync import async_to_sync
from django.http import HttpResponse
from django.utils.http import content_disposition_header
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.schema import ResponseDetail
from events.schema import (
    AssignHolderSchema,
    TicketScreenSchema,
    TicketTransferSchema,
    TransferEligibility,
    TransferOutcomeSchema,
    TransferPayload,
)
from events.service.ticket_backend import get_ticket_backend
from events.service.ticket_screen import TicketScreenController
from events.service.ticket_transfer_protocol import TransferOutcome


def _screen_state(screen: TicketScreenController) -> dict[str, t.Any]:
    """State for ``TicketScreenSchema``. The ticket is passed as the model instance."""
    return {
        "ticket": screen.ticket,
        "scan_code": screen.scan_code,
        "available_actions": [str(action) for action in screen.available_actions],
        "is_exporting": bool(screen.is_exporting),
    }


def _outcome_schema(outcome: TransferOutcome) -> TransferOutcomeSchema:
    return TransferOutcomeSchema(
        success=outcome.success,
        message=outcome.message,
        state=str(outcome.state),
        target=outcome.target,
    )


@api_controller("/tickets", tags=["Tickets"], auth=JWTAuth())
class TicketController(UserAwareController):
    def screen_for(self, ticket_id: UUID) -> TicketScreenController:
        """Load the screen for a ticket owned by the current user."""
        screen = TicketScreenController(get_ticket_backend())
        ticket = async_to_sync(screen.load)(ticket_id)
        if ticket is None or ticket.user_id != self.user().id:
            raise HttpError(404, str(_("Ticket not found.")))
        return screen

    @route.get("/{ticket_id}", url_name="ticket_detail", response=TicketScreenSchema)
    def get_ticket(self, ticket_id: UUID) -> dict[str, t.Any]:
        """Ticket, event, holder, scan code and the actions currently offered."""
        return _screen_state(self.screen_for(ticket_id))

    @route.post("/{ticket_id}/holder", url_name="ticket_assign_holder", response=TicketScreenSchema)
    def assign_holder(self, ticket_id: UUID, payload: AssignHolderSchema) -> dict[str, t.Any]:
        """Assign the ticket's holder. Only possible while it has none."""
        screen = self.screen_for(ticket_id)
        async_to_sync(screen.assign_holder)(self.user(), payload)
        return _screen_state(screen)

    @route.get(
        "/{ticket_id}/transfer/eligibility",
        url_name="ticket_transfer_eligibility",
        response=TransferEligibility,
    )
    def transfer_eligibility(self, ticket_id: UUID) -> TransferEligibility:
        """Whether the current user may transfer this ticket, and why not."""
        return async_to_sync(get_ticket_backend().can_transfer_ticket)(ticket_id, self.user().id)

    @route.post(
        "/{ticket_id}/transfer",
        url_name="ticket_transfer",
        response={200: TransferOutcomeSchema, 400: TransferOutcomeSchema},
    )
    def transfer(self, ticket_id: UUID, payload: TransferPayload) -> tuple[int, TransferOutcomeSchema]:
        """Transfer the ticket to the account registered under ``email``."""
        screen = self.screen_for(ticket_id)
        screen.open_transfer_dialog()
        outcome = async_to_sync(screen.submit_transfer)(payload.email, self.user())
        return (200 if outcome.success else 400), _outcome_schema(outcome)

    @route.get("/{ticket_id}/transfers", url_name="ticket_transfer_history", response=list[TicketTransferSchema])
    def transfer_history(self, ticket_id: UUID) -> list[TicketTransferSchema]:
        """Transfer log of the ticket, newest first."""
        self.screen_for(ticket_id)
        return async_to_sync(get_ticket_backend().get_transfer_history)(ticket_id)  # type: ignore[return-value]

    @route.get(
        "/{ticket_id}/export",
        url_name="ticket_export",
        response={200: None, 400: ResponseDetail, 404: ResponseDetail},
        summary="Download the ticket as PDF",
    )
    def export(self, ticket_id: UUID) -> HttpResponse:
        """Render the ticket face into a single landscape page.

        Only offered once the ticket has a holder.
        """
        screen = self.screen_for(ticket_id)
        outcome = async_to_sync(screen.export)()
        if outcome is None:
            raise HttpError(400, str(_("Assign a holder before exporting the ticket.")))
        if not outcome.success or outcome.document is None:
            raise HttpError(400, outcome.message)

        response = HttpResponse(outcome.document.content, content_type="application/pdf")
        response["Content-Disposition"] = content_disposition_header(True, outcome.document.filename)
        return response
