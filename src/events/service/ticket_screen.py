"""State of the ticket screen and the actions it offers.

Without a holder a ticket offers *assign holder* and *transfer*; with one it
offers *export* and *transfer*. Ticket and holder data are only refreshed from
the backend after it confirms a change.
"""

import enum
import typing as t
from dataclasses import dataclass
from uuid import UUID

import structlog

from events.exceptions import ExportError
from events.models import Ticket
from events.schema import AssignHolderSchema
from events.service.holder_service import validate_holder_payload
from events.service.ticket_code import scan_code_for
from events.service.ticket_export import (
    ExportedDocument,
    LoadingFlag,
    RenderTarget,
    TicketExportPipeline,
    build_ticket_face,
)
from events.service.ticket_transfer_protocol import TransferOutcome, TransferProtocol

if t.TYPE_CHECKING:
    from accounts.models import Account
    from events.service.ticket_backend import TicketBackend

logger = structlog.get_logger(__name__)


class TicketAction(enum.StrEnum):
    ASSIGN_HOLDER = "assign_holder"
    TRANSFER = "transfer"
    EXPORT = "export"


@dataclass(frozen=True)
class TransferResultView:
    """What the result dialog shows after a confirmed transfer."""

    success: bool
    message: str
    display_name: str | None = None


@dataclass(frozen=True)
class ExportOutcome:
    success: bool
    message: str
    document: ExportedDocument | None = None


class TicketScreenController:
    def __init__(
        self,
        backend: "TicketBackend",
        *,
        export_pipeline: TicketExportPipeline | None = None,
        transfer_protocol: TransferProtocol | None = None,
    ) -> None:
        self.backend = backend
        self.transfer_protocol = transfer_protocol or TransferProtocol(backend)
        self.is_exporting = export_pipeline.loading if export_pipeline is not None else LoadingFlag()
        self.export_pipeline = export_pipeline or TicketExportPipeline(loading=self.is_exporting)

        self.ticket: Ticket | None = None
        self._render_target: RenderTarget | None = None

        self.transfer_dialog_open = False
        self.transfer_error: str | None = None
        self.transfer_result: TransferResultView | None = None
        self._dialog_generation = 0

    async def load(self, ticket_id: UUID) -> Ticket | None:
        """Fetch the ticket with its event and holder."""
        self.ticket = await self.backend.get_ticket_details(ticket_id)
        self._render_target = None
        return self.ticket

    @property
    def scan_code(self) -> str | None:
        return scan_code_for(self.ticket) if self.ticket is not None else None

    @property
    def available_actions(self) -> list[TicketAction]:
        if self.ticket is None:
            return []
        if not self.ticket.has_holder:
            return [TicketAction.ASSIGN_HOLDER, TicketAction.TRANSFER]
        if self.is_exporting:
            return [TicketAction.TRANSFER]
        return [TicketAction.EXPORT, TicketAction.TRANSFER]

    @property
    def render_target(self) -> RenderTarget | None:
        """The ticket face, built on first use and kept until the next load."""
        if self.ticket is None:
            return None
        if self._render_target is None:
            self._render_target = build_ticket_face(self.ticket, t.cast(str, self.scan_code))
        return self._render_target

    # ---- Transfer ----

    def open_transfer_dialog(self) -> None:
        self._dialog_generation += 1
        self.transfer_dialog_open = True
        self.transfer_error = None
        self.transfer_result = None

    def close_transfer_dialog(self) -> None:
        self._dialog_generation += 1
        self.transfer_dialog_open = False
        self.transfer_error = None

    async def submit_transfer(self, email: str, current_user: "Account | None") -> TransferOutcome:
        """Run a transfer attempt from the dialog.

        If the dialog is closed or reopened while the attempt is in flight, the
        result is only logged and the screen is left alone.
        """
        if self.ticket is None:
            raise RuntimeError("submit_transfer called before load")
        ticket_id = self.ticket.id
        generation = self._dialog_generation

        outcome = await self.transfer_protocol.transfer(ticket_id, email, current_user)

        if generation != self._dialog_generation or not self.transfer_dialog_open:
            logger.info(
                "ticket_transfer_late_result_ignored",
                ticket_id=str(ticket_id),
                success=outcome.success,
                state=str(outcome.state),
            )
            return outcome

        if outcome.success:
            self.close_transfer_dialog()
            self.transfer_result = TransferResultView(
                success=True,
                message=outcome.message,
                display_name=outcome.target.display_name if outcome.target else None,
            )
            await self.load(ticket_id)
        else:
            self.transfer_error = outcome.message
        return outcome

    # ---- Holder ----

    async def assign_holder(self, current_user: "Account", payload: AssignHolderSchema) -> Ticket:
        """Validate the holder form, persist it and reload the ticket."""
        if self.ticket is None:
            raise RuntimeError("assign_holder called before load")
        cleaned = validate_holder_payload(payload)
        self.ticket = await self.backend.assign_holder(self.ticket.id, current_user.id, cleaned)
        self._render_target = None
        return self.ticket

    # ---- Export ----

    async def export(self) -> ExportOutcome | None:
        """Export the ticket as a PDF. A no-op (``None``) when export is not offered."""
        if TicketAction.EXPORT not in self.available_actions:
            logger.info(
                "ticket_export_not_available",
                ticket_id=str(self.ticket.id) if self.ticket else None,
                exporting=bool(self.is_exporting),
            )
            return None

        ticket = t.cast(Ticket, self.ticket)
        target = t.cast(RenderTarget, self.render_target)
        try:
            document = await self.export_pipeline.export(
                target, scan_code=t.cast(str, self.scan_code), event_title=ticket.event.title
            )
        except ExportError as e:
            logger.warning("ticket_export_failed", ticket_id=str(ticket.id), error=type(e).__name__)
            return ExportOutcome(success=False, message=e.message)
        except Exception:
            logger.exception("ticket_export_crashed", ticket_id=str(ticket.id))
            return ExportOutcome(success=False, message=ExportError.default_message)
        return ExportOutcome(success=True, message=document.filename, document=document)
