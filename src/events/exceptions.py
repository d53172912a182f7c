class TransferError(Exception):
    """Base class for failures of a ticket transfer attempt.

    Every subclass carries a user-facing message; the transfer protocol turns
    them into a structured outcome instead of letting them escape.
    """

    default_message = "Could not transfer the ticket."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidEmail(TransferError):
    default_message = "Enter a valid email address."


class NotAuthenticated(TransferError):
    default_message = "You need to be logged in to transfer tickets."


class NotTransferable(TransferError):
    """The eligibility predicate said no. The message is the backend's reason, verbatim."""

    default_message = "This ticket cannot be transferred."


class TargetNotFound(TransferError):
    default_message = "No account was found with this email."


class SelfTransfer(TransferError):
    default_message = "You cannot transfer a ticket to yourself."


class TransferRejected(TransferError):
    """The atomic transfer ran and answered with an explicit failure."""

    default_message = "The transfer was rejected."


class TransferFailed(TransferError):
    """Infrastructure failure during one of the backend round-trips."""

    default_message = "Internal error while processing the transfer. Please try again."


class ExportError(Exception):
    """Base class for failures of the ticket export pipeline."""

    default_message = "Could not generate the ticket PDF."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyRenderTarget(ExportError):
    default_message = "The ticket has no content to export."


class CaptureFailed(ExportError):
    default_message = "The ticket image could not be captured."


class HolderValidationError(Exception):
    """Raised when holder data fails validation. Maps field names to messages."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
