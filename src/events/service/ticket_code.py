"""Scan codes printed on tickets and encoded in their QR graphic.

A scan code is a fixed prefix followed by six uppercase alphanumerics, e.g.
``PLKTK076476``. Codes derived here only depend on the ticket identifier, so
re-deriving them never changes a ticket's code.
"""

import re
import typing as t
from uuid import UUID

from django.conf import settings

if t.TYPE_CHECKING:
    from events.models import Ticket

SCAN_CODE_SUFFIX_LENGTH = 6
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def _prefix() -> str:
    return str(settings.TICKET_SCAN_CODE_PREFIX)


def placeholder_scan_code() -> str:
    """The code used when a ticket has no identifier at all."""
    return _prefix() + "0" * SCAN_CODE_SUFFIX_LENGTH


def is_canonical_scan_code(code: str | None) -> bool:
    """Whether the code is PREFIX + exactly six uppercase alphanumerics."""
    if not code:
        return False
    pattern = rf"{re.escape(_prefix())}[A-Z0-9]{{{SCAN_CODE_SUFFIX_LENGTH}}}"
    return re.fullmatch(pattern, code) is not None


def normalize_scan_code(stored_code: str | None, ticket_id: UUID | str | None) -> str:
    """Return the canonical scan code for a ticket.

    A stored code that is already canonical is returned unchanged. Otherwise the
    code is derived from the identifier: non-alphanumerics are stripped, the last
    six characters are uppercased and right-padded with ``0``.
    """
    if is_canonical_scan_code(stored_code):
        return t.cast(str, stored_code)

    if not ticket_id:
        return placeholder_scan_code()

    clean_id = _NON_ALPHANUMERIC.sub("", str(ticket_id))
    if not clean_id:
        return placeholder_scan_code()

    suffix = clean_id[-SCAN_CODE_SUFFIX_LENGTH:].upper().ljust(SCAN_CODE_SUFFIX_LENGTH, "0")
    return _prefix() + suffix


def scan_code_for(ticket: "Ticket") -> str:
    """Shortcut for a ticket instance."""
    return normalize_scan_code(ticket.qr_code, ticket.pk)
