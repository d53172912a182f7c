"""Ticket identity, transfer and export configuration."""

from decouple import config

# Scan codes are PREFIX + 6 uppercase alphanumerics, e.g. PLKTK076476.
TICKET_SCAN_CODE_PREFIX: str = config("TICKET_SCAN_CODE_PREFIX", default="PLKTK")

# How many times a single ticket may change hands.
TICKET_MAX_TRANSFERS: int = config("TICKET_MAX_TRANSFERS", default=1, cast=int)

# Printable page (A4 landscape) in millimetres.
TICKET_EXPORT_PAGE_WIDTH_MM: float = config("TICKET_EXPORT_PAGE_WIDTH_MM", default=297.0, cast=float)
TICKET_EXPORT_PAGE_HEIGHT_MM: float = config("TICKET_EXPORT_PAGE_HEIGHT_MM", default=210.0, cast=float)

TICKET_EXPORT_SCALE: int = config("TICKET_EXPORT_SCALE", default=2, cast=int)
TICKET_EXPORT_BACKGROUND: str = config("TICKET_EXPORT_BACKGROUND", default="#f3eeec")
TICKET_EXPORT_MIN_IMAGE_BYTES: int = config("TICKET_EXPORT_MIN_IMAGE_BYTES", default=100, cast=int)
TICKET_EXPORT_IMAGE_TIMEOUT: float = config("TICKET_EXPORT_IMAGE_TIMEOUT", default=10.0, cast=float)
