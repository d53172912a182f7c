"""Single-page PDF composition of a captured ticket."""

import base64
import re
import typing as t

from django.template.loader import render_to_string
from weasyprint import HTML

from .layout import Placement

FILENAME_FALLBACK_TITLE = "evento"
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/"\x00-\x1f\x7f]')


def export_filename(scan_code: str, event_title: str | None) -> str:
    """``ingresso_<scan code>_<event title>.pdf``.

    Characters that would break a path or a ``Content-Disposition`` header are
    dropped from the title.
    """
    title = _UNSAFE_FILENAME_CHARS.sub("", event_title or "").strip() or FILENAME_FALLBACK_TITLE
    return f"ingresso_{scan_code}_{title}.pdf"


def compose_pdf(png: bytes, placement: Placement, *, page_width: float, page_height: float, title: str = "") -> bytes:
    """Embed one PNG at ``placement`` on a single page of the given size (mm)."""
    context = {
        "title": title,
        "page_width": page_width,
        "page_height": page_height,
        "placement": placement,
        "image_base64": base64.b64encode(png).decode("ascii"),
    }
    html_string = render_to_string("events/ticket_export.html", context=context)
    return t.cast(bytes, HTML(string=html_string).write_pdf())
