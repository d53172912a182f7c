"""The ticket face that gets captured for export.

A ``RenderTarget`` is a small retained layout: an ordered list of blocks plus
an inline ``style`` mapping that behaves like a DOM node's inline style. The
same target backs the live ticket view and the export capture, so the capture
must leave it exactly as it found it.
"""

import enum
import math
import textwrap
import typing as t
from dataclasses import dataclass, field

from django.utils import formats, timezone

from events.service.ticket_export.qr import qr_code_data_uri

if t.TYPE_CHECKING:
    from PIL import Image

    from events.models import Ticket

DEFAULT_WIDTH = 1000
DEFAULT_PADDING = 40
LINE_HEIGHT_RATIO = 1.35
# Average glyph width relative to the font size, used to wrap text without a font.
GLYPH_WIDTH_RATIO = 0.55


class ImageState(enum.StrEnum):
    PENDING = "pending"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass
class TextBlock:
    text: str
    size: int = 24
    bold: bool = False
    color: str = "#1f1f1f"
    align: t.Literal["left", "center"] = "left"
    transient: bool = False

    def lines(self, content_width: int) -> list[str]:
        """Greedy wrap to the content width."""
        chars = max(1, int(content_width / (self.size * GLYPH_WIDTH_RATIO)))
        return textwrap.wrap(self.text, width=chars) or [""]

    def measure(self, content_width: int) -> tuple[int, int]:
        return content_width, math.ceil(len(self.lines(content_width)) * self.size * LINE_HEIGHT_RATIO)


@dataclass
class ImageBlock:
    source: str | None
    width: int
    height: int
    alt: str = ""
    align: t.Literal["left", "center"] = "center"
    transient: bool = False
    state: ImageState = ImageState.PENDING
    image: "Image.Image | None" = field(default=None, repr=False)

    @property
    def is_settled(self) -> bool:
        return self.state != ImageState.PENDING

    def measure(self, content_width: int) -> tuple[int, int]:
        width = min(self.width, content_width)
        return width, round(self.height * width / self.width) if self.width else 0


@dataclass
class Spacer:
    height: int = 16
    transient: bool = False

    def measure(self, content_width: int) -> tuple[int, int]:
        return content_width, self.height


Block = TextBlock | ImageBlock | Spacer


@dataclass(frozen=True)
class PlacedBlock:
    block: Block
    x: int
    y: int
    width: int
    height: int


def _px(value: str | None) -> int | None:
    if not value or not value.endswith("px"):
        return None
    try:
        return round(float(value[:-2]))
    except ValueError:
        return None


@dataclass
class RenderTarget:
    blocks: list[Block] = field(default_factory=list)
    style: dict[str, str] = field(default_factory=dict)
    width: int = DEFAULT_WIDTH
    padding: int = DEFAULT_PADDING

    @property
    def is_empty(self) -> bool:
        """True when there is nothing visible to capture."""
        return not any(
            (isinstance(b, TextBlock) and b.text.strip()) or isinstance(b, ImageBlock) for b in self.blocks
        )

    @property
    def images(self) -> list[ImageBlock]:
        return [b for b in self.blocks if isinstance(b, ImageBlock)]

    @property
    def is_displayed(self) -> bool:
        return self.style.get("display") != "none"

    def content_width(self) -> int:
        return max(0, (_px(self.style.get("width")) or self.width) - 2 * self.padding)

    def layout(self) -> list[PlacedBlock]:
        """Position every block top to bottom at 1x density."""
        if not self.is_displayed:
            return []
        content_width = self.content_width()
        y = self.padding
        placed = []
        for block in self.blocks:
            width, height = block.measure(content_width)
            x = self.padding
            if getattr(block, "align", "left") == "center":
                x += (content_width - width) // 2
            placed.append(PlacedBlock(block, x, y, width, height))
            y += height
        return placed

    def bounding_box(self) -> tuple[int, int]:
        """Width and height of the laid-out target, like ``getBoundingClientRect``."""
        if not self.is_displayed:
            return 0, 0
        placed = self.layout()
        natural_height = (placed[-1].y + placed[-1].height if placed else 0) + self.padding
        width = _px(self.style.get("width")) or self.width
        height = _px(self.style.get("height")) or natural_height
        return width, height


def build_ticket_face(ticket: "Ticket", scan_code: str) -> RenderTarget:
    """Lay out the printable face of a ticket: cover, event, holder and QR code."""
    event = ticket.event
    start = timezone.localtime(event.start)
    blocks: list[Block] = []

    if event.cover_source:
        blocks += [ImageBlock(source=event.cover_source, width=920, height=360, alt=event.title), Spacer(24)]

    blocks += [
        TextBlock(event.title, size=40, bold=True),
        TextBlock(formats.date_format(start, "DATETIME_FORMAT"), size=22, color="#555555"),
    ]
    if event.location:
        blocks.append(TextBlock(event.location, size=22, color="#555555"))

    blocks.append(Spacer(28))
    if ticket.holder is not None:
        blocks.append(TextBlock(ticket.holder.name, size=26, bold=True))
        blocks.append(TextBlock(ticket.holder.email, size=20, color="#555555"))
        if ticket.holder.document:
            blocks.append(TextBlock(ticket.holder.document, size=20, color="#555555"))

    blocks += [
        Spacer(28),
        ImageBlock(source=qr_code_data_uri(scan_code), width=320, height=320, alt=scan_code),
        TextBlock(scan_code, size=30, bold=True, align="center"),
    ]
    return RenderTarget(blocks=blocks)
