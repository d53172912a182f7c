"""Capture a ticket face and turn it into a downloadable single-page PDF.

The target is shared with the live ticket view. Every style change and every
transient block added for the capture is undone when ``capture_scope`` exits,
whatever happened inside it, and the loading flag is always cleared.
"""

import typing as t
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog
from django.conf import settings
from django.utils import formats, timezone
from django.utils.translation import gettext_lazy as _

from events.exceptions import CaptureFailed, EmptyRenderTarget, ExportError

from .composer import compose_pdf, export_filename
from .images import ImageLoader, wait_for_images
from .layout import Placement, fit_to_page, page_size
from .rasterizer import PillowRasterizer, Rasterizer, encode_png
from .render_target import Block, RenderTarget, TextBlock

logger = structlog.get_logger(__name__)

RESTORABLE_STYLE_KEYS = ("display", "visibility", "position", "overflow", "width", "height", "transform", "left", "top")
CAPTURE_STYLE_OVERRIDES = {"overflow": "visible", "transform": "none"}

_MISSING = object()

Composer = t.Callable[..., bytes]


class LoadingFlag:
    """An in-progress flag with an optional change listener."""

    def __init__(self, listener: t.Callable[[bool], None] | None = None) -> None:
        self._value = False
        self.listener = listener

    @property
    def value(self) -> bool:
        return self._value

    def set(self, value: bool) -> None:
        if value == self._value:
            return
        self._value = value
        if self.listener is not None:
            self.listener(value)

    def __bool__(self) -> bool:
        return self._value


@dataclass
class CaptureScope:
    target: RenderTarget
    snapshot: dict[str, t.Any]
    transient: list[Block] = field(default_factory=list)

    def add_transient(self, block: Block) -> Block:
        """Append a block that only exists for the duration of the capture."""
        block.transient = True
        self.target.blocks.append(block)
        self.transient.append(block)
        return block


@contextmanager
def capture_scope(target: RenderTarget, overrides: dict[str, str] | None = None) -> t.Iterator[CaptureScope]:
    """Snapshot the restorable style keys, apply ``overrides``, restore on exit."""
    snapshot = {key: target.style.get(key, _MISSING) for key in RESTORABLE_STYLE_KEYS}
    scope = CaptureScope(target=target, snapshot=snapshot)
    try:
        target.style.update({k: v for k, v in (overrides or {}).items() if k in RESTORABLE_STYLE_KEYS})
        yield scope
    finally:
        removed = 0
        for block in scope.transient:
            if block in target.blocks:
                target.blocks.remove(block)
                removed += 1
        for key, value in snapshot.items():
            if value is _MISSING:
                target.style.pop(key, None)
            else:
                target.style[key] = value
        logger.debug("ticket_capture_cleaned_up", transient_removed=removed)


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    content: bytes
    placement: Placement
    image_width: int
    image_height: int


class TicketExportPipeline:
    """Steps: check target, wait for images, measure, rasterize, validate, fit, compose."""

    def __init__(
        self,
        *,
        rasterizer: Rasterizer | None = None,
        loader: ImageLoader | None = None,
        composer: Composer | None = None,
        loading: LoadingFlag | None = None,
        scale: int | None = None,
        background: str | None = None,
        min_image_bytes: int | None = None,
    ) -> None:
        self.rasterizer = rasterizer or PillowRasterizer()
        self.loader = loader
        self.composer = composer or compose_pdf
        self.loading = loading if loading is not None else LoadingFlag()
        self.scale = scale or settings.TICKET_EXPORT_SCALE
        self.background = background or settings.TICKET_EXPORT_BACKGROUND
        self.min_image_bytes = (
            min_image_bytes if min_image_bytes is not None else settings.TICKET_EXPORT_MIN_IMAGE_BYTES
        )

    async def _capture(self, target: RenderTarget) -> tuple[bytes, int, int]:
        with capture_scope(target, CAPTURE_STYLE_OVERRIDES) as scope:
            generated_at = formats.date_format(timezone.localtime(), "DATETIME_FORMAT")
            scope.add_transient(TextBlock(str(_("Generated on {date}")).format(date=generated_at), size=14))

            await wait_for_images(target, self.loader)

            width, height = target.bounding_box()
            if width <= 0 or height <= 0:
                raise CaptureFailed(str(_("The ticket has invalid dimensions.")))

            try:
                bitmap = await self.rasterizer.rasterize(
                    target, width=width, height=height, scale=self.scale, background=self.background
                )
            except ExportError:
                raise
            except Exception as e:
                logger.exception("ticket_rasterization_failed")
                raise CaptureFailed() from e

        if bitmap.width <= 0 or bitmap.height <= 0:
            raise CaptureFailed(str(_("The ticket image was not captured correctly.")))
        png = encode_png(bitmap)
        if len(png) < self.min_image_bytes:
            raise CaptureFailed(str(_("The ticket image was not generated correctly.")))
        return png, bitmap.width, bitmap.height

    async def export(self, target: RenderTarget, *, scan_code: str, event_title: str | None) -> ExportedDocument:
        """Produce the PDF for ``target``.

        Raises:
            EmptyRenderTarget: the target has nothing to capture.
            CaptureFailed: the capture was degenerate.
            ExportError: composing the document failed.
        """
        self.loading.set(True)
        try:
            if target.is_empty:
                raise EmptyRenderTarget()

            png, image_width, image_height = await self._capture(target)
            page_width, page_height = page_size()
            placement = fit_to_page(image_width, image_height, page_width, page_height)

            filename = export_filename(scan_code, event_title)
            try:
                content = self.composer(
                    png, placement, page_width=page_width, page_height=page_height, title=event_title or ""
                )
            except Exception as e:
                logger.exception("ticket_pdf_composition_failed", filename=filename)
                raise ExportError() from e

            logger.info(
                "ticket_pdf_exported",
                filename=filename,
                image_width=image_width,
                image_height=image_height,
                placement_width=round(placement.width, 1),
                placement_height=round(placement.height, 1),
            )
            return ExportedDocument(
                filename=filename,
                content=content,
                placement=placement,
                image_width=image_width,
                image_height=image_height,
            )
        finally:
            self.loading.set(False)

