"""Ticket export: capture the ticket face and compose a printable PDF."""

from .composer import compose_pdf, export_filename
from .images import ImageLoader, wait_for_images
from .layout import Placement, fit_to_page, page_size
from .pipeline import (
    RESTORABLE_STYLE_KEYS,
    ExportedDocument,
    LoadingFlag,
    TicketExportPipeline,
    capture_scope,
)
from .rasterizer import PillowRasterizer, Rasterizer, encode_png
from .render_target import ImageBlock, ImageState, RenderTarget, Spacer, TextBlock, build_ticket_face

__all__ = [
    "RESTORABLE_STYLE_KEYS",
    "ExportedDocument",
    "ImageBlock",
    "ImageLoader",
    "ImageState",
    "LoadingFlag",
    "PillowRasterizer",
    "Placement",
    "Rasterizer",
    "RenderTarget",
    "Spacer",
    "TextBlock",
    "TicketExportPipeline",
    "build_ticket_face",
    "capture_scope",
    "compose_pdf",
    "encode_png",
    "export_filename",
    "fit_to_page",
    "page_size",
    "wait_for_images",
]
