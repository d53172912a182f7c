"""Offscreen rendering of a ``RenderTarget`` into a bitmap."""

import io
from typing import Protocol

import structlog
from PIL import Image, ImageColor, ImageDraw, ImageFont

from .render_target import ImageBlock, ImageState, RenderTarget, Spacer, TextBlock

logger = structlog.get_logger(__name__)


class Rasterizer(Protocol):
    """Turns a laid-out target into a bitmap at ``scale`` pixel density."""

    async def rasterize(
        self, target: RenderTarget, *, width: int, height: int, scale: int, background: str
    ) -> Image.Image:
        """Render the target.

        Args:
            target: The target to capture. Must not be mutated.
            width: Capture width in CSS pixels.
            height: Capture height in CSS pixels.
            scale: Device pixel ratio of the bitmap.
            background: Opaque fill behind everything.

        Returns:
            An RGB image of ``width * scale`` by ``height * scale`` pixels.
        """
        ...


def _load_font(font_size: int, *, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font with fallbacks for different platforms."""
    dejavu = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    font_paths = [
        f"/usr/share/fonts/truetype/dejavu/{dejavu}",  # Linux
        "/System/Library/Fonts/Helvetica.ttc",  # macOS
    ]

    for path in font_paths:
        try:
            return ImageFont.truetype(path, font_size)
        except OSError:
            continue

    return ImageFont.load_default(size=font_size)


class PillowRasterizer:
    """Draws text and loaded images with Pillow. Errored or pending images are skipped."""

    async def rasterize(
        self, target: RenderTarget, *, width: int, height: int, scale: int, background: str
    ) -> Image.Image:
        canvas = Image.new("RGB", (width * scale, height * scale), ImageColor.getrgb(background))
        draw = ImageDraw.Draw(canvas)
        skipped = 0

        for placed in target.layout():
            block = placed.block
            x, y = placed.x * scale, placed.y * scale
            if isinstance(block, Spacer):
                continue
            if isinstance(block, TextBlock):
                font = _load_font(block.size * scale, bold=block.bold)
                line_height = round(placed.height * scale / max(1, len(block.lines(placed.width))))
                for i, line in enumerate(block.lines(placed.width)):
                    line_x = x
                    if block.align == "center":
                        line_x += max(0, round((placed.width * scale - draw.textlength(line, font=font)) / 2))
                    draw.text((line_x, y + i * line_height), line, fill=block.color, font=font)
                continue
            if isinstance(block, ImageBlock):
                if block.state != ImageState.LOADED or block.image is None:
                    skipped += 1
                    continue
                size = (max(1, placed.width * scale), max(1, placed.height * scale))
                image = block.image.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
                canvas.paste(image, (x, y), image)

        if skipped:
            logger.info("ticket_capture_images_skipped", count=skipped)
        return canvas


def encode_png(image: Image.Image) -> bytes:
    """Serialize a capture to PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
