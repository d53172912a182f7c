"""Image loading for the ticket face.

Every ``ImageBlock`` settles exactly once, either loaded or errored. A failed
image never fails the export; it is just left out of the capture.
"""

import asyncio
import base64
from io import BytesIO

import httpx
import structlog
from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image

from .render_target import ImageBlock, ImageState, RenderTarget

logger = structlog.get_logger(__name__)


def _decode(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


class ImageLoader:
    """Settles image blocks from data URIs, http(s) URLs or storage paths."""

    def __init__(self, client: httpx.AsyncClient, *, timeout: float | None = None) -> None:
        self.client = client
        self.timeout = timeout if timeout is not None else settings.TICKET_EXPORT_IMAGE_TIMEOUT

    async def _read(self, source: str) -> bytes:
        if source.startswith("data:"):
            _, _, payload = source.partition(",")
            return base64.b64decode(payload, validate=True)
        if source.startswith(("http://", "https://")):
            response = await self.client.get(source, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
            return response.content
        with default_storage.open(source, "rb") as f:
            return f.read()

    async def load(self, block: ImageBlock) -> ImageBlock:
        """Load one block. Never raises; failures leave the block ``errored``."""
        if block.is_settled:
            return block
        if not block.source:
            block.state = ImageState.ERRORED
            return block
        try:
            block.image = _decode(await self._read(block.source))
        except Exception as e:
            block.state = ImageState.ERRORED
            logger.warning(
                "ticket_image_load_failed", source=block.source[:80], error_type=type(e).__name__, error=str(e)
            )
        else:
            block.state = ImageState.LOADED
        return block


async def wait_for_images(target: RenderTarget, loader: ImageLoader | None = None) -> list[ImageBlock]:
    """Wait until every image of the target has loaded or errored.

    A join over all pending loads: it returns only when each of them has
    settled, and it never fails because one of them did.
    """
    pending = [block for block in target.images if not block.is_settled]
    if not pending:
        return target.images

    logger.debug("ticket_images_waiting", count=len(pending))
    if loader is not None:
        await asyncio.gather(*(loader.load(block) for block in pending))
    else:
        async with httpx.AsyncClient(timeout=httpx.Timeout(settings.TICKET_EXPORT_IMAGE_TIMEOUT)) as client:
            loader = ImageLoader(client)
            await asyncio.gather(*(loader.load(block) for block in pending))
    return target.images
