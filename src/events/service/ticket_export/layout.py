from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class Placement:
    """Where the captured image goes on the page, in millimetres."""

    x: float
    y: float
    width: float
    height: float


def page_size() -> tuple[float, float]:
    """The landscape page in millimetres."""
    return settings.TICKET_EXPORT_PAGE_WIDTH_MM, settings.TICKET_EXPORT_PAGE_HEIGHT_MM


def fit_to_page(image_width: int, image_height: int, page_width: float, page_height: float) -> Placement:
    """Scale an image to fit the page without distortion and center it.

    An image relatively wider than the page spans the full page width and is
    letterboxed top and bottom; any other image spans the full height and is
    letterboxed left and right.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Cannot place an image of {image_width}x{image_height}.")

    image_ratio = image_width / image_height
    page_ratio = page_width / page_height

    if image_ratio > page_ratio:
        width = page_width
        height = page_width / image_ratio
        return Placement(x=0.0, y=(page_height - height) / 2, width=width, height=height)

    height = page_height
    width = page_height * image_ratio
    return Placement(x=(page_width - width) / 2, y=0.0, width=width, height=height)
