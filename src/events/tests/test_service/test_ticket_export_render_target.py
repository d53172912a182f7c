import pytest

from events.models import Event, Ticket
from events.service.ticket_export import ImageBlock, RenderTarget, Spacer, TextBlock, build_ticket_face
from events.service.ticket_export.rasterizer import PillowRasterizer, encode_png


class TestRenderTarget:
    def test_empty_target(self) -> None:
        assert RenderTarget().is_empty
        assert RenderTarget(blocks=[Spacer(), TextBlock("   ")]).is_empty
        assert not RenderTarget(blocks=[TextBlock("x")]).is_empty
        assert not RenderTarget(blocks=[ImageBlock(source=None, width=10, height=10)]).is_empty

    def test_bounding_box_follows_layout(self) -> None:
        target = RenderTarget(blocks=[Spacer(100), Spacer(50)], width=500, padding=20)
        assert target.bounding_box() == (500, 20 + 150 + 20)

    def test_style_width_and_height_win(self) -> None:
        target = RenderTarget(blocks=[Spacer(100)], style={"width": "320px", "height": "90px"})
        assert target.bounding_box() == (320, 90)

    def test_hidden_target_has_no_box(self) -> None:
        target = RenderTarget(blocks=[TextBlock("x")], style={"display": "none"})
        assert target.bounding_box() == (0, 0)
        assert target.layout() == []

    def test_images_shrink_to_content_width(self) -> None:
        target = RenderTarget(blocks=[ImageBlock(source=None, width=1000, height=500)], width=600, padding=50)
        (placed,) = target.layout()
        assert (placed.width, placed.height) == (500, 250)

    def test_centered_blocks(self) -> None:
        target = RenderTarget(
            blocks=[ImageBlock(source=None, width=100, height=100, align="center")], width=400, padding=0
        )
        (placed,) = target.layout()
        assert placed.x == 150

    def test_long_text_wraps(self) -> None:
        short = TextBlock("Festa", size=20).measure(400)
        long = TextBlock("Festa " * 40, size=20).measure(400)
        assert long[1] > short[1]


@pytest.mark.django_db
class TestBuildTicketFace:
    def test_contains_event_holder_and_code(self, held_ticket: Ticket) -> None:
        face = build_ticket_face(held_ticket, "PLKTK0A1B2C")
        texts = [block.text for block in face.blocks if isinstance(block, TextBlock)]

        assert "Festa Junina" in texts
        assert "Arena Pulakatraca, Recife - PE" in texts
        assert "Olivia Owner" in texts
        assert "12345678901" in texts
        assert texts[-1] == "PLKTK0A1B2C"
        qr = face.images[-1]
        assert qr.source is not None and qr.source.startswith("data:image/png;base64,")
        assert qr.alt == "PLKTK0A1B2C"

    def test_cover_image_comes_first(self, held_ticket: Ticket, event: Event) -> None:
        event.cover_image_url = "https://cdn.example.com/cover.png"
        event.save()
        held_ticket.refresh_from_db()

        face = build_ticket_face(held_ticket, "PLKTK0A1B2C")

        assert isinstance(face.blocks[0], ImageBlock)
        assert face.blocks[0].source == "https://cdn.example.com/cover.png"

    def test_without_holder(self, ticket: Ticket) -> None:
        face = build_ticket_face(ticket, "PLKTK0A1B2C")
        assert not face.is_empty
        assert len(face.images) == 1


class TestPillowRasterizer:
    @pytest.mark.asyncio
    async def test_bitmap_is_scaled(self, render_target: RenderTarget) -> None:
        width, height = render_target.bounding_box()

        bitmap = await PillowRasterizer().rasterize(
            render_target, width=width, height=height, scale=2, background="#f3eeec"
        )

        assert bitmap.size == (width * 2, height * 2)
        assert bitmap.getpixel((0, 0)) == (0xF3, 0xEE, 0xEC)
        assert encode_png(bitmap).startswith(b"\x89PNG")

    @pytest.mark.asyncio
    async def test_unloaded_images_are_skipped(self) -> None:
        target = RenderTarget(blocks=[ImageBlock(source="x", width=50, height=50)], width=100, padding=0)
        bitmap = await PillowRasterizer().rasterize(target, width=100, height=50, scale=1, background="#ffffff")
        assert bitmap.getcolors() == [(100 * 50, (255, 255, 255))]
