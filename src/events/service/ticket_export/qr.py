import base64
from io import BytesIO

import qrcode


def qr_code_png(value: str, *, box_size: int = 10, border: int = 4) -> bytes:
    """Render ``value`` as a QR code PNG."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(value)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()


def qr_code_data_uri(value: str) -> str:
    """QR code as a ``data:`` URI, ready to drop into an image block."""
    return "data:image/png;base64," + base64.b64encode(qr_code_png(value)).decode("utf-8")
