"""
QR ticket rendering. The payload is the bare booking id, which is what the
scanner hands back to the check-in engine.
"""

import io

import qrcode
from qrcode import constants


def render_qr_png(booking_id: str, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(booking_id)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
