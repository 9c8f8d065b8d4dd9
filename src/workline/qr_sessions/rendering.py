"""On-demand QR rendering and decoding.

The stored session id is the source of truth; images are always regenerated
from it.
"""

from __future__ import annotations

import base64
import io
from typing import BinaryIO, Optional

import qrcode
from PIL import Image

from ..core.constants import QR_IMAGE_BORDER, QR_IMAGE_BOX_SIZE


def _make_qr(payload: str, *, box_size: int, border: int) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    return qr


def render_png(payload: str, *, box_size: int = QR_IMAGE_BOX_SIZE, border: int = QR_IMAGE_BORDER) -> bytes:
    img = _make_qr(payload, box_size=box_size, border=border).make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_data_url(payload: str, *, box_size: int = QR_IMAGE_BOX_SIZE, border: int = QR_IMAGE_BORDER) -> str:
    png = render_png(payload, box_size=box_size, border=border)
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def render_ascii(payload: str, *, out=None, invert: bool = False) -> None:
    """Print the code with block characters (terminal kiosks)."""
    _make_qr(payload, box_size=1, border=2).print_ascii(out=out, invert=invert)


def decode_image(stream: BinaryIO) -> Optional[str]:
    """Return the first QR payload found in an image, or ``None``."""

    # pyzbar needs the zbar shared library; import on use so the API still
    # starts on hosts without it.
    from pyzbar.pyzbar import decode as pyzbar_decode

    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()


def decode_data_url(data_url: str) -> Optional[str]:
    _, _, encoded = data_url.partition(",")
    return decode_image(io.BytesIO(base64.b64decode(encoded)))
