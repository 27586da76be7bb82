from __future__ import annotations

import base64
import io
import re
from typing import Any, Dict, Mapping, Optional

import cv2
import numpy as np
import qrcode
from qrcode import constants

from .models import PASS_ID_MAX_LENGTH
from .passes.errors import BadInput, DecodeError

_ERROR_CORRECTION = {
    "L": constants.ERROR_CORRECT_L,
    "M": constants.ERROR_CORRECT_M,
    "Q": constants.ERROR_CORRECT_Q,
    "H": constants.ERROR_CORRECT_H,
}

# printable ASCII without whitespace
_TOKEN_RE = re.compile(r"^[\x21-\x7e]+$")


def qr_options(config: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "error_correction": config.get("QR_ERROR_CORRECTION", "M"),
        "box_size": config.get("QR_BOX_SIZE", 10),
        "border": config.get("QR_BORDER", 4),
    }


def encode(token: str, error_correction: str = "M", box_size: int = 10, border: int = 4) -> bytes:
    """Render ``token`` as a QR code and return the PNG bytes."""
    if not isinstance(token, str) or not token:
        raise BadInput("token is required")

    try:
        level = _ERROR_CORRECTION[str(error_correction).upper()]
    except KeyError:
        raise ValueError(f"Unknown QR error correction level: {error_correction!r}")

    qr = qrcode.QRCode(version=None, error_correction=level, box_size=box_size, border=border)
    qr.add_data(token)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def encode_base64(token: str, **options: Any) -> str:
    return base64.b64encode(encode(token, **options)).decode("utf-8")


def data_url(png_base64: str) -> str:
    return f"data:image/png;base64,{png_base64}"


def is_token(value: str, prefix: Optional[str] = None) -> bool:
    if not value or len(value) > PASS_ID_MAX_LENGTH or not _TOKEN_RE.match(value):
        return False
    return prefix is None or value.startswith(prefix)


def decode(image: bytes, expected_prefix: Optional[str] = None) -> str:
    """Return the pass token held in a QR code image.

    Raises :class:`DecodeError` if the bytes are not an image, no QR code
    is found, or the payload does not look like a pass token. Decoding does
    not touch the pass store.
    """
    if not image:
        raise DecodeError("No image data")

    try:
        pixels = cv2.imdecode(np.frombuffer(image, np.uint8), cv2.IMREAD_GRAYSCALE)
    except cv2.error as e:
        raise DecodeError("Could not read image") from e
    if pixels is None:
        raise DecodeError("Could not read image")

    try:
        text, _points, _straight = cv2.QRCodeDetector().detectAndDecode(pixels)
    except cv2.error as e:
        raise DecodeError("Could not decode QR from image") from e

    if not text:
        raise DecodeError("No QR code found in image")
    if not is_token(text, expected_prefix):
        raise DecodeError("QR payload is not a pass token")
    return text
