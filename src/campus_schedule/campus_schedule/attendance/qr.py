"""QR attendance codes: extraction from scanned text and decoding from images."""
from __future__ import annotations

import re
from typing import BinaryIO, Optional

from PIL import Image, UnidentifiedImageError

from ..core.constants import ATTENDANCE_URL_PREFIX
from ..core.exceptions import ValidationError

CODE_RE = re.compile(r"^[a-f0-9]{12}$", re.IGNORECASE)
URL_CODE_RE = re.compile(r"siap\.undip\.ac\.id/a/([a-f0-9]{12})", re.IGNORECASE)
ANY_CODE_RE = re.compile(r"([a-f0-9]{12})", re.IGNORECASE)


def extract_attendance_code(scanned_text: str) -> Optional[str]:
    """Pull the 12-hex-char attendance code out of a bare code or attendance URL."""
    text = (scanned_text or "").strip()
    if CODE_RE.match(text):
        return text.lower()

    pattern = URL_CODE_RE if "siap.undip.ac.id/a/" in text else ANY_CODE_RE
    match = pattern.search(text)
    return match.group(1).lower() if match else None


def attendance_url(code: str) -> str:
    return f"{ATTENDANCE_URL_PREFIX}{code}"


def decode_qr_image(stream: BinaryIO) -> str:
    """Decode the first QR code found in an uploaded image."""
    # pyzbar loads the zbar shared library on import.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Uploaded file is not a readable image", field="image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image", field="image")
    try:
        return decoded[0].data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise ValidationError("Invalid attendance QR code", field="image")
