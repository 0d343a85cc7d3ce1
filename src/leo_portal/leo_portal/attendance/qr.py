from __future__ import annotations

import re
from typing import IO

from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.exceptions import ValidationError

_CHECKIN_PATH = "/attendance/checkin/"
_PAYLOAD_RE = re.compile(r"/attendance/checkin/(\d+)/?$")


def event_qr_payload(base_url: str, event_id: int) -> str:
    return f"{(base_url or '').rstrip('/')}{_CHECKIN_PATH}{int(event_id)}"


def parse_event_qr(payload: str) -> int:
    """Extract the event id from a scanned check-in payload."""
    match = _PAYLOAD_RE.search((payload or "").strip())
    if not match:
        raise ValidationError("This QR code is not an event check-in code")
    return int(match.group(1))


def decode_qr_image(stream: IO[bytes]) -> str:
    try:
        img = Image.open(stream).convert("RGB")
    except (OSError, ValueError):
        raise ValidationError("Could not read the uploaded image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")
    return decoded[0].data.decode("utf-8", errors="ignore").strip()
