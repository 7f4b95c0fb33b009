"""QR payload helpers for gate passes.

Printed passes carry ``RICO-PASS|{PASS_ID}|{PHONE_DIGITS}``. Scanners also
send a JSON object with ``passId`` or a bare pass id, so decoding accepts all
three shapes.
"""
from __future__ import annotations

import base64
import io
import json
import logging
import re
from typing import Optional, Tuple

import qrcode

from ..common.validators import normalize_pass_id, normalize_phone
from ..core.constants import QR_PAYLOAD_PREFIX
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

BARE_PASS_ID = re.compile(r"^(PASS|VIP)-\d{8}-\d{4}$")


def build_qr_payload(pass_id: str, phone: str = "") -> str:
    return f"{QR_PAYLOAD_PREFIX}|{normalize_pass_id(pass_id)}|{normalize_phone(phone)}"


def render_qr_data_url(payload: str) -> str:
    """Render `payload` as a ``data:image/png;base64`` URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=1,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def try_render_qr_data_url(payload: str) -> str:
    """Like render_qr_data_url, but a rendering failure yields ``""``."""
    try:
        return render_qr_data_url(payload)
    except Exception:
        logger.warning("Failed to render QR image for payload %s", payload, exc_info=True)
        return ""


def parse_scan_payload(raw: str) -> Tuple[str, Optional[str]]:
    """Decode scanned text into (pass_id, phone or None)."""
    text = (raw or "").strip()
    if not text:
        raise ValidationError("Scanned code is empty.")

    if text.upper().startswith(QR_PAYLOAD_PREFIX + "|"):
        parts = text.split("|")
        if len(parts) != 3 or not parts[1].strip():
            raise ValidationError("Unrecognized pass QR code.")
        return normalize_pass_id(parts[1]), normalize_phone(parts[2]) or None

    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            raise ValidationError("Unrecognized pass QR code.")
        pass_id = normalize_pass_id(data.get("passId")) if isinstance(data, dict) else ""
        if not pass_id:
            raise ValidationError("Unrecognized pass QR code.")
        return pass_id, normalize_phone(data.get("phone")) or None

    pass_id = normalize_pass_id(text)
    if BARE_PASS_ID.match(pass_id):
        return pass_id, None

    raise ValidationError("Unrecognized pass QR code.")
