# signature/logic/signature_image.py
from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..exceptions.errors import SignatureImageError

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def extract_base64_payload(value: str) -> str:
    """
    Return the base64 part of a signature value.

    Values are either data URLs ("data:image/png;base64,....") or the raw
    base64 payload; raw payloads get the PNG prefix before splitting.
    """
    data = value if "," in value else PNG_DATA_URL_PREFIX + value
    payload = data.split(",", 1)[1].strip()
    if not payload:
        raise SignatureImageError("Invalid signature data format")
    return payload


def decode_signature_png(value: str) -> bytes:
    """Decode a signature value into raw PNG bytes."""
    payload = extract_base64_payload(value)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureImageError(f"Signature is not valid base64: {exc}") from exc


def load_signature_image(value: str) -> Image.Image:
    """
    Decode and open a signature value as an RGBA Pillow image.

    Only PNG is accepted, matching what the signature pad produces.
    """
    png = decode_signature_png(value)
    try:
        img = Image.open(io.BytesIO(png))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise SignatureImageError(f"Signature is not a readable image: {exc}") from exc
    if img.format != "PNG":
        raise SignatureImageError(f"Signature must be PNG, got {img.format}")
    if img.width <= 0 or img.height <= 0:
        raise SignatureImageError("Signature image is empty")
    return img.convert("RGBA")
