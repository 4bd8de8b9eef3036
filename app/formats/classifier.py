"""Single place that decides what shape a payload string has.

Used on the raw gateway body and again on decrypted plaintext, so the
decision order below must stay free of side effects.
"""

import base64
import binascii
import json

from app.formats.models import ClassificationTag, ClassifiedPayload

# base64 of "Salted__" contributes exactly these ten characters
CIPHER_ENVELOPE_PREFIX = "U2FsdGVkX1"
DATA_URL_IMAGE_PREFIX = "data:image"


def classify(payload: str) -> ClassificationTag:
    """Classify a payload by prefix and content checks, first match wins."""
    text = payload.strip()
    if text.startswith(CIPHER_ENVELOPE_PREFIX):
        return ClassificationTag.CIPHER_ENVELOPE
    if text.startswith(DATA_URL_IMAGE_PREFIX):
        return ClassificationTag.EMBEDDED_DATA_URL
    try:
        json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return ClassificationTag.UNKNOWN
    return ClassificationTag.JSON_ENVELOPE


def classify_payload(payload: str, decrypted: bool = False) -> ClassifiedPayload:
    text = payload.strip()
    return ClassifiedPayload(tag=classify(text), text=text, decrypted=decrypted)


def looks_like_wrapped_envelope(payload: str) -> bool:
    """True when the payload is base64 of a cipher-envelope string.

    Such blobs are reported for manual review rather than unwrapped.
    """
    text = "".join(payload.split())
    if not text or text.startswith(CIPHER_ENVELOPE_PREFIX):
        return False
    try:
        decoded = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return False
    return decoded.startswith(CIPHER_ENVELOPE_PREFIX.encode("ascii"))
