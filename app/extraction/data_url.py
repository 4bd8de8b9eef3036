import base64
import binascii
import mimetypes
from urllib.parse import unquote_to_bytes

from app.extraction.models import DecodedDataUrl
from app.recovery.exceptions import MalformedArtifact

DEFAULT_MIME_TYPE = "application/octet-stream"


def is_data_url(value: object) -> bool:
    return isinstance(value, str) and value.lstrip().startswith("data:")


def decode_data_url(value: str, kind: str) -> DecodedDataUrl:
    """Decode an RFC 2397 data URL.

    The header is everything before the first comma. Bodies flagged
    ``;base64`` are decoded strictly, others are percent-decoded.

    Raises:
        MalformedArtifact: on a missing comma, an invalid base64 body or an
            empty body.
    """
    text = value.strip()
    header, sep, body = text.partition(",")
    if not sep:
        raise MalformedArtifact(kind, "data URL has no comma separator")

    params = header[len("data:"):].split(";")
    mime_type = params[0].strip() or DEFAULT_MIME_TYPE
    if "base64" in (p.strip().lower() for p in params[1:]):
        compact = "".join(body.split())
        try:
            data = base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise MalformedArtifact(kind, f"body is not valid base64: {exc}") from exc
    else:
        data = unquote_to_bytes(body)

    if not data:
        raise MalformedArtifact(kind, "data URL body is empty")
    return DecodedDataUrl(mime_type=mime_type, data=data)


def default_file_name(kind: str, document_id: str, mime_type: str) -> str:
    """``<kind>-<document_id><ext>``, with ``.bin`` for unknown types."""
    extension = mimetypes.guess_extension(mime_type, strict=False) or ".bin"
    return f"{kind}-{document_id}{extension}"
