from dataclasses import dataclass
from enum import Enum


class ClassificationTag(str, Enum):
    """Shape of a fetched blob or decrypted plaintext."""

    CIPHER_ENVELOPE = "cipher_envelope"
    EMBEDDED_DATA_URL = "embedded_data_url"
    JSON_ENVELOPE = "json_envelope"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedPayload:
    """A payload string annotated with its classification."""

    tag: ClassificationTag
    text: str
    decrypted: bool = False
