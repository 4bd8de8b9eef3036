from typing import NamedTuple

import pytest

# Envelopes below were produced with OpenSSL ``enc -aes-256-cbc -md md5`` using a
# fixed salt, which is byte-compatible with CryptoJS ``AES.encrypt``.

SAMPLE_KEY = "test-key-123"
SAMPLE_PLAINTEXT = '{"test":true,"message":"Decryption is working!"}'
SAMPLE_ENVELOPE = (
    "U2FsdGVkX18BAgMEBQYHCHf/R8L2HUmKRaM/gPRwpvVLT2X4jzZ7LGiXeN7jN00TWJU9RTYelj8m"
    "spM8vNH0x/fUJs5zOXi1X73qShoehU8="
)

LEGACY_KEY = "legacy-key"
LEGACY_PLAINTEXT = "hello legacy producer"
LEGACY_ENVELOPE = "ESIzRFVmd4hQAfBxh3d3zhxftxrC+wKyCHMGNKLkyZJzS0XBiAJLUA=="

NOTICE_KEY = "notice-key-42"
NOTICE_PLAINTEXT = (
    '{"thumbnail":"data:image/png;base64,iVBORw0KGgoAAAANSUhEUg==",'
    '"document":"data:image/png;base64,AAECAwQ="}'
)
NOTICE_ENVELOPE = (
    "U2FsdGVkX1+hoqOkpaanqHtVsmJXLlF+2uOX1wd4h6cSAC5TUseROAfemenfk1Z2ZyKEX6WLzEKG"
    "b+FNeFU0HpW2iryYt46xA+AlB5ntfWClvibboUMuynoefDZwP5E2YjL4jyl7fSpwdrc+LnaJUpBv"
    "+9250mMxkGuYI5b277M="
)
NOTICE_THUMBNAIL_BYTES = bytes.fromhex("89504e470d0a1a0a0000000d49484452")
NOTICE_DOCUMENT_BYTES = bytes([0, 1, 2, 3, 4])

IMAGE_KEY = "image-key"
IMAGE_PLAINTEXT = "data:image/png;base64,iVBORw0KGgo="
IMAGE_ENVELOPE = (
    "U2FsdGVkX18PDg0MCwoJCNY2D5cedIh6ZTBoD6EHdGKO0hnkQD6idCy5zue2EUCa5F0RLyyub7my"
    "LI8JHfB+QQ=="
)
IMAGE_BYTES = bytes.fromhex("89504e470d0a1a0a")


class CipherVector(NamedTuple):
    key: str
    envelope: str
    plaintext: str


@pytest.fixture()
def sample_vector() -> CipherVector:
    """JSON plaintext under a ``Salted__`` envelope."""
    return CipherVector(SAMPLE_KEY, SAMPLE_ENVELOPE, SAMPLE_PLAINTEXT)


@pytest.fixture()
def legacy_vector() -> CipherVector:
    """Envelope without the ``Salted__`` marker; the salt leads the bytes."""
    return CipherVector(LEGACY_KEY, LEGACY_ENVELOPE, LEGACY_PLAINTEXT)


@pytest.fixture()
def notice_vector() -> CipherVector:
    """Encrypted JSON envelope carrying a thumbnail and a document."""
    return CipherVector(NOTICE_KEY, NOTICE_ENVELOPE, NOTICE_PLAINTEXT)


@pytest.fixture()
def image_vector() -> CipherVector:
    """Encrypted bare ``data:image/png`` URL."""
    return CipherVector(IMAGE_KEY, IMAGE_ENVELOPE, IMAGE_PLAINTEXT)


@pytest.fixture()
def notice_thumbnail_bytes() -> bytes:
    return NOTICE_THUMBNAIL_BYTES


@pytest.fixture()
def notice_document_bytes() -> bytes:
    return NOTICE_DOCUMENT_BYTES


@pytest.fixture()
def image_bytes() -> bytes:
    return IMAGE_BYTES
