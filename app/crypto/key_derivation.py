"""OpenSSL ``EVP_BytesToKey`` with MD5 and a single iteration.

This is the password-to-key scheme the JavaScript library uses for
``AES.encrypt(message, passphrase)``. It must stay byte-exact: a stronger KDF
would make every existing envelope unrecoverable.

    block_0 = MD5(passphrase || salt)
    block_n = MD5(block_{n-1} || passphrase || salt)

Blocks are concatenated until ``key_size + iv_size`` bytes are available.
"""

import hashlib

from app.crypto.models import IV_SIZE, KEY_SIZE, DerivedKeyMaterial


def evp_bytes_to_key(passphrase: bytes, salt: bytes, length: int) -> bytes:
    derived = b""
    block = b""
    while len(derived) < length:
        block = hashlib.md5(block + passphrase + salt, usedforsecurity=False).digest()
        derived += block
    return derived[:length]


def derive_key_material(
    passphrase: bytes,
    salt: bytes,
    key_size: int = KEY_SIZE,
    iv_size: int = IV_SIZE,
) -> DerivedKeyMaterial:
    """Derive key and IV; 48 bytes means exactly three MD5 rounds."""
    derived = evp_bytes_to_key(passphrase, salt, key_size + iv_size)
    return DerivedKeyMaterial(key=derived[:key_size], iv=derived[key_size:])
