import base64
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from app.crypto.key_derivation import derive_key_material
from app.crypto.models import BLOCK_SIZE, SALT_SIZE, CipherEnvelope
from app.recovery.exceptions import DecryptionFailed

SALT_MARKER = b"Salted__"


def decode_envelope_text(envelope_text: str) -> bytes:
    """Strict base64 decode of an envelope string, ignoring whitespace."""
    compact = "".join(envelope_text.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionFailed(f"envelope is not valid base64: {exc}") from exc


def parse_envelope(raw: bytes) -> CipherEnvelope:
    """Split decoded envelope bytes into salt and ciphertext.

    With the ``Salted__`` marker the salt is bytes 8..16; without it the first
    eight bytes are the salt.

    Raises:
        DecryptionFailed: if the ciphertext is empty or not block aligned.
    """
    if raw[:len(SALT_MARKER)] == SALT_MARKER:
        salt_start = len(SALT_MARKER)
        has_marker = True
    else:
        salt_start = 0
        has_marker = False

    salt = raw[salt_start:salt_start + SALT_SIZE]
    ciphertext = raw[salt_start + SALT_SIZE:]
    if len(salt) != SALT_SIZE:
        raise DecryptionFailed(f"envelope too short for salt ({len(raw)} bytes)")
    if not ciphertext or len(ciphertext) % BLOCK_SIZE != 0:
        raise DecryptionFailed(
            f"ciphertext length {len(ciphertext)} is not a positive multiple of {BLOCK_SIZE}"
        )
    return CipherEnvelope(salt=salt, ciphertext=ciphertext, has_marker=has_marker)


class CompatibleCipher:
    """Decrypts salted AES-256-CBC envelopes produced by CryptoJS ``AES.encrypt``."""

    def decrypt(self, envelope_text: str, passphrase: str) -> str:
        """Return the UTF-8 plaintext of an envelope.

        Raises:
            DecryptionFailed: on malformed framing, bad padding or non-UTF-8 output.
        """
        envelope = parse_envelope(decode_envelope_text(envelope_text))
        return self.decrypt_envelope(envelope, passphrase)

    def decrypt_envelope(self, envelope: CipherEnvelope, passphrase: str) -> str:
        material = derive_key_material(passphrase.encode("utf-8"), envelope.salt)
        decryptor = Cipher(algorithms.AES(material.key), modes.CBC(material.iv)).decryptor()
        padded = decryptor.update(envelope.ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise DecryptionFailed("invalid padding (wrong key or corrupt data)") from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionFailed(
                "plaintext is not valid UTF-8 (wrong key or corrupt data)"
            ) from exc
