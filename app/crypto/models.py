from dataclasses import dataclass

SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16
BLOCK_SIZE = 16


@dataclass(frozen=True)
class CipherEnvelope:
    """Salt and ciphertext parsed out of a salted envelope."""

    salt: bytes
    ciphertext: bytes
    has_marker: bool = True

    def __post_init__(self) -> None:
        if len(self.salt) != SALT_SIZE:
            raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(self.salt)}")


@dataclass(frozen=True)
class DerivedKeyMaterial:
    """AES-256 key and CBC IV derived from a passphrase and salt."""

    key: bytes
    iv: bytes
