from app.crypto.cipher import CompatibleCipher, parse_envelope
from app.crypto.key_derivation import derive_key_material
from app.crypto.models import CipherEnvelope, DerivedKeyMaterial

__all__ = [
    "CipherEnvelope",
    "CompatibleCipher",
    "DerivedKeyMaterial",
    "derive_key_material",
    "parse_envelope",
]
