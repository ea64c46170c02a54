"""
Key Pair Provider

Generates, imports and exports the P-256 (secp256r1) key pairs used by an
enrolled device. Every device owns two independent pairs:
- signing key: bound to certificateForSigning
- login key:   bound to certificateForLogin, used for ECDH and proofs

Public keys are exported as the fixed 91-byte SubjectPublicKeyInfo that the
server expects inside CSRs.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)

from .exceptions import KeyExportError, KeyGenerationError, KeyImportError
from .types import (
    EC_POINT_LENGTH,
    SPKI_TOTAL_LENGTH,
    KeyPurpose,
)


def _is_p256(key) -> bool:
    return isinstance(getattr(key, "curve", None), ec.SECP256R1)


@dataclass
class KeyPair:
    """
    P-256 key pair owned by a single device.

    The private key never leaves the process in the clear except through
    `export_private_key_pem`, which is reserved for the key store.
    """

    private_key: EllipticCurvePrivateKey
    purpose: KeyPurpose

    def __post_init__(self):
        if not isinstance(self.private_key, EllipticCurvePrivateKey) or not _is_p256(self.private_key):
            raise KeyImportError("Key pair must hold a P-256 private key")
        if not isinstance(self.purpose, KeyPurpose):
            raise KeyImportError(f"Invalid key purpose: {self.purpose!r}")

    @property
    def public_key(self) -> EllipticCurvePublicKey:
        return self.private_key.public_key()

    def __repr__(self) -> str:
        return f"KeyPair(purpose={self.purpose.value}, curve=P-256)"


def generate(purpose: KeyPurpose) -> KeyPair:
    """
    Create a fresh P-256 key pair.

    Raises:
        KeyGenerationError: If the platform RNG / provider is unavailable
    """
    try:
        private_key = ec.generate_private_key(ec.SECP256R1())
    except Exception as e:
        raise KeyGenerationError(f"Failed to generate P-256 key pair: {e}") from e

    return KeyPair(private_key=private_key, purpose=purpose)


def generate_device_key_pairs() -> Tuple[KeyPair, KeyPair]:
    """Generate the (signing, login) pair set for a new device enrollment."""
    return generate(KeyPurpose.SIGNING), generate(KeyPurpose.LOGIN)


def export_uncompressed_point(public_key: EllipticCurvePublicKey) -> bytes:
    """Return the 65-byte uncompressed point 0x04 || X || Y."""
    if not _is_p256(public_key):
        raise KeyExportError("Only P-256 public keys can be exported")

    try:
        point = public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
    except Exception as e:
        raise KeyExportError(f"Failed to serialize public key: {e}") from e

    if len(point) != EC_POINT_LENGTH:
        raise KeyExportError(f"Unexpected EC point length: {len(point)}")
    return point


def export_public_key_spki(key: Union[KeyPair, EllipticCurvePublicKey]) -> bytes:
    """
    Export a public key as P-256 SubjectPublicKeyInfo DER.

    SEQUENCE {
        SEQUENCE { OID ecPublicKey, OID prime256v1 },
        BIT STRING { 0x00, 0x04 || X || Y }
    }

    The uncompressed point is the last 65 bytes of the structure.

    Returns:
        bytes: 91-byte SPKI structure

    Raises:
        KeyExportError: If the key cannot be serialized
    """
    public_key = key.public_key if isinstance(key, KeyPair) else key
    if not _is_p256(public_key):
        raise KeyExportError("Only P-256 public keys can be exported for enrollment")

    try:
        spki = public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except Exception as e:
        raise KeyExportError(f"Failed to serialize public key: {e}") from e

    if len(spki) != SPKI_TOTAL_LENGTH:
        raise KeyExportError(f"Unexpected SPKI length: {len(spki)}")
    return spki


# ============================================================================
# PEM PERSISTENCE (used by key stores)
# ============================================================================


def export_private_key_pem(key_pair: KeyPair, password: Optional[bytes] = None) -> bytes:
    """
    Serialize the private key as PKCS#8 PEM.

    Raises:
        KeyExportError: If the key cannot be serialized
    """
    encryption = (
        serialization.BestAvailableEncryption(password)
        if password
        else serialization.NoEncryption()
    )

    try:
        return key_pair.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )
    except Exception as e:
        raise KeyExportError(f"Failed to export private key: {e}") from e


def import_private_key_pem(
    pem: Union[bytes, str],
    purpose: KeyPurpose,
    password: Optional[bytes] = None
) -> KeyPair:
    """
    Load a PKCS#8 PEM private key.

    Raises:
        KeyImportError: If the PEM is invalid, encrypted with another
            password, or not a P-256 key
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")

    try:
        private_key = serialization.load_pem_private_key(pem, password=password)
    except Exception as e:
        raise KeyImportError(f"Failed to import private key: {e}") from e

    return KeyPair(private_key=private_key, purpose=purpose)
