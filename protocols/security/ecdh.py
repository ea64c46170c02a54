"""
ECDH Key Agreement for Encrypted Certificates

The server encrypts each issued certificate for the device's login key using
an ephemeral P-256 key, sent alongside the ciphertext as a 91-byte
SubjectPublicKeyInfo. Key material is derived as:

    material = SHA-512(ECDH(local_private, server_ephemeral_public))  # 64 bytes
    aes_key  = material[0:32]    # AES-256-CBC
    hmac_key = material[32:64]   # HMAC-SHA256

The uncompressed point is read at the fixed offset 26 of the SPKI blob; the
surrounding header is checked first so that a differently shaped key is
rejected instead of being sliced blindly.

Standards Reference:
- NIST SP 800-56A Rev. 3 - ECDH
- RFC 5480 - Elliptic Curve SubjectPublicKeyInfo
"""

import logging
from typing import Tuple

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)

from protocols.core import der
from protocols.core.crypto import compute_ecdh_shared_secret, sha512
from protocols.core.exceptions import KeyImportError
from protocols.core.types import (
    AES_KEY_LENGTH,
    EC_POINT_LENGTH,
    OID_EC_PUBLIC_KEY,
    OID_PRIME256V1,
    SHARED_KEY_MATERIAL_LENGTH,
    SPKI_EC_POINT_OFFSET,
    SPKI_TOTAL_LENGTH,
    TAG_BIT_STRING,
    TAG_SEQUENCE,
)

logger = logging.getLogger(__name__)

# Everything before the EC point: SEQUENCE header, algorithm identifier,
# BIT STRING header and the unused-bits byte
P256_SPKI_PREFIX = (
    bytes([TAG_SEQUENCE]) + der.encode_length(SPKI_TOTAL_LENGTH - 2)
    + der.sequence(der.oid(OID_EC_PUBLIC_KEY), der.oid(OID_PRIME256V1))
    + bytes([TAG_BIT_STRING]) + der.encode_length(EC_POINT_LENGTH + 1)
    + b"\x00"
)


def validate_spki_shape(spki_der: bytes) -> None:
    """
    Check that `spki_der` is the fixed 91-byte P-256 SPKI.

    Raises:
        KeyImportError: If the length or the header bytes differ
    """
    if len(spki_der) != SPKI_TOTAL_LENGTH:
        raise KeyImportError(
            f"Server public key must be {SPKI_TOTAL_LENGTH} bytes of SPKI, got {len(spki_der)}"
        )
    if spki_der[:SPKI_EC_POINT_OFFSET] != P256_SPKI_PREFIX:
        raise KeyImportError("Server public key is not a P-256 SubjectPublicKeyInfo")


def extract_ec_point(spki_der: bytes) -> bytes:
    """Return the 65-byte uncompressed point of a P-256 SPKI (offset 26..91)."""
    validate_spki_shape(spki_der)
    return bytes(spki_der[SPKI_EC_POINT_OFFSET:SPKI_TOTAL_LENGTH])


def import_server_public_key(spki_der: bytes) -> EllipticCurvePublicKey:
    """
    Import the server's ephemeral public key for key agreement.

    Raises:
        KeyImportError: If the blob is not a P-256 SPKI or the point is
            invalid (wrong leading byte, off-curve)
    """
    point = extract_ec_point(spki_der)
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), point)
    except ValueError as e:
        raise KeyImportError(f"Invalid P-256 point in server public key: {e}") from e


def derive_shared_secret(local_private_key: EllipticCurvePrivateKey, server_spki_der: bytes) -> bytes:
    """
    Perform ECDH with the server's ephemeral key and hash with SHA-512.

    Args:
        local_private_key: Device login private key
        server_spki_der: 91-byte SPKI sent by the server

    Returns:
        bytes: 64 bytes of key material

    Raises:
        KeyImportError: If the server key cannot be imported
        KeyExchangeError: If the key agreement is rejected
    """
    server_public_key = import_server_public_key(server_spki_der)
    shared_secret = compute_ecdh_shared_secret(local_private_key, server_public_key)
    material = sha512(shared_secret)

    logger.debug(f"ECDH key material derived: {len(material)} bytes")
    return material


def split_key_material(material: bytes) -> Tuple[bytes, bytes]:
    """Split 64 bytes of key material into (aes_key, hmac_key)."""
    if len(material) != SHARED_KEY_MATERIAL_LENGTH:
        raise ValueError(
            f"Key material must be {SHARED_KEY_MATERIAL_LENGTH} bytes, got {len(material)}"
        )
    return material[:AES_KEY_LENGTH], material[AES_KEY_LENGTH:]
