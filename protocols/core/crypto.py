"""
Accessy Cryptographic Operations

Provides the core cryptographic operations used by the enrollment protocol:
- ECDSA-SHA256 signature generation (always DER-encoded) and verification
- IEEE P1363 (r || s) to DER signature conversion
- ECDH shared secret computation
- SHA-512, HMAC-SHA256 and constant-time comparison

Standards Reference:
- SEC 1 v2.0 - Elliptic Curve Cryptography
- RFC 3279 Section 2.2.3 - ECDSA signature encoding
- NIST SP 800-56A Rev. 3 - ECDH
- RFC 2104 - HMAC

Author: Cerve Project
Date: October 2026
"""

import hashlib
import hmac

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature

from .exceptions import KeyExchangeError, MalformedInputError, SigningError
from .types import P1363_SIGNATURE_LENGTH, TAG_SEQUENCE


# ============================================================================
# SIGNATURE ENCODING
# ============================================================================


def p1363_to_der(raw_signature: bytes) -> bytes:
    """
    Convert an IEEE P1363 ECDSA signature to DER.

    Some providers (Web Crypto, PKCS#11 tokens) return the raw r || s
    concatenation; the Accessy server only accepts the ASN.1 form
        Ecdsa-Sig-Value ::= SEQUENCE { r INTEGER, s INTEGER }

    Each half is read as an unsigned big-endian integer and re-encoded as a
    minimal DER INTEGER.

    Args:
        raw_signature: 64 bytes (32-byte r || 32-byte s) for P-256

    Returns:
        bytes: DER-encoded signature

    Raises:
        MalformedInputError: If the signature is not 64 bytes long
    """
    if len(raw_signature) != P1363_SIGNATURE_LENGTH:
        raise MalformedInputError(
            f"Raw P-256 signature must be {P1363_SIGNATURE_LENGTH} bytes, got {len(raw_signature)}"
        )

    half = P1363_SIGNATURE_LENGTH // 2
    r = int.from_bytes(raw_signature[:half], "big")
    s = int.from_bytes(raw_signature[half:], "big")

    return encode_dss_signature(r, s)


def is_der_signature(signature: bytes) -> bool:
    """True if `signature` parses completely as SEQUENCE { INTEGER, INTEGER }."""
    if not signature or signature[0] != TAG_SEQUENCE:
        return False
    try:
        decode_dss_signature(bytes(signature))
        return True
    except ValueError:
        return False


def ensure_der_signature(signature: bytes) -> bytes:
    """
    Normalize a signature to DER.

    Well-formed DER is passed through unchanged (a DER signature may itself
    be 64 bytes long, so the structure is checked before the length);
    64-byte raw signatures are converted.
    """
    if is_der_signature(signature):
        return bytes(signature)
    if len(signature) == P1363_SIGNATURE_LENGTH:
        return p1363_to_der(signature)
    raise MalformedInputError(f"Unrecognized signature encoding ({len(signature)} bytes)")


# ============================================================================
# ECDSA SIGNATURE OPERATIONS
# ============================================================================


def sign_ecdsa_sha256(data: bytes, private_key: EllipticCurvePrivateKey) -> bytes:
    """
    Sign data using ECDSA with SHA-256.

    Args:
        data: Data to sign (CertificationRequestInfo or proof signing input)
        private_key: P-256 private key

    Returns:
        bytes: DER-encoded ECDSA signature

    Raises:
        SigningError: If the key is absent or the provider rejects it
    """
    if private_key is None:
        raise SigningError("Private key is not available")

    if not isinstance(private_key, EllipticCurvePrivateKey):
        raise SigningError(f"Unsupported private key type: {type(private_key).__name__}")

    try:
        signature = private_key.sign(data, ec.ECDSA(hashes.SHA256()))
    except Exception as e:
        raise SigningError(f"Failed to sign data: {e}") from e

    return ensure_der_signature(signature)


def verify_ecdsa_sha256(
    data: bytes,
    signature: bytes,
    public_key: EllipticCurvePublicKey
) -> bool:
    """
    Verify an ECDSA-SHA256 signature (DER or raw r || s).

    Returns:
        bool: True if the signature is valid, False otherwise
    """
    try:
        der_signature = ensure_der_signature(signature)
        public_key.verify(der_signature, data, ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False
    except (MalformedInputError, ValueError):
        return False


# ============================================================================
# ECDH OPERATIONS (NIST SP 800-56A)
# ============================================================================


def compute_ecdh_shared_secret(
    private_key: EllipticCurvePrivateKey,
    public_key: EllipticCurvePublicKey
) -> bytes:
    """
    Compute the raw ECDH shared secret (x-coordinate, 32 bytes for P-256).

    Raises:
        KeyExchangeError: If the provider rejects the key agreement
    """
    if private_key is None:
        raise KeyExchangeError("Private key is not available")

    try:
        return private_key.exchange(ec.ECDH(), public_key)
    except Exception as e:
        raise KeyExchangeError(f"Failed to compute ECDH shared secret: {e}") from e


# ============================================================================
# HASH / MAC
# ============================================================================


def sha512(data: bytes) -> bytes:
    return hashlib.sha512(data).digest()


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha256).digest()


def constant_time_equal(left: bytes, right: bytes) -> bool:
    """Compare two byte strings without leaking the mismatch position."""
    return hmac.compare_digest(left, right)
