"""
Accessy Certificate Signing Request

Builds the PKCS#10-shaped request the server uses as a proof of key
possession during device enrollment:

    CertificationRequest ::= SEQUENCE {
        certificationRequestInfo  SEQUENCE {
            version        INTEGER (0),
            subject        SEQUENCE { SET { O = userId }, SET { CN = deviceId } },
            subjectPKInfo  SubjectPublicKeyInfo (P-256, 91 bytes),
            attributes     [0] IMPLICIT SET OF Attribute (empty: A0 00)
        },
        signatureAlgorithm  SEQUENCE { OID ecdsaWithSHA256 },
        signature           BIT STRING (DER ECDSA-SHA256 signature)
    }

Wire envelope (double base64 is part of the contract):

    b64nopad("axs.1.0") + "." + b64nopad(b64(csr_der))

Only the outer pass strips padding; the inner pass keeps standard padding.

Standards Reference:
- RFC 2986 - PKCS #10 Certification Request Syntax
- RFC 5758 - ecdsa-with-SHA256

Author: Cerve Project
Date: October 2026
"""

import logging
from typing import Tuple

from protocols.core import der
from protocols.core.crypto import sign_ecdsa_sha256
from protocols.core.encoding import b64encode, b64encode_nopad, safe_b64decode
from protocols.core.exceptions import AccessyCryptoError, CsrBuildError, MalformedInputError
from protocols.core.keys import KeyPair, export_public_key_spki
from protocols.core.types import (
    CSR_VERSION_TAG,
    OID_COMMON_NAME,
    OID_ECDSA_WITH_SHA256,
    OID_ORGANIZATION_NAME,
    TAG_SEQUENCE,
)

logger = logging.getLogger(__name__)

CSR_VERSION = 0


# ============================================================================
# DER BUILDING BLOCKS
# ============================================================================


def build_rdn(attribute_oid: str, value: str) -> bytes:
    """SET { SEQUENCE { OID, PrintableString } }"""
    return der.set_of(der.sequence(der.oid(attribute_oid), der.printable_string(value)))


def build_subject(user_id: str, device_id: str) -> bytes:
    """Subject name: O = user id, CN = device id (in this order)."""
    return der.sequence(
        build_rdn(OID_ORGANIZATION_NAME, user_id),
        build_rdn(OID_COMMON_NAME, device_id),
    )


def build_certification_request_info(spki_der: bytes, user_id: str, device_id: str) -> bytes:
    return der.sequence(
        der.integer(CSR_VERSION),
        build_subject(user_id, device_id),
        spki_der,
        der.context_tag(0),
    )


def build_signature_algorithm() -> bytes:
    # No NULL parameters for ECDSA algorithm identifiers
    return der.sequence(der.oid(OID_ECDSA_WITH_SHA256))


# ============================================================================
# CSR
# ============================================================================


def build_csr_der(key_pair: KeyPair, user_id: str, device_id: str) -> bytes:
    """
    Build and sign the DER CertificationRequest.

    Args:
        key_pair: Device key pair whose public key is attested
        user_id: Account identifier (subject O)
        device_id: Device identifier (subject CN)

    Returns:
        bytes: DER-encoded CSR

    Raises:
        CsrBuildError: On any encoding or signing failure
    """
    if not isinstance(user_id, str) or not isinstance(device_id, str):
        raise CsrBuildError("user_id and device_id must be strings")

    try:
        spki_der = export_public_key_spki(key_pair)
        request_info = build_certification_request_info(spki_der, user_id, device_id)
        signature = sign_ecdsa_sha256(request_info, key_pair.private_key)

        csr_der = der.sequence(
            request_info,
            build_signature_algorithm(),
            der.bit_string(signature),
        )
    except AccessyCryptoError as e:
        raise CsrBuildError(f"Failed to build CSR: {e}") from e
    except (AttributeError, TypeError, ValueError) as e:
        raise CsrBuildError(f"Failed to build CSR: {e}") from e

    logger.debug(f"CSR built for {key_pair.purpose.value} key: {len(csr_der)} bytes")
    return csr_der


def encode_csr_envelope(csr_der: bytes) -> str:
    """Wrap a DER CSR in the versioned double-base64 envelope."""
    version_b64 = b64encode_nopad(CSR_VERSION_TAG.encode("utf-8"))
    inner_b64 = b64encode(csr_der)
    outer_b64 = b64encode_nopad(inner_b64.encode("ascii"))
    return f"{version_b64}.{outer_b64}"


def decode_csr_envelope(envelope: str) -> Tuple[str, bytes]:
    """
    Inverse of `encode_csr_envelope`.

    Returns:
        Tuple of (version tag, CSR DER)

    Raises:
        MalformedInputError: If the envelope is not "{version}.{payload}"
            or the payload is not a DER SEQUENCE
    """
    parts = envelope.split(".")
    if len(parts) != 2:
        raise MalformedInputError(f"CSR envelope must have 2 segments, got {len(parts)}")

    version_b64, outer_b64 = parts
    try:
        version = safe_b64decode(version_b64).decode("utf-8")
        inner_b64 = safe_b64decode(outer_b64).decode("ascii")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"Invalid CSR envelope text: {e}") from e

    csr_der = safe_b64decode(inner_b64)
    if not csr_der or csr_der[0] != TAG_SEQUENCE:
        raise MalformedInputError("CSR payload is not a DER SEQUENCE")

    return version, csr_der


def build_csr(key_pair: KeyPair, user_id: str, device_id: str) -> str:
    """
    Create a Certificate Signing Request in Accessy wire format.

    Returns:
        str: "{base64(axs.1.0)}.{base64(base64(csr_der))}"

    Raises:
        CsrBuildError: On any encoding or signing failure
    """
    return encode_csr_envelope(build_csr_der(key_pair, user_id, device_id))


class CsrBuilder:
    """
    Object façade over `build_csr` for callers that inject collaborators.

    Example:
        >>> from protocols.core.keys import generate
        >>> from protocols.core.types import KeyPurpose
        >>> csr = CsrBuilder().build(generate(KeyPurpose.LOGIN), "user", "device")
        >>> csr.split(".")[0]
        'YXhzLjEuMA'
    """

    def build(self, key_pair: KeyPair, user_id: str, device_id: str) -> str:
        return build_csr(key_pair, user_id, device_id)
