"""
Proof of Possession (PoP) Tokens

Implements the short-lived proof token the device presents to log in and to
invoke asset operations (door unlock). The token proves possession of the
login private key bound to the enrolled certificate.

Token Format (four base64url segments, no padding):
    {header}.{certificate}.{payload}.{signature}

    header      = b64url("axs.1.4")
    certificate = b64url(utf8(certificate string))
    payload     = b64url(str(t - t % 5)), t = floor(unix time)
    signature   = b64url(DER(ECDSA-SHA256("{header}.{certificate}.{payload}")))

The timestamp is rounded DOWN to a 5-second boundary; two proofs created in
the same window differ only by their (randomized) signature. How far the
rounded timestamp may drift from server time is server policy.

Author: Cerve Project
Date: October 2026
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)

from protocols.core.crypto import sign_ecdsa_sha256, verify_ecdsa_sha256
from protocols.core.encoding import b64url_encode, safe_b64decode
from protocols.core.exceptions import MalformedInputError, SigningError
from protocols.core.types import PROOF_TIME_WINDOW_SECONDS, PROOF_VERSION_TAG

logger = logging.getLogger(__name__)

PROOF_SEGMENTS = 4


@dataclass(frozen=True)
class ProofToken:
    """Decoded view of a proof token."""

    header: str
    certificate: str
    timestamp: int
    signature: bytes
    signing_input: bytes


def rounded_timestamp(now: Optional[float] = None) -> int:
    """
    Current UNIX time rounded down to the proof window.

    Examples:
        >>> rounded_timestamp(1700000004.9)
        1700000000
        >>> rounded_timestamp(1700000005)
        1700000005
    """
    t = int(math.floor(time.time() if now is None else now))
    return t - (t % PROOF_TIME_WINDOW_SECONDS)


def create_proof(
    cert_base64: str,
    private_key: EllipticCurvePrivateKey,
    now: Optional[float] = None
) -> str:
    """
    Generate a proof token.

    Args:
        cert_base64: Certificate string recovered from enrollment (or the
            JWT `publicKeyForLogin` override)
        private_key: Login private key bound to that certificate
        now: UNIX time override (defaults to the system clock)

    Returns:
        str: "{header}.{certificate}.{payload}.{signature}"

    Raises:
        SigningError: If the private key is absent or unusable
    """
    if private_key is None:
        raise SigningError("Login private key is not available")

    header = b64url_encode(PROOF_VERSION_TAG.encode("utf-8"))
    certificate = b64url_encode(cert_base64.encode("utf-8"))
    payload = b64url_encode(str(rounded_timestamp(now)).encode("utf-8"))

    signing_input = f"{header}.{certificate}.{payload}"
    signature = sign_ecdsa_sha256(signing_input.encode("utf-8"), private_key)

    logger.debug(f"Proof created: {len(signature)}-byte DER signature")
    return f"{signing_input}.{b64url_encode(signature)}"


def parse_proof(proof: str) -> ProofToken:
    """
    Decode a proof token without verifying it.

    Raises:
        MalformedInputError: If the token does not have 4 decodable segments
    """
    parts = proof.split(".")
    if len(parts) != PROOF_SEGMENTS:
        raise MalformedInputError(f"Proof must have {PROOF_SEGMENTS} segments, got {len(parts)}")

    header_b64, certificate_b64, payload_b64, signature_b64 = parts
    try:
        header = safe_b64decode(header_b64).decode("utf-8")
        certificate = safe_b64decode(certificate_b64).decode("utf-8")
        timestamp = int(safe_b64decode(payload_b64).decode("ascii"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedInputError(f"Invalid proof segment: {e}") from e

    return ProofToken(
        header=header,
        certificate=certificate,
        timestamp=timestamp,
        signature=safe_b64decode(signature_b64),
        signing_input=f"{header_b64}.{certificate_b64}.{payload_b64}".encode("utf-8"),
    )


def verify_proof(proof: str, public_key: EllipticCurvePublicKey) -> bool:
    """
    Verify the signature and header of a proof token.

    The timestamp window is not checked: acceptance tolerance is decided by
    the server.

    Returns:
        bool: True if the header is axs.1.4 and the signature is valid
    """
    try:
        token = parse_proof(proof)
    except MalformedInputError:
        return False

    if token.header != PROOF_VERSION_TAG:
        return False

    return verify_ecdsa_sha256(token.signing_input, token.signature, public_key)


class ProofSigner:
    """Binds a certificate and its login key to produce successive proofs."""

    def __init__(self, cert_base64: str, private_key: EllipticCurvePrivateKey):
        self.cert_base64 = cert_base64
        self.private_key = private_key

    def create(self, now: Optional[float] = None) -> str:
        return create_proof(self.cert_base64, self.private_key, now=now)
