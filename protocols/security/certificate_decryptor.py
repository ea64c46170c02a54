"""
Encrypted Certificate Decryptor

Recovers the plaintext certificate string from the envelopes returned by
device enrollment (`certificateForLogin`, `certificateForSigning`).

Envelope Format:
    {header}.{meta}.{serverEphemeralSpki_b64url}.{payload_b64url}.{signature}

    payload (after base64url decoding, UTF-8):
    {iv_b64url}.{ciphertext_b64url}.{hmac_b64url}

Decryption Flow (encrypt-then-MAC):
1. ECDH(login private key, server ephemeral key) -> SHA-512 -> 64 bytes
2. aes_key = bytes[0:32], hmac_key = bytes[32:64]
3. HMAC-SHA256(hmac_key, "{iv_b64url}.{ciphertext_b64url}") over the
   ORIGINAL base64url text, compared in constant time
4. AES-256-CBC decrypt with PKCS#7 padding

Error Policy:
- Envelope or payload with an unexpected shape, or a segment that is not
  valid base64 -> None (no certificate)
- HMAC mismatch -> IntegrityError, decryption is never attempted
- Bad padding / block length -> DecryptionError
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from protocols.core.crypto import constant_time_equal, hmac_sha256
from protocols.core.encoding import b64encode, safe_b64decode
from protocols.core.exceptions import DecryptionError, IntegrityError, MalformedInputError
from protocols.core.types import (
    ENVELOPE_MIN_SEGMENTS,
    ENVELOPE_PAYLOAD_INDEX,
    ENVELOPE_PAYLOAD_SEGMENTS,
    ENVELOPE_SERVER_KEY_INDEX,
    TAG_SEQUENCE,
)
from protocols.security.ecdh import derive_shared_secret, split_key_material

logger = logging.getLogger(__name__)

AES_BLOCK_SIZE_BITS = 128


@dataclass(frozen=True)
class EncryptedCertificateEnvelope:
    """
    Parsed encrypted certificate envelope.

    Every segment is base64-decoded while parsing. The original base64url
    text of the iv and ciphertext is kept as well because the HMAC covers
    the text, not the bytes.
    """

    server_public_key_der: bytes
    iv_b64: str
    ciphertext_b64: str
    iv: bytes
    ciphertext: bytes
    hmac_tag: bytes

    @property
    def authenticated_data(self) -> bytes:
        return f"{self.iv_b64}.{self.ciphertext_b64}".encode("utf-8")

    @classmethod
    def parse(cls, envelope: str) -> Optional["EncryptedCertificateEnvelope"]:
        """
        Parse an envelope string.

        Returns:
            The parsed envelope, or None if the structure deviates from the
            expected 5 + 3 segment layout or a segment is not valid base64
        """
        if not isinstance(envelope, str):
            return None

        parts = envelope.split(".")
        if len(parts) < ENVELOPE_MIN_SEGMENTS:
            logger.debug(f"Envelope has {len(parts)} segments, expected >= {ENVELOPE_MIN_SEGMENTS}")
            return None

        try:
            server_public_key_der = safe_b64decode(parts[ENVELOPE_SERVER_KEY_INDEX])
            payload = safe_b64decode(parts[ENVELOPE_PAYLOAD_INDEX]).decode("utf-8")
        except (MalformedInputError, UnicodeDecodeError) as e:
            logger.debug(f"Envelope segment could not be decoded: {e}")
            return None

        if "." not in payload:
            return None

        payload_parts = payload.split(".")
        if len(payload_parts) != ENVELOPE_PAYLOAD_SEGMENTS:
            logger.debug(
                f"Encrypted payload has {len(payload_parts)} segments, "
                f"expected {ENVELOPE_PAYLOAD_SEGMENTS}"
            )
            return None

        iv_b64, ciphertext_b64, hmac_b64 = payload_parts
        try:
            iv = safe_b64decode(iv_b64)
            ciphertext = safe_b64decode(ciphertext_b64)
            hmac_tag = safe_b64decode(hmac_b64)
        except MalformedInputError as e:
            logger.debug(f"Encrypted payload segment could not be decoded: {e}")
            return None

        return cls(
            server_public_key_der=server_public_key_der,
            iv_b64=iv_b64,
            ciphertext_b64=ciphertext_b64,
            iv=iv,
            ciphertext=ciphertext,
            hmac_tag=hmac_tag,
        )


def decrypt_aes256_cbc(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """
    AES-256-CBC decryption with PKCS#7 unpadding.

    Raises:
        DecryptionError: On wrong key/IV size, block length or padding
    """
    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(AES_BLOCK_SIZE_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError(f"AES-256-CBC decryption failed: {e}") from e


def plaintext_to_certificate(plaintext: bytes) -> str:
    """
    Interpret decrypted bytes as the certificate string.

    Text certificates are returned as-is. Binary plaintext (raw DER
    starting with a SEQUENCE tag, or anything else that is not text) is
    re-encoded as standard base64.
    """
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError:
        if plaintext[:1] == bytes([TAG_SEQUENCE]):
            logger.debug("Decrypted certificate is raw DER, re-encoding as base64")
        else:
            logger.warning("Decrypted certificate is neither text nor DER, re-encoding as base64")
        return b64encode(plaintext)


def decrypt_envelope(
    envelope: EncryptedCertificateEnvelope,
    login_private_key: EllipticCurvePrivateKey
) -> str:
    """
    Verify and decrypt a parsed envelope.

    Raises:
        KeyImportError / KeyExchangeError: ECDH failures
        IntegrityError: HMAC mismatch
        DecryptionError: AES/padding failures
    """
    material = derive_shared_secret(login_private_key, envelope.server_public_key_der)
    aes_key, hmac_key = split_key_material(material)

    expected_hmac = hmac_sha256(hmac_key, envelope.authenticated_data)
    if not constant_time_equal(expected_hmac, envelope.hmac_tag):
        raise IntegrityError("HMAC verification failed - certificate may be tampered")

    plaintext = decrypt_aes256_cbc(envelope.ciphertext, aes_key, envelope.iv)
    return plaintext_to_certificate(plaintext)


def extract_certificate(envelope: str, login_private_key: EllipticCurvePrivateKey) -> Optional[str]:
    """
    Extract and decrypt the certificate from an enrollment response field.

    Args:
        envelope: Encrypted certificate envelope string
        login_private_key: Device login private key

    Returns:
        The certificate string, or None if the envelope shape is not
        recognized

    Raises:
        KeyImportError / KeyExchangeError: ECDH failures
        IntegrityError: HMAC mismatch
        DecryptionError: AES/padding failures
    """
    parsed = EncryptedCertificateEnvelope.parse(envelope)
    if parsed is None:
        logger.info("Encrypted certificate envelope not recognized, no certificate recovered")
        return None

    certificate = decrypt_envelope(parsed, login_private_key)
    logger.debug(f"Certificate recovered: {len(certificate)} characters")
    return certificate


class CertificateDecryptor:
    """Object façade over `extract_certificate`."""

    def __init__(self, login_private_key: EllipticCurvePrivateKey):
        self.login_private_key = login_private_key

    def extract(self, envelope: str) -> Optional[str]:
        return extract_certificate(envelope, self.login_private_key)
