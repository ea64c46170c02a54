"""
Accessy Core Types and Utilities

This module provides the foundational constants, errors, encoders and
cryptographic primitives of the Accessy enrollment protocol.

Submodules:
- types: Protocol constants, DER tags, OIDs, KeyPurpose
- exceptions: Error taxonomy (malformed input, integrity, provider failures)
- encoding: base64 / base64url helpers
- der: DER tag/length/value encoder
- keys: P-256 key pair provider and SPKI export
- crypto: ECDSA, ECDH, SHA-512, HMAC-SHA256

Author: Cerve Project
Date: October 2026
"""

# Re-export all core functionality for convenience
from .types import (
    # Constants
    CSR_VERSION_TAG,
    PROOF_VERSION_TAG,
    PROOF_TIME_WINDOW_SECONDS,
    SPKI_TOTAL_LENGTH,
    SPKI_EC_POINT_OFFSET,

    # Enums
    KeyPurpose,
)

from .exceptions import (
    AccessyCryptoError,
    MalformedInputError,
    MalformedTokenError,
    IntegrityError,
    CryptoProviderError,
    KeyGenerationError,
    KeyExportError,
    KeyImportError,
    KeyExchangeError,
    SigningError,
    DecryptionError,
    CsrBuildError,
)

from .encoding import (
    b64encode,
    b64encode_nopad,
    b64url_encode,
    safe_b64decode,
)

from .der import (
    encode_length,
    decode_length,
    wrap_tlv,
)

from .keys import (
    KeyPair,
    generate,
    generate_device_key_pairs,
    export_public_key_spki,
    export_private_key_pem,
    import_private_key_pem,
)

from .crypto import (
    sign_ecdsa_sha256,
    verify_ecdsa_sha256,
    p1363_to_der,
    ensure_der_signature,
    compute_ecdh_shared_secret,
    hmac_sha256,
    constant_time_equal,
    sha512,
)

__all__ = [
    # Constants
    "CSR_VERSION_TAG",
    "PROOF_VERSION_TAG",
    "PROOF_TIME_WINDOW_SECONDS",
    "SPKI_TOTAL_LENGTH",
    "SPKI_EC_POINT_OFFSET",

    # Enums
    "KeyPurpose",

    # Errors
    "AccessyCryptoError",
    "MalformedInputError",
    "MalformedTokenError",
    "IntegrityError",
    "CryptoProviderError",
    "KeyGenerationError",
    "KeyExportError",
    "KeyImportError",
    "KeyExchangeError",
    "SigningError",
    "DecryptionError",
    "CsrBuildError",

    # Encoding
    "b64encode",
    "b64encode_nopad",
    "b64url_encode",
    "safe_b64decode",
    "encode_length",
    "decode_length",
    "wrap_tlv",

    # Keys
    "KeyPair",
    "generate",
    "generate_device_key_pairs",
    "export_public_key_spki",
    "export_private_key_pem",
    "import_private_key_pem",

    # Crypto
    "sign_ecdsa_sha256",
    "verify_ecdsa_sha256",
    "p1363_to_der",
    "ensure_der_signature",
    "compute_ecdh_shared_secret",
    "hmac_sha256",
    "constant_time_equal",
    "sha512",
]
