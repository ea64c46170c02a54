"""
Accessy Mobile-Device Protocol Implementations

Implements the client side of the Accessy device enrollment and login
protocol: key generation, CSR construction, encrypted certificate recovery
and proof-of-possession tokens.

Module Structure:
- core/: Constants, exceptions, base64/DER encoding, key and signature primitives
- certificates/: PKCS#10 CSR builder and the axs.1.0 CSR envelope
- messages/: API message dataclasses and JWT payload decoding
- security/: ECDH key material, certificate decryption, proof tokens

Standards Reference:
- RFC 2986 - PKCS #10 Certification Request Syntax
- RFC 5480 - Elliptic Curve SubjectPublicKeyInfo
- X.690 - ASN.1 Distinguished Encoding Rules

Author: Cerve Project
Date: October 2026
"""

__version__ = "1.0.0"

from .core import (
    KeyPurpose,
    KeyPair,
    AccessyCryptoError,
    MalformedInputError,
    MalformedTokenError,
    IntegrityError,
    CryptoProviderError,
    CsrBuildError,
    generate_device_key_pairs,
    export_public_key_spki,
)
from .certificates import CsrBuilder, build_csr
from .messages import JWTPayload, decode_payload
from .security import CertificateDecryptor, ProofSigner, create_proof, extract_certificate

__all__ = [
    "__version__",
    "KeyPurpose",
    "KeyPair",
    "AccessyCryptoError",
    "MalformedInputError",
    "MalformedTokenError",
    "IntegrityError",
    "CryptoProviderError",
    "CsrBuildError",
    "generate_device_key_pairs",
    "export_public_key_spki",
    "CsrBuilder",
    "build_csr",
    "JWTPayload",
    "decode_payload",
    "CertificateDecryptor",
    "ProofSigner",
    "create_proof",
    "extract_certificate",
]
