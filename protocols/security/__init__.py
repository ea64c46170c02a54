"""
Accessy Security Operations

This module provides the key-agreement and proof operations of the
enrollment protocol:
- ECDH + SHA-512 key material derivation from the server's ephemeral key
- Encrypted certificate extraction (HMAC-SHA256 + AES-256-CBC)
- Proof of Possession token generation and verification

Author: Cerve Project
Date: October 2026
"""

from .ecdh import derive_shared_secret, split_key_material, validate_spki_shape
from .certificate_decryptor import (
    CertificateDecryptor,
    EncryptedCertificateEnvelope,
    extract_certificate,
)
from .proof_of_possession import (
    ProofSigner,
    ProofToken,
    create_proof,
    parse_proof,
    verify_proof,
    rounded_timestamp,
)

__all__ = [
    # ECDH
    "derive_shared_secret",
    "split_key_material",
    "validate_spki_shape",

    # Encrypted certificates
    "CertificateDecryptor",
    "EncryptedCertificateEnvelope",
    "extract_certificate",

    # Proof of Possession
    "ProofSigner",
    "ProofToken",
    "create_proof",
    "parse_proof",
    "verify_proof",
    "rounded_timestamp",
]
