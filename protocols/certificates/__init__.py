"""
Accessy Certificate Requests

CSR construction for device enrollment (one CSR per device key pair).

Author: Cerve Project
Date: October 2026
"""

from .csr import (
    CsrBuilder,
    build_csr,
    build_csr_der,
    encode_csr_envelope,
    decode_csr_envelope,
)

__all__ = [
    "CsrBuilder",
    "build_csr",
    "build_csr_der",
    "encode_csr_envelope",
    "decode_csr_envelope",
]
