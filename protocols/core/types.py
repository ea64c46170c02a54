"""
Accessy Core Types and Constants

Defines the fixed protocol constants, DER tags, object identifiers and basic
enumerations shared by the enrollment and proof-of-possession code.

Every value in this module is part of the wire contract with the Accessy
server: changing any of them breaks byte-for-byte compatibility.

Author: Cerve Project
Date: October 2026
"""

from enum import Enum


# ============================================================================
# PROTOCOL VERSION TAGS
# ============================================================================

# Version tag prefixed to every CSR envelope ("{b64(tag)}.{b64(b64(der))}")
CSR_VERSION_TAG = "axs.1.0"

# Header of every proof token ("{header}.{certificate}.{payload}.{signature}")
PROOF_VERSION_TAG = "axs.1.4"

# Proof payload timestamps are rounded DOWN to this boundary
PROOF_TIME_WINDOW_SECONDS = 5


# ============================================================================
# DER TAGS (ITU-T X.690)
# ============================================================================

TAG_INTEGER = 0x02
TAG_BIT_STRING = 0x03
TAG_OID = 0x06
TAG_PRINTABLE_STRING = 0x13
TAG_SEQUENCE = 0x30
TAG_SET = 0x31
TAG_CONTEXT_0 = 0xA0


# ============================================================================
# OBJECT IDENTIFIERS
# ============================================================================

OID_ORGANIZATION_NAME = "2.5.4.10"  # O  -> user id
OID_COMMON_NAME = "2.5.4.3"  # CN -> device id
OID_EC_PUBLIC_KEY = "1.2.840.10045.2.1"
OID_PRIME256V1 = "1.2.840.10045.3.1.7"
OID_ECDSA_WITH_SHA256 = "1.2.840.10045.4.3.2"


# ============================================================================
# KEY AND ENVELOPE GEOMETRY
# ============================================================================

# P-256 SubjectPublicKeyInfo:
#   30 59                         SEQUENCE (89)
#     30 13                       SEQUENCE (19) algorithm identifier
#       06 07 2A8648CE3D0201      ecPublicKey
#       06 08 2A8648CE3D030107    prime256v1
#     03 42 00                    BIT STRING (66), no unused bits
#       04 || X(32) || Y(32)      uncompressed point
SPKI_TOTAL_LENGTH = 91
SPKI_BIT_STRING_OFFSET = 23
SPKI_EC_POINT_OFFSET = 26
EC_POINT_LENGTH = 65
EC_COORDINATE_LENGTH = 32
P1363_SIGNATURE_LENGTH = 64

# SHA-512(ECDH secret) is split into AES-256 key || HMAC-SHA256 key
SHARED_KEY_MATERIAL_LENGTH = 64
AES_KEY_LENGTH = 32
HMAC_KEY_LENGTH = 32

# Top-level fields of an encrypted certificate envelope and of its payload
ENVELOPE_MIN_SEGMENTS = 5
ENVELOPE_SERVER_KEY_INDEX = 2
ENVELOPE_PAYLOAD_INDEX = 3
ENVELOPE_PAYLOAD_SEGMENTS = 3


# ============================================================================
# ENUMERATIONS
# ============================================================================


class KeyPurpose(Enum):
    """
    Role of a device key pair.

    Each enrolled device owns exactly one pair of each kind; they are
    generated independently and never interchanged.
    """

    SIGNING = "signing"
    LOGIN = "login"
