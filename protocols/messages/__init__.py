"""
Accessy Protocol Messages

This module provides the JSON message dataclasses exchanged with the Accessy
API and the JWT payload decoder.

Message categories:
- Verification: VerifyRequest/Response
- Enrollment token: EnrollTokenRequest/Response
- Recovery key: ValidateRecoveryRequest/Response
- Enrollment: EnrollRequest/Response
- Login: LoginResponse
- Assets: Door, DoorOperation, DoorsResponse

Author: Cerve Project
Date: October 2026
"""

from .types import (
    # Verification messages
    VerifyRequest,
    VerifyResponse,

    # Enrollment token messages
    EnrollTokenRequest,
    EnrollTokenResponse,

    # Recovery key messages
    ValidateRecoveryRequest,
    ValidateRecoveryResponse,

    # Enrollment messages
    EnrollRequest,
    EnrollResponse,

    # Login messages
    LoginResponse,

    # Asset messages
    Door,
    DoorOperation,
    DoorsResponse,

    # Client-side state
    EnrollmentToken,
    Credentials,
)
from .jwt import JWTPayload, decode_payload

__all__ = [
    "VerifyRequest",
    "VerifyResponse",
    "EnrollTokenRequest",
    "EnrollTokenResponse",
    "ValidateRecoveryRequest",
    "ValidateRecoveryResponse",
    "EnrollRequest",
    "EnrollResponse",
    "LoginResponse",
    "Door",
    "DoorOperation",
    "DoorsResponse",
    "EnrollmentToken",
    "Credentials",
    "JWTPayload",
    "decode_payload",
]
