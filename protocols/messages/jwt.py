"""
JWT Payload Decoding

Reads the claims of the enrollment and login tokens issued by the Accessy
API. The signature is NOT verified: the tokens are opaque bearer credentials
for the server and the client only needs the identifiers they carry.

Claims used:
- jti / sub           user identifier (jti preferred)
- deviceId            device identifier assigned at enrollment
- publicKeyForLogin   certificate string overriding the decrypted one
- iss / exp / iat     informational
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from protocols.core.encoding import safe_b64decode
from protocols.core.exceptions import MalformedInputError, MalformedTokenError

logger = logging.getLogger(__name__)

_STRING_CLAIMS = ("jti", "sub", "iss", "deviceId", "publicKeyForLogin")
_INTEGER_CLAIMS = ("exp", "iat")


@dataclass(frozen=True)
class JWTPayload:
    jti: Optional[str] = None
    sub: Optional[str] = None
    iss: Optional[str] = None
    exp: Optional[int] = None
    iat: Optional[int] = None
    deviceId: Optional[str] = None
    publicKeyForLogin: Optional[str] = None

    @property
    def user_id(self) -> str:
        """jti, falling back to sub, falling back to an empty string."""
        return self.jti or self.sub or ""

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "JWTPayload":
        values = {}
        for name in _STRING_CLAIMS:
            value = claims.get(name)
            if value is not None and not isinstance(value, str):
                raise MalformedTokenError(f"Claim '{name}' must be a string")
            values[name] = value
        for name in _INTEGER_CLAIMS:
            value = claims.get(name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise MalformedTokenError(f"Claim '{name}' must be numeric")
            values[name] = int(value) if value is not None else None
        return cls(**values)


def decode_payload(token: str) -> JWTPayload:
    """
    Decode the payload segment of a compact JWT without verifying it.

    Examples:
        >>> decode_payload("eyJhbGciOiJIUzI1NiJ9.eyJqdGkiOiJhYmMifQ.sig").jti
        'abc'

    Raises:
        MalformedTokenError: If the token has fewer than 2 segments or the
            payload is not a base64url JSON object
    """
    if not isinstance(token, str):
        raise MalformedTokenError("Token must be a string")

    parts = token.split(".")
    if len(parts) < 2:
        raise MalformedTokenError(f"JWT must have at least 2 segments, got {len(parts)}")

    try:
        raw = safe_b64decode(parts[1])
        claims = json.loads(raw.decode("utf-8"))
    except (MalformedInputError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedTokenError(f"JWT payload is not base64url JSON: {e}") from e

    if not isinstance(claims, dict):
        raise MalformedTokenError("JWT payload must be a JSON object")

    payload = JWTPayload.from_claims(claims)
    logger.debug(f"JWT decoded: claims={sorted(claims)}")
    return payload
