"""
Accessy API Message Types

Dataclasses for the JSON bodies exchanged with the Accessy API during
verification, enrollment, login and asset operations. Field names mirror the
JSON keys so that `from_dict(**json)` / `to_dict()` stay trivial.

Message Flow:
    client -> /auth/recover                     VerifyRequest
    server ->                                   VerifyResponse
    client -> /auth/mobile-device/enroll/token  EnrollTokenRequest
    server ->                                   EnrollTokenResponse (JWT)
    client -> /auth/validate-recovery-key       ValidateRecoveryRequest (optional)
    client -> /auth/mobile-device/enroll        EnrollRequest (two CSRs)
    server ->                                   EnrollResponse (two envelopes)
    client -> /auth/mobile-device/login         proof token (text/plain)
    server ->                                   LoginResponse (JWT)

Author: Cerve Project
Date: October 2026
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


def _require(data: Dict[str, Any], key: str, message_type: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{message_type} body must be a JSON object")
    if key not in data or data[key] is None:
        raise ValueError(f"{message_type}: '{key}' is required")
    return data[key]


# ============================================================================
# VERIFICATION
# ============================================================================


@dataclass
class VerifyRequest:
    msisdn: str  # Phone number in E.164 or local format

    def __post_init__(self):
        if not self.msisdn:
            raise ValueError("msisdn is required")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class VerifyResponse:
    verificationCodeId: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerifyResponse":
        return cls(verificationCodeId=_require(data, "verificationCodeId", cls.__name__))


# ============================================================================
# ENROLLMENT TOKEN
# ============================================================================


@dataclass
class EnrollTokenRequest:
    """SMS code exchange; the verification id is sent upper-cased."""

    code: str
    id: str

    def __post_init__(self):
        if not self.code:
            raise ValueError("code is required")
        if not self.id:
            raise ValueError("id is required")
        self.id = self.id.upper()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EnrollTokenResponse:
    token: str  # Compact JWT carrying user and device identifiers
    recoveryKeyRequired: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnrollTokenResponse":
        return cls(
            token=_require(data, "token", cls.__name__),
            recoveryKeyRequired=bool(data.get("recoveryKeyRequired", False)),
        )


# ============================================================================
# RECOVERY KEY
# ============================================================================


@dataclass
class ValidateRecoveryRequest:
    recoveryKey: str

    def __post_init__(self):
        if not self.recoveryKey:
            raise ValueError("recoveryKey is required")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ValidateRecoveryResponse:
    valid: bool

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidateRecoveryResponse":
        return cls(valid=bool(_require(data, "valid", cls.__name__)))


# ============================================================================
# DEVICE ENROLLMENT
# ============================================================================


@dataclass
class EnrollRequest:
    """
    Device enrollment request.

    Both CSRs are in the "{b64(axs.1.0)}.{b64(b64(der))}" envelope format;
    recoveryKey is left out of the body when the account does not require one.
    """

    deviceName: str
    csrForSigning: str
    csrForLogin: str
    appName: str
    recoveryKey: Optional[str] = None

    def __post_init__(self):
        if not self.deviceName:
            raise ValueError("deviceName is required")
        if not self.csrForSigning or not self.csrForLogin:
            raise ValueError("csrForSigning and csrForLogin are required")
        if not self.appName:
            raise ValueError("appName is required")

    def to_dict(self) -> Dict[str, Any]:
        body = {"deviceName": self.deviceName}
        if self.recoveryKey is not None:
            body["recoveryKey"] = self.recoveryKey
        body.update(
            csrForSigning=self.csrForSigning,
            csrForLogin=self.csrForLogin,
            appName=self.appName,
        )
        return body


@dataclass
class EnrollResponse:
    """Both fields are encrypted certificate envelopes."""

    certificateForLogin: str
    certificateForSigning: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnrollResponse":
        return cls(
            certificateForLogin=_require(data, "certificateForLogin", cls.__name__),
            certificateForSigning=_require(data, "certificateForSigning", cls.__name__),
        )


# ============================================================================
# LOGIN
# ============================================================================


@dataclass
class LoginResponse:
    auth_token: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoginResponse":
        return cls(auth_token=_require(data, "auth_token", cls.__name__))


# ============================================================================
# ASSETS (DOORS)
# ============================================================================


@dataclass
class DoorOperation:
    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DoorOperation":
        return cls(id=_require(data, "id", cls.__name__), name=data.get("name", ""))


@dataclass
class Door:
    """An asset publication the user can operate."""

    publicationId: str
    name: str
    assetId: str = ""
    assetName: str = ""
    operations: List[DoorOperation] = field(default_factory=list)
    favorite: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Door":
        # API shape: {"id", "name", "asset": {"id", "name", "operations": [...], "position2d"}, "favorite"}
        asset = data.get("asset") or {}
        position = asset.get("position2d") or {}
        return cls(
            publicationId=_require(data, "id", cls.__name__),
            name=data.get("name", ""),
            assetId=asset.get("id", ""),
            assetName=asset.get("name", ""),
            operations=[DoorOperation.from_dict(op) for op in asset.get("operations", [])],
            favorite=bool(data.get("favorite", False)),
            latitude=position.get("latitude"),
            longitude=position.get("longitude"),
        )


@dataclass
class DoorsResponse:
    items: List[Door] = field(default_factory=list)
    totalItems: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DoorsResponse":
        if not isinstance(data, dict):
            raise ValueError("DoorsResponse body must be a JSON object")
        items = [Door.from_dict(item) for item in data.get("items", [])]
        return cls(items=items, totalItems=int(data.get("totalItems", len(items))))


# ============================================================================
# CLIENT-SIDE STATE
# ============================================================================


@dataclass
class EnrollmentToken:
    """Enrollment token plus the identifiers decoded from its JWT payload."""

    token: str
    recoveryKeyRequired: bool
    userId: str
    deviceId: str


@dataclass
class Credentials:
    """
    Credentials persisted after a successful enrollment.

    Private keys are stored separately in a key store under
    `login_key_identifier` / `signing_key_identifier`.
    """

    authToken: str
    deviceId: str
    userId: str
    certBase64: str
    isDemoMode: bool = False

    def __post_init__(self):
        if not self.deviceId:
            raise ValueError("deviceId is required")

    @property
    def login_key_identifier(self) -> str:
        return f"login-{self.deviceId}"

    @property
    def signing_key_identifier(self) -> str:
        return f"signing-{self.deviceId}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credentials":
        return cls(
            authToken=_require(data, "authToken", cls.__name__),
            deviceId=_require(data, "deviceId", cls.__name__),
            userId=data.get("userId", ""),
            certBase64=_require(data, "certBase64", cls.__name__),
            isDemoMode=bool(data.get("isDemoMode", False)),
        )
