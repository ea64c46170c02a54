"""
Accessy Configuration - Paths, API constants and key store options

Centralizes the API endpoint, default headers, on-disk locations and the
options used by the key store. Changing a value here applies to the whole
client.

Usage:
    from config.accessy_config import ACCESSY_CONSTANTS, ACCESSY_PATHS

    client = AccessyApiClient(base_url=ACCESSY_CONSTANTS.API_BASE_URL)
    store = FileKeyStore(ACCESSY_PATHS.KEYS)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class AccessyPaths:
    """
    Base directories for client state.

    Attributes:
        BASE: Root directory for all client data
        KEYS: PEM-encoded device private keys
        CREDENTIALS: Persisted credentials (CREDENTIALS_FILE)
        LOGS: Log directory
    """
    BASE: Path = Path("./accessy_data")
    KEYS: Path = Path("./accessy_data/keys")
    CREDENTIALS: Path = Path("./accessy_data/credentials")
    LOGS: Path = Path("./accessy_data/logs")

    @property
    def CREDENTIALS_FILE(self) -> Path:
        """JSON document of the enrolled device"""
        return self.CREDENTIALS / "credentials.json"


ACCESSY_PATHS = AccessyPaths()


@dataclass(frozen=True)
class AccessyConstants:
    """API endpoint, media types and client identification."""
    # API
    API_BASE_URL: str = "https://api.accessy.se"
    API_HOST: str = "api.accessy.se"
    ACCEPT_V1: str = "application/vnd.axessions.v1+json"
    ACCEPT_V2: str = "application/vnd.axessions.v2+json"  # device enrollment only
    PLAN: str = "accessy"
    APP_NAME: str = "Accessy-iOS"
    DEFAULT_DEVICE_NAME: str = "Python Client"

    # Requests
    DEFAULT_TIMEOUT: int = 30  # seconds
    DOORS_PAGE_SIZE: int = 100

    # Headers
    PROOF_HEADER: str = "x-axs-proof"
    PLAN_HEADER: str = "x-axs-plan"


ACCESSY_CONSTANTS = AccessyConstants()


SUPPORTED_KEY_TYPES = ("ec-secp256r1",)


@dataclass(frozen=True)
class KeyStoreOptions:
    """
    Typed key store attributes.

    Only P-256 private keys are supported. `service` namespaces the stored
    keys (one subdirectory per service); setting `access_group` shares them
    with the owning group (files created 0640 instead of 0600).
    """
    key_class: str = "private"
    key_type: str = "ec-secp256r1"
    key_size_bits: int = 256
    access_group: Optional[str] = None
    service: str = "se.accessy.keys"

    def __post_init__(self):
        if self.key_class != "private":
            raise ValueError(f"Unsupported key class: {self.key_class}")
        if self.key_type not in SUPPORTED_KEY_TYPES:
            raise ValueError(f"Unsupported key type: {self.key_type}")
        if self.key_size_bits != 256:
            raise ValueError(f"Unsupported key size: {self.key_size_bits} (only 256 bits)")
        if not self.service or "/" in self.service or self.service in (".", ".."):
            raise ValueError(f"Invalid service name: {self.service!r}")

    @property
    def file_mode(self) -> int:
        return 0o640 if self.access_group else 0o600


DEFAULT_KEY_STORE_OPTIONS = KeyStoreOptions()


def _demo_door(index: int, name: str, asset_name: str, operation: str,
               latitude: float, longitude: float, favorite: bool) -> Dict:
    # Same JSON shape as GET /asset/my-asset-publication items
    return {
        "id": f"demo-door-{index}",
        "name": name,
        "asset": {
            "id": f"demo-asset-{index}",
            "name": asset_name,
            "operations": [{"id": f"demo-op-{index}", "name": operation}],
            "position2d": {"latitude": latitude, "longitude": longitude},
        },
        "favorite": favorite,
    }


DEMO_DOORS: Tuple[Dict, ...] = (
    _demo_door(1, "Main Entrance", "Main Building Door", "Unlock", 57.7089, 11.9746, True),
    _demo_door(2, "Office Reception", "Reception Door", "Unlock", 57.7092, 11.9750, False),
    _demo_door(3, "Parking Garage", "Garage Gate", "Open", 57.7087, 11.9742, False),
    _demo_door(4, "Conference Room A", "Meeting Room Door", "Unlock", 57.7090, 11.9748, True),
    _demo_door(5, "Side Entrance", "Secondary Building Door", "Unlock", 57.7088, 11.9744, False),
    _demo_door(6, "Rooftop Access", "Rooftop Door", "Unlock", 57.7091, 11.9749, False),
)


@dataclass(frozen=True)
class DemoData:
    """Phone numbers that run the flow against canned data instead of the API."""
    DEMO_PHONE_NUMBERS: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"+46700000000", "demo", "+15555555555", "0700000000"})
    )
    DEMO_AUTH_TOKEN: str = "demo-auth-token"
    DEMO_USER_ID: str = "demo-user-id"
    DEMO_DEVICE_ID: str = "demo-device-id"
    DEMO_CERT_BASE64: str = "demo-cert-base64"
    DEMO_VERIFICATION_CODE_ID: str = "demo-verification"
    SAMPLE_DOORS: Tuple[Dict, ...] = DEMO_DOORS

    def is_demo_phone_number(self, number: str) -> bool:
        """
        Examples:
            >>> DEMO_DATA.is_demo_phone_number(" demo ")
            True
            >>> DEMO_DATA.is_demo_phone_number("+46701234567")
            False
        """
        return (number or "").strip() in self.DEMO_PHONE_NUMBERS


DEMO_DATA = DemoData()


def get_default_headers(accept: Optional[str] = None) -> Dict[str, str]:
    """
    Default headers sent with every API request.

    Args:
        accept: Media type override (ACCEPT_V2 for device enrollment)

    Returns:
        Dict[str, str]: A fresh dictionary, safe to mutate
    """
    return {
        "Host": ACCESSY_CONSTANTS.API_HOST,
        "accept": accept or ACCESSY_CONSTANTS.ACCEPT_V1,
        ACCESSY_CONSTANTS.PLAN_HEADER: ACCESSY_CONSTANTS.PLAN,
        "content-type": "application/json",
    }


# Door positions that are missing or wrong in the API, by publication id
DOOR_LOCATION_OVERRIDES: Dict[str, Tuple[float, float]] = {
    "F9114E43-B180-470F-B953-2D90FB67AA72": (57.711941, 11.945427),  # P.O nr 21
    "B450D23A-451A-49B8-9D9A-07F7BB3EC36C": (57.711437, 11.946004),  # United Spaces Theatre Plan 2
    "F96EBB6D-B9EC-422F-905F-8A3B9575EA30": (57.711603, 11.946576),  # United Spaces reception Plan 2
}
