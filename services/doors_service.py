"""
Doors Service

Lists the doors (asset publications) of the logged-in user and invokes
their operations. Every unlock carries a fresh proof token signed with the
device login key.

Author: Cerve Project
Date: October 2026
"""

import math
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from config.accessy_config import DEMO_DATA, DOOR_LOCATION_OVERRIDES
from interfaces.accessy_interfaces import AccessyTransport, KeyStore
from protocols.core.types import KeyPurpose
from protocols.messages.types import Credentials, Door
from protocols.security.proof_of_possession import create_proof
from utils.logger import AccessyLogger

EARTH_RADIUS_METERS = 6371008.8


class DoorsServiceError(Exception):
    pass


class DoorNotFoundError(DoorsServiceError):
    def __init__(self, door_id: str):
        self.door_id = door_id
        super().__init__("Door not found")


class NoOperationsError(DoorsServiceError):
    def __init__(self, door_id: str):
        self.door_id = door_id
        super().__init__("Door has no unlock operations available")


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle (haversine) distance in meters.

    Examples:
        >>> distance_meters(57.7, 11.9, 57.7, 11.9)
        0.0
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def apply_location_override(door: Door) -> Door:
    override = DOOR_LOCATION_OVERRIDES.get(door.publicationId)
    if override is None:
        return door
    latitude, longitude = override
    return replace(door, latitude=latitude, longitude=longitude)


def find_nearest_door(
    doors: Iterable[Door], latitude: float, longitude: float
) -> Optional[Tuple[Door, float]]:
    """Nearest door with a known position and its distance, or None."""
    nearest = None
    for door in doors:
        if not door.has_position:
            continue
        distance = distance_meters(latitude, longitude, door.latitude, door.longitude)
        if nearest is None or distance < nearest[1]:
            nearest = (door, distance)
    return nearest


class DoorsService:
    """
    Service for door operations.

    Args:
        transport: Accessy API transport
        key_store: Key store holding the device login key
    """

    def __init__(self, transport: AccessyTransport, key_store: KeyStore):
        self.transport = transport
        self.key_store = key_store
        self.logger = AccessyLogger.get_logger("DoorsService")

    def get_doors(self, credentials: Credentials) -> List[Door]:
        if credentials.isDemoMode:
            return [Door.from_dict(item) for item in DEMO_DATA.SAMPLE_DOORS]

        response = self.transport.get_doors(credentials.authToken)
        doors = [apply_location_override(door) for door in response.items]
        self.logger.info(f"Loaded {len(doors)} doors")
        return doors

    def unlock(self, door: Door, credentials: Credentials) -> None:
        """
        Invoke the first operation of `door`.

        Raises:
            NoOperationsError: If the door exposes no operation
            KeyNotFoundError: If the login key is missing from the key store
            ApiError: Transport failures
        """
        if not door.operations:
            raise NoOperationsError(door.publicationId)
        operation = door.operations[0]

        if credentials.isDemoMode:
            self.logger.info(f"Demo mode: pretending to unlock {door.name}")
            return

        login_key_pair = self.key_store.load_key(credentials.login_key_identifier, KeyPurpose.LOGIN)
        proof = create_proof(credentials.certBase64, login_key_pair.private_key)

        self.transport.unlock_door(operation.id, proof, credentials.authToken)
        self.logger.info(f"✅ Unlocked {door.name} ({operation.name or operation.id})")

    def unlock_door(self, door_id: str, credentials: Credentials) -> None:
        """Look the door up by publication id, then unlock it."""
        doors = self.get_doors(credentials)
        door = next((d for d in doors if d.publicationId == door_id), None)
        if door is None:
            raise DoorNotFoundError(door_id)
        self.unlock(door, credentials)

    def set_favorite(self, door: Door, is_favorite: bool, credentials: Credentials) -> Door:
        if not credentials.isDemoMode:
            self.transport.set_favorite(door.publicationId, is_favorite, credentials.authToken)
        return replace(door, favorite=is_favorite)

    def unlock_nearest(self, credentials: Credentials, latitude: float, longitude: float) -> Door:
        """
        Unlock the door closest to the given position.

        Raises:
            DoorNotFoundError: If no door has a known position
        """
        nearest = find_nearest_door(self.get_doors(credentials), latitude, longitude)
        if nearest is None:
            raise DoorNotFoundError("<nearest>")
        door, distance = nearest
        self.logger.info(f"Nearest door: {door.name} at {distance:.0f} m")
        self.unlock(door, credentials)
        return door
