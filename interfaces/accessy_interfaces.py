"""
Accessy Abstract Interfaces

Collaborator seams of the enrollment flow. The services depend only on these
interfaces so that the file-backed stores and the HTTP client can be swapped
for in-memory fakes in tests or for platform key stores in production.

Author: Cerve Project
Date: October 2026
"""

from abc import ABC, abstractmethod

from protocols.core.keys import KeyPair
from protocols.core.types import KeyPurpose
from protocols.messages.types import (
    Credentials,
    DoorsResponse,
    EnrollRequest,
    EnrollResponse,
    EnrollTokenResponse,
    LoginResponse,
    ValidateRecoveryResponse,
    VerifyResponse,
)


class KeyStore(ABC):
    """
    Persistent storage for device private keys.

    Implementations: FileKeyStore
    """

    @abstractmethod
    def save_key(self, key_pair: KeyPair, identifier: str) -> None:
        """
        Store a private key, replacing any key with the same identifier.

        Args:
            key_pair: Key pair to persist (only the private key is stored)
            identifier: "login-{deviceId}" or "signing-{deviceId}"
        """
        pass

    @abstractmethod
    def load_key(self, identifier: str, purpose: KeyPurpose) -> KeyPair:
        """
        Load a private key.

        Raises:
            KeyNotFoundError: If no key is stored under `identifier`
        """
        pass

    @abstractmethod
    def delete_key(self, identifier: str) -> None:
        """Delete a key; deleting a missing key is not an error."""
        pass

    @abstractmethod
    def key_exists(self, identifier: str) -> bool:
        pass


class CredentialsStore(ABC):
    """
    Persistent storage for the enrolled device credentials.

    Implementations: FileCredentialsStore
    """

    @abstractmethod
    def save(self, credentials: Credentials) -> None:
        pass

    @abstractmethod
    def load(self) -> Credentials:
        """
        Raises:
            CredentialsNotFoundError: If nothing has been saved
        """
        pass

    @abstractmethod
    def delete(self) -> None:
        """Delete the credentials and the device keys they reference."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        pass


class AccessyTransport(ABC):
    """
    Accessy API operations used by the services.

    Implementations: AccessyApiClient

    All methods raise ApiError subclasses on transport or HTTP failures.
    """

    @abstractmethod
    def request_verification(self, msisdn: str) -> VerifyResponse:
        pass

    @abstractmethod
    def submit_verification_code(self, code: str, verification_code_id: str) -> EnrollTokenResponse:
        pass

    @abstractmethod
    def validate_recovery_key(self, recovery_key: str, enroll_token: str) -> ValidateRecoveryResponse:
        pass

    @abstractmethod
    def enroll_device(self, request: EnrollRequest, enroll_token: str) -> EnrollResponse:
        pass

    @abstractmethod
    def login(self, login_proof: str) -> LoginResponse:
        pass

    @abstractmethod
    def get_doors(self, auth_token: str) -> DoorsResponse:
        pass

    @abstractmethod
    def unlock_door(self, operation_id: str, proof: str, auth_token: str) -> None:
        pass

    @abstractmethod
    def set_favorite(self, publication_id: str, is_favorite: bool, auth_token: str) -> None:
        pass
