"""
File-backed Credentials Store

Persists the enrolled device's Credentials as a single JSON document.
Private keys are not part of the document: they live in the key store under
the identifiers the credentials reference, and are removed with them.
"""

from pathlib import Path
from typing import Union

from interfaces.accessy_interfaces import CredentialsStore, KeyStore
from protocols.messages.types import Credentials
from utils.config_utils import read_json, write_atomic_json
from utils.key_store import KeyStoreError
from utils.logger import AccessyLogger


class CredentialsNotFoundError(Exception):
    def __init__(self, path):
        self.path = path
        super().__init__(f"No credentials stored at {path}")


class FileCredentialsStore(CredentialsStore):
    """
    Args:
        path: JSON file holding the credentials
        key_store: Key store holding the device keys
    """

    def __init__(self, path: Union[str, Path], key_store: KeyStore):
        self.path = Path(path)
        self.key_store = key_store
        self.logger = AccessyLogger.get_logger("CredentialsStore")

    def save(self, credentials: Credentials) -> None:
        write_atomic_json(self.path, credentials.to_dict())
        self.logger.info(f"Credentials saved for device {credentials.deviceId}")

    def load(self) -> Credentials:
        data = read_json(self.path)
        if data is None:
            raise CredentialsNotFoundError(self.path)
        try:
            return Credentials.from_dict(data)
        except ValueError as e:
            raise CredentialsNotFoundError(self.path) from e

    def delete(self) -> None:
        try:
            credentials = self.load()
        except CredentialsNotFoundError:
            credentials = None

        if credentials is not None:
            for identifier in (credentials.login_key_identifier, credentials.signing_key_identifier):
                try:
                    self.key_store.delete_key(identifier)
                except (KeyStoreError, ValueError, OSError) as e:
                    self.logger.warning(f"Could not delete key {identifier}: {e}")

        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        self.logger.info("Credentials deleted")

    def exists(self) -> bool:
        try:
            self.load()
        except CredentialsNotFoundError:
            return False
        return True
