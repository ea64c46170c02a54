"""
File-backed Key Store

Stores device private keys as PKCS#8 PEM files, one per identifier:

    <base_dir>/<service>/<identifier>.key

Writes are atomic (temporary file + os.replace) and serialized with a
`filelock.FileLock`, so that two processes enrolling on the same machine
cannot interleave a save and a delete.
"""

import os
import re
from pathlib import Path
from typing import Optional, Union

from config.accessy_config import DEFAULT_KEY_STORE_OPTIONS, KeyStoreOptions
from interfaces.accessy_interfaces import KeyStore
from protocols.core.keys import KeyPair, export_private_key_pem, import_private_key_pem
from protocols.core.types import KeyPurpose
from utils.config_utils import lock_for, write_atomic_bytes
from utils.logger import AccessyLogger

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class KeyStoreError(Exception):
    """Base error of the key store."""


class KeyNotFoundError(KeyStoreError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Key not found: {identifier}")


class FileKeyStore(KeyStore):
    """
    PEM file key store.

    Args:
        base_dir: Root directory for keys (e.g. ACCESSY_PATHS.KEYS)
        options: Key attributes; `service` selects the subdirectory
        password: Optional password used to encrypt the PEM files
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        options: KeyStoreOptions = DEFAULT_KEY_STORE_OPTIONS,
        password: Optional[bytes] = None,
    ):
        self.options = options
        self.password = password
        self.directory = Path(base_dir) / options.service
        self.logger = AccessyLogger.get_logger("KeyStore")

    def _key_path(self, identifier: str) -> Path:
        if not isinstance(identifier, str) or not IDENTIFIER_PATTERN.match(identifier) \
                or identifier in (".", ".."):
            raise ValueError(f"Invalid key identifier: {identifier!r}")
        return self.directory / f"{identifier}.key"

    def save_key(self, key_pair: KeyPair, identifier: str) -> None:
        path = self._key_path(identifier)
        pem = export_private_key_pem(key_pair, password=self.password)

        self.directory.mkdir(parents=True, exist_ok=True)
        with lock_for(path):
            write_atomic_bytes(path, pem, mode=self.options.file_mode)

        self.logger.info(f"Key saved: {identifier} ({key_pair.purpose.value})")

    def load_key(self, identifier: str, purpose: KeyPurpose) -> KeyPair:
        path = self._key_path(identifier)
        if not path.exists():
            raise KeyNotFoundError(identifier)

        with lock_for(path):
            try:
                pem = path.read_bytes()
            except FileNotFoundError:
                raise KeyNotFoundError(identifier) from None

        return import_private_key_pem(pem, purpose, password=self.password)

    def delete_key(self, identifier: str) -> None:
        path = self._key_path(identifier)
        if not path.exists():
            return

        with lock_for(path):
            try:
                os.remove(path)
            except FileNotFoundError:
                return

        self.logger.info(f"Key deleted: {identifier}")

    def key_exists(self, identifier: str) -> bool:
        return self._key_path(identifier).exists()
