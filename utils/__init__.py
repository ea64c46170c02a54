"""
Utils Package

Contains utility modules for logging, atomic JSON I/O and file-backed
key and credential storage.
"""

from .logger import AccessyLogger
from .config_utils import read_json, write_atomic_json
from .key_store import FileKeyStore, KeyNotFoundError, KeyStoreError
from .credentials_store import CredentialsNotFoundError, FileCredentialsStore

__all__ = [
    # Logging
    "AccessyLogger",
    # JSON I/O
    "read_json",
    "write_atomic_json",
    # Storage
    "FileKeyStore",
    "KeyNotFoundError",
    "KeyStoreError",
    "FileCredentialsStore",
    "CredentialsNotFoundError",
]
