"""
Accessy Configuration Package

Centralizes paths, API constants, key store options and demo data.
"""

from .accessy_config import (
    ACCESSY_PATHS,
    ACCESSY_CONSTANTS,
    DEFAULT_KEY_STORE_OPTIONS,
    DEMO_DATA,
    DOOR_LOCATION_OVERRIDES,
    AccessyPaths,
    AccessyConstants,
    KeyStoreOptions,
    DemoData,
    get_default_headers,
)

__all__ = [
    'ACCESSY_PATHS',
    'ACCESSY_CONSTANTS',
    'DEFAULT_KEY_STORE_OPTIONS',
    'DEMO_DATA',
    'DOOR_LOCATION_OVERRIDES',
    'AccessyPaths',
    'AccessyConstants',
    'KeyStoreOptions',
    'DemoData',
    'get_default_headers',
]
