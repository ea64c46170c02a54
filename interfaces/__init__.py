"""
Accessy Interfaces Package

Abstract collaborators of the enrollment services.
"""

from .accessy_interfaces import AccessyTransport, CredentialsStore, KeyStore

__all__ = [
    "AccessyTransport",
    "CredentialsStore",
    "KeyStore",
]
