"""
Accessy protocol errors.

MalformedInputError   - input does not have the expected shape
IntegrityError        - HMAC mismatch on an encrypted certificate
CryptoProviderError   - a cryptographic primitive refused the operation
CsrBuildError         - CSR construction aborted
"""

from typing import Optional


class AccessyCryptoError(Exception):
    """Base class for every error raised by the protocol core."""


class MalformedInputError(AccessyCryptoError, ValueError):
    """Input (base64 text, envelope, token, DER value) has the wrong shape."""


class MalformedTokenError(MalformedInputError):
    """A compact JWT could not be split or its payload decoded."""


class IntegrityError(AccessyCryptoError):
    """
    The HMAC tag of an encrypted certificate does not match.

    Always fatal: the certificate must be discarded and decryption is never
    attempted.
    """


class CryptoProviderError(AccessyCryptoError):
    """
    Failure surfaced by the underlying cryptographic provider.

    Attributes:
        operation: Name of the operation that failed (e.g. "sign", "ecdh")
    """

    operation = "crypto"

    def __init__(self, message: str, operation: Optional[str] = None):
        if operation is not None:
            self.operation = operation
        super().__init__(f"[{self.operation}] {message}")


class KeyGenerationError(CryptoProviderError):
    operation = "generate_key"


class KeyExportError(CryptoProviderError):
    operation = "export_key"


class KeyImportError(CryptoProviderError):
    operation = "import_key"


class KeyExchangeError(CryptoProviderError):
    operation = "ecdh"


class SigningError(CryptoProviderError):
    operation = "sign"


class DecryptionError(CryptoProviderError):
    operation = "decrypt"


class CsrBuildError(AccessyCryptoError):
    """CSR construction failed; no partial CSR is ever returned."""
