"""
Base64 helpers for the Accessy wire formats.

The server mixes three flavours of base64 in the same messages:
- standard alphabet with padding (inner CSR pass)
- standard alphabet without padding (CSR envelope)
- URL-safe alphabet without padding (proofs, envelopes, JWT)
"""

import base64
import binascii

from .exceptions import MalformedInputError


def b64encode(data: bytes) -> str:
    """Standard base64 with '=' padding."""
    return base64.b64encode(data).decode("ascii")


def b64encode_nopad(data: bytes) -> str:
    """Standard base64, '=' padding stripped."""
    return b64encode(data).rstrip("=")


def b64url_encode(data: bytes) -> str:
    """URL-safe base64, '=' padding stripped."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def restore_padding(text: str) -> str:
    """Append '=' until the length is a multiple of 4."""
    remainder = len(text) % 4
    if remainder:
        text += "=" * (4 - remainder)
    return text


def safe_b64decode(text: str) -> bytes:
    """
    Decode URL-safe or standard base64, with or without padding.

    Args:
        text: Encoded text

    Returns:
        bytes: Decoded data

    Raises:
        MalformedInputError: If the text is not valid base64
    """
    if not isinstance(text, str):
        raise MalformedInputError(f"Expected str, got {type(text).__name__}")

    normalized = restore_padding(text.replace("-", "+").replace("_", "/"))
    try:
        return base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"Invalid base64 input: {e}") from e
