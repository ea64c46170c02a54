"""
DER Encoder (ITU-T X.690)

Minimal Distinguished Encoding Rules writer for the handful of ASN.1 types
used by the Accessy CSR and SubjectPublicKeyInfo structures:
SEQUENCE, SET, OBJECT IDENTIFIER, INTEGER, BIT STRING, PrintableString and
context-specific constructed tags.

Length encoding:
- short form: a single byte when length < 128
- long form:  0x80|k followed by k big-endian bytes (1 <= k <= 4),
              k being the minimal number of bytes needed

Only lengths bounded by key and signature sizes are ever encoded, so values
above 2^32-1 are rejected rather than supported.
"""

from typing import Tuple, Union

from .exceptions import MalformedInputError
from .types import (
    TAG_BIT_STRING,
    TAG_CONTEXT_0,
    TAG_INTEGER,
    TAG_OID,
    TAG_PRINTABLE_STRING,
    TAG_SEQUENCE,
    TAG_SET,
)

MAX_LENGTH_OCTETS = 4
MAX_ENCODABLE_LENGTH = (1 << (8 * MAX_LENGTH_OCTETS)) - 1


# ============================================================================
# LENGTH AND TLV
# ============================================================================


def encode_length(length: int) -> bytes:
    """
    Encode a DER length prefix.

    Args:
        length: Content length in bytes (0 <= length <= 2^32-1)

    Returns:
        bytes: Short-form (1 byte) or minimal long-form length prefix

    Raises:
        MalformedInputError: If the length is negative or too large

    Examples:
        >>> encode_length(127).hex()
        '7f'
        >>> encode_length(128).hex()
        '8180'
        >>> encode_length(65536).hex()
        '83010000'
    """
    if length < 0 or length > MAX_ENCODABLE_LENGTH:
        raise MalformedInputError(f"DER length out of range: {length}")

    if length < 0x80:
        return bytes([length])

    num_octets = (length.bit_length() + 7) // 8
    return bytes([0x80 | num_octets]) + length.to_bytes(num_octets, byteorder="big")


def decode_length(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode a DER length prefix.

    Strict reader: indefinite lengths, long forms that could have been short
    forms and long forms with leading zero octets are all rejected.

    Args:
        data: Buffer containing the length prefix
        offset: Position of the first length byte

    Returns:
        Tuple of (length, number of bytes consumed)

    Raises:
        MalformedInputError: If the prefix is truncated or not minimal
    """
    if offset >= len(data):
        raise MalformedInputError("Truncated DER length")

    first = data[offset]
    if first < 0x80:
        return first, 1

    num_octets = first & 0x7F
    if num_octets == 0:
        raise MalformedInputError("Indefinite DER length not allowed")
    if num_octets > MAX_LENGTH_OCTETS:
        raise MalformedInputError(f"DER length uses {num_octets} octets (max {MAX_LENGTH_OCTETS})")

    end = offset + 1 + num_octets
    if end > len(data):
        raise MalformedInputError("Truncated DER long-form length")

    octets = data[offset + 1:end]
    if octets[0] == 0x00:
        raise MalformedInputError("Non-minimal DER length (leading zero octet)")

    length = int.from_bytes(octets, byteorder="big")
    if length < 0x80:
        raise MalformedInputError("Non-minimal DER length (long form for short value)")

    return length, 1 + num_octets


def wrap_tlv(tag: int, content: bytes) -> bytes:
    """Tag byte + encode_length(len(content)) + content."""
    if not 0 <= tag <= 0xFF:
        raise MalformedInputError(f"DER tag out of range: {tag}")
    return bytes([tag]) + encode_length(len(content)) + bytes(content)


# ============================================================================
# TYPED CONSTRUCTORS
# ============================================================================


def sequence(*parts: bytes) -> bytes:
    return wrap_tlv(TAG_SEQUENCE, b"".join(parts))


def set_of(*parts: bytes) -> bytes:
    return wrap_tlv(TAG_SET, b"".join(parts))


def context_tag(number: int = 0, content: bytes = b"") -> bytes:
    """Constructed context-specific tag [number]; `context_tag()` is A0 00."""
    return wrap_tlv(TAG_CONTEXT_0 | number, content)


def printable_string(text: str) -> bytes:
    # Values are written as-is; the server accepts UTF-8 identifiers here
    return wrap_tlv(TAG_PRINTABLE_STRING, text.encode("utf-8"))


def bit_string(data: bytes, unused_bits: int = 0) -> bytes:
    if not 0 <= unused_bits <= 7:
        raise MalformedInputError(f"Invalid unused bits count: {unused_bits}")
    return wrap_tlv(TAG_BIT_STRING, bytes([unused_bits]) + bytes(data))


def encode_oid_content(dotted: str) -> bytes:
    """
    Encode the content octets of an OBJECT IDENTIFIER.

    First two arcs are packed as 40*X+Y, every arc in base-128 with the
    continuation bit set on all but the last octet.
    """
    try:
        arcs = [int(arc) for arc in dotted.split(".")]
    except ValueError as e:
        raise MalformedInputError(f"Invalid OID: {dotted!r}") from e

    if len(arcs) < 2 or arcs[0] > 2 or (arcs[0] < 2 and arcs[1] >= 40) or min(arcs) < 0:
        raise MalformedInputError(f"Invalid OID: {dotted!r}")

    encoded = bytearray()
    for arc in [40 * arcs[0] + arcs[1]] + arcs[2:]:
        chunk = [arc & 0x7F]
        arc >>= 7
        while arc:
            chunk.append(0x80 | (arc & 0x7F))
            arc >>= 7
        encoded.extend(reversed(chunk))
    return bytes(encoded)


def oid(dotted: str) -> bytes:
    """
    Examples:
        >>> oid("2.5.4.10").hex()
        '060355040a'
    """
    return wrap_tlv(TAG_OID, encode_oid_content(dotted))


def encode_integer_content(value: Union[int, bytes]) -> bytes:
    """
    Minimal two's-complement content octets of a non-negative INTEGER.

    Byte input is treated as an unsigned big-endian magnitude: leading zero
    octets are stripped and a single 0x00 is prepended when the high bit of
    the first remaining octet is set.
    """
    if isinstance(value, int):
        if value < 0:
            raise MalformedInputError("Negative INTEGER values are not supported")
        magnitude = value.to_bytes((value.bit_length() + 7) // 8, byteorder="big")
    else:
        magnitude = bytes(value)

    magnitude = magnitude.lstrip(b"\x00") or b"\x00"
    if magnitude[0] & 0x80:
        magnitude = b"\x00" + magnitude
    return magnitude


def integer(value: Union[int, bytes]) -> bytes:
    return wrap_tlv(TAG_INTEGER, encode_integer_content(value))
