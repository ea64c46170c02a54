"""
Test Suite: DER Encoder

Tests the length encoding, TLV wrapping and typed constructors used by the
CSR and SubjectPublicKeyInfo builders.
"""

import pytest

from protocols.core import der
from protocols.core.exceptions import MalformedInputError


ROUND_TRIP_LENGTHS = [0, 1, 127, 128, 255, 256, 65535, 65536, 16777215]


class TestLengthEncoding:
    """Short and long form length prefixes"""

    @pytest.mark.parametrize("length", ROUND_TRIP_LENGTHS)
    def test_length_round_trip(self, length):
        encoded = der.encode_length(length)
        decoded, consumed = der.decode_length(encoded)
        assert decoded == length
        assert consumed == len(encoded)

    def test_short_form_below_128(self):
        assert der.encode_length(0) == b"\x00"
        assert der.encode_length(127) == b"\x7f"

    def test_long_form_is_minimal(self):
        assert der.encode_length(128) == b"\x81\x80"
        assert der.encode_length(255) == b"\x81\xff"
        assert der.encode_length(256) == b"\x82\x01\x00"
        assert der.encode_length(65535) == b"\x82\xff\xff"
        assert der.encode_length(65536) == b"\x83\x01\x00\x00"
        assert der.encode_length(16777215) == b"\x83\xff\xff\xff"

    def test_four_octet_maximum(self):
        assert der.encode_length(2 ** 32 - 1) == b"\x84\xff\xff\xff\xff"

    @pytest.mark.parametrize("length", [-1, 2 ** 32])
    def test_out_of_range_rejected(self, length):
        with pytest.raises(MalformedInputError):
            der.encode_length(length)

    def test_decode_with_offset(self):
        data = b"\x30\x82\x01\x00"
        assert der.decode_length(data, offset=1) == (256, 3)

    @pytest.mark.parametrize(
        "data",
        [
            b"",            # truncated
            b"\x80",        # indefinite
            b"\x85\x01\x02\x03\x04\x05",  # too many octets
            b"\x82\x01",    # truncated long form
            b"\x82\x00\x80",  # leading zero octet
            b"\x81\x7f",    # long form for a short value
        ],
    )
    def test_decode_rejects_non_der(self, data):
        with pytest.raises(MalformedInputError):
            der.decode_length(data)


class TestTypedConstructors:
    """TLV constructors"""

    def test_wrap_tlv(self):
        assert der.wrap_tlv(0x04, b"abc") == b"\x04\x03abc"

    def test_wrap_tlv_long_content(self):
        encoded = der.wrap_tlv(0x04, b"\x00" * 200)
        assert encoded[:3] == b"\x04\x81\xc8"
        assert len(encoded) == 203

    def test_empty_context_tag(self):
        assert der.context_tag() == b"\xa0\x00"

    def test_sequence_and_set(self):
        assert der.sequence(b"\x02\x01\x00") == b"\x30\x03\x02\x01\x00"
        assert der.set_of() == b"\x31\x00"

    def test_organization_name_oid(self):
        assert der.oid("2.5.4.10") == bytes.fromhex("060355040a")

    def test_common_name_oid(self):
        assert der.oid("2.5.4.3") == bytes.fromhex("0603550403")

    def test_ec_public_key_oid(self):
        assert der.oid("1.2.840.10045.2.1") == bytes.fromhex("06072a8648ce3d0201")

    def test_prime256v1_oid(self):
        assert der.oid("1.2.840.10045.3.1.7") == bytes.fromhex("06082a8648ce3d030107")

    def test_ecdsa_with_sha256_oid(self):
        assert der.oid("1.2.840.10045.4.3.2") == bytes.fromhex("06082a8648ce3d040302")

    @pytest.mark.parametrize("dotted", ["", "1", "3.1", "1.40", "1.a.3"])
    def test_invalid_oid_rejected(self, dotted):
        with pytest.raises(MalformedInputError):
            der.oid(dotted)

    def test_integer_zero(self):
        assert der.integer(0) == b"\x02\x01\x00"

    def test_integer_high_bit_gets_zero_prefix(self):
        assert der.integer(0x80) == b"\x02\x02\x00\x80"
        assert der.integer(b"\xff\x01") == b"\x02\x03\x00\xff\x01"

    def test_integer_strips_leading_zeros(self):
        assert der.integer(b"\x00\x00\x7f") == b"\x02\x01\x7f"
        assert der.integer(b"\x00\x00\x00") == b"\x02\x01\x00"

    def test_negative_integer_rejected(self):
        with pytest.raises(MalformedInputError):
            der.integer(-1)

    def test_bit_string_prefixes_unused_bits(self):
        assert der.bit_string(b"\x04\x05") == b"\x03\x03\x00\x04\x05"

    def test_printable_string(self):
        assert der.printable_string("user") == b"\x13\x04user"
