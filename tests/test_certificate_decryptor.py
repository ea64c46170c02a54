"""
Test Suite: Encrypted Certificate Envelopes

Tests ECDH key derivation against the server's ephemeral key and the
verify-then-decrypt flow of enrollment certificate envelopes.
"""

import base64
import hashlib
import hmac

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from conftest import TEST_CERTIFICATE, b64url
from protocols.core.exceptions import DecryptionError, IntegrityError, KeyImportError
from protocols.security.certificate_decryptor import (
    CertificateDecryptor,
    EncryptedCertificateEnvelope,
    decrypt_aes256_cbc,
    extract_certificate,
    plaintext_to_certificate,
)
from protocols.security.ecdh import (
    P256_SPKI_PREFIX,
    derive_shared_secret,
    extract_ec_point,
    import_server_public_key,
    split_key_material,
    validate_spki_shape,
)


class TestEcdh:
    """Server key import and key material derivation"""

    def test_prefix_matches_library_spki(self, reference_server):
        assert len(P256_SPKI_PREFIX) == 26
        assert reference_server.server_spki[:26] == P256_SPKI_PREFIX

    def test_extract_point(self, reference_server):
        point = extract_ec_point(reference_server.server_spki)
        assert len(point) == 65
        assert point[0] == 0x04

    def test_import_server_key(self, reference_server):
        public_key = import_server_public_key(reference_server.server_spki)
        expected = reference_server.server_private_key.public_key().public_numbers()
        assert public_key.public_numbers() == expected

    def test_wrong_length_rejected(self, reference_server):
        with pytest.raises(KeyImportError):
            validate_spki_shape(reference_server.server_spki[:-1])

    def test_other_curve_rejected(self):
        p384 = ec.generate_private_key(ec.SECP384R1()).public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        with pytest.raises(KeyImportError):
            import_server_public_key(p384)

    def test_off_curve_point_rejected(self, reference_server):
        spki = bytearray(reference_server.server_spki)
        spki[-1] ^= 0x01
        with pytest.raises(KeyImportError):
            import_server_public_key(bytes(spki))

    def test_material_matches_server_side(self, reference_server, fixed_login_key_pair):
        material = derive_shared_secret(fixed_login_key_pair.private_key, reference_server.server_spki)
        assert len(material) == 64
        assert material == reference_server.key_material(fixed_login_key_pair.public_key)

    def test_material_is_sha512_of_shared_secret(self, reference_server, fixed_login_key_pair):
        shared = fixed_login_key_pair.private_key.exchange(
            ec.ECDH(), reference_server.server_private_key.public_key()
        )
        material = derive_shared_secret(fixed_login_key_pair.private_key, reference_server.server_spki)
        assert material == hashlib.sha512(shared).digest()

    def test_split(self):
        aes_key, hmac_key = split_key_material(bytes(range(64)))
        assert aes_key == bytes(range(32))
        assert hmac_key == bytes(range(32, 64))

    def test_split_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            split_key_material(b"\x00" * 63)


class TestEnvelopeParsing:
    """Shape checks: unrecognized envelopes yield no certificate"""

    def test_parse(self, reference_server, fixed_login_key_pair):
        envelope = reference_server.encrypt_certificate(TEST_CERTIFICATE, fixed_login_key_pair.public_key)
        parsed = EncryptedCertificateEnvelope.parse(envelope)

        assert parsed.server_public_key_der == reference_server.server_spki
        assert parsed.iv == reference_server.iv
        assert len(parsed.hmac_tag) == 32
        assert parsed.authenticated_data == f"{parsed.iv_b64}.{parsed.ciphertext_b64}".encode("utf-8")

    def test_too_few_segments(self, reference_server, fixed_login_key_pair):
        envelope = reference_server.encrypt_certificate(TEST_CERTIFICATE, fixed_login_key_pair.public_key)
        truncated = ".".join(envelope.split(".")[:4])
        assert EncryptedCertificateEnvelope.parse(truncated) is None
        assert extract_certificate(truncated, fixed_login_key_pair.private_key) is None

    @pytest.mark.parametrize("payload", ["nodots", "iv.ciphertext", "a.b.c.d"])
    def test_wrong_payload_shape(self, reference_server, fixed_login_key_pair, payload):
        envelope = reference_server.wrap(payload)
        assert extract_certificate(envelope, fixed_login_key_pair.private_key) is None

    def test_payload_not_base64(self, reference_server, fixed_login_key_pair):
        parts = reference_server.wrap("a.b.c").split(".")
        parts[3] = "!!!"
        assert extract_certificate(".".join(parts), fixed_login_key_pair.private_key) is None

    @pytest.mark.parametrize("segment", [0, 1])
    @pytest.mark.parametrize("authentic_tag", [True, False])
    def test_iv_or_ciphertext_not_base64(self, reference_server, fixed_login_key_pair, segment, authentic_tag):
        fields = list(
            reference_server.encrypt_payload(TEST_CERTIFICATE.encode("utf-8"), fixed_login_key_pair.public_key)[:2]
        )
        fields[segment] = "!!not*base64!!"

        if authentic_tag:
            _, hmac_key = split_key_material(reference_server.key_material(fixed_login_key_pair.public_key))
            tag = hmac.new(hmac_key, ".".join(fields).encode("utf-8"), hashlib.sha256).digest()
        else:
            tag = b"\x00" * 32
        envelope = reference_server.wrap(".".join(fields + [b64url(tag)]))

        assert EncryptedCertificateEnvelope.parse(envelope) is None
        assert extract_certificate(envelope, fixed_login_key_pair.private_key) is None

    def test_not_a_string(self, fixed_login_key_pair):
        assert EncryptedCertificateEnvelope.parse(None) is None
        assert extract_certificate(b"a.b.c.d.e", fixed_login_key_pair.private_key) is None


class TestDecryption:
    """HMAC verification and AES-256-CBC decryption"""

    def test_round_trip(self, reference_server, fixed_login_key_pair):
        envelope = reference_server.encrypt_certificate(TEST_CERTIFICATE, fixed_login_key_pair.public_key)
        assert extract_certificate(envelope, fixed_login_key_pair.private_key) == TEST_CERTIFICATE

    def test_fresh_keys_round_trip(self, reference_server, login_key_pair):
        envelope = reference_server.encrypt_certificate("MIIC-cert", login_key_pair.public_key)
        assert CertificateDecryptor(login_key_pair.private_key).extract(envelope) == "MIIC-cert"

    def test_extra_trailing_segments_ignored(self, reference_server, fixed_login_key_pair):
        envelope = reference_server.encrypt_certificate(TEST_CERTIFICATE, fixed_login_key_pair.public_key)
        assert extract_certificate(envelope + ".extra", fixed_login_key_pair.private_key) == TEST_CERTIFICATE

    def test_binary_plaintext_is_base64_encoded(self, reference_server, fixed_login_key_pair):
        der_certificate = b"\x30\x82\x01\x0a\xff\xfe" + bytes(range(200, 256))
        envelope = reference_server.encrypt_certificate(der_certificate, fixed_login_key_pair.public_key)

        expected = base64.b64encode(der_certificate).decode("ascii")
        assert extract_certificate(envelope, fixed_login_key_pair.private_key) == expected

    def test_wrong_recipient_fails_integrity(self, reference_server, fixed_login_key_pair, login_key_pair):
        envelope = reference_server.encrypt_certificate(TEST_CERTIFICATE, fixed_login_key_pair.public_key)
        with pytest.raises(IntegrityError):
            extract_certificate(envelope, login_key_pair.private_key)

    @pytest.mark.parametrize("segment", [0, 1])
    def test_any_modified_character_fails_integrity(self, reference_server, fixed_login_key_pair, segment):
        iv_b64, ciphertext_b64, hmac_b64 = reference_server.encrypt_payload(
            TEST_CERTIFICATE.encode("utf-8"), fixed_login_key_pair.public_key
        )
        fields = [iv_b64, ciphertext_b64]
        original = fields[segment]

        for index in range(len(original)):
            replacement = "A" if original[index] != "A" else "B"
            tampered = list(fields)
            tampered[segment] = original[:index] + replacement + original[index + 1:]
            envelope = reference_server.wrap(".".join(tampered + [hmac_b64]))

            with pytest.raises(IntegrityError):
                extract_certificate(envelope, fixed_login_key_pair.private_key)

    def test_modified_tag_fails_integrity(self, reference_server, fixed_login_key_pair):
        iv_b64, ciphertext_b64, _ = reference_server.encrypt_payload(
            TEST_CERTIFICATE.encode("utf-8"), fixed_login_key_pair.public_key
        )
        envelope = reference_server.wrap(f"{iv_b64}.{ciphertext_b64}.{b64url(b'0' * 32)}")
        with pytest.raises(IntegrityError):
            extract_certificate(envelope, fixed_login_key_pair.private_key)

    def test_bad_padding_with_valid_tag(self, reference_server, fixed_login_key_pair):
        material = reference_server.key_material(fixed_login_key_pair.public_key)
        aes_key, hmac_key = split_key_material(material)

        # One block that decrypts to zeros: last byte 0x00 is never valid PKCS#7
        encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(reference_server.iv)).encryptor()
        ciphertext = encryptor.update(b"\x00" * 16) + encryptor.finalize()

        iv_b64 = b64url(reference_server.iv)
        ciphertext_b64 = b64url(ciphertext)
        tag = hmac.new(hmac_key, f"{iv_b64}.{ciphertext_b64}".encode("utf-8"), hashlib.sha256).digest()
        envelope = reference_server.wrap(f"{iv_b64}.{ciphertext_b64}.{b64url(tag)}")

        with pytest.raises(DecryptionError):
            extract_certificate(envelope, fixed_login_key_pair.private_key)

    def test_decrypt_rejects_partial_block(self):
        with pytest.raises(DecryptionError):
            decrypt_aes256_cbc(b"\x00" * 15, b"\x00" * 32, b"\x00" * 16)

    def test_plaintext_to_certificate(self):
        assert plaintext_to_certificate(b"MIIB") == "MIIB"
        assert plaintext_to_certificate(b"\x30\x80\xff") == "MID/"


# Built independently of the test fixtures for the login key
# LOGIN_KEY_SCALAR, the server key SERVER_KEY_SCALAR and iv 00..0f
KNOWN_ENVELOPE = (
    "eyJhbGciOiJFQ0RILUVTIn0"
    ".eyJ2IjoxfQ"
    ".MFkwEwYHKoZIzj0CAQYIKoZIzj0DAQcDQgAEWiWzDByt9gdce4f5y1V5ADPvsWjKhkplGiBU4wLD3A7ONVspn5osziRvBw2fVdnlC2wCodZvgq85kN70tdnQbg"
    ".QUFFQ0F3UUZCZ2NJQ1FvTERBME9Edy56VW9BX09NcGEzQkJBNlpDRkRhU0VMQURjdHJIVU82UXFHZkliazNMd3RQVXE5S0xkYjJsYmtsV2YzSHBIQTNyLjZNOEt0N25saTRhNlk5V1puU0drTFVYTmNnaXZEUkNXa1hmTzhqY0RjRTQ"
    ".c2VydmVyLXNpZ25hdHVyZQ"
)
KNOWN_PAYLOAD = (
    "AAECAwQFBgcICQoLDA0ODw"
    ".zUoA_OMpa3BBA6ZCFDaSELADctrHUO6QqGfIbk3LwtPUq9KLdb2lbklWf3HpHA3r"
    ".6M8Kt7nli4a6Y9WZnSGkLUXNcgivDRCWkXfO8jcDcE4"
)


class TestKnownEnvelope:
    """Fixed keys, fixed iv, literal envelope"""

    def test_extract(self, fixed_login_key_pair):
        assert extract_certificate(KNOWN_ENVELOPE, fixed_login_key_pair.private_key) == TEST_CERTIFICATE

    def test_parse(self):
        parsed = EncryptedCertificateEnvelope.parse(KNOWN_ENVELOPE)

        assert parsed.iv == bytes(range(16))
        assert len(parsed.ciphertext) == 48
        assert parsed.authenticated_data == KNOWN_PAYLOAD.rsplit(".", 1)[0].encode("utf-8")

    def test_fixture_server_agrees(self, reference_server, fixed_login_key_pair):
        envelope = reference_server.encrypt_certificate(TEST_CERTIFICATE, fixed_login_key_pair.public_key)
        assert envelope == KNOWN_ENVELOPE
