"""
Pytest Configuration and Shared Fixtures

Provides shared fixtures for all tests:
- Deterministic and fresh P-256 device key pairs
- A reference implementation of the server side of the protocol
  (encrypted certificate envelopes, JWTs)
- An in-memory AccessyTransport backed by the reference server
- File-backed key and credential stores in temporary directories

Author: Cerve Project
Date: October 2026
"""

import base64
import hashlib
import hmac
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cryptography import x509
from cryptography.hazmat.primitives import padding, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from interfaces.accessy_interfaces import AccessyTransport
from protocols.certificates.csr import decode_csr_envelope
from protocols.core.keys import KeyPair, generate
from protocols.core.types import KeyPurpose
from protocols.messages.types import (
    Door,
    DoorsResponse,
    EnrollResponse,
    EnrollTokenResponse,
    LoginResponse,
    ValidateRecoveryResponse,
    VerifyResponse,
)
from utils.credentials_store import FileCredentialsStore
from utils.key_store import FileKeyStore

# Fixed scalars so that envelopes built in tests are reproducible
LOGIN_KEY_SCALAR = 0x1F2E3D4C5B6A79880123456789ABCDEFFEDCBA98765432100011223344556677
SERVER_KEY_SCALAR = 0x0A1B2C3D4E5F60718293A4B5C6D7E8F90112233445566778899AABBCCDDEEFF0
FIXED_IV = bytes(range(16))

TEST_CERTIFICATE = "MIIBdevice-certificate-for-login=="
TEST_USER_ID = "user-123"
TEST_DEVICE_ID = "device-456"


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def make_jwt(claims: dict) -> str:
    """Unsigned compact JWT (the client never verifies signatures)."""
    header = b64url(json.dumps({"alg": "ES256", "typ": "JWT"}).encode("utf-8"))
    payload = b64url(json.dumps(claims).encode("utf-8"))
    return f"{header}.{payload}.{b64url(b'signature')}"


class ReferenceServer:
    """
    Server side of the encrypted certificate envelope.

    encrypt-then-MAC:
        material = SHA-512(ECDH(server_ephemeral, device_login_public))
        ct       = AES-256-CBC(material[:32], iv, PKCS7(certificate))
        tag      = HMAC-SHA256(material[32:], "{b64url(iv)}.{b64url(ct)}")
    """

    def __init__(self, server_private_key=None, iv=FIXED_IV):
        self.server_private_key = server_private_key or ec.derive_private_key(
            SERVER_KEY_SCALAR, ec.SECP256R1()
        )
        self.iv = iv

    @property
    def server_spki(self) -> bytes:
        return self.server_private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def key_material(self, recipient_public_key) -> bytes:
        shared = self.server_private_key.exchange(ec.ECDH(), recipient_public_key)
        return hashlib.sha512(shared).digest()

    def encrypt_payload(self, plaintext: bytes, recipient_public_key):
        """Returns (iv_b64, ciphertext_b64, hmac_b64)."""
        material = self.key_material(recipient_public_key)
        aes_key, hmac_key = material[:32], material[32:]

        padder = padding.PKCS7(128).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(self.iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        iv_b64 = b64url(self.iv)
        ciphertext_b64 = b64url(ciphertext)
        tag = hmac.new(hmac_key, f"{iv_b64}.{ciphertext_b64}".encode("utf-8"), hashlib.sha256).digest()
        return iv_b64, ciphertext_b64, b64url(tag)

    def wrap(self, payload_text: str, server_spki: bytes = None) -> str:
        """Five-segment envelope around an inner "{iv}.{ct}.{hmac}" payload."""
        spki = self.server_spki if server_spki is None else server_spki
        return ".".join(
            [
                b64url(b'{"alg":"ECDH-ES"}'),
                b64url(b'{"v":1}'),
                b64url(spki),
                b64url(payload_text.encode("utf-8")),
                b64url(b"server-signature"),
            ]
        )

    def encrypt_certificate(self, certificate, recipient_public_key) -> str:
        if isinstance(certificate, str):
            certificate = certificate.encode("utf-8")
        payload = ".".join(self.encrypt_payload(certificate, recipient_public_key))
        return self.wrap(payload)


class FakeTransport(AccessyTransport):
    """
    In-memory Accessy API driven by the reference server.

    Enrollment decrypts nothing: it reads the public key out of the login CSR
    and encrypts `certificate` for it, exactly like the real server.
    """

    def __init__(self, server: ReferenceServer, certificate: str = TEST_CERTIFICATE,
                 public_key_for_login: str = None, recovery_key_required: bool = False):
        self.server = server
        self.certificate = certificate
        self.public_key_for_login = public_key_for_login
        self.recovery_key_required = recovery_key_required
        self.calls = []
        self.enroll_requests = []
        self.login_proofs = []
        self.unlocks = []
        self.favorites = []
        self.doors = [
            {
                "id": "door-1",
                "name": "Front Door",
                "asset": {
                    "id": "asset-1",
                    "name": "Front",
                    "operations": [{"id": "op-1", "name": "Unlock"}],
                    "position2d": {"latitude": 57.70, "longitude": 11.97},
                },
                "favorite": False,
            },
            {
                "id": "door-2",
                "name": "Back Door",
                "asset": {"id": "asset-2", "name": "Back", "operations": []},
                "favorite": True,
            },
        ]

    def request_verification(self, msisdn):
        self.calls.append(("request_verification", msisdn))
        return VerifyResponse(verificationCodeId="vc-1")

    def submit_verification_code(self, code, verification_code_id):
        self.calls.append(("submit_verification_code", code, verification_code_id))
        token = make_jwt({"jti": TEST_USER_ID, "deviceId": TEST_DEVICE_ID, "iat": 1700000000})
        return EnrollTokenResponse(token=token, recoveryKeyRequired=self.recovery_key_required)

    def validate_recovery_key(self, recovery_key, enroll_token):
        self.calls.append(("validate_recovery_key", recovery_key, enroll_token))
        return ValidateRecoveryResponse(valid=recovery_key == "valid-recovery-key")

    def enroll_device(self, request, enroll_token):
        self.calls.append(("enroll_device", enroll_token))
        self.enroll_requests.append(request)

        _, login_der = decode_csr_envelope(request.csrForLogin)
        login_public_key = x509.load_der_x509_csr(login_der).public_key()
        _, signing_der = decode_csr_envelope(request.csrForSigning)
        signing_public_key = x509.load_der_x509_csr(signing_der).public_key()

        return EnrollResponse(
            certificateForLogin=self.server.encrypt_certificate(self.certificate, login_public_key),
            certificateForSigning=self.server.encrypt_certificate(self.certificate, signing_public_key),
        )

    def login(self, login_proof):
        self.calls.append(("login",))
        self.login_proofs.append(login_proof)
        claims = {"jti": TEST_USER_ID, "deviceId": TEST_DEVICE_ID}
        if self.public_key_for_login is not None:
            claims["publicKeyForLogin"] = self.public_key_for_login
        return LoginResponse(auth_token=make_jwt(claims))

    def get_doors(self, auth_token):
        self.calls.append(("get_doors", auth_token))
        return DoorsResponse(items=[Door.from_dict(item) for item in self.doors])

    def unlock_door(self, operation_id, proof, auth_token):
        self.calls.append(("unlock_door", operation_id))
        self.unlocks.append((operation_id, proof, auth_token))

    def set_favorite(self, publication_id, is_favorite, auth_token):
        self.calls.append(("set_favorite", publication_id, is_favorite))
        self.favorites.append((publication_id, is_favorite))


@pytest.fixture(scope="session")
def fixed_login_key_pair():
    """Deterministic login key pair (same scalar in every run)."""
    return KeyPair(
        private_key=ec.derive_private_key(LOGIN_KEY_SCALAR, ec.SECP256R1()),
        purpose=KeyPurpose.LOGIN,
    )


@pytest.fixture
def login_key_pair():
    return generate(KeyPurpose.LOGIN)


@pytest.fixture
def signing_key_pair():
    return generate(KeyPurpose.SIGNING)


@pytest.fixture
def reference_server():
    return ReferenceServer()


@pytest.fixture
def fake_transport(reference_server):
    return FakeTransport(reference_server)


@pytest.fixture
def jwt_factory():
    return make_jwt


@pytest.fixture
def key_store(tmp_path):
    return FileKeyStore(tmp_path / "keys")


@pytest.fixture
def credentials_store(tmp_path, key_store):
    return FileCredentialsStore(tmp_path / "credentials" / "credentials.json", key_store)
