"""
Enrollment Service

Drives the device enrollment flow against the Accessy API.

Flow:
1. request_verification_code(phone)         -> SMS, verificationCodeId
2. submit_verification_code(code, id)       -> enroll JWT (user, device ids)
3. validate_recovery_key(key, token)        -> only if recoveryKeyRequired
4. enroll_device_and_login(name, key, tok)  -> two key pairs, two CSRs,
   enrollment, login certificate decryption, login with a proof token,
   key and credentials persistence
5. login(credentials)                       -> fresh auth token

Demo phone numbers short-circuit the API and yield demo credentials.

Author: Cerve Project
Date: October 2026
"""

from typing import Optional

from config.accessy_config import ACCESSY_CONSTANTS, DEMO_DATA
from interfaces.accessy_interfaces import AccessyTransport, CredentialsStore, KeyStore
from protocols.certificates.csr import build_csr
from protocols.core.keys import KeyPair, generate_device_key_pairs
from protocols.core.types import KeyPurpose
from protocols.messages.jwt import decode_payload
from protocols.messages.types import Credentials, EnrollmentToken, EnrollRequest
from protocols.security.certificate_decryptor import extract_certificate
from protocols.security.proof_of_possession import create_proof
from utils.logger import AccessyLogger


class EnrollmentError(Exception):
    """Enrollment could not be completed."""


class CertificateExtractionError(EnrollmentError):
    def __init__(self, message: str = "No certificate could be recovered from the enrollment response"):
        super().__init__(message)


def create_demo_credentials() -> Credentials:
    return Credentials(
        authToken=DEMO_DATA.DEMO_AUTH_TOKEN,
        deviceId=DEMO_DATA.DEMO_DEVICE_ID,
        userId=DEMO_DATA.DEMO_USER_ID,
        certBase64=DEMO_DATA.DEMO_CERT_BASE64,
        isDemoMode=True,
    )


class EnrollmentService:
    """
    Service for authentication operations.

    Args:
        transport: Accessy API transport
        key_store: Where the login and signing private keys are persisted
        credentials_store: Optional store; when given, credentials are saved
            after enrollment and after each login
        app_name: Value of `appName` sent at enrollment
    """

    def __init__(
        self,
        transport: AccessyTransport,
        key_store: KeyStore,
        credentials_store: Optional[CredentialsStore] = None,
        app_name: str = ACCESSY_CONSTANTS.APP_NAME,
    ):
        self.transport = transport
        self.key_store = key_store
        self.credentials_store = credentials_store
        self.app_name = app_name
        self.logger = AccessyLogger.get_logger("EnrollmentService")

    # ========================================================================
    # VERIFICATION
    # ========================================================================

    def request_verification_code(self, phone_number: str) -> str:
        """Request an SMS verification code; returns the verificationCodeId."""
        if DEMO_DATA.is_demo_phone_number(phone_number):
            self.logger.info("Demo phone number, skipping SMS verification")
            return DEMO_DATA.DEMO_VERIFICATION_CODE_ID

        response = self.transport.request_verification(phone_number)
        self.logger.info("Verification code requested")
        return response.verificationCodeId

    def submit_verification_code(self, code: str, verification_code_id: str) -> EnrollmentToken:
        """
        Exchange the SMS code for an enrollment token.

        Raises:
            MalformedTokenError: If the returned token is not a readable JWT
        """
        if verification_code_id == DEMO_DATA.DEMO_VERIFICATION_CODE_ID:
            return EnrollmentToken(
                token=DEMO_DATA.DEMO_AUTH_TOKEN,
                recoveryKeyRequired=False,
                userId=DEMO_DATA.DEMO_USER_ID,
                deviceId=DEMO_DATA.DEMO_DEVICE_ID,
            )

        response = self.transport.submit_verification_code(code, verification_code_id)
        payload = decode_payload(response.token)

        enrollment_token = EnrollmentToken(
            token=response.token,
            recoveryKeyRequired=response.recoveryKeyRequired,
            userId=payload.user_id,
            deviceId=payload.deviceId or "",
        )
        self.logger.info(
            f"Enrollment token received for device {enrollment_token.deviceId or '<unknown>'} "
            f"(recovery key required: {enrollment_token.recoveryKeyRequired})"
        )
        return enrollment_token

    def validate_recovery_key(self, recovery_key: str, enroll_token: str) -> bool:
        response = self.transport.validate_recovery_key(recovery_key, enroll_token)
        self.logger.info(f"Recovery key valid: {response.valid}")
        return response.valid

    # ========================================================================
    # ENROLLMENT
    # ========================================================================

    def enroll_device_and_login(
        self,
        device_name: str,
        recovery_key: Optional[str],
        enroll_token: EnrollmentToken,
    ) -> Credentials:
        """
        Enroll this device and log in.

        Returns:
            Credentials; the private keys are saved in the key store under
            `credentials.login_key_identifier` / `signing_key_identifier`

        Raises:
            CsrBuildError: CSR construction failed
            CertificateExtractionError: The login certificate envelope was
                not recognized
            IntegrityError / DecryptionError: The envelope was tampered with
                or could not be decrypted
            ApiError: Transport failures
        """
        if enroll_token.token == DEMO_DATA.DEMO_AUTH_TOKEN:
            credentials = create_demo_credentials()
            self._persist(credentials)
            self.logger.info("Demo mode enrollment completed")
            return credentials

        signing_key_pair, login_key_pair = generate_device_key_pairs()

        csr_for_signing = build_csr(signing_key_pair, enroll_token.userId, enroll_token.deviceId)
        csr_for_login = build_csr(login_key_pair, enroll_token.userId, enroll_token.deviceId)

        request = EnrollRequest(
            deviceName=device_name,
            recoveryKey=recovery_key,
            csrForSigning=csr_for_signing,
            csrForLogin=csr_for_login,
            appName=self.app_name,
        )
        enroll_response = self.transport.enroll_device(request, enroll_token.token)

        cert_base64 = extract_certificate(
            enroll_response.certificateForLogin, login_key_pair.private_key
        )
        if cert_base64 is None:
            self.logger.error("❌ Login certificate could not be extracted")
            raise CertificateExtractionError()

        login_proof = create_proof(cert_base64, login_key_pair.private_key)
        login_response = self.transport.login(login_proof)

        # The login token may carry an updated certificate
        jwt_payload = decode_payload(login_response.auth_token)
        final_cert = jwt_payload.publicKeyForLogin or cert_base64

        credentials = Credentials(
            authToken=login_response.auth_token,
            deviceId=enroll_token.deviceId,
            userId=enroll_token.userId,
            certBase64=final_cert,
        )

        self.key_store.save_key(login_key_pair, credentials.login_key_identifier)
        self.key_store.save_key(signing_key_pair, credentials.signing_key_identifier)
        self._persist(credentials)

        self.logger.info(f"✅ Device {credentials.deviceId} enrolled and logged in")
        return credentials

    # ========================================================================
    # LOGIN
    # ========================================================================

    def load_login_key(self, credentials: Credentials) -> KeyPair:
        return self.key_store.load_key(credentials.login_key_identifier, KeyPurpose.LOGIN)

    def login(self, credentials: Credentials) -> Credentials:
        """Log in again with a fresh proof; returns credentials with the new token."""
        if credentials.isDemoMode:
            return credentials

        login_key_pair = self.load_login_key(credentials)
        proof = create_proof(credentials.certBase64, login_key_pair.private_key)
        login_response = self.transport.login(proof)

        jwt_payload = decode_payload(login_response.auth_token)
        refreshed = Credentials(
            authToken=login_response.auth_token,
            deviceId=credentials.deviceId,
            userId=credentials.userId,
            certBase64=jwt_payload.publicKeyForLogin or credentials.certBase64,
        )
        self._persist(refreshed)

        self.logger.info(f"Logged in as device {refreshed.deviceId}")
        return refreshed

    def logout(self) -> None:
        """Forget the stored credentials and device keys."""
        if self.credentials_store is not None:
            self.credentials_store.delete()

    def _persist(self, credentials: Credentials) -> None:
        if self.credentials_store is not None:
            self.credentials_store.save(credentials)
