"""
Accessy HTTP API Client

`requests`-based implementation of AccessyTransport.

Endpoints:
    POST   /auth/recover                                   verification SMS
    POST   /auth/mobile-device/enroll/token                SMS code -> enroll JWT
    POST   /auth/validate-recovery-key                     (Bearer enroll token)
    POST   /auth/mobile-device/enroll                      (Bearer enroll token, v2)
    POST   /auth/mobile-device/login                       proof as text/plain
    GET    /asset/my-asset-publication?page_size=100       (Bearer auth token)
    PUT    /asset/asset-operation/{id}/invoke              (Bearer + x-axs-proof)
    PUT    /asset/my-asset-publication/{id}/favorite       (Bearer) mark favorite
    DELETE /asset/my-asset-publication/{id}/favorite       (Bearer) unmark

Status mapping: 2xx ok, 401 UnauthorizedError, 403 ForbiddenError,
404 NotFoundError, 429 RateLimitedError, 5xx ServerError, anything else
ApiError(status_code). Connection failures and timeouts raise NetworkError,
undecodable bodies DecodingError.

Author: Cerve Project
Date: October 2026
"""

from typing import Any, Dict, Optional, Type

import requests

from config.accessy_config import ACCESSY_CONSTANTS, get_default_headers
from interfaces.accessy_interfaces import AccessyTransport
from protocols.messages.types import (
    DoorsResponse,
    EnrollRequest,
    EnrollResponse,
    EnrollTokenRequest,
    EnrollTokenResponse,
    LoginResponse,
    ValidateRecoveryRequest,
    ValidateRecoveryResponse,
    VerifyRequest,
    VerifyResponse,
)
from utils.logger import AccessyLogger


# ============================================================================
# ERRORS
# ============================================================================


class ApiError(Exception):
    """Base API error; `status_code` is None for non-HTTP failures."""

    default_message: Optional[str] = None

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        if message is None:
            message = self.default_message or (
                f"Request failed with code {status_code}" if status_code is not None
                else "Request failed"
            )
        super().__init__(message)


class UnauthorizedError(ApiError):
    default_message = "Session expired. Please log in again"


class ForbiddenError(ApiError):
    default_message = "Access denied"


class NotFoundError(ApiError):
    default_message = "Resource not found"


class RateLimitedError(ApiError):
    default_message = "Too many requests. Please try again later"


class ServerError(ApiError):
    default_message = "Server error. Please try again"


class NetworkError(ApiError):
    default_message = "Network connection failed. Please check your internet"


class DecodingError(ApiError):
    default_message = "Invalid response from server"


_STATUS_ERRORS = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitedError,
}


def error_for_status(status_code: int) -> Optional[ApiError]:
    """
    Map an HTTP status to the matching ApiError (None for 2xx).

    Examples:
        >>> error_for_status(204) is None
        True
        >>> type(error_for_status(503)).__name__
        'ServerError'
        >>> str(error_for_status(418))
        'Request failed with code 418'
    """
    if 200 <= status_code <= 299:
        return None
    if status_code in _STATUS_ERRORS:
        return _STATUS_ERRORS[status_code](status_code=status_code)
    if 500 <= status_code <= 599:
        return ServerError(status_code=status_code)
    return ApiError(status_code=status_code)


# ============================================================================
# CLIENT
# ============================================================================


class AccessyApiClient(AccessyTransport):
    """
    HTTP client for the Accessy API.

    Args:
        base_url: API root (default https://api.accessy.se)
        session: Optional pre-configured requests.Session
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = ACCESSY_CONSTANTS.API_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = ACCESSY_CONSTANTS.DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = AccessyLogger.get_logger("AccessyApiClient")

    # ========================================================================
    # AUTHENTICATION ENDPOINTS
    # ========================================================================

    def request_verification(self, msisdn: str) -> VerifyResponse:
        body = VerifyRequest(msisdn=msisdn).to_dict()
        response = self._request("POST", "/auth/recover", get_default_headers(), json_body=body)
        return self._decode(response, VerifyResponse)

    def submit_verification_code(self, code: str, verification_code_id: str) -> EnrollTokenResponse:
        body = EnrollTokenRequest(code=code, id=verification_code_id).to_dict()
        response = self._request(
            "POST", "/auth/mobile-device/enroll/token", get_default_headers(), json_body=body
        )
        return self._decode(response, EnrollTokenResponse)

    def validate_recovery_key(self, recovery_key: str, enroll_token: str) -> ValidateRecoveryResponse:
        body = ValidateRecoveryRequest(recoveryKey=recovery_key).to_dict()
        headers = self._authorized_headers(enroll_token)
        response = self._request("POST", "/auth/validate-recovery-key", headers, json_body=body)
        return self._decode(response, ValidateRecoveryResponse)

    def enroll_device(self, request: EnrollRequest, enroll_token: str) -> EnrollResponse:
        headers = self._authorized_headers(enroll_token, accept=ACCESSY_CONSTANTS.ACCEPT_V2)
        response = self._request(
            "POST", "/auth/mobile-device/enroll", headers, json_body=request.to_dict()
        )
        self.logger.info(f"Device enrolled: {request.deviceName}")
        return self._decode(response, EnrollResponse)

    def login(self, login_proof: str) -> LoginResponse:
        headers = get_default_headers()
        headers["content-type"] = "text/plain"
        response = self._request(
            "POST", "/auth/mobile-device/login", headers, data=login_proof.encode("utf-8")
        )
        return self._decode(response, LoginResponse)

    # ========================================================================
    # DOOR ENDPOINTS
    # ========================================================================

    def get_doors(self, auth_token: str) -> DoorsResponse:
        endpoint = f"/asset/my-asset-publication?page_size={ACCESSY_CONSTANTS.DOORS_PAGE_SIZE}"
        response = self._request("GET", endpoint, self._authorized_headers(auth_token))
        return self._decode(response, DoorsResponse)

    def unlock_door(self, operation_id: str, proof: str, auth_token: str) -> None:
        headers = self._authorized_headers(auth_token)
        headers[ACCESSY_CONSTANTS.PROOF_HEADER] = proof
        self._request(
            "PUT", f"/asset/asset-operation/{operation_id}/invoke", headers, data=b"{}"
        )
        self.logger.info(f"Operation invoked: {operation_id}")

    def set_favorite(self, publication_id: str, is_favorite: bool, auth_token: str) -> None:
        method = "PUT" if is_favorite else "DELETE"
        self._request(
            method,
            f"/asset/my-asset-publication/{publication_id}/favorite",
            self._authorized_headers(auth_token),
        )

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    @staticmethod
    def _authorized_headers(token: str, accept: Optional[str] = None) -> Dict[str, str]:
        headers = get_default_headers(accept=accept)
        headers["authorization"] = f"Bearer {token}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        headers: Dict[str, str],
        json_body: Optional[Dict[str, Any]] = None,
        data: Optional[bytes] = None,
    ) -> requests.Response:
        url = self.base_url + endpoint
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json_body,
                data=data,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{method} {endpoint} failed: {e}")
            raise NetworkError() from e

        error = error_for_status(response.status_code)
        if error is not None:
            self.logger.warning(f"{method} {endpoint} -> HTTP {response.status_code}")
            raise error

        self.logger.debug(f"{method} {endpoint} -> HTTP {response.status_code}")
        return response

    def _decode(self, response: requests.Response, message_type: Type):
        try:
            data = response.json()
        except ValueError as e:
            raise DecodingError() from e

        try:
            return message_type.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Unexpected {message_type.__name__} body: {e}")
            raise DecodingError() from e
