"""
Accessy Proxy Blueprint

Server-side routes used by the web client: the browser cannot call the
Accessy API directly (CORS, Host header), so requests are relayed through
these endpoints to an AccessyTransport.
"""

from flask import Blueprint, current_app, jsonify, request

from api.client import ApiError, DecodingError, NetworkError
from config.accessy_config import ACCESSY_CONSTANTS
from protocols.messages.types import EnrollRequest

BEARER_PREFIX = "Bearer "


def error_response(error: ApiError):
    """JSON error body with the upstream status (502 when there is none)."""
    if isinstance(error, (NetworkError, DecodingError)) or error.status_code is None:
        status = 502
    else:
        status = error.status_code
    return jsonify({"error": str(error)}), status


def bearer_token(required_prefix: bool = True):
    """Token from the Authorization header, or None when absent/invalid."""
    auth_header = request.headers.get("authorization")
    if not auth_header:
        return None
    if auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX):] or None
    return None if required_prefix else auth_header


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def create_accessy_blueprint(transport):
    """Create Flask blueprint relaying the web client's API calls."""
    bp = Blueprint("accessy", __name__)

    bp.transport = transport

    @bp.errorhandler(ApiError)
    def handle_api_error(e):
        current_app.logger.warning(f"Upstream error: {e}")
        return error_response(e)

    @bp.route("/auth/recover", methods=["POST"])
    def request_verification():
        """
        POST /auth/recover
        Body: {"msisdn": "..."}
        """
        data = json_body()
        if not data or not data.get("msisdn"):
            return jsonify({"error": "msisdn is required"}), 400

        response = bp.transport.request_verification(data["msisdn"])
        return jsonify({"verificationCodeId": response.verificationCodeId})

    @bp.route("/auth/mobile-device/enroll/token", methods=["POST"])
    def submit_verification_code():
        """
        POST /auth/mobile-device/enroll/token
        Body: {"code": "...", "id": "..."}
        """
        data = json_body()
        if not data or not data.get("code") or not data.get("id"):
            return jsonify({"error": "code and id are required"}), 400

        response = bp.transport.submit_verification_code(data["code"], data["id"])
        return jsonify(
            {"token": response.token, "recoveryKeyRequired": response.recoveryKeyRequired}
        )

    @bp.route("/auth/mobile-device/enroll", methods=["POST"])
    def enroll_device():
        """
        POST /auth/mobile-device/enroll
        Headers: Authorization: Bearer <enroll token>
        Body: {"deviceName", "recoveryKey", "csrForSigning", "csrForLogin"}
        """
        enroll_token = bearer_token()
        if enroll_token is None:
            return jsonify({"error": "Missing or invalid authorization header"}), 401

        data = json_body()
        if data is None:
            return jsonify({"error": "JSON body is required"}), 400

        try:
            enroll_request = EnrollRequest(
                deviceName=data.get("deviceName") or "",
                recoveryKey=data.get("recoveryKey"),
                csrForSigning=data.get("csrForSigning") or "",
                csrForLogin=data.get("csrForLogin") or "",
                appName=ACCESSY_CONSTANTS.APP_NAME,
            )
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        response = bp.transport.enroll_device(enroll_request, enroll_token)
        return jsonify(
            {
                "certificateForLogin": response.certificateForLogin,
                "certificateForSigning": response.certificateForSigning,
            }
        )

    @bp.route("/auth/mobile-device/login", methods=["POST"])
    def login():
        """
        POST /auth/mobile-device/login
        Body: proof token as text/plain
        """
        login_proof = request.get_data(as_text=True).strip()
        if not login_proof:
            return jsonify({"error": "Login proof is required"}), 400

        response = bp.transport.login(login_proof)
        return jsonify({"auth_token": response.auth_token})

    @bp.route("/asset/my-asset-publication", methods=["GET"])
    def get_doors():
        auth_token = bearer_token(required_prefix=False)
        if auth_token is None:
            return jsonify({"error": "Missing authorization header"}), 401

        response = bp.transport.get_doors(auth_token)
        return jsonify(
            {
                "items": [
                    {
                        "id": door.publicationId,
                        "name": door.name,
                        "favorite": door.favorite,
                        "asset": {
                            "id": door.assetId,
                            "name": door.assetName,
                            "operations": [
                                {"id": op.id, "name": op.name} for op in door.operations
                            ],
                        },
                    }
                    for door in response.items
                ],
                "totalItems": response.totalItems,
            }
        )

    @bp.route("/asset/asset-operation/<operation_id>/invoke", methods=["PUT"])
    def unlock_door(operation_id):
        """
        PUT /asset/asset-operation/<operation_id>/invoke
        Headers: Authorization: Bearer <auth token>, x-axs-proof: <proof>
        """
        auth_token = bearer_token(required_prefix=False)
        if auth_token is None:
            return jsonify({"error": "Missing authorization header"}), 401

        proof = request.headers.get(ACCESSY_CONSTANTS.PROOF_HEADER)
        if not proof:
            return jsonify({"error": f"Missing {ACCESSY_CONSTANTS.PROOF_HEADER} header"}), 401

        bp.transport.unlock_door(operation_id, proof, auth_token)
        return jsonify({"status": "success"})

    return bp
