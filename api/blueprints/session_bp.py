"""
Session Blueprint

Keeps the web client's session in cookies: the auth token, certificate and
identifiers are HttpOnly; only the phone number is readable by scripts.
"""

import json

from flask import Blueprint, jsonify, request

SESSION_MAX_AGE_SECONDS = 60 * 60 * 24 * 30  # 30 days

HTTP_ONLY_COOKIES = ("auth_token", "cert_base64", "device_id", "user_id")
SESSION_DATA_COOKIE = "session_data"


def create_session_blueprint():
    """Create Flask blueprint for the cookie session."""
    bp = Blueprint("session", __name__)

    @bp.route("", methods=["POST"])
    def store_session():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "JSON body is required"}), 400

        missing = [name for name in HTTP_ONLY_COOKIES if not data.get(name)]
        if missing:
            return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), 400

        response = jsonify({"success": True})
        for name in HTTP_ONLY_COOKIES:
            response.set_cookie(
                name,
                data[name],
                path="/",
                httponly=True,
                secure=True,
                samesite="Strict",
                max_age=SESSION_MAX_AGE_SECONDS,
            )
        response.set_cookie(
            SESSION_DATA_COOKIE,
            json.dumps({"phone_number": data.get("phone_number")}),
            path="/",
            httponly=False,
            secure=True,
            samesite="Strict",
            max_age=SESSION_MAX_AGE_SECONDS,
        )
        return response

    @bp.route("", methods=["DELETE"])
    def clear_session():
        response = jsonify({"success": True})
        for name in HTTP_ONLY_COOKIES + (SESSION_DATA_COOKIE,):
            response.delete_cookie(name, path="/")
        return response

    return bp
