"""
Flask App Factory for the Accessy Proxy API

Builds the server that relays the web client's calls to the Accessy API
and keeps its cookie session.

Author: Cerve Project
Date: October 2026
"""

from typing import Any, Dict, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from config.accessy_config import ACCESSY_CONSTANTS
from interfaces.accessy_interfaces import AccessyTransport
from utils.logger import AccessyLogger, parse_level


def create_app(
    transport: Optional[AccessyTransport] = None, config: Optional[Dict[str, Any]] = None
) -> Flask:
    """
    Factory function to create the proxy Flask app.

    Args:
        transport: Upstream transport (default: AccessyApiClient on
            config["api_base_url"])
        config: Configuration dictionary

    Returns:
        Flask: Configured Flask application
    """
    app = Flask(__name__)

    default_config = {
        "api_base_url": ACCESSY_CONSTANTS.API_BASE_URL,
        "api_timeout": ACCESSY_CONSTANTS.DEFAULT_TIMEOUT,
        "cors_origins": "*",  # "*" for dev, list of domains for production
        "log_level": "INFO",
        "log_dir": None,  # None: console only
        "max_content_length": 1 * 1024 * 1024,  # 1MB
        "environment": "development",  # "development" or "production"
    }

    if config:
        default_config.update(config)

    cors_origins = default_config["cors_origins"]
    if default_config["environment"] == "production" and cors_origins == "*":
        app.logger.warning("⚠️  SECURITY: CORS set to '*' in production! Specify allowed domains.")

    app.config.update(
        {
            "MAX_CONTENT_LENGTH": default_config["max_content_length"],
            "ENVIRONMENT": default_config["environment"],
            "API_BASE_URL": default_config["api_base_url"],
        }
    )

    CORS(
        app,
        resources={r"/api/*": {"origins": cors_origins}},
        allow_headers=["Content-Type", "Authorization", ACCESSY_CONSTANTS.PROOF_HEADER],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        supports_credentials=False,
    )

    AccessyLogger.configure(level=default_config["log_level"], log_dir=default_config["log_dir"])
    app.logger.setLevel(parse_level(default_config["log_level"]))

    if transport is None:
        from .client import AccessyApiClient

        transport = AccessyApiClient(
            base_url=default_config["api_base_url"], timeout=default_config["api_timeout"]
        )

    app.config["TRANSPORT"] = transport

    app.logger.info("=" * 80)
    app.logger.info("Starting Accessy proxy API")
    app.logger.info(f"Upstream: {app.config['API_BASE_URL']}")
    app.logger.info("=" * 80)

    @app.route("/health")
    def health_check():
        return jsonify({"status": "ok", "upstream": app.config["API_BASE_URL"]})

    from .blueprints.accessy_bp import create_accessy_blueprint
    from .blueprints.session_bp import create_session_blueprint

    app.register_blueprint(create_accessy_blueprint(transport), url_prefix="/api/accessy")
    app.register_blueprint(create_session_blueprint(), url_prefix="/api/session")

    app.logger.info("Registered proxy endpoints:")
    app.logger.info("  POST   /api/accessy/auth/recover")
    app.logger.info("  POST   /api/accessy/auth/mobile-device/enroll/token")
    app.logger.info("  POST   /api/accessy/auth/mobile-device/enroll")
    app.logger.info("  POST   /api/accessy/auth/mobile-device/login")
    app.logger.info("  GET    /api/accessy/asset/my-asset-publication")
    app.logger.info("  PUT    /api/accessy/asset/asset-operation/<operation_id>/invoke")
    app.logger.info("  POST   /api/session")
    app.logger.info("  DELETE /api/session")

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "The requested endpoint does not exist"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(413)
    def payload_too_large(e):
        return jsonify({"error": "Request body too large"}), 413

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f"Internal server error: {e}")
        return jsonify({"error": "An unexpected error occurred"}), 500

    return app
