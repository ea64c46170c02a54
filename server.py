"""
Accessy Proxy Server Launcher.

Runs the Flask proxy that relays the web client's calls to the Accessy API.

Usage:
    python server.py                              # defaults (127.0.0.1:5000)
    python server.py --port 8080 --debug
    python server.py --config proxy_config.json   # JSON overrides of DEFAULT_CONFIG
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from api.flask_app_factory import create_app
from config.accessy_config import ACCESSY_CONSTANTS, ACCESSY_PATHS
from utils.config_utils import read_json
from utils.logger import AccessyLogger

DEFAULT_CONFIG = {
    "host": "127.0.0.1",
    "port": 5000,
    "debug": False,
    "api_base_url": ACCESSY_CONSTANTS.API_BASE_URL,
    "api_timeout": ACCESSY_CONSTANTS.DEFAULT_TIMEOUT,
    "cors_origins": "*",
    "log_level": "INFO",
    "log_dir": str(ACCESSY_PATHS.LOGS),
    "environment": "development",
}


def load_config(config_path=None):
    """
    Load configuration from a JSON file on top of DEFAULT_CONFIG.

    Raises:
        SystemExit: If the file exists but is not a JSON object
    """
    config = DEFAULT_CONFIG.copy()

    if config_path:
        user_config = read_json(config_path)
        if user_config is None:
            if Path(config_path).exists():
                print(f"❌ Invalid configuration file: {config_path}")
                sys.exit(1)
            print(f"⚠️  Config file not found: {config_path}, using defaults")
        elif not isinstance(user_config, dict):
            print(f"❌ Configuration must be a JSON object: {config_path}")
            sys.exit(1)
        else:
            config.update(user_config)
            print(f" Configuration loaded from: {config_path}")

    return config


def main():
    parser = argparse.ArgumentParser(
        description="Accessy proxy API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python server.py
  python server.py --host 0.0.0.0 --port 8080
  python server.py --config proxy_config.json --debug
        """
    )
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("--host", help="Host to bind (overrides config)")
    parser.add_argument("--port", type=int, help="Port to use (overrides config)")
    parser.add_argument("--api-base-url", help="Upstream Accessy API (overrides config)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    args = parser.parse_args()

    config = load_config(args.config)

    # Apply CLI overrides
    if args.host:
        config["host"] = args.host
    if args.port:
        config["port"] = args.port
    if args.api_base_url:
        config["api_base_url"] = args.api_base_url
    if args.debug:
        config["debug"] = True
        config["log_level"] = "DEBUG"

    logger = AccessyLogger.get_logger("server")
    app = create_app(config=config)

    logger.info(f"Proxy listening on http://{config['host']}:{config['port']}")
    app.run(host=config["host"], port=int(config["port"]), debug=config["debug"])


if __name__ == "__main__":
    main()
