"""
Blueprints Package

Flask blueprints of the proxy API.
"""

__all__ = [
    "create_accessy_blueprint",
    "create_session_blueprint",
]
