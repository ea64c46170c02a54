"""
Accessy API Package

HTTP client for the Accessy API and the Flask proxy used by the web client.

Author: Cerve Project
Date: October 2026
"""

__version__ = "1.0.0"
__author__ = "Cerve Project"

from .client import (
    AccessyApiClient,
    ApiError,
    DecodingError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from .flask_app_factory import create_app

__all__ = [
    "AccessyApiClient",
    "ApiError",
    "DecodingError",
    "ForbiddenError",
    "NetworkError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "UnauthorizedError",
    "create_app",
]
