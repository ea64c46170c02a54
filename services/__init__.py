"""
Accessy Services Package

Enrollment, login and door operations built on the protocol layer.
"""

from .enrollment_service import (
    CertificateExtractionError,
    EnrollmentError,
    EnrollmentService,
    create_demo_credentials,
)
from .doors_service import (
    DoorNotFoundError,
    DoorsService,
    DoorsServiceError,
    NoOperationsError,
    find_nearest_door,
)

__all__ = [
    "CertificateExtractionError",
    "EnrollmentError",
    "EnrollmentService",
    "create_demo_credentials",
    "DoorNotFoundError",
    "DoorsService",
    "DoorsServiceError",
    "NoOperationsError",
    "find_nearest_door",
]
