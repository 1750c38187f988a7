"""
Core layer - Typed records, local validation and the HTTP call layer.

This layer provides:
- Typed dataclasses for API responses
- Low-level HTTP client with auth, body encoding and error classification
"""

from passslot.core.client import (
    APIClient,
    APIError,
    ClientConfig,
    PassSlotError,
    TransportError,
    UnauthorizedError,
    ValidationError,
    ValidationFailedError,
)
from passslot.core.types import (
    FieldError,
    ListResult,
    Pass,
    PassImage,
    Restrictions,
    SkippedImage,
    Template,
)

__all__ = [
    "APIClient",
    "APIError",
    "ClientConfig",
    "FieldError",
    "ListResult",
    "Pass",
    "PassImage",
    "PassSlotError",
    "Restrictions",
    "SkippedImage",
    "Template",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
    "ValidationFailedError",
]
