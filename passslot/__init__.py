"""
PassSlot SDK - Client library for the PassSlot wallet pass API.

Layers:
- core: Typed records, local validation and the HTTP call layer
- sdk: High-level PassSlot client with pass and template operations
- cli: Command-line interface
"""

__version__ = "0.3.0"

from passslot.core.client import (  # noqa: E402
    APIError,
    PassSlotError,
    TransportError,
    UnauthorizedError,
    ValidationError,
    ValidationFailedError,
)
from passslot.core.types import Pass, Restrictions, Template  # noqa: E402
from passslot.sdk import PassSlot  # noqa: E402

__all__ = [
    "APIError",
    "Pass",
    "PassSlot",
    "PassSlotError",
    "Restrictions",
    "Template",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
    "ValidationFailedError",
]
