"""
Core types for PassSlot API responses.

These dataclasses provide type safety and IDE support for API responses.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


# =============================================================================
# Errors
# =============================================================================


@dataclass(frozen=True)
class FieldError:
    """A single field failure from a 422 response."""

    field: str
    reasons: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldError":
        """Create from API response dict."""
        reasons = data.get("reasons") or []
        return cls(
            field=str(data.get("field", "")),
            reasons=[str(r) for r in reasons] if isinstance(reasons, list) else [str(reasons)],
        )

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "reasons": self.reasons}


# =============================================================================
# List results
# =============================================================================


@dataclass
class ListResult(Generic[T]):
    """A list endpoint response."""

    data: list[T]

    @property
    def total_count(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[T]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    @classmethod
    def from_response(cls, result: Any, parser: Callable[[dict[str, Any]], T]) -> "ListResult[T]":
        """Parse a JSON array (or an object wrapping one under "data")."""
        if isinstance(result, dict):
            result = result.get("data") or []
        if not isinstance(result, list):
            result = []
        return cls(data=[parser(item) for item in result if isinstance(item, dict)])


# =============================================================================
# Pass Types
# =============================================================================


@dataclass
class SkippedImage:
    """An image left out of a pass creation request, and why."""

    image_type: str
    path: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"image_type": self.image_type, "path": self.path, "reason": self.reason}


@dataclass
class Pass:
    """
    A wallet pass, addressed by (pass type identifier, serial number).

    Construct one directly to address an existing pass:

        Pass("pass.slot.coupon", "b6c3d1a0")
    """

    pass_type_identifier: str
    serial_number: str
    url: str | None = None
    template_id: int | str | None = None
    description: str | None = None
    pass_json: dict[str, Any] | None = None
    skipped_images: list[SkippedImage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pass":
        """Create from API response dict (pass description or pass.json)."""
        return cls(
            pass_type_identifier=data.get("passTypeIdentifier", ""),
            serial_number=data.get("serialNumber", ""),
            url=data.get("url"),
            template_id=data.get("templateId"),
            description=data.get("description"),
        )

    @classmethod
    def from_pass_json(cls, data: dict[str, Any]) -> "Pass":
        """Create from a full pass.json document, keeping the document."""
        result = cls.from_dict(data)
        result.pass_json = data
        return result

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "passTypeIdentifier": self.pass_type_identifier,
            "serialNumber": self.serial_number,
        }
        if self.url:
            result["url"] = self.url
        if self.template_id is not None:
            result["templateId"] = self.template_id
        if self.description:
            result["description"] = self.description
        return result


# =============================================================================
# Template Types
# =============================================================================


@dataclass
class Template:
    """A pass template."""

    id: int | str
    name: str = ""
    pass_type_identifier: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Template":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            pass_type_identifier=data.get("passType") or data.get("passTypeIdentifier"),
            description=data.get("description"),
        )


# =============================================================================
# Image Types
# =============================================================================


@dataclass
class PassImage:
    """An image description of a pass or a template."""

    type: str
    resolution: str | None = None
    url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PassImage":
        """Create from API response dict."""
        return cls(
            type=data.get("type", ""),
            resolution=data.get("resolution"),
            url=data.get("url"),
        )


# =============================================================================
# Restriction Types
# =============================================================================


@dataclass
class Restrictions:
    """Distribution restrictions of a template."""

    quantity_restriction: int | None = None
    redemption_restriction: int | None = None
    password_protection: str | None = None
    date_restriction: str | None = None
    sharing_restriction: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Restrictions":
        """Create from API response dict."""
        return cls(
            quantity_restriction=data.get("quantityRestriction"),
            redemption_restriction=data.get("redemptionRestriction"),
            password_protection=data.get("passwordProtection"),
            date_restriction=data.get("dateRestriction"),
            sharing_restriction=data.get("sharingRestriction", False),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "quantityRestriction": self.quantity_restriction,
            "redemptionRestriction": self.redemption_restriction,
            "passwordProtection": self.password_protection,
            "dateRestriction": self.date_restriction,
            "sharingRestriction": self.sharing_restriction,
        }
