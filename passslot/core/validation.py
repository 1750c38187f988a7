"""
Local validation run before any request is sent.

Covers image descriptors and image files, template id formatting and
template restriction records.
"""

import logging
import math
import mimetypes
import numbers
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from passslot.core.client import ValidationError
from passslot.core.types import Restrictions, SkippedImage

logger = logging.getLogger(__name__)

# Image types supported by PassSlot and Wallet
IMAGE_TYPES = ("icon", "logo", "strip", "thumbnail", "background", "footer")
RETINA_SUFFIX = "2x"

# image/jpeg is what every MIME database reports for .jpg files
IMAGE_MIME_TYPES = ("image/png", "image/jpg", "image/jpeg", "image/gif")

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


@dataclass(frozen=True)
class ImageFile:
    """A validated local image ready to be attached to a multipart request."""

    image_type: str
    path: Path
    mime_type: str
    content: bytes = field(default=b"", repr=False)

    def part(self) -> tuple[str, bytes, str]:
        """httpx file tuple for this image."""
        return (self.path.name, self.content, self.mime_type)


def is_image_type(image_type: str) -> bool:
    """Check an image type, accepting the retina "2x" variant of each type."""
    if image_type in IMAGE_TYPES:
        return True
    return image_type.endswith(RETINA_SUFFIX) and image_type[: -len(RETINA_SUFFIX)] in IMAGE_TYPES


def detect_mime_type(path: Path) -> str | None:
    return mimetypes.guess_type(path.name)[0]


def check_image(image_type: str, path: str | Path) -> ImageFile:
    """
    Validate an image before it is attached to a request.

    Args:
        image_type: Image type, optionally with the "2x" suffix
        path: Local image file

    Returns:
        ImageFile describing the attachment

    Raises:
        ValidationError: Unknown image type, missing or unreadable file, or unsupported MIME type

    """
    if not is_image_type(image_type):
        raise ValidationError(f"Image type {image_type} not available", details={"image_type": image_type})

    image_path = Path(path)
    if not image_path.is_file():
        raise ValidationError(f"No such image {image_path}", details={"path": str(image_path)})

    mime_type = detect_mime_type(image_path)
    if mime_type not in IMAGE_MIME_TYPES:
        raise ValidationError(
            f"Image mime type {mime_type} not supported",
            details={"path": str(image_path), "mime_type": mime_type},
        )

    try:
        content = image_path.read_bytes()
    except OSError as e:
        raise ValidationError(
            f"Cannot read image {image_path}: {e.strerror or e}", details={"path": str(image_path)}
        ) from e

    return ImageFile(image_type=image_type, path=image_path, mime_type=mime_type, content=content)


def collect_images(images: dict[str, str | Path]) -> tuple[list[ImageFile], list[SkippedImage]]:
    """
    Validate a set of optional images, dropping the invalid ones.

    Returns:
        Tuple of (accepted images, skipped images with reasons)

    """
    accepted: list[ImageFile] = []
    skipped: list[SkippedImage] = []
    for image_type, path in images.items():
        try:
            accepted.append(check_image(image_type, path))
        except ValidationError as e:
            logger.warning("%s. Image will be ignored", e.message)
            skipped.append(SkippedImage(image_type=image_type, path=str(path), reason=e.message))
    return accepted, skipped


def format_template_id(template_id: Any) -> str:
    """
    Format a template id for use in a resource path.

    Numeric ids are rendered as plain integers (6008004.0 -> "6008004"),
    never with a fraction or an exponent.
    """
    if isinstance(template_id, bool):
        raise ValidationError(f"Invalid template id: {template_id!r}")
    if isinstance(template_id, numbers.Integral):
        return str(int(template_id))
    if isinstance(template_id, numbers.Real):
        if not math.isfinite(template_id):
            raise ValidationError(f"Invalid template id: {template_id!r}")
        return str(int(template_id))
    if isinstance(template_id, str) and template_id.strip():
        return template_id.strip()
    raise ValidationError(f"Invalid template id: {template_id!r}")


def is_utc_timestamp(value: str) -> bool:
    """Check for an exact YYYY-MM-DDTHH:MM:SSZ timestamp that is a real calendar date."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        parsed = datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return parsed.strftime(DATE_FORMAT) == value


def _is_count(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return value >= 0 and float(value).is_integer()


def validate_restrictions(restrictions: Restrictions) -> None:
    """
    Validate a restriction record.

    Raises:
        ValidationError: On the first invalid field

    """
    for name, value in (
        ("quantityRestriction", restrictions.quantity_restriction),
        ("redemptionRestriction", restrictions.redemption_restriction),
    ):
        if value is not None and not _is_count(value):
            raise ValidationError(f"{name} must be a non-negative number", details={name: value})

    if restrictions.password_protection is not None and not isinstance(restrictions.password_protection, str):
        raise ValidationError("passwordProtection must be a string")

    if not isinstance(restrictions.sharing_restriction, bool):
        raise ValidationError(
            "sharingRestriction must be a boolean",
            details={"sharingRestriction": restrictions.sharing_restriction},
        )

    date = restrictions.date_restriction
    if date is not None and not is_utc_timestamp(date):
        raise ValidationError(
            "dateRestriction must be an ISO-8601 UTC timestamp (YYYY-MM-DDTHH:MM:SSZ)",
            details={"dateRestriction": date},
        )


def restriction_fields(restrictions: Restrictions) -> dict[str, tuple[None, str]]:
    """Multipart form fields for a restriction record. Unset fields are omitted."""
    fields: dict[str, tuple[None, str]] = {}
    for name, value in restrictions.to_dict().items():
        if value is None:
            continue
        if isinstance(value, bool):
            text = "true" if value else "false"
        elif isinstance(value, numbers.Real):
            text = str(int(value))
        else:
            text = str(value)
        fields[name] = (None, text)
    return fields
