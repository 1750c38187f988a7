"""
PassSlot SDK - High-level client with typed operations.

This layer maps each pass and template operation to a resource path and
payload, and decodes the result. Built on top of the core APIClient.
"""

import builtins
import json
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from passslot.core.client import APIClient, ClientConfig
from passslot.core.types import ListResult, Pass, PassImage, Restrictions, Template
from passslot.core.validation import (
    check_image,
    collect_images,
    format_template_id,
    restriction_fields,
    validate_restrictions,
)


def _segment(value: Any) -> str:
    """Percent-encode a single path segment."""
    return quote(str(value), safe="")


def _succeeded(result: Any) -> bool:
    """An empty response body means the operation succeeded."""
    return not result


def _as_dict(result: Any) -> dict[str, Any]:
    return result if isinstance(result, dict) else {}


class PassSlot:
    """
    High-level PassSlot API client.

    Example:
        client = PassSlot("<app key>")

        # Create a pass from a template
        values = {"Name": "John", "Level": "Platinum", "Balance": 20.50}
        images = {"thumbnail": "john.png"}
        pass_ = client.passes.create(6008004, values, images)

        pkpass = client.passes.download(pass_)
        url = client.passes.get_url(pass_)

    """

    def __init__(
        self,
        app_key: str | None = None,
        base_url: str | None = None,
        debug: bool | None = None,
        timeout: float | None = None,
        ca_bundle: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the PassSlot client.

        Args:
            app_key: PassSlot app key (or PASSSLOT_APP_KEY env var)
            base_url: API base URL (or PASSSLOT_BASE_URL env var)
            debug: Log every request at INFO level (or PASSSLOT_DEBUG env var)
            timeout: Request timeout in seconds (or PASSSLOT_TIMEOUT env var)
            ca_bundle: CA bundle for TLS verification (or PASSSLOT_CA_BUNDLE env var)
            transport: Optional httpx transport, mostly for tests

        """
        config = ClientConfig.from_env(
            app_key=app_key,
            base_url=base_url,
            debug=debug,
            timeout=timeout,
            ca_bundle=ca_bundle,
        )
        self._client = APIClient(config, transport=transport)

        # Sub-clients for different resources
        self.passes = PassOperations(self._client)
        self.templates = TemplateOperations(self._client)

    @property
    def config(self) -> ClientConfig:
        """Get the client configuration."""
        return self._client.config


# =============================================================================
# Pass Operations
# =============================================================================


class PassOperations:
    """Operations on passes."""

    def __init__(self, client: APIClient):
        self._client = client

    @staticmethod
    def _path(pass_: Pass, *parts: Any) -> str:
        path = f"/passes/{_segment(pass_.pass_type_identifier)}/{_segment(pass_.serial_number)}"
        for part in parts:
            path += f"/{_segment(part)}"
        return path

    def _create(
        self,
        path: str,
        values: dict[str, Any] | None,
        images: dict[str, str | Path] | None,
    ) -> Pass:
        values = values or {}
        if not images:
            return Pass.from_dict(_as_dict(self._client.post(path, values)))

        accepted, skipped = collect_images(images)
        files: dict[str, Any] = {image.image_type: image.part() for image in accepted}
        files["values"] = ("values.json", json.dumps(values), "application/json")

        created = Pass.from_dict(_as_dict(self._client.post(path, files, multipart=True)))
        created.skipped_images = skipped
        return created

    def create(
        self,
        template_id: int | float | str,
        values: dict[str, Any] | None = None,
        images: dict[str, str | Path] | None = None,
    ) -> Pass:
        """
        Create a pass from a template.

        Images are keyed by image type; retina images use the "2x" suffix
        (e.g. {"icon": "icon.png", "icon2x": "icon@2x.png"}). Invalid images
        are skipped and listed on the returned pass's `skipped_images`.

        Args:
            template_id: Template ID
            values: Values for the template placeholders
            images: Optional images for the pass

        Returns:
            The created Pass

        """
        path = f"/templates/{_segment(format_template_id(template_id))}/pass"
        return self._create(path, values, images)

    def create_with_name(
        self,
        template_name: str,
        values: dict[str, Any] | None = None,
        images: dict[str, str | Path] | None = None,
    ) -> Pass:
        """Same as create() but addresses the template by name."""
        path = f"/templates/names/{_segment(template_name)}/pass"
        return self._create(path, values, images)

    def list(self, pass_type: str | None = None) -> ListResult[Pass]:
        """
        List created passes.

        Args:
            pass_type: Optional filter on the pass type identifier

        """
        path = "/passes"
        if pass_type:
            path += f"/{_segment(pass_type)}"
        return ListResult.from_response(self._client.get(path), Pass.from_dict)

    def download(self, pass_: Pass) -> bytes:
        """Download the .pkpass file of a pass."""
        return self._client.get(self._path(pass_))

    def get(self, pass_type: str, serial_number: str) -> Pass:
        """
        Get an existing pass.

        Args:
            pass_type: Pass type identifier
            serial_number: Serial number

        Returns:
            Pass with the full pass.json document on `pass_json`

        """
        result = self._client.get(self._path(Pass(pass_type, serial_number), "passjson"))
        fetched = Pass.from_pass_json(_as_dict(result))
        fetched.pass_type_identifier = fetched.pass_type_identifier or pass_type
        fetched.serial_number = fetched.serial_number or serial_number
        return fetched

    def get_values(self, pass_: Pass) -> dict[str, Any]:
        """Get the placeholder values of a pass."""
        return self._client.get(self._path(pass_, "values"))

    def get_value(self, pass_: Pass, name: str) -> Any:
        """Get a single placeholder value of a pass."""
        result = self._client.get(self._path(pass_, "values", name))
        if isinstance(result, dict) and "value" in result:
            return result["value"]
        return result

    def update_value(self, pass_: Pass, name: str, value: Any) -> None:
        """Update a single placeholder value of a pass."""
        self._client.put(self._path(pass_, "values", name), {"value": value})

    def update_values(self, pass_: Pass, values: dict[str, Any]) -> None:
        """Update the placeholder values of a pass."""
        self._client.put(self._path(pass_, "values"), values)

    def get_status(self, pass_: Pass) -> str:
        """Get the status of a pass."""
        result = self._client.get(self._path(pass_, "status"))
        if isinstance(result, dict):
            return result.get("status", "")
        return result.decode("utf-8") if isinstance(result, bytes) else str(result)

    def update_status(self, pass_: Pass, status: str) -> str:
        """Update the status of a pass."""
        result = self._client.put(self._path(pass_, "status"), {"status": status})
        if isinstance(result, dict) and result.get("status"):
            return result["status"]
        return status

    def push(self, pass_: Pass) -> bool:
        """Send a push update to the devices holding a pass."""
        return _succeeded(self._client.post(self._path(pass_, "push")))

    def delete(self, pass_: Pass) -> bool:
        """Delete a pass."""
        return _succeeded(self._client.delete(self._path(pass_)))

    def get_url(self, pass_: Pass) -> str:
        """
        Get the URL of the pass preview page.

        Uses the URL returned at creation when present, otherwise asks the API.
        Redirecting a user to it is left to the caller.
        """
        if pass_.url:
            return pass_.url
        result = self._client.get(self._path(pass_, "url"))
        if isinstance(result, dict):
            return result.get("url", "")
        return result.decode("utf-8").strip() if isinstance(result, bytes) else str(result)

    def email(self, pass_: Pass, email: str) -> bool:
        """Email a pass to the given address."""
        return _succeeded(self._client.post(self._path(pass_, "email"), {"email": email}))

    def list_images(self, pass_: Pass, image_type: str | None = None) -> builtins.list[PassImage]:
        """List the images of a pass, optionally only those of one type."""
        parts = ["images", image_type] if image_type else ["images"]
        return ListResult.from_response(self._client.get(self._path(pass_, *parts)), PassImage.from_dict).data

    def get_image(self, pass_: Pass, image_type: str, resolution: str) -> bytes:
        """Download one image of a pass."""
        return self._client.get(self._path(pass_, "images", image_type, resolution))

    def save_image(self, pass_: Pass, image_type: str, resolution: str, path: str | Path) -> Any:
        """
        Create or replace one image of a pass.

        Raises:
            ValidationError: Invalid image type, missing or unreadable file, or unsupported MIME type

        """
        image = check_image(image_type, path)
        return self._client.post(
            self._path(pass_, "images", image_type, resolution),
            {"image": image.part()},
            multipart=True,
        )

    def delete_image(self, pass_: Pass, image_type: str, resolution: str) -> bool:
        """Delete one image of a pass."""
        return _succeeded(self._client.delete(self._path(pass_, "images", image_type, resolution)))

    def delete_images(self, pass_: Pass, image_type: str | None = None) -> bool:
        """Delete all images of a pass, optionally only those of one type."""
        parts = ["images", image_type] if image_type else ["images"]
        return _succeeded(self._client.delete(self._path(pass_, *parts)))


# =============================================================================
# Template Operations
# =============================================================================


class TemplateOperations:
    """Operations on templates."""

    def __init__(self, client: APIClient):
        self._client = client

    @staticmethod
    def _path(template_id: int | float | str, *parts: Any) -> str:
        path = f"/templates/{_segment(format_template_id(template_id))}"
        for part in parts:
            if part:
                path += f"/{_segment(part)}"
        return path

    def list(self) -> ListResult[Template]:
        """List all templates."""
        return ListResult.from_response(self._client.get("/templates"), Template.from_dict)

    def get(self, template_id: int | float | str) -> Template:
        """Get a template by ID."""
        return Template.from_dict(_as_dict(self._client.get(self._path(template_id))))

    def list_images(
        self,
        template_id: int | float | str,
        image_type: str | None = None,
        resolution: str | None = None,
    ) -> builtins.list[PassImage]:
        """List the images of a template, optionally filtered by type and resolution."""
        result = self._client.get(self._path(template_id, "images", image_type, resolution))
        if isinstance(result, dict) and "data" not in result:
            result = [result]
        return ListResult.from_response(result, PassImage.from_dict).data

    def get_image(self, template_id: int | float | str, image_type: str, resolution: str) -> bytes:
        """Download one image of a template."""
        return self._client.get(self._path(template_id, "images", image_type, resolution))

    def save_image(self, template_id: int | float | str, image_type: str, resolution: str, path: str | Path) -> Any:
        """
        Create or replace one image of a template.

        Raises:
            ValidationError: Invalid image type, missing or unreadable file, or unsupported MIME type

        """
        image = check_image(image_type, path)
        return self._client.post(
            self._path(template_id, "images", image_type, resolution),
            {"image": image.part()},
            multipart=True,
        )

    def delete_image(self, template_id: int | float | str, image_type: str, resolution: str) -> bool:
        """Delete one image of a template."""
        return _succeeded(self._client.delete(self._path(template_id, "images", image_type, resolution)))

    def delete_images(
        self,
        template_id: int | float | str,
        image_type: str | None = None,
        resolution: str | None = None,
    ) -> bool:
        """Delete all images of a template, optionally filtered by type and resolution."""
        return _succeeded(self._client.delete(self._path(template_id, "images", image_type, resolution)))

    def get_restrictions(self, template_id: int | float | str) -> Restrictions:
        """Get the distribution restrictions of a template."""
        result = self._client.get(self._path(template_id, "restrictions"))
        return Restrictions.from_dict(_as_dict(result))

    def save_restrictions(self, template_id: int | float | str, restrictions: Restrictions) -> Restrictions | bool:
        """
        Replace the distribution restrictions of a template.

        Returns:
            The stored Restrictions when the API echoes them, else True

        Raises:
            ValidationError: Invalid restriction record (nothing is sent)

        """
        validate_restrictions(restrictions)
        result = self._client.put(
            self._path(template_id, "restrictions"),
            restriction_fields(restrictions),
            multipart=True,
        )
        if isinstance(result, dict):
            return Restrictions.from_dict(result)
        return _succeeded(result)
