"""
SDK tests - every pass and template operation maps to the right request.

Requests are recorded through httpx.MockTransport.
"""

import json
from pathlib import Path

import pytest
from conftest import Recorder

from passslot.core.client import ValidationError
from passslot.core.types import Pass, Restrictions
from passslot.sdk import PassSlot

COUPON = Pass("pass.slot.coupon", "b6c3d1a0")
PASS_PATH = "/v1/passes/pass.slot.coupon/b6c3d1a0"
CREATED = {"passTypeIdentifier": "pass.slot.coupon", "serialNumber": "b6c3d1a0", "url": "https://d.pslot.io/x"}


# =============================================================================
# Pass creation
# =============================================================================


def test_create_without_images_posts_json(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(201, json=CREATED)

    created = client.passes.create(6008004.0, {"Name": "John", "Balance": 20.50})

    assert recorder.last.method == "POST"
    assert recorder.last.url.path == "/v1/templates/6008004/pass"
    assert recorder.last.headers["Content-Type"] == "application/json"
    assert json.loads(recorder.last.content) == {"Name": "John", "Balance": 20.50}
    assert created.pass_type_identifier == "pass.slot.coupon"
    assert created.serial_number == "b6c3d1a0"
    assert created.url == "https://d.pslot.io/x"
    assert created.skipped_images == []


def test_create_with_locations(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(201, json=CREATED)
    values = {
        "Locations": [{"latitude": "44.833775", "longitude": "-0.6343934", "relevantText": "Somewhere"}],
    }

    client.passes.create(6008004, values)

    assert json.loads(recorder.last.content) == values


def test_create_with_images_posts_multipart(client: PassSlot, recorder: Recorder, png_file: Path) -> None:
    recorder.respond(201, json=CREATED)

    created = client.passes.create(6008004, {"Name": "John"}, {"thumbnail": png_file})

    content_type = recorder.last.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data")
    body = recorder.last.content
    assert b'name="thumbnail"; filename="thumbnail.png"' in body
    assert b"Content-Type: image/png" in body
    assert b'name="values"' in body
    assert b"Content-Type: application/json" in body
    assert b'{"Name": "John"}' in body
    assert created.skipped_images == []


def test_create_skips_bad_images(client: PassSlot, recorder: Recorder, png_file: Path, tmp_path: Path) -> None:
    recorder.respond(201, json=CREATED)

    created = client.passes.create(
        6008004,
        {"Name": "John"},
        {"thumbnail": png_file, "icon": tmp_path / "missing.png", "banner": png_file},
    )

    body = recorder.last.content
    assert b'name="thumbnail"' in body
    assert b'name="icon"' not in body
    assert b'name="banner"' not in body
    assert sorted(s.image_type for s in created.skipped_images) == ["banner", "icon"]


def test_create_skips_unreadable_images(
    client: PassSlot, recorder: Recorder, png_file: Path, unreadable_png: Path
) -> None:
    recorder.respond(201, json=CREATED)

    created = client.passes.create(6008004, {"Name": "John"}, {"thumbnail": png_file, "icon": unreadable_png})

    body = recorder.last.content
    assert b'name="thumbnail"' in body
    assert b'name="icon"' not in body
    assert [s.image_type for s in created.skipped_images] == ["icon"]
    assert "Cannot read image" in created.skipped_images[0].reason


def test_create_with_name_encodes_the_name(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(201, json=CREATED)

    client.passes.create_with_name("Member Card/Gold", {"Name": "John"})

    assert recorder.last.url.raw_path == b"/v1/templates/names/Member%20Card%2FGold/pass"


# =============================================================================
# Pass lookups
# =============================================================================


def test_list_passes(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json=[CREATED, {"passTypeIdentifier": "pass.slot.coupon", "serialNumber": "c2"}])

    passes = client.passes.list()

    assert recorder.last.url.path == "/v1/passes"
    assert passes.total_count == 2
    assert [p.serial_number for p in passes] == ["b6c3d1a0", "c2"]


def test_list_passes_by_type(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json=[])

    assert len(client.passes.list("pass.slot.coupon")) == 0
    assert recorder.last.url.path == "/v1/passes/pass.slot.coupon"


def test_download_returns_pkpass_bytes(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, content=b"PK\x03\x04", headers={"Content-Type": "application/vnd.apple.pkpass"})

    assert client.passes.download(COUPON) == b"PK\x03\x04"
    assert recorder.last.url.path == PASS_PATH


def test_get_pass_reads_pass_json(client: PassSlot, recorder: Recorder) -> None:
    pass_json = {"passTypeIdentifier": "pass.slot.coupon", "serialNumber": "b6c3d1a0", "formatVersion": 1}
    recorder.respond(200, json=pass_json)

    fetched = client.passes.get("pass.slot.coupon", "b6c3d1a0")

    assert recorder.last.url.path == f"{PASS_PATH}/passjson"
    assert fetched.pass_json == pass_json
    assert fetched.serial_number == "b6c3d1a0"


def test_values(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json={"Name": "John"})
    assert client.passes.get_values(COUPON) == {"Name": "John"}
    assert recorder.last.url.path == f"{PASS_PATH}/values"

    recorder.respond(200, json={"value": "John"})
    assert client.passes.get_value(COUPON, "Name") == "John"
    assert recorder.last.url.path == f"{PASS_PATH}/values/Name"


def test_update_value(client: PassSlot, recorder: Recorder) -> None:
    client.passes.update_value(COUPON, "Balance", 15)

    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == f"{PASS_PATH}/values/Balance"
    assert json.loads(recorder.last.content) == {"value": 15}


def test_update_values(client: PassSlot, recorder: Recorder) -> None:
    client.passes.update_values(COUPON, {"Name": "Jane", "Level": "Gold"})

    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == f"{PASS_PATH}/values"
    assert json.loads(recorder.last.content) == {"Name": "Jane", "Level": "Gold"}


def test_status(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json={"status": "active"})
    assert client.passes.get_status(COUPON) == "active"
    assert recorder.last.url.path == f"{PASS_PATH}/status"

    recorder.respond(204)
    assert client.passes.update_status(COUPON, "voided") == "voided"
    assert recorder.last.method == "PUT"
    assert json.loads(recorder.last.content) == {"status": "voided"}


def test_push_and_delete_report_empty_body_as_success(client: PassSlot, recorder: Recorder) -> None:
    assert client.passes.push(COUPON) is True
    assert recorder.last.method == "POST"
    assert recorder.last.url.path == f"{PASS_PATH}/push"

    assert client.passes.delete(COUPON) is True
    assert recorder.last.method == "DELETE"
    assert recorder.last.url.path == PASS_PATH


def test_delete_with_unexpected_body_is_not_success(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, content=b"queued", headers={"Content-Type": "text/plain"})

    assert client.passes.delete(COUPON) is False


def test_email(client: PassSlot, recorder: Recorder) -> None:
    assert client.passes.email(COUPON, "john@example.com") is True
    assert recorder.last.url.path == f"{PASS_PATH}/email"
    assert json.loads(recorder.last.content) == {"email": "john@example.com"}


# =============================================================================
# Pass URL
# =============================================================================


def test_get_url_uses_embedded_url(client: PassSlot, recorder: Recorder) -> None:
    assert client.passes.get_url(Pass.from_dict(CREATED)) == "https://d.pslot.io/x"
    assert recorder.requests == []


def test_get_url_asks_the_api(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json={"url": "https://d.pslot.io/y"})

    assert client.passes.get_url(COUPON) == "https://d.pslot.io/y"
    assert recorder.last.url.path == f"{PASS_PATH}/url"


# =============================================================================
# Pass images
# =============================================================================


def test_list_pass_images(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json=[{"type": "logo", "resolution": "normal", "url": "https://img/logo"}])

    images = client.passes.list_images(COUPON, "logo")

    assert recorder.last.url.path == f"{PASS_PATH}/images/logo"
    assert images[0].type == "logo"
    assert images[0].resolution == "normal"


def test_get_pass_image(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, content=b"\x89PNG", headers={"Content-Type": "image/png"})

    assert client.passes.get_image(COUPON, "thumbnail", "normal") == b"\x89PNG"
    assert recorder.last.url.path == f"{PASS_PATH}/images/thumbnail/normal"


def test_save_pass_image(client: PassSlot, recorder: Recorder, png_file: Path) -> None:
    client.passes.save_image(COUPON, "thumbnail", "normal", png_file)

    assert recorder.last.method == "POST"
    assert recorder.last.url.path == f"{PASS_PATH}/images/thumbnail/normal"
    assert b'name="image"; filename="thumbnail.png"' in recorder.last.content


def test_save_pass_image_missing_file_sends_nothing(client: PassSlot, recorder: Recorder, tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        client.passes.save_image(COUPON, "icon", "normal", tmp_path / "missing.png")

    assert recorder.requests == []


def test_save_pass_image_unreadable_file_sends_nothing(
    client: PassSlot, recorder: Recorder, unreadable_png: Path
) -> None:
    with pytest.raises(ValidationError, match="Cannot read image"):
        client.passes.save_image(COUPON, "icon", "normal", unreadable_png)

    assert recorder.requests == []


def test_save_pass_image_bad_type_sends_nothing(client: PassSlot, recorder: Recorder, png_file: Path) -> None:
    with pytest.raises(ValidationError):
        client.passes.save_image(COUPON, "banner", "normal", png_file)

    assert recorder.requests == []


def test_delete_pass_images(client: PassSlot, recorder: Recorder) -> None:
    assert client.passes.delete_image(COUPON, "logo", "normal") is True
    assert recorder.last.url.path == f"{PASS_PATH}/images/logo/normal"

    assert client.passes.delete_images(COUPON) is True
    assert recorder.last.url.path == f"{PASS_PATH}/images"

    assert client.passes.delete_images(COUPON, "strip") is True
    assert recorder.last.url.path == f"{PASS_PATH}/images/strip"
    assert {r.method for r in recorder.requests} == {"DELETE"}


# =============================================================================
# Templates
# =============================================================================


def test_list_templates(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json=[{"id": 6008004, "name": "Coupon", "passType": "pass.slot.coupon"}])

    templates = client.templates.list()

    assert recorder.last.url.path == "/v1/templates"
    assert templates.data[0].id == 6008004
    assert templates.data[0].pass_type_identifier == "pass.slot.coupon"


def test_get_template(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(200, json={"id": 6008004, "name": "Coupon"})

    template = client.templates.get(6008004.0)

    assert recorder.last.url.path == "/v1/templates/6008004"
    assert template.name == "Coupon"


def test_template_images(client: PassSlot, recorder: Recorder, gif_file: Path) -> None:
    recorder.respond(200, json=[{"type": "logo", "resolution": "normal"}])
    assert client.templates.list_images(6008004)[0].type == "logo"
    assert recorder.last.url.path == "/v1/templates/6008004/images"

    recorder.respond(200, json={"type": "logo", "resolution": "normal"})
    assert client.templates.list_images(6008004, "logo", "normal")[0].resolution == "normal"
    assert recorder.last.url.path == "/v1/templates/6008004/images/logo/normal"

    recorder.respond(200, content=b"GIF89a", headers={"Content-Type": "image/gif"})
    assert client.templates.get_image(6008004, "logo", "normal") == b"GIF89a"

    recorder.respond(204)
    client.templates.save_image(6008004, "logo", "normal", gif_file)
    assert recorder.last.method == "POST"
    assert b"Content-Type: image/gif" in recorder.last.content

    assert client.templates.delete_image(6008004, "logo", "normal") is True
    assert recorder.last.url.path == "/v1/templates/6008004/images/logo/normal"

    assert client.templates.delete_images(6008004, "logo") is True
    assert recorder.last.url.path == "/v1/templates/6008004/images/logo"


def test_get_restrictions(client: PassSlot, recorder: Recorder) -> None:
    recorder.respond(
        200,
        json={
            "quantityRestriction": 100,
            "redemptionRestriction": None,
            "passwordProtection": None,
            "dateRestriction": "2023-01-15T10:30:00Z",
            "sharingRestriction": True,
        },
    )

    restrictions = client.templates.get_restrictions(6008004)

    assert recorder.last.url.path == "/v1/templates/6008004/restrictions"
    assert restrictions.quantity_restriction == 100
    assert restrictions.date_restriction == "2023-01-15T10:30:00Z"
    assert restrictions.sharing_restriction is True


def test_save_restrictions_is_multipart_put(client: PassSlot, recorder: Recorder) -> None:
    result = client.templates.save_restrictions(
        6008004, Restrictions(quantity_restriction=100, date_restriction="2023-01-15T10:30:00Z")
    )

    assert result is True
    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == "/v1/templates/6008004/restrictions"
    assert recorder.last.headers["Content-Type"].startswith("multipart/form-data")
    body = recorder.last.content
    assert b'name="quantityRestriction"' in body
    assert b"2023-01-15T10:30:00Z" in body
    assert b'name="redemptionRestriction"' not in body


def test_save_invalid_restrictions_sends_nothing(client: PassSlot, recorder: Recorder) -> None:
    with pytest.raises(ValidationError):
        client.templates.save_restrictions(6008004, Restrictions(date_restriction="2023-13-01T00:00:00Z"))

    assert recorder.requests == []
