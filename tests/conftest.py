"""Pytest configuration - loads .env for the live smoke test and provides a mock transport."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

from passslot.sdk import PassSlot

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

BASE_URL = "https://api.test.local/v1"
APP_KEY = "test-app-key"

# Smallest valid PNG and GIF headers are enough for MIME detection by extension
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
GIF_BYTES = b"GIF89a" + b"\x00" * 16


class Recorder:
    """Collects requests sent through an httpx.MockTransport and replays canned responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda _r: httpx.Response(204)

    def respond(self, status: int = 200, json: object = None, content: bytes | str | None = None,
                headers: dict[str, str] | None = None) -> None:
        """Answer every following request with the same response."""

        def handler(_request: httpx.Request) -> httpx.Response:
            if json is not None:
                return httpx.Response(status, json=json, headers=headers)
            return httpx.Response(status, content=content or b"", headers=headers)

        self.handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep PASSSLOT_* variables from a developer's shell out of unit tests."""
    for name in ("PASSSLOT_BASE_URL", "PASSSLOT_DEBUG", "PASSSLOT_TIMEOUT", "PASSSLOT_CA_BUNDLE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def client(recorder: Recorder) -> PassSlot:
    return PassSlot(app_key=APP_KEY, base_url=BASE_URL, transport=httpx.MockTransport(recorder))


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "thumbnail.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def unreadable_png(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A PNG that exists but cannot be read, as with missing file permissions."""
    path = tmp_path / "locked.png"
    path.write_bytes(PNG_BYTES)
    read_bytes = Path.read_bytes

    def deny(self: Path) -> bytes:
        if self.name == path.name:
            raise PermissionError(13, "Permission denied", str(self))
        return read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", deny)
    return path


@pytest.fixture
def gif_file(tmp_path: Path) -> Path:
    path = tmp_path / "logo.gif"
    path.write_bytes(GIF_BYTES)
    return path
