"""Shared pytest fixtures for MR Render Studio tests."""

import asyncio
import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from renderstudio.core.config import RenderStudioConfig
from renderstudio.core.encoding import encode_image_bytes
from renderstudio.core.errors import MissingCredential
from renderstudio.core.presets import PromptCatalog, load_catalog
from renderstudio.core.session import SessionController


class FakeGenerationClient:
    """Stand-in for GenerationClient that records calls.

    Attributes:
        result: Data URI returned by ``generate``
        error: Exception raised by ``generate`` instead of returning
        has_credential: When False, ``require_credential`` raises
        gate: Optional asyncio.Event that ``generate`` waits on
    """

    def __init__(self, result: str | None = None):
        self.result = result
        self.error: Exception | None = None
        self.has_credential = True
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, list[str]]] = []

    def require_credential(self) -> str:
        if not self.has_credential:
            raise MissingCredential()
        return "test-key"

    async def generate(self, prompt, images):
        self.calls.append((prompt, list(images)))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


def make_image_bytes(image_format: str = "PNG", color: str = "red", size=(8, 8)) -> bytes:
    """Encode a small solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> RenderStudioConfig:
    """Create a test configuration with a key and a temporary exports dir."""
    return RenderStudioConfig(
        _env_file=None,
        fal_key="test-key",
        endpoint_url="https://api.example.test/edit",
        exports_dir=str(temp_dir / "exports"),
        request_timeout=5,
    )


@pytest.fixture
def keyless_config(temp_dir: Path) -> RenderStudioConfig:
    """Create a test configuration without an API key."""
    return RenderStudioConfig(
        _env_file=None,
        fal_key=None,
        exports_dir=str(temp_dir / "exports"),
    )


@pytest.fixture
def catalog() -> PromptCatalog:
    """The bundled preset catalog."""
    return load_catalog()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG", "red")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG", "blue")


@pytest.fixture
def result_png_bytes() -> bytes:
    """Bytes of the image the remote API 'produces'."""
    return make_image_bytes("PNG", "green", size=(16, 16))


@pytest.fixture
def result_data_uri(result_png_bytes: bytes) -> str:
    return encode_image_bytes(result_png_bytes)


@pytest.fixture
def fake_client(result_data_uri: str) -> FakeGenerationClient:
    return FakeGenerationClient(result=result_data_uri)


@pytest.fixture
def session(test_config, fake_client, catalog) -> SessionController:
    """Session wired to the fake client."""
    return SessionController(test_config, client=fake_client, catalog=catalog)


@pytest.fixture
def ready_session(session, png_bytes) -> SessionController:
    """Session with one reference image and a usable prompt."""
    asyncio.run(session.add_image(png_bytes))
    session.set_prompt("Put it in a museum")
    return session
