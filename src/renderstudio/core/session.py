"""Per-session workflow controller.

The controller owns the reference images, the prompt, the current result and
the session status, and is the only place status transitions happen.

State Machine
-------------
::

    Idle/Success/Error --generate()--> Loading
    Loading --success--> Success        (result set)
    Loading --failure--> Error(message) (result unchanged)
    *       --clear_all()--> Idle       (images, prompt, result, error cleared)
    Success --use_as_input()--> Idle    (result becomes the only image)

``generate()`` is a no-op unless there is at least one image, the prompt has
non-whitespace content and no request is in flight. A missing API key is
reported as ``Error`` without ever entering ``Loading``.

Stale Responses
---------------
Requests cannot be cancelled. Each ``generate()`` call takes a new request
token and ``clear_all()`` invalidates the in-flight one; a response whose
token no longer matches is logged and dropped. Uploads that finish decoding
after a ``clear_all()`` are dropped the same way.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .config import RenderStudioConfig
from .encoding import to_png_bytes
from .errors import CapacityExceeded, ExportError, FileDecodeError, RenderStudioError
from .generation_client import GenerationClient
from .image_store import ImageStore, ReferenceImage
from .presets import PromptCatalog, load_catalog
from .prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Failed to generate image"


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session used for rendering."""

    images: tuple[ReferenceImage, ...]
    capacity: int
    prompt: str
    status: SessionStatus
    error: str | None
    result: str | None
    can_generate: bool
    can_add: bool

    @property
    def has_result(self) -> bool:
        return self.result is not None

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.LOADING


class SessionController:
    """Orchestrates the upload, generate and result workflow for one user.

    Args:
        config: Configuration instance (defaults to the global config)
        client: Generation client (defaults to one built from ``config``)
        catalog: Preset catalog (defaults to ``load_catalog(config.prompts_file)``)
    """

    def __init__(
        self,
        config: RenderStudioConfig | None = None,
        client: GenerationClient | None = None,
        catalog: PromptCatalog | None = None,
    ):
        if config is None:
            from .config import config as default_config

            config = default_config

        self.config = config
        self.images = ImageStore(capacity=config.max_images)
        self.prompt = PromptBuilder()
        self.client = client if client is not None else GenerationClient(config)
        self.catalog = catalog if catalog is not None else load_catalog(config.prompts_file)

        self.status = SessionStatus.IDLE
        self.error: str | None = None
        self.result: str | None = None

        self._request_counter = 0
        self._inflight_token: int | None = None
        self._epoch = 0

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.LOADING

    def can_generate(self) -> bool:
        return len(self.images) >= 1 and self.prompt.is_usable and not self.is_loading

    def can_add(self) -> bool:
        return not self.images.is_full and not self.is_loading

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            images=self.images.images,
            capacity=self.images.capacity,
            prompt=self.prompt.text,
            status=self.status,
            error=self.error,
            result=self.result,
            can_generate=self.can_generate(),
            can_add=self.can_add(),
        )

    # ------------------------------------------------------------------
    # Reference images
    # ------------------------------------------------------------------

    async def add_image(self, file_bytes: bytes) -> ReferenceImage | None:
        """Decode and store an uploaded file.

        Returns:
            The stored image, or None if the upload was rejected
        """
        if self._reject_while_loading("add image"):
            return None

        epoch = self._epoch
        try:
            image = await self.images.add(file_bytes)
        except CapacityExceeded as e:
            logger.warning(f"Upload ignored: {e}")
            return None
        except RenderStudioError as e:
            if epoch == self._epoch:
                self._fail(e.message)
            return None

        if epoch != self._epoch:
            logger.warning(f"Dropping upload {image.id} that finished after the session was cleared")
            self.images.remove(image.id)
            return None
        if self.is_loading:
            logger.warning(f"Dropping upload {image.id} that finished after a generation started")
            self.images.remove(image.id)
            return None
        return image

    async def add_image_file(self, path: str | Path) -> ReferenceImage | None:
        """Read an uploaded file from disk and store it.

        A file that cannot be read moves the session to ``Error``.
        """
        if self._reject_while_loading("add image"):
            return None

        try:
            file_bytes = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            logger.warning(f"Could not read upload {path}: {e}")
            self._fail(FileDecodeError(f"Failed to read uploaded image: {e.strerror or e}").message)
            return None
        return await self.add_image(file_bytes)

    def remove_image(self, image_id: str) -> bool:
        if self._reject_while_loading("remove image"):
            return False
        return self.images.remove(image_id)

    # ------------------------------------------------------------------
    # Prompt
    # ------------------------------------------------------------------

    def set_prompt(self, text: str) -> None:
        if self._reject_while_loading("edit prompt"):
            return
        self.prompt.set(text)

    def append_prompt(self, text: str) -> None:
        if self._reject_while_loading("append to prompt"):
            return
        self.prompt.append(text)

    def apply_preset(self, preset_id: str) -> None:
        """Replace the prompt with a catalog preset.

        Raises:
            KeyError: If ``preset_id`` is not in the catalog
        """
        entry = self.catalog.preset(preset_id)
        self.set_prompt(entry.value)

    def apply_adjustment(self, adjustment_id: str) -> None:
        """Append a catalog adjustment to the prompt.

        Raises:
            KeyError: If ``adjustment_id`` is not in the catalog
        """
        entry = self.catalog.adjustment(adjustment_id)
        self.append_prompt(entry.value)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(self) -> bool:
        """Run one generation if the session allows it.

        Returns:
            True if a result was applied to this session
        """
        if not self.can_generate():
            logger.debug(
                f"Generate ignored (images={len(self.images)}, "
                f"prompt_usable={self.prompt.is_usable}, status={self.status.value})"
            )
            return False

        try:
            self.client.require_credential()
        except RenderStudioError as e:
            logger.warning("Generate attempted without an API key")
            self._fail(e.message)
            return False

        self._request_counter += 1
        token = self._request_counter
        self._inflight_token = token
        self.status = SessionStatus.LOADING
        self.error = None
        logger.info(f"Generation {token} started with {len(self.images)} reference image(s)")

        result: str | None = None
        error: str | None = None
        try:
            result = await self.client.generate(self.prompt.text, self.images.payloads())
        except RenderStudioError as e:
            logger.warning(f"Generation {token} failed: {e}")
            error = e.message
        except Exception as e:
            logger.error(f"Unexpected error in generation {token}: {e}", exc_info=True)
            error = UNEXPECTED_ERROR_MESSAGE

        if token != self._inflight_token:
            logger.warning(f"Discarding stale response for generation {token}")
            return False

        self._inflight_token = None
        if error is not None:
            self._fail(error)
            return False

        self.result = result
        self.status = SessionStatus.SUCCESS
        logger.info(f"Generation {token} succeeded")
        return True

    # ------------------------------------------------------------------
    # Result handling
    # ------------------------------------------------------------------

    def use_as_input(self) -> bool:
        """Make the current result the only reference image.

        Returns:
            True if the result was promoted
        """
        if self.result is None or self._reject_while_loading("use result as input"):
            return False

        self.images.replace_with(self.result)
        self.result = None
        self.error = None
        self.status = SessionStatus.IDLE
        logger.info("Result promoted to reference image")
        return True

    def download(self) -> Path | None:
        """Export the current result as a PNG file.

        The status is left unchanged on success; a failed export moves the
        session to ``Error``.

        Returns:
            Path of the written file, or None if nothing was exported
        """
        if self.result is None:
            return None

        path = self.config.exports_dir / f"{self.config.export_prefix}-{int(time.time() * 1000)}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(to_png_bytes(self.result))
        except (OSError, ValueError) as e:
            logger.error(f"Export to {path} failed: {e}")
            self._fail(ExportError(f"Failed to export image: {e}").message)
            return None

        logger.info(f"Exported result to {path}")
        return path

    def clear_all(self) -> None:
        """Reset images, prompt, result and error, and return to Idle.

        An in-flight request keeps running but its response will be ignored.
        """
        if self._inflight_token is not None:
            logger.info(f"Clearing session; generation {self._inflight_token} will be ignored")

        self.images.clear()
        self.prompt.clear()
        self.result = None
        self.error = None
        self.status = SessionStatus.IDLE
        self._inflight_token = None
        self._epoch += 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(self, message: str) -> None:
        # A request in flight owns the status until its response is applied
        if self._inflight_token is not None:
            logger.warning(f"Error while generation {self._inflight_token} is in progress: {message}")
            return
        self.status = SessionStatus.ERROR
        self.error = message

    def _reject_while_loading(self, action: str) -> bool:
        if self.is_loading:
            logger.warning(f"Cannot {action} while a generation is in progress")
            return True
        return False

    def __repr__(self) -> str:
        return (
            f"SessionController(status={self.status.value}, "
            f"images={len(self.images)}/{self.images.capacity}, "
            f"has_result={self.result is not None})"
        )
