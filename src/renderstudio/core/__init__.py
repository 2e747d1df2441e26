"""Core workflow for MR Render Studio.

- **RenderStudioConfig / config**: Pydantic Settings configuration (RENDERSTUDIO_ prefix)
- **ImageStore**: Ordered reference images held as data URIs (max 5)
- **PromptBuilder**: Current prompt with replace and append operations
- **PromptCatalog**: Static presets and adjustments loaded from JSON
- **GenerationClient**: One round-trip to the remote image-edit API
- **SessionController**: Per-user state machine tying the above together

Usage Example
-------------
    from renderstudio.core import SessionController

    session = SessionController()
    await session.add_image(Path("render.png").read_bytes())
    session.apply_preset("museum")
    await session.generate()
    session.download()
"""

from renderstudio.core.config import RenderStudioConfig, config
from renderstudio.core.errors import (
    CapacityExceeded,
    ExportError,
    FileDecodeError,
    MissingCredential,
    NoImageReturned,
    RemoteError,
    RenderStudioError,
    ResultDecodeError,
)
from renderstudio.core.generation_client import GenerationClient
from renderstudio.core.image_store import ImageStore, ReferenceImage
from renderstudio.core.presets import PromptCatalog, PromptEntry, load_catalog
from renderstudio.core.prompt_builder import PromptBuilder
from renderstudio.core.session import SessionController, SessionSnapshot, SessionStatus

__all__ = [
    "CapacityExceeded",
    "ExportError",
    "FileDecodeError",
    "GenerationClient",
    "ImageStore",
    "MissingCredential",
    "NoImageReturned",
    "PromptBuilder",
    "PromptCatalog",
    "PromptEntry",
    "ReferenceImage",
    "RemoteError",
    "RenderStudioConfig",
    "RenderStudioError",
    "ResultDecodeError",
    "SessionController",
    "SessionSnapshot",
    "SessionStatus",
    "config",
    "load_catalog",
]
