"""Pydantic response models for the MR Render Studio API.

Models
------
ConfigResponse
    Payload for ``GET /api/config``: presets, adjustments and session
    limits, so other front ends can offer the same choices as the UI.
HealthResponse
    Payload for ``GET /api/health``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from renderstudio.core.presets import PromptEntry


class ConfigResponse(BaseModel):
    """Response body for ``GET /api/config``.

    Attributes:
        version: Application version string.
        max_images: Maximum reference images per session.
        credential_configured: Whether an API key is available. The key
            itself is never returned.
        presets: Ordered presets that replace the prompt.
        adjustments: Ordered adjustments appended to the prompt.
    """

    version: str
    max_images: int = Field(..., ge=1)
    credential_configured: bool
    presets: list[PromptEntry]
    adjustments: list[PromptEntry]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
