"""MR Render Studio: FastAPI Application.

This module is the single entry point for the web application. It defines
the FastAPI ``app`` instance, the JSON routes, mounts the Gradio UI at ``/``
and provides the ``main()`` CLI function that launches the uvicorn server.

Endpoints
---------
========  ================  ============================================
Method    Path              Purpose
========  ================  ============================================
GET       ``/api/health``   Liveness check
GET       ``/api/config``   Presets, adjustments and session limits
GET       ``/``             Gradio single-page UI
========  ================  ============================================

Usage
-----
CLI (installed entry point)::

    renderstudio

Direct invocation::

    python -m renderstudio.api.main
"""

from __future__ import annotations

import logging

import gradio as gr
from fastapi import FastAPI

from renderstudio import __version__
from renderstudio.api.models import ConfigResponse, HealthResponse
from renderstudio.core.config import config
from renderstudio.ui.app import create_ui
from renderstudio.ui.state import get_catalog

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application with the Gradio UI mounted at ``/``.

    JSON routes are registered before the mount so they take precedence over
    the UI's catch-all path.
    """
    api = FastAPI(
        title="MR Render Studio",
        description="Turn architectural renders into photoreal context shots.",
        version=__version__,
    )

    @api.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    @api.get("/api/config", response_model=ConfigResponse)
    async def get_config() -> ConfigResponse:
        """Return the preset catalog and session limits."""
        catalog = get_catalog()
        return ConfigResponse(
            version=__version__,
            max_images=config.max_images,
            credential_configured=config.has_credential,
            presets=catalog.presets,
            adjustments=catalog.adjustments,
        )

    if not config.has_credential:
        logger.warning(
            "No FAL API key configured; generation will fail until "
            "RENDERSTUDIO_FAL_KEY (or FAL_KEY) is set."
        )

    return gr.mount_gradio_app(api, create_ui(), path="/")


app = create_app()


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~renderstudio.core.config.config` (which
    loads from ``RENDERSTUDIO_SERVER_HOST`` and ``RENDERSTUDIO_SERVER_PORT``
    environment variables). Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``renderstudio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting MR Render Studio...")
    logger.info(f"Configuration: {config.model_dump(exclude={'fal_key'})}")

    if config.gradio_share:
        # A public share link needs Gradio's own server
        logger.info("Share link requested; launching Gradio directly")
        create_ui().launch(
            server_name=config.server_host,
            server_port=config.server_port,
            share=True,
            show_error=True,
        )
        return

    uvicorn.run(
        "renderstudio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
