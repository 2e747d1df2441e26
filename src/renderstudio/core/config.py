"""Configuration management for MR Render Studio.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the RENDERSTUDIO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (RENDERSTUDIO_* prefix)
2. .env file in the project root
3. Default values defined in RenderStudioConfig

Example .env file:
    RENDERSTUDIO_FAL_KEY=your-fal-key
    RENDERSTUDIO_REQUEST_TIMEOUT=120
    RENDERSTUDIO_EXPORTS_DIR=exports

The API credential is also picked up from the plain ``FAL_KEY`` variable that
the fal.ai tooling uses, so an existing shell setup works unchanged.

Missing Credential
------------------
A missing credential is *not* a startup error. The application starts, and the
first generation attempt reports a configuration error to the user instead.

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from renderstudio.core.config import config

    print(config.endpoint_url)
    print(config.exports_dir)
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderStudioConfig(BaseSettings):
    """Main configuration for MR Render Studio.

    Attributes
    ----------
    Remote API Settings:
        fal_key : SecretStr | None
            Credential sent as ``Authorization: Key <fal_key>``
        endpoint_url : str
            Image-edit endpoint receiving the generation request
        aspect_ratio : str
            Aspect ratio parameter sent with every request
        output_format : Literal["png"]
            Output format parameter sent with every request
        request_timeout : float
            Timeout in seconds for each outbound HTTP request

    Session Settings:
        max_images : int
            Maximum number of reference images per session (1-5)
        prompts_file : Path | None
            Optional JSON file replacing the bundled preset catalog

    Export Settings:
        exports_dir : Path
            Directory where downloaded results are written
        export_prefix : str
            Filename prefix for exported results

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        gradio_share : bool
            Create public gradio.live link (keep False for local-only)

    Examples
    --------
        >>> custom_config = RenderStudioConfig(
        ...     fal_key="test-key",
        ...     exports_dir="/tmp/exports",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RENDERSTUDIO_",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote API settings
    fal_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("fal_key", "RENDERSTUDIO_FAL_KEY", "FAL_KEY"),
        description="fal.ai API key",
    )
    endpoint_url: str = Field(
        default="https://fal.run/fal-ai/nano-banana-pro/edit",
        description="Image-edit endpoint URL",
    )
    aspect_ratio: str = Field(default="auto", description="Aspect ratio sent to the API")
    output_format: Literal["png"] = Field(default="png", description="Output image format")
    request_timeout: float = Field(
        default=120.0,
        description="Timeout in seconds for outbound requests",
        gt=0,
        le=600,
    )

    # Session settings
    max_images: int = Field(
        default=5,
        description="Maximum reference images per session",
        ge=1,
        le=5,
    )
    prompts_file: Path | None = Field(
        default=None,
        description="JSON file overriding the bundled presets and adjustments",
    )

    # Export settings
    exports_dir: Path = Field(
        default=Path("exports"),
        description="Directory for downloaded results",
    )
    export_prefix: str = Field(default="mr-render", min_length=1)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the exports directory."""
        super().__init__(**kwargs)

        self.exports_dir.mkdir(parents=True, exist_ok=True)

    @property
    def has_credential(self) -> bool:
        """True when a non-blank API key is configured."""
        return self.fal_key is not None and bool(self.fal_key.get_secret_value().strip())


# Global configuration instance
config = RenderStudioConfig()
