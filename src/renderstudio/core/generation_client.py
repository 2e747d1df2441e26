"""HTTP client for the remote image-edit API.

Processing flow:
    1. Resolve the API key from configuration (fail before any network call).
    2. POST the prompt and the reference data URIs to the configured endpoint.
    3. Read ``images[0].url`` from the JSON response.
    4. GET that URL and re-encode the bytes as a data URI.

Step 4 means every image the UI handles is a data URI, so a generated result
can be fed straight back in as a reference image.

Error handling:
    - Missing key -> ``MissingCredential``
    - Non-2xx response or transport failure -> ``RemoteError``
    - Success without an image URL -> ``NoImageReturned``
    - Result fetch or decode failure -> ``ResultDecodeError``

Business rules (image count, prompt content) are validated by the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

import httpx

from .config import RenderStudioConfig
from .encoding import encode_image_bytes
from .errors import (
    FileDecodeError,
    MissingCredential,
    NoImageReturned,
    RemoteError,
    ResultDecodeError,
)

logger = logging.getLogger(__name__)


class GenerationClient:
    """Wraps one generation round-trip against the image-edit API.

    Args:
        config: Configuration supplying the endpoint, key and fixed parameters.
        http_client: Optional shared ``httpx.AsyncClient``. When omitted a
            short-lived client is opened for each ``generate`` call.
    """

    def __init__(
        self,
        config: RenderStudioConfig,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self._http_client = http_client

    def require_credential(self) -> str:
        """Return the API key.

        Raises:
            MissingCredential: If no non-blank key is configured
        """
        if not self.config.has_credential:
            raise MissingCredential()
        return self.config.fal_key.get_secret_value().strip()

    def build_payload(self, prompt: str, images: Sequence[str]) -> dict:
        return {
            "prompt": prompt,
            "image_urls": list(images),
            "aspect_ratio": self.config.aspect_ratio,
            "output_format": self.config.output_format,
        }

    async def generate(self, prompt: str, images: Sequence[str]) -> str:
        """Run a generation and return the result as a data URI.

        Args:
            prompt: Prompt text, sent verbatim
            images: Reference image data URIs in order

        Returns:
            Data URI of the produced image

        Raises:
            MissingCredential: If no key is configured
            RemoteError: If the API call fails
            NoImageReturned: If the response has no image URL
            ResultDecodeError: If the produced image cannot be loaded
        """
        api_key = self.require_credential()
        headers = {
            "Authorization": f"Key {api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(prompt, images)

        async with self._client() as client:
            logger.info(
                f"Requesting generation from {self.config.endpoint_url} "
                f"with {len(payload['image_urls'])} reference image(s)"
            )
            try:
                response = await client.post(
                    self.config.endpoint_url,
                    json=payload,
                    headers=headers,
                    timeout=self.config.request_timeout,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.warning(f"Generation request failed: {e!r}")
                raise RemoteError(str(e) or None) from e

            if not response.is_success:
                raise RemoteError(_error_message(response), status_code=response.status_code)

            image_url = _first_image_url(response)
            if image_url is None:
                raise NoImageReturned()

            return await self._fetch_result(client, image_url)

    async def _fetch_result(self, client: httpx.AsyncClient, url: str) -> str:
        """Download the produced image and encode it as a data URI."""
        logger.info("Fetching generated image")
        try:
            response = await client.get(url, timeout=self.config.request_timeout)
            response.raise_for_status()
            return await asyncio.to_thread(encode_image_bytes, response.content)
        except (httpx.HTTPError, httpx.InvalidURL, FileDecodeError) as e:
            logger.warning(f"Could not load generated image: {e}")
            raise ResultDecodeError() from e

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient() as client:
            yield client


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message

    return f"API error: {response.status_code}"


def _first_image_url(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        logger.warning("Generation response was not valid JSON")
        return None

    images = body.get("images") if isinstance(body, dict) else None
    if not isinstance(images, list) or not images:
        return None

    first = images[0]
    url = first.get("url") if isinstance(first, dict) else None
    return url if isinstance(url, str) and url else None
