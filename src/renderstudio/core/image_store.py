"""Ordered in-memory collection of reference images.

Insertion order is meaningful: images are sent to the API in that order.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass

from .encoding import encode_image_bytes
from .errors import CapacityExceeded

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5


@dataclass(frozen=True)
class ReferenceImage:
    """A single reference image.

    Attributes:
        id: Unique opaque identifier
        data: Base64 data URI of the image bytes
    """

    id: str
    data: str


class ImageStore:
    """Holds up to ``capacity`` reference images in insertion order."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._images: list[ReferenceImage] = []

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self):
        return iter(self._images)

    @property
    def images(self) -> tuple[ReferenceImage, ...]:
        return tuple(self._images)

    @property
    def is_full(self) -> bool:
        return len(self._images) >= self.capacity

    def payloads(self) -> list[str]:
        """Return the encoded payloads in insertion order."""
        return [image.data for image in self._images]

    def get(self, image_id: str) -> ReferenceImage | None:
        return next((image for image in self._images if image.id == image_id), None)

    async def add(self, file_bytes: bytes) -> ReferenceImage:
        """Decode raw file bytes and append them as a new reference image.

        Decoding runs in a worker thread so the event loop stays responsive.

        Args:
            file_bytes: Raw contents of the uploaded file

        Returns:
            The stored ReferenceImage

        Raises:
            CapacityExceeded: If the store is already full
            FileDecodeError: If the bytes are not a readable image
        """
        if self.is_full:
            raise CapacityExceeded(f"Reference image limit of {self.capacity} reached")

        data = await asyncio.to_thread(encode_image_bytes, file_bytes)

        # Another add may have filled the store while decoding
        if self.is_full:
            raise CapacityExceeded(f"Reference image limit of {self.capacity} reached")

        image = ReferenceImage(id=uuid.uuid4().hex, data=data)
        self._images.append(image)
        logger.info(f"Added reference image {image.id} ({len(self)}/{self.capacity})")
        return image

    def remove(self, image_id: str) -> bool:
        """Remove the image with ``image_id``.

        Returns:
            True if an image was removed, False if the id was unknown
        """
        for index, image in enumerate(self._images):
            if image.id == image_id:
                del self._images[index]
                logger.info(f"Removed reference image {image_id}")
                return True
        return False

    def clear(self) -> None:
        self._images.clear()

    def replace_with(self, data: str) -> ReferenceImage:
        """Empty the store and insert exactly one image built from ``data``."""
        image = ReferenceImage(id=uuid.uuid4().hex, data=data)
        self._images = [image]
        logger.info(f"Replaced reference images with {image.id}")
        return image
