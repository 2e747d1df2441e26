"""Preset and adjustment catalog.

The catalog is static data loaded once at startup from ``data/prompts.json``
(bundled with the package) or from the file named by
``RENDERSTUDIO_PROMPTS_FILE``. Entry order in the file is the display order.

File Format
-----------
::

    {
      "presets": [{"id": "hotel", "label": "Hotel", "value": "..."}],
      "adjustments": [{"id": "backlit", "label": "+ Backlit", "value": "..."}]
    }

A preset replaces the prompt; an adjustment is appended to it.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class PromptEntry(BaseModel):
    """A single named prompt fragment."""

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)


class PromptCatalog(BaseModel):
    """Ordered presets and adjustments.

    Attributes:
        presets: Full prompts that replace the current prompt.
        adjustments: Short phrases appended to the current prompt.
    """

    presets: list[PromptEntry] = Field(default_factory=list)
    adjustments: list[PromptEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> PromptCatalog:
        for name, entries in (("preset", self.presets), ("adjustment", self.adjustments)):
            seen: set[str] = set()
            for entry in entries:
                if entry.id in seen:
                    raise ValueError(f"Duplicate {name} id: {entry.id}")
                seen.add(entry.id)
        return self

    def preset(self, preset_id: str) -> PromptEntry:
        """Look up a preset by id.

        Raises:
            KeyError: If no preset has that id
        """
        for entry in self.presets:
            if entry.id == preset_id:
                return entry
        raise KeyError(preset_id)

    def adjustment(self, adjustment_id: str) -> PromptEntry:
        """Look up an adjustment by id.

        Raises:
            KeyError: If no adjustment has that id
        """
        for entry in self.adjustments:
            if entry.id == adjustment_id:
                return entry
        raise KeyError(adjustment_id)


def load_catalog(path: Path | None = None) -> PromptCatalog:
    """Load the prompt catalog.

    Args:
        path: JSON file to read. ``None`` uses the bundled catalog.

    Returns:
        Validated PromptCatalog

    Raises:
        OSError: If ``path`` cannot be read
        ValueError: If the content is not valid JSON or fails validation
    """
    if path is None:
        text = resources.files("renderstudio").joinpath("data/prompts.json").read_text("utf-8")
        source = "bundled catalog"
    else:
        text = Path(path).read_text(encoding="utf-8")
        source = str(path)

    catalog = PromptCatalog.model_validate(json.loads(text))
    logger.info(
        f"Loaded {len(catalog.presets)} presets and "
        f"{len(catalog.adjustments)} adjustments from {source}"
    )
    return catalog
