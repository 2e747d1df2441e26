"""Free-text prompt composition.

Presets replace the prompt wholesale; adjustments are appended to it.

Usage
-----
::

    builder = PromptBuilder()
    builder.set("Take exact image but put it in museum gallery.")
    builder.append("Wall should be bright white, not gray.")
    builder.text
    # 'Take exact image but put it in museum gallery. Wall should be bright white, not gray.'
"""


class PromptBuilder:
    """Holds the current prompt text."""

    def __init__(self, text: str = ""):
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_usable(self) -> bool:
        """True if the prompt has any non-whitespace content."""
        return bool(self._text.strip())

    def set(self, text: str) -> None:
        """Replace the prompt verbatim."""
        self._text = text or ""

    def append(self, text: str) -> None:
        """Append ``text`` separated by a single space.

        An empty prompt becomes exactly ``text``. Neither side is trimmed and
        repeated appends are not de-duplicated.
        """
        self._text = f"{self._text} {text}" if self._text else text

    def clear(self) -> None:
        self._text = ""

    def __repr__(self) -> str:
        return f"PromptBuilder(length={len(self._text)}, usable={self.is_usable})"
