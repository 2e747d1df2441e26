"""Error kinds raised by the MR Render Studio core.

Every error's string form is a message that can be shown to the user as-is.
The session controller converts them into its ``Error(message)`` status.
"""


class RenderStudioError(Exception):
    """Base class for user-facing errors."""

    default_message = "Failed to generate image"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class MissingCredential(RenderStudioError):
    """No API key is configured."""

    default_message = "Missing FAL API key. Add RENDERSTUDIO_FAL_KEY to environment variables."


class RemoteError(RenderStudioError):
    """The remote API answered with a failure, or could not be reached."""

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NoImageReturned(RenderStudioError):
    default_message = "No image returned from API"


class ResultDecodeError(RenderStudioError):
    """The produced image could not be fetched or re-encoded."""

    default_message = "Failed to load generated image"


class CapacityExceeded(RenderStudioError):
    default_message = "Reference image limit reached"


class FileDecodeError(RenderStudioError):
    """An uploaded file is not a readable image."""

    default_message = "Failed to read uploaded image"


class ExportError(RenderStudioError):
    default_message = "Failed to export image"
