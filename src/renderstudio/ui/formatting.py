"""Turn a session snapshot into Gradio component updates."""

import logging

import gradio as gr

from renderstudio.core.encoding import data_uri_to_image
from renderstudio.core.session import SessionSnapshot, SessionStatus

logger = logging.getLogger(__name__)

IDLE_MESSAGE = "*Upload a render and describe the context you want*"
LOADING_MESSAGE = "⏳ *Generating...*"
SUCCESS_MESSAGE = "✅ **Render complete!** Download it or use it as the next input."

WORKFLOW_MARKDOWN = """
#### Workflow
1. Upload your 3D render
2. Pick a context preset or write your own
3. Add adjustments as needed
4. Generate → iterate with "Use as Input"
"""


def format_status(snapshot: SessionSnapshot) -> str:
    """Return the status line for the current session state."""
    if snapshot.status is SessionStatus.ERROR:
        return f"❌ **Error**\n\n{snapshot.error}"
    if snapshot.status is SessionStatus.LOADING:
        return LOADING_MESSAGE
    if snapshot.status is SessionStatus.SUCCESS:
        return SUCCESS_MESSAGE
    return IDLE_MESSAGE


def format_image_count(snapshot: SessionSnapshot) -> str:
    return f"**Reference Images ({len(snapshot.images)}/{snapshot.capacity})**"


def gallery_items(snapshot: SessionSnapshot) -> list:
    """Return ``(PIL image, caption)`` pairs for the reference gallery."""
    return [
        (data_uri_to_image(image.data), f"#{index}")
        for index, image in enumerate(snapshot.images, start=1)
    ]


def render_session(snapshot: SessionSnapshot) -> tuple:
    """Build updates for every session-bound component.

    Returns:
        Tuple of (gallery, image_count, upload_button, prompt, generate_button,
        status, result_image, download_button, use_input_button)
    """
    loading = snapshot.is_loading
    result_image = data_uri_to_image(snapshot.result) if snapshot.has_result else None

    return (
        gr.update(value=gallery_items(snapshot)),
        gr.update(value=format_image_count(snapshot)),
        gr.update(interactive=snapshot.can_add),
        gr.update(value=snapshot.prompt, interactive=not loading),
        gr.update(
            value="Generating..." if loading else "Generate",
            interactive=snapshot.can_generate,
        ),
        gr.update(value=format_status(snapshot)),
        gr.update(value=result_image),
        gr.update(interactive=snapshot.has_result),
        gr.update(interactive=snapshot.has_result and not loading),
    )
