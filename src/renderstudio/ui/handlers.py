"""Gradio event handlers.

Every handler takes the session from ``gr.State`` as its last input and
returns it as its last output. Handlers that change visible state also return
the tuple built by :func:`~renderstudio.ui.formatting.render_session`.

Handlers that touch the session are coroutines, so every session mutation
runs on the event loop.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

import gradio as gr

from renderstudio.core.session import SessionController

from .formatting import render_session
from .state import initialize_session

logger = logging.getLogger(__name__)


async def load_session(session: SessionController | None) -> tuple:
    """Render the initial page for a new browser session."""
    session = initialize_session(session)
    return (*render_session(session.snapshot()), session)


async def upload_images(files, session: SessionController | None) -> tuple:
    """Add uploaded files to the reference images.

    Files beyond the capacity limit are dropped. An unreadable file stops the
    upload and is reported in the status area.

    Args:
        files: Uploaded file paths (one or several)
        session: Current session

    Returns:
        Tuple of (*session_updates, session)
    """
    session = initialize_session(session)
    if files is None:
        files = []
    elif not isinstance(files, list):
        files = [files]

    for index, file in enumerate(files):
        if not session.can_add():
            logger.warning(f"Ignoring {len(files) - index} upload(s): image limit reached or loading")
            break
        image = await session.add_image_file(file)
        if image is None:
            break

    return (*render_session(session.snapshot()), session)


def select_reference(evt: gr.SelectData) -> int:
    """Remember which gallery thumbnail was clicked."""
    return evt.index


async def delete_selected(selected_index: int | None, session: SessionController | None) -> tuple:
    """Delete the selected reference image.

    Returns:
        Tuple of (*session_updates, selected_index, session)
    """
    session = initialize_session(session)
    images = session.images.images
    if selected_index is not None and 0 <= selected_index < len(images):
        session.remove_image(images[selected_index].id)
    else:
        logger.debug(f"No reference image selected (index={selected_index})")
    return (*render_session(session.snapshot()), None, session)


async def edit_prompt(text: str, session: SessionController | None) -> tuple:
    """Store manual prompt edits.

    Only the Generate button is refreshed so the textbox is not rewritten
    while the user is typing.

    Returns:
        Tuple of (generate_button_update, session)
    """
    session = initialize_session(session)
    session.set_prompt(text or "")
    return gr.update(interactive=session.can_generate()), session


async def apply_preset(preset_id: str, session: SessionController | None) -> tuple:
    """Replace the prompt with a preset."""
    session = initialize_session(session)
    session.apply_preset(preset_id)
    return (*render_session(session.snapshot()), session)


async def apply_adjustment(adjustment_id: str, session: SessionController | None) -> tuple:
    """Append an adjustment to the prompt."""
    session = initialize_session(session)
    session.apply_adjustment(adjustment_id)
    return (*render_session(session.snapshot()), session)


async def generate(session: SessionController | None) -> AsyncIterator[tuple]:
    """Run a generation, showing the loading state while it is in flight.

    Yields:
        Tuple of (*session_updates, session), once when loading starts and
        once when the request completes
    """
    session = initialize_session(session)
    if not session.can_generate():
        yield (*render_session(session.snapshot()), session)
        return

    task = asyncio.create_task(session.generate())
    # Let the task reach its first suspension so the status is already
    # Loading (or Error, for a missing key) when the first update renders.
    await asyncio.sleep(0)
    yield (*render_session(session.snapshot()), session)

    await task
    yield (*render_session(session.snapshot()), session)


async def clear_all(session: SessionController | None) -> tuple:
    """Reset the session.

    Returns:
        Tuple of (*session_updates, selected_index, export_file, session)
    """
    session = initialize_session(session)
    session.clear_all()
    return (
        *render_session(session.snapshot()),
        None,
        gr.update(value=None, visible=False),
        session,
    )


async def download_result(session: SessionController | None) -> tuple:
    """Export the result and offer the file for download.

    Returns:
        Tuple of (export_file, *session_updates, session)
    """
    session = initialize_session(session)
    path = session.download()
    file_update = gr.update(value=str(path), visible=True) if path else gr.update()
    return (file_update, *render_session(session.snapshot()), session)


async def use_as_input(session: SessionController | None) -> tuple:
    """Make the result the only reference image."""
    session = initialize_session(session)
    session.use_as_input()
    return (*render_session(session.snapshot()), session)
