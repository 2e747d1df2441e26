"""Unit tests for Gradio UI handlers and formatting."""

import asyncio
import inspect
from types import SimpleNamespace

import pytest
from PIL import Image

from renderstudio.core.errors import RemoteError
from renderstudio.core.session import SessionStatus
from renderstudio.ui import handlers
from renderstudio.ui.app import _bind
from renderstudio.ui.formatting import (
    IDLE_MESSAGE,
    LOADING_MESSAGE,
    SUCCESS_MESSAGE,
    format_image_count,
    format_status,
    render_session,
)

# Positions in the render_session() tuple
GALLERY, COUNT, UPLOAD, PROMPT, GENERATE, STATUS, RESULT, DOWNLOAD, USE_INPUT = range(9)


@pytest.fixture
def upload_files(temp_dir, png_bytes, jpeg_bytes):
    """Two image files on disk as Gradio passes them."""
    first = temp_dir / "a.png"
    second = temp_dir / "b.jpg"
    first.write_bytes(png_bytes)
    second.write_bytes(jpeg_bytes)
    return [str(first), str(second)]


class TestFormatting:
    def test_status_messages(self, session, ready_session):
        assert format_status(session.snapshot()) == IDLE_MESSAGE

        ready_session.status = SessionStatus.LOADING
        assert format_status(ready_session.snapshot()) == LOADING_MESSAGE

        ready_session.status = SessionStatus.SUCCESS
        assert format_status(ready_session.snapshot()) == SUCCESS_MESSAGE

        ready_session.status = SessionStatus.ERROR
        ready_session.error = "overloaded"
        assert "overloaded" in format_status(ready_session.snapshot())

    def test_image_count(self, ready_session):
        assert format_image_count(ready_session.snapshot()) == "**Reference Images (1/5)**"

    def test_render_idle_session(self, session):
        updates = render_session(session.snapshot())

        assert len(updates) == 9
        assert updates[GALLERY]["value"] == []
        assert updates[UPLOAD]["interactive"] is True
        assert updates[GENERATE]["interactive"] is False
        assert updates[GENERATE]["value"] == "Generate"
        assert updates[RESULT]["value"] is None
        assert updates[DOWNLOAD]["interactive"] is False
        assert updates[USE_INPUT]["interactive"] is False

    def test_render_loading_session(self, ready_session):
        ready_session.status = SessionStatus.LOADING
        updates = render_session(ready_session.snapshot())

        assert updates[GENERATE]["value"] == "Generating..."
        assert updates[GENERATE]["interactive"] is False
        assert updates[PROMPT]["interactive"] is False
        assert updates[UPLOAD]["interactive"] is False

    def test_render_result(self, ready_session):
        asyncio.run(ready_session.generate())
        updates = render_session(ready_session.snapshot())

        assert isinstance(updates[RESULT]["value"], Image.Image)
        assert updates[DOWNLOAD]["interactive"] is True
        assert updates[USE_INPUT]["interactive"] is True

    def test_gallery_items(self, ready_session):
        updates = render_session(ready_session.snapshot())
        ((image, caption),) = updates[GALLERY]["value"]
        assert isinstance(image, Image.Image)
        assert caption == "#1"


class TestSessionCreation:
    def test_load_creates_session(self, monkeypatch, session):
        monkeypatch.setattr(handlers, "initialize_session", lambda s: s or session)
        outputs = asyncio.run(handlers.load_session(None))
        assert outputs[-1] is session
        assert len(outputs) == 10

    def test_existing_session_reused(self, session):
        outputs = asyncio.run(handlers.load_session(session))
        assert outputs[-1] is session


class TestUploadHandler:
    def test_upload_multiple(self, session, upload_files):
        outputs = asyncio.run(handlers.upload_images(upload_files, session))

        assert len(session.images) == 2
        assert outputs[COUNT]["value"] == "**Reference Images (2/5)**"
        assert outputs[-1] is session

    def test_upload_single_path(self, session, upload_files):
        asyncio.run(handlers.upload_images(upload_files[0], session))
        assert len(session.images) == 1

    def test_upload_beyond_capacity(self, session, upload_files):
        asyncio.run(handlers.upload_images(upload_files * 4, session))

        assert len(session.images) == 5
        assert session.status is SessionStatus.IDLE

    def test_upload_none(self, session):
        asyncio.run(handlers.upload_images(None, session))
        assert len(session.images) == 0

    def test_bad_file_reported(self, session, temp_dir, upload_files):
        bad = temp_dir / "notes.txt"
        bad.write_text("hello")

        outputs = asyncio.run(handlers.upload_images([str(bad), upload_files[0]], session))

        assert session.status is SessionStatus.ERROR
        assert len(session.images) == 0
        assert "Failed to read uploaded image" in outputs[STATUS]["value"]


class TestDeleteHandler:
    def test_select_reference(self):
        assert handlers.select_reference(SimpleNamespace(index=3)) == 3

    def test_delete_selected(self, session, upload_files):
        asyncio.run(handlers.upload_images(upload_files, session))
        remaining = session.images.images[1]

        outputs = asyncio.run(handlers.delete_selected(0, session))

        assert session.images.images == (remaining,)
        assert outputs[-2] is None

    @pytest.mark.parametrize("index", [None, 5, -1])
    def test_delete_without_valid_selection(self, ready_session, index):
        asyncio.run(handlers.delete_selected(index, ready_session))
        assert len(ready_session.images) == 1


class TestPromptHandlers:
    def test_edit_prompt_enables_generate(self, ready_session):
        update, session = asyncio.run(handlers.edit_prompt("Airport terminal", ready_session))

        assert session.prompt.text == "Airport terminal"
        assert update["interactive"] is True

    def test_blank_prompt_disables_generate(self, ready_session):
        update, _ = asyncio.run(handlers.edit_prompt("   ", ready_session))
        assert update["interactive"] is False

    def test_preset_and_adjustment(self, session, catalog):
        asyncio.run(handlers.apply_preset("corporate", session))
        outputs = asyncio.run(handlers.apply_adjustment("bright-white", session))

        expected = f"{catalog.preset('corporate').value} {catalog.adjustment('bright-white').value}"
        assert outputs[PROMPT]["value"] == expected


class TestGenerateHandler:
    def test_yields_loading_then_result(self, ready_session, fake_client):
        async def _run():
            fake_client.gate = asyncio.Event()
            updates = handlers.generate(ready_session)
            first = await updates.__anext__()
            fake_client.gate.set()
            second = await updates.__anext__()
            return first, second

        first, second = asyncio.run(_run())

        assert first[STATUS]["value"] == LOADING_MESSAGE
        assert first[GENERATE]["interactive"] is False
        assert second[STATUS]["value"] == SUCCESS_MESSAGE
        assert isinstance(second[RESULT]["value"], Image.Image)

    def test_disallowed_generate_yields_once(self, session, fake_client):
        async def _run():
            return [outputs async for outputs in handlers.generate(session)]

        results = asyncio.run(_run())

        assert len(results) == 1
        assert fake_client.calls == []

    def test_error_rendered(self, ready_session, fake_client):
        fake_client.error = RemoteError("overloaded")

        async def _run():
            return [outputs async for outputs in handlers.generate(ready_session)]

        final = asyncio.run(_run())[-1]
        assert "overloaded" in final[STATUS]["value"]


class TestResultHandlers:
    def test_download(self, ready_session):
        asyncio.run(ready_session.generate())

        outputs = asyncio.run(handlers.download_result(ready_session))

        assert outputs[0]["visible"] is True
        assert outputs[0]["value"].endswith(".png")

    def test_download_without_result(self, session):
        outputs = asyncio.run(handlers.download_result(session))
        assert "value" not in outputs[0]

    def test_use_as_input(self, ready_session, result_data_uri):
        asyncio.run(ready_session.generate())

        outputs = asyncio.run(handlers.use_as_input(ready_session))

        assert ready_session.images.payloads() == [result_data_uri]
        assert outputs[RESULT]["value"] is None

    def test_clear_all(self, ready_session):
        asyncio.run(ready_session.generate())

        outputs = asyncio.run(handlers.clear_all(ready_session))

        assert len(outputs) == 12
        assert ready_session.snapshot().images == ()
        assert outputs[PROMPT]["value"] == ""
        assert outputs[-3] is None
        assert outputs[-2]["visible"] is False


class TestHandlersRunOnEventLoop:
    """Session handlers are coroutines and run on the event loop."""

    @pytest.mark.parametrize(
        "handler",
        [
            handlers.load_session,
            handlers.upload_images,
            handlers.delete_selected,
            handlers.edit_prompt,
            handlers.apply_preset,
            handlers.apply_adjustment,
            handlers.clear_all,
            handlers.download_result,
            handlers.use_as_input,
        ],
    )
    def test_session_handlers_are_coroutines(self, handler):
        assert inspect.iscoroutinefunction(handler)

    def test_generate_is_async_generator(self):
        assert inspect.isasyncgenfunction(handlers.generate)

    def test_bound_preset_handler(self, session, catalog):
        bound = _bind(handlers.apply_preset, "spa")

        assert inspect.iscoroutinefunction(bound)
        outputs = asyncio.run(bound(session))
        assert outputs[PROMPT]["value"] == catalog.preset("spa").value

    def test_clear_during_generation_is_not_undone(self, ready_session, fake_client):
        async def _run():
            fake_client.gate = asyncio.Event()
            updates = handlers.generate(ready_session)
            await updates.__anext__()
            await handlers.clear_all(ready_session)
            fake_client.gate.set()
            return await updates.__anext__()

        final = asyncio.run(_run())

        assert ready_session.result is None
        assert ready_session.status is SessionStatus.IDLE
        assert final[RESULT]["value"] is None
