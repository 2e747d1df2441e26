"""Gradio UI for MR Render Studio."""

import logging

import gradio as gr

from renderstudio.core.config import config

from .formatting import IDLE_MESSAGE, WORKFLOW_MARKDOWN
from .handlers import (
    apply_adjustment,
    apply_preset,
    clear_all,
    delete_selected,
    download_result,
    edit_prompt,
    generate,
    load_session,
    select_reference,
    upload_images,
    use_as_input,
)
from .state import get_catalog

logger = logging.getLogger(__name__)


def _bind(handler, entry_id: str):
    """Return a one-argument coroutine handler calling ``handler(entry_id, session)``."""

    async def bound(session):
        return await handler(entry_id, session)

    return bound


def create_ui() -> gr.Blocks:
    """Create the Gradio Blocks app.

    Returns:
        Gradio Blocks app (not launched)
    """
    catalog = get_catalog()
    app = gr.Blocks(title="MR Render Studio")

    with app:
        # Session state - one SessionController per browser session, created lazily
        session_state = gr.State(None)
        selected_index = gr.State(None)

        with gr.Row():
            with gr.Column(scale=4):
                gr.Markdown(
                    """
                    # MR Render Studio
                    ### Renders → Real Visualizations
                    """
                )
            with gr.Column(scale=1, min_width=120):
                clear_btn = gr.Button("Clear All", variant="secondary", size="sm")

        with gr.Row():
            # Left column - inputs
            with gr.Column(scale=1):
                image_count = gr.Markdown(
                    value=f"**Reference Images (0/{config.max_images})**",
                )
                reference_gallery = gr.Gallery(
                    label="Reference Images",
                    show_label=False,
                    columns=2,
                    height=280,
                    object_fit="cover",
                    allow_preview=False,
                )
                with gr.Row():
                    upload_btn = gr.UploadButton(
                        "+ Add",
                        file_types=["image"],
                        file_count="multiple",
                        variant="primary",
                        size="sm",
                    )
                    delete_btn = gr.Button("× Delete selected", size="sm")

                prompt_input = gr.Textbox(
                    label="Prompt",
                    placeholder="Describe the context and style you want...",
                    lines=4,
                )

                gr.Markdown("**Context Presets**")
                with gr.Row():
                    preset_buttons = [
                        (entry.id, gr.Button(entry.label, size="sm")) for entry in catalog.presets
                    ]

                gr.Markdown("**Adjustments** *(append to prompt)*")
                with gr.Row():
                    adjustment_buttons = [
                        (entry.id, gr.Button(entry.label, size="sm"))
                        for entry in catalog.adjustments
                    ]

                generate_btn = gr.Button("Generate", variant="primary", interactive=False)
                status_output = gr.Markdown(value=IDLE_MESSAGE)

            # Right column - result
            with gr.Column(scale=1):
                result_image = gr.Image(
                    label="Result",
                    type="pil",
                    interactive=False,
                    height=480,
                )
                with gr.Row():
                    download_btn = gr.Button("⬇ Download", interactive=False)
                    use_input_btn = gr.Button("↻ Use as Input", interactive=False)
                export_file = gr.File(label="Exported image", visible=False, interactive=False)
                gr.Markdown(WORKFLOW_MARKDOWN)

        # Components refreshed after every session change, in render_session() order
        session_outputs = [
            reference_gallery,
            image_count,
            upload_btn,
            prompt_input,
            generate_btn,
            status_output,
            result_image,
            download_btn,
            use_input_btn,
        ]

        app.load(
            fn=load_session,
            inputs=[session_state],
            outputs=session_outputs + [session_state],
        )

        upload_btn.upload(
            fn=upload_images,
            inputs=[upload_btn, session_state],
            outputs=session_outputs + [session_state],
        )

        reference_gallery.select(fn=select_reference, inputs=None, outputs=[selected_index])

        delete_btn.click(
            fn=delete_selected,
            inputs=[selected_index, session_state],
            outputs=session_outputs + [selected_index, session_state],
        )

        prompt_input.input(
            fn=edit_prompt,
            inputs=[prompt_input, session_state],
            outputs=[generate_btn, session_state],
        )

        for preset_id, button in preset_buttons:
            button.click(
                fn=_bind(apply_preset, preset_id),
                inputs=[session_state],
                outputs=session_outputs + [session_state],
            )

        for adjustment_id, button in adjustment_buttons:
            button.click(
                fn=_bind(apply_adjustment, adjustment_id),
                inputs=[session_state],
                outputs=session_outputs + [session_state],
            )

        generate_btn.click(
            fn=generate,
            inputs=[session_state],
            outputs=session_outputs + [session_state],
            # At most one request per session; the controller enforces it
            concurrency_limit=None,
        )

        clear_btn.click(
            fn=clear_all,
            inputs=[session_state],
            outputs=session_outputs + [selected_index, export_file, session_state],
        )

        download_btn.click(
            fn=download_result,
            inputs=[session_state],
            outputs=[export_file] + session_outputs + [session_state],
        )

        use_input_btn.click(
            fn=use_as_input,
            inputs=[session_state],
            outputs=session_outputs + [session_state],
        )

    return app
