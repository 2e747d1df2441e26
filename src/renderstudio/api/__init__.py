"""MR Render Studio: FastAPI host application.

Modules
-------
main
    FastAPI application serving the JSON endpoints and the mounted Gradio
    UI, plus the ``main()`` CLI entry point.
models
    Pydantic response models.
"""
