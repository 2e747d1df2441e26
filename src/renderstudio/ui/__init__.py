"""Gradio user interface for MR Render Studio.

- app: Blocks layout and event wiring (``create_ui``)
- handlers: Event handlers operating on the per-session controller
- formatting: Snapshot to component-update rendering
- state: Lazy per-session controller creation
"""

from .app import create_ui

__all__ = ["create_ui"]
