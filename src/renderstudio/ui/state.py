"""Session state management for the Gradio UI.

Each browser session gets its own SessionController, created lazily on the
first event because ``gr.State`` deep-copies its initial value per session.
"""

import logging

from renderstudio.core.config import config
from renderstudio.core.presets import PromptCatalog, load_catalog
from renderstudio.core.session import SessionController

logger = logging.getLogger(__name__)

_catalog: PromptCatalog | None = None


def get_catalog() -> PromptCatalog:
    """Return the preset catalog, loading it on first use."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(config.prompts_file)
    return _catalog


def initialize_session(session: SessionController | None) -> SessionController:
    """Return ``session``, creating a new controller if it is None.

    Args:
        session: Existing SessionController or None

    Returns:
        Ready-to-use SessionController
    """
    if session is not None:
        return session

    logger.info("Creating new SessionController")
    return SessionController(config, catalog=get_catalog())
