"""MR Render Studio - turn architectural renders into photoreal context shots."""

__version__ = "0.1.0"

from renderstudio.core.config import RenderStudioConfig, config
from renderstudio.core.session import SessionController, SessionStatus

__all__ = [
    "RenderStudioConfig",
    "SessionController",
    "SessionStatus",
    "config",
]
