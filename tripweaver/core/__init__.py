"""Core module - Settings, logging, and shared exceptions.

Import the API exceptions directly where needed:

    from tripweaver.core.exceptions import BadRequestError
"""

from tripweaver.core.config import settings
from tripweaver.core.logging import setup_logging

__all__ = [
    "settings",
    "setup_logging",
]
