"""
API route modules.
"""

from .misc import router as misc_router
from .sets import router as sets_router
from .themes import router as themes_router

__all__ = [
    "misc_router",
    "sets_router",
    "themes_router",
]
