"""
API module for AIconic.
"""

from .routes import router
from .session_routes import router as session_router

__all__ = ["router", "session_router"]
