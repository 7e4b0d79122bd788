"""
Database module for AIconic.

Provides:
- SQLAlchemy ORM models for sessions, messages and icons
- Engine/session management driven by DATABASE_URL
- IconStore with the CRUD used by the API and the agent tools
"""

from .database import (
    Base,
    get_db_session,
    init_engine,
    reset_engine,
    is_database_configured,
    check_connection,
    create_all_tables,
    drop_all_tables,
)
from .orm_models import ChatSession, Message, Icon, IconFormat
from .store import IconStore, derive_session_title

__all__ = [
    "Base",
    "get_db_session",
    "init_engine",
    "reset_engine",
    "is_database_configured",
    "check_connection",
    "create_all_tables",
    "drop_all_tables",
    "ChatSession",
    "Message",
    "Icon",
    "IconFormat",
    "IconStore",
    "derive_session_title",
]
