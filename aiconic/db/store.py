"""
IconStore - persistence for chat sessions, messages and generated icons.

Every public method opens its own unit of work with get_db_session(), so
a method either fully commits or leaves the database untouched.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any

from sqlalchemy import desc, asc, func

from .database import get_db_session
from .orm_models import (
    ChatSession, Message, Icon,
    DEFAULT_SESSION_TITLE,
    session_to_dict, message_to_dict, icon_to_dict,
)

logger = logging.getLogger(__name__)

SESSION_LIST_LIMIT = 50
TITLE_MAX_LENGTH = 20
DEFAULT_ICON_NAME = "未命名图标"
DEFAULT_MESSAGE_ICON_STYLE = "modern"

_WHITESPACE_RE = re.compile(r"\s+")


def derive_session_title(content: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """
    Build a session title from the first user message.

    Whitespace runs collapse to a single space; titles longer than
    max_length are cut and suffixed with "...".
    """
    title = _WHITESPACE_RE.sub(" ", content or "").strip()
    if len(title) > max_length:
        return title[:max_length] + "..."
    return title


def _parse_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        return None


class IconStore:
    """Session, message and icon operations backed by SQLAlchemy."""
    
    # =========================================================================
    # Session Operations
    # =========================================================================
    
    def list_sessions(self, limit: int = SESSION_LIST_LIMIT) -> List[Dict[str, Any]]:
        """Most recently updated sessions first."""
        with get_db_session() as db:
            sessions = (
                db.query(ChatSession)
                .order_by(desc(ChatSession.updated_at))
                .limit(limit)
                .all()
            )
            return [session_to_dict(s) for s in sessions]
    
    def create_session(self, title: Optional[str] = None) -> Dict[str, Any]:
        now = datetime.utcnow()
        with get_db_session() as db:
            session = ChatSession(
                title=(title or "").strip() or DEFAULT_SESSION_TITLE,
                created_at=now,
                updated_at=now,
            )
            db.add(session)
            db.flush()
            logger.info(f"Created session {session.id}")
            return session_to_dict(session)
    
    def get_session(self, session_id: Any) -> Optional[Dict[str, Any]]:
        sid = _parse_uuid(session_id)
        if sid is None:
            return None
        with get_db_session() as db:
            session = db.query(ChatSession).filter_by(id=sid).first()
            return session_to_dict(session) if session else None
    
    def get_session_detail(self, session_id: Any) -> Optional[Dict[str, Any]]:
        """Session row plus its messages and icons, both oldest first."""
        sid = _parse_uuid(session_id)
        if sid is None:
            return None
        with get_db_session() as db:
            session = db.query(ChatSession).filter_by(id=sid).first()
            if not session:
                return None
            messages = (
                db.query(Message)
                .filter_by(session_id=sid)
                .order_by(asc(Message.created_at))
                .all()
            )
            icons = (
                db.query(Icon)
                .filter_by(session_id=sid)
                .order_by(asc(Icon.created_at))
                .all()
            )
            return {
                "session": session_to_dict(session),
                "messages": [message_to_dict(m) for m in messages],
                "icons": [icon_to_dict(i) for i in icons],
            }
    
    def delete_session(self, session_id: Any) -> bool:
        """Delete a session with its messages and icons."""
        sid = _parse_uuid(session_id)
        if sid is None:
            return False
        with get_db_session() as db:
            session = db.query(ChatSession).filter_by(id=sid).first()
            if not session:
                return False
            db.delete(session)
            logger.info(f"Deleted session {sid}")
            return True
    
    # =========================================================================
    # Message Operations
    # =========================================================================
    
    def add_message(
        self,
        session_id: Any,
        role: str,
        content: str,
        tool_calls: Optional[List[Dict[str, Any]]] = None,
        generated_icons: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Append a message and its generated icons in one transaction.
        
        The first user message of a session also sets the session title;
        every message bumps the session's updated_at.
        
        Returns:
            {"message", "newTitle", "icons"} or None if the session does not exist
        """
        sid = _parse_uuid(session_id)
        if sid is None:
            return None
        
        now = datetime.utcnow()
        with get_db_session() as db:
            session = db.query(ChatSession).filter_by(id=sid).first()
            if not session:
                return None
            
            message = Message(
                session_id=sid,
                role=role,
                content=content,
                tool_calls=tool_calls,
                created_at=now,
            )
            db.add(message)
            db.flush()
            
            new_title = None
            if role == "user":
                user_messages = (
                    db.query(func.count(Message.id))
                    .filter(Message.session_id == sid, Message.role == "user")
                    .scalar()
                )
                if user_messages == 1:
                    new_title = derive_session_title(content) or None
                    if new_title:
                        session.title = new_title
                        logger.info(f"Session {sid} titled '{new_title}'")
            session.updated_at = now
            
            icons = []
            # Distinct timestamps keep the icons in posted order
            for position, item in enumerate(generated_icons or []):
                icon = Icon(
                    session_id=sid,
                    message_id=message.id,
                    name=item.get("name") or DEFAULT_ICON_NAME,
                    prompt=item.get("prompt") or content,
                    svg_content=item["svg"],
                    style=item.get("style") or DEFAULT_MESSAGE_ICON_STYLE,
                    created_at=now + timedelta(microseconds=position),
                )
                db.add(icon)
                icons.append(icon)
            db.flush()
            
            return {
                "message": message_to_dict(message),
                "newTitle": new_title,
                "icons": [icon_to_dict(i, include_svg=False) for i in icons],
            }
    
    # =========================================================================
    # Icon Operations
    # =========================================================================
    
    def save_icon(
        self,
        name: str,
        svg_content: str,
        prompt: str,
        style: str,
        session_id: Any = None,
    ) -> Dict[str, Any]:
        with get_db_session() as db:
            icon = Icon(
                session_id=_parse_uuid(session_id) if session_id else None,
                name=name,
                svg_content=svg_content,
                prompt=prompt,
                style=style,
            )
            db.add(icon)
            db.flush()
            return icon_to_dict(icon)
    
    def search_icons(self, keyword: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Case-insensitive substring match on icon names."""
        with get_db_session() as db:
            icons = (
                db.query(Icon)
                .filter(Icon.name.ilike(f"%{keyword}%"))
                .order_by(desc(Icon.created_at))
                .limit(limit)
                .all()
            )
            return [icon_to_dict(i, include_svg=False) for i in icons]
    
    def recent_icons(self, limit: int = 5) -> List[Dict[str, Any]]:
        with get_db_session() as db:
            icons = (
                db.query(Icon)
                .order_by(desc(Icon.created_at))
                .limit(limit)
                .all()
            )
            return [icon_to_dict(i) for i in icons]
    
    def delete_icon(self, icon_id: Any) -> bool:
        iid = _parse_uuid(icon_id)
        if iid is None:
            return False
        with get_db_session() as db:
            icon = db.query(Icon).filter_by(id=iid).first()
            if not icon:
                return False
            db.delete(icon)
            return True
