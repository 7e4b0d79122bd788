"""
SQLAlchemy ORM Models for AIconic.

Chat sessions own their messages and generated icons. Deleting a session
removes everything beneath it, both through ON DELETE CASCADE foreign keys
and through ORM relationship cascades.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, JSON, Index, Uuid
)
from sqlalchemy.orm import relationship

from .database import Base


DEFAULT_SESSION_TITLE = "新会话"
DEFAULT_ICON_STYLE = "outline"


# =============================================================================
# Session Model
# =============================================================================

class ChatSession(Base):
    """A chat conversation with the icon agent."""
    __tablename__ = "sessions"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, default=DEFAULT_SESSION_TITLE)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    messages = relationship(
        "Message", back_populates="session", cascade="all, delete-orphan",
        order_by="Message.created_at",
    )
    icons = relationship("Icon", back_populates="session", cascade="all, delete")


# =============================================================================
# Message Model
# =============================================================================

class Message(Base):
    """One persisted chat turn."""
    __tablename__ = "messages"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(20), nullable=False)  # user, assistant
    content = Column(Text, nullable=False)
    tool_calls = Column(JSON)  # ToolInvocationRecord list as sent by the client
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    session = relationship("ChatSession", back_populates="messages")
    icons = relationship("Icon", back_populates="message", cascade="all, delete")
    
    __table_args__ = (
        Index("ix_messages_session_created", "session_id", "created_at"),
    )


# =============================================================================
# Icon Model
# =============================================================================

class Icon(Base):
    """A generated SVG icon, optionally attached to a session and message."""
    __tablename__ = "icons"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=True)
    message_id = Column(Uuid(as_uuid=True), ForeignKey("messages.id", ondelete="CASCADE"), nullable=True)
    name = Column(String(255), nullable=False)
    prompt = Column(Text, nullable=False)
    svg_content = Column(Text, nullable=False)
    style = Column(String(50), default=DEFAULT_ICON_STYLE)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    session = relationship("ChatSession", back_populates="icons")
    message = relationship("Message", back_populates="icons")
    formats = relationship("IconFormat", back_populates="icon", cascade="all, delete-orphan")
    
    __table_args__ = (
        Index("ix_icons_session_created", "session_id", "created_at"),
        Index("ix_icons_name", "name"),
    )


class IconFormat(Base):
    """An exported raster/vector rendition of an icon."""
    __tablename__ = "icon_formats"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    icon_id = Column(Uuid(as_uuid=True), ForeignKey("icons.id", ondelete="CASCADE"), nullable=False)
    format = Column(String(20), nullable=False)  # svg, png, ico
    size = Column(Integer)
    file_path = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    icon = relationship("Icon", back_populates="formats")


# =============================================================================
# Helper Functions
# =============================================================================

def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def session_to_dict(session: ChatSession) -> Dict[str, Any]:
    """Convert ChatSession model to dictionary."""
    return {
        "id": str(session.id),
        "title": session.title,
        "createdAt": _iso(session.created_at),
        "updatedAt": _iso(session.updated_at),
    }


def message_to_dict(message: Message) -> Dict[str, Any]:
    """Convert Message model to dictionary."""
    return {
        "id": str(message.id),
        "sessionId": str(message.session_id),
        "role": message.role,
        "content": message.content,
        "toolCalls": message.tool_calls,
        "createdAt": _iso(message.created_at),
    }


def icon_to_dict(icon: Icon, include_svg: bool = True) -> Dict[str, Any]:
    """Convert Icon model to dictionary."""
    result = {
        "id": str(icon.id),
        "sessionId": str(icon.session_id) if icon.session_id else None,
        "messageId": str(icon.message_id) if icon.message_id else None,
        "name": icon.name,
        "prompt": icon.prompt,
        "style": icon.style,
        "createdAt": _iso(icon.created_at),
    }
    if include_svg:
        result["svgContent"] = icon.svg_content
    return result
