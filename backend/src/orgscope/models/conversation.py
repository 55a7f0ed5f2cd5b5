"""Conversation and Message models (tenant-scoped)"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, func, false, true
from sqlalchemy.orm import relationship

from .base import Base, ORGANIZATION_FK


class Conversation(Base):
    """Customer conversation received through a platform."""
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    organization_id = Column(String, ForeignKey(ORGANIZATION_FK, ondelete="SET NULL"), nullable=True)
    platform_id = Column(Integer, ForeignKey("platforms.id"), nullable=True)
    customer_name = Column(String, nullable=False)
    last_message = Column(Text, nullable=True)
    last_message_at = Column(DateTime(timezone=True), nullable=True, server_default=func.now())
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    messages = relationship("Message", back_populates="conversation")

    __table_args__ = (
        Index('conversations_org_id_idx', 'organization_id'),
    )


class Message(Base):
    """Single message in a conversation.

    Messages are queried through their conversation, so the tenant column
    carries no index of its own.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False)
    organization_id = Column(String, ForeignKey(ORGANIZATION_FK, ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    is_from_customer = Column(Boolean, nullable=False)
    is_ai_generated = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    conversation = relationship("Conversation", back_populates="messages")
