"""SQLAlchemy models for orgscope"""

from .base import Base
from .organization import Organization
from .membership import OrganizationMember
from .user import User
from .platform import Platform
from .conversation import Conversation, Message
from .analytics import Analytics

__all__ = [
    "Base",
    "Organization",
    "OrganizationMember",
    "User",
    "Platform",
    "Conversation",
    "Message",
    "Analytics",
]
