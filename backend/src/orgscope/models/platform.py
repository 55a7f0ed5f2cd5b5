"""Platform model - a connected messaging channel (tenant-scoped)"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, func, false

from .base import Base, ORGANIZATION_FK


class Platform(Base):
    """Messaging platform connection owned by a user within an organization."""
    __tablename__ = "platforms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    organization_id = Column(String, ForeignKey(ORGANIZATION_FK, ondelete="SET NULL"), nullable=True)
    name = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    token_expiry = Column(DateTime(timezone=True), nullable=True)
    is_connected = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('platforms_org_id_idx', 'organization_id'),
    )
