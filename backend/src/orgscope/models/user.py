"""User model - persisted form of an authenticated principal"""

from sqlalchemy import Column, String, DateTime, ForeignKey, func

from .base import Base, ORGANIZATION_FK


class User(Base):
    """User created by the external authentication provider.

    The id is the provider's stable subject identifier (the JWT `sub`
    claim). organization_id records the user's home organization; access
    decisions are made from organization_members, not from this column.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    role = Column(String, nullable=True, default="user", server_default="user")
    organization_id = Column(String, ForeignKey(ORGANIZATION_FK, ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def to_dict(self):
        """Convert user to dictionary representation"""
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "organization_id": self.organization_id,
        }
