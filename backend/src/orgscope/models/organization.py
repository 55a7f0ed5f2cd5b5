"""Organization model - tenant boundary for all business data"""

from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, func
from sqlalchemy.orm import relationship, validates

from .base import Base, PortableJSONB


class Organization(Base):
    """
    Organization model - root entity of the multi-tenant system.

    Every tenant-scoped table references organizations.id with
    ON DELETE SET NULL, so deleting an organization detaches its
    records instead of deleting them.
    """
    __tablename__ = "organizations"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    name = Column(String, nullable=False)
    plan = Column(String, nullable=False, default="free", server_default="free")
    logo = Column(String, nullable=True)
    website = Column(String, nullable=True)
    industry = Column(String, nullable=True)
    size = Column(Integer, nullable=True)
    settings = Column(PortableJSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    members = relationship(
        "OrganizationMember",
        back_populates="organization",
        order_by="OrganizationMember.created_at",
    )

    @validates('name')
    def validate_name(self, key, value):
        """
        Ensure organization name is not empty and within length limits.

        Raises:
            ValueError: If name is empty/whitespace or exceeds 200 characters
        """
        if not value or len(value.strip()) == 0:
            raise ValueError("Organization name cannot be empty")
        if len(value) > 200:
            raise ValueError("Organization name cannot exceed 200 characters")
        return value.strip()

    def __repr__(self):
        return f"<Organization(id={self.id}, name='{self.name}', plan='{self.plan}')>"
