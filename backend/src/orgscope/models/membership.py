"""OrganizationMember model - grants a principal a role within an organization"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from .base import Base


class OrganizationMember(Base):
    """Membership of a user in an organization.

    The role is stored as free-form text ("admin", "member") and compared
    exactly by the role gate. Only memberships whose invite_status is
    "accepted" grant access to the organization.
    """
    __tablename__ = "organization_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(String, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String, nullable=False, default="member", server_default="member")
    invite_status = Column(String, nullable=False, default="pending", server_default="pending")
    invite_token = Column(String, nullable=True)
    invite_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    organization = relationship("Organization", back_populates="members")

    __table_args__ = (
        UniqueConstraint('organization_id', 'user_id', name='uq_organization_members_org_user'),
    )

    def __repr__(self):
        return (
            f"<OrganizationMember(organization_id={self.organization_id}, "
            f"user_id={self.user_id}, role='{self.role}')>"
        )
