"""Analytics model - daily messaging statistics (tenant-scoped)"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, func

from .base import Base, ORGANIZATION_FK


class Analytics(Base):
    """Per-user daily messaging counters."""
    __tablename__ = "analytics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    organization_id = Column(String, ForeignKey(ORGANIZATION_FK, ondelete="SET NULL"), nullable=True)
    total_messages = Column(Integer, nullable=False, default=0, server_default="0")
    ai_responses = Column(Integer, nullable=False, default=0, server_default="0")
    manual_responses = Column(Integer, nullable=False, default=0, server_default="0")
    sentiment_score = Column(Integer, nullable=False, default=0, server_default="0")
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('analytics_org_id_idx', 'organization_id'),
    )
