"""Pydantic schemas for conversations."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: Optional[str] = None
    platform_id: Optional[int] = None
    customer_name: str
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    is_active: bool
