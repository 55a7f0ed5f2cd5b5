"""Pydantic schemas for the organizations API."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


VALID_PLANS = {"free", "starter", "professional", "enterprise"}


class OrganizationResponse(BaseModel):
    """Organization as returned to members."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    plan: str
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[int] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrganizationUpdate(BaseModel):
    """Partial organization update. Omitted fields keep their value."""

    name: Optional[str] = Field(default=None, min_length=3, max_length=200)
    plan: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=1)
    settings: Optional[Dict[str, Any]] = None

    @field_validator('name', 'plan', mode='before')
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        # Omit a field to keep its value; name and plan cannot be cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator('plan')
    @classmethod
    def validate_plan(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v_lower = v.lower()
        if v_lower not in VALID_PLANS:
            raise ValueError(
                f"Invalid plan '{v}'. Must be one of: {', '.join(sorted(VALID_PLANS))}"
            )
        return v_lower


class MemberResponse(BaseModel):
    """Membership row of an organization."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: str
    user_id: str
    role: str
    invite_status: str
    created_at: Optional[datetime] = None
