from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Literal, Optional
from uuid import UUID

from app.models.organization import MemberRole, OrgType

class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: OrgType = OrgType.ARTIST_ORG

class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    type: str
    balance: int = 0
    plan_type: Optional[str] = None
    monthly_release_limit: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class OrgMemberCreate(BaseModel):
    # The member must already have an account
    email: EmailStr
    role: Literal["MANAGER", "EDITOR", "VIEWER"] = MemberRole.EDITOR.value

class OrgMemberResponse(BaseModel):
    id: UUID
    org_id: UUID
    user_id: UUID
    role: str
    email: Optional[str] = None
