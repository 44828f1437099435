from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from uuid import UUID

from app.models.user import UserRole
from .organization import OrganizationResponse

class UserResponse(BaseModel):
    id: UUID
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)  # Allows Pydantic to convert SQLAlchemy models to JSON


class UserWithOrganizations(UserResponse):
    """The signed-in user together with every organization they belong to."""
    organizations: List[OrganizationResponse] = []


class UserRoleUpdate(BaseModel):
    role: UserRole
