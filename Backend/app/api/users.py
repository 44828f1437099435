from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_current_user
from app.models.user import User
from app.schemas.organization import OrganizationResponse
from app.schemas.user import UserResponse, UserWithOrganizations
from app.services.catalog_service import CatalogService
from app.services.database import get_db

router = APIRouter()

@router.get("/users/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_user)):
    """
    Fetch the current logged-in user.
    """
    return current_user

@router.get("/auth/user", response_model=UserWithOrganizations)
async def read_session_user(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The current user with their organizations, as the frontend loads it after sign-in"""
    orgs = await CatalogService(db).get_user_organizations(current_user.id)
    user = UserResponse.model_validate(current_user)
    return UserWithOrganizations(
        **user.model_dump(),
        organizations=[OrganizationResponse.model_validate(o) for o in orgs],
    )
