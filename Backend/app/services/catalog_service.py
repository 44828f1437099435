import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import AuthorizationError, DuplicateError, NotFoundException, ValidationError
from app.models.artist import Artist
from app.models.organization import EDITING_ROLES, MANAGING_ROLES, MemberRole, Organization, OrgMember, OrgType
from app.models.release import EDITABLE_STATUSES, Release, ReleaseStatus
from app.models.track import Track
from app.models.user import User
from app.schemas.artist import ArtistCreate
from app.schemas.organization import OrganizationCreate, OrgMemberCreate
from app.schemas.release import ArtworkAttach, ReleaseCreate, ReleaseUpdate
from app.services.audit import log_action
from app.services.database import commit_or_rollback
from app.services.release_validation import validate_artwork

logger = logging.getLogger(__name__)

DEFAULT_ORG_NAME = "My Music"
DEFAULT_ARTIST_NAME = "Artist Name"

# Columns that an update may leave out but never clear.
REQUIRED_RELEASE_FIELDS = ("type", "title", "territories", "status")


def check_upc_change(release: Release, new_upc: Optional[str]) -> None:
    """A UPC is the product's identity: once set it can be repeated but never changed."""
    if release.upc and new_upc != release.upc:
        raise ValidationError.single("upc", "UPC is already assigned and cannot be changed")


def reject_cleared_fields(update_data: dict, fields) -> None:
    for field in fields:
        if field in update_data and update_data[field] is None:
            raise ValidationError.single(field, f"{field} cannot be empty")


async def ensure_upc_unused(db: AsyncSession, upc: str, release_id: Optional[uuid.UUID] = None) -> None:
    query = select(Release.id).where(Release.upc == upc)
    if release_id is not None:
        query = query.where(Release.id != release_id)
    if (await db.execute(query)).first():
        raise DuplicateError("UPC", upc)


class CatalogService:
    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # --- organizations -------------------------------------------------

    async def get_organization(self, org_id: uuid.UUID) -> Organization:
        org = await self.db.get(Organization, org_id)
        if not org:
            raise NotFoundException("Organization", str(org_id))
        return org

    async def get_user_organizations(self, user_id: uuid.UUID) -> List[Organization]:
        result = await self.db.execute(
            select(Organization)
            .join(OrgMember, OrgMember.org_id == Organization.id)
            .where(OrgMember.user_id == user_id)
            .order_by(Organization.created_at, Organization.id)
        )
        return list(result.scalars().all())

    async def get_membership(self, org_id: uuid.UUID, user_id: uuid.UUID) -> Optional[OrgMember]:
        result = await self.db.execute(
            select(OrgMember).where(OrgMember.org_id == org_id, OrgMember.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def ensure_member(self, user: User, org_id: uuid.UUID, editing: bool = False) -> None:
        """
        Readers: any member, or an admin. Writers: owner/manager/editor members only;
        admin capability does not grant draft editing.
        """
        membership = await self.get_membership(org_id, user.id)
        if editing:
            if membership is None or membership.role not in EDITING_ROLES:
                raise AuthorizationError("Not authorized to modify this organization's catalog")
        elif membership is None and not user.is_admin:
            raise AuthorizationError("Not a member of this organization")

    async def create_organization(self, user: User, org_data: OrganizationCreate) -> Organization:
        org = Organization(name=org_data.name, type=org_data.type.value)
        self.db.add(org)
        await self.db.flush()
        self.db.add(OrgMember(org_id=org.id, user_id=user.id, role=MemberRole.OWNER.value))
        log_action(
            self.db, action="CREATE_ORGANIZATION", user_id=user.id, org_id=org.id,
            entity="organization", entity_id=org.id,
            data={"name": org.name, "type": org.type},
        )
        await commit_or_rollback(self.db, "create organization")
        await self.db.refresh(org)
        return org

    async def get_or_create_default_organization(self, user: User) -> Organization:
        orgs = await self.get_user_organizations(user.id)
        if orgs:
            return orgs[0]

        logger.info(f"Creating default organization for user {user.id}")
        org = Organization(name=DEFAULT_ORG_NAME, type=OrgType.ARTIST_ORG.value)
        self.db.add(org)
        await self.db.flush()  # Use flush to get the ID before the transaction commits.
        self.db.add(OrgMember(org_id=org.id, user_id=user.id, role=MemberRole.OWNER.value))
        await self.db.flush()
        return org

    async def list_members(self, user: User, org_id: uuid.UUID) -> List[dict]:
        await self.get_organization(org_id)
        await self.ensure_member(user, org_id)
        result = await self.db.execute(
            select(OrgMember, User.email)
            .join(User, User.id == OrgMember.user_id)
            .where(OrgMember.org_id == org_id)
            .order_by(OrgMember.created_at)
        )
        return [
            {"id": m.id, "org_id": m.org_id, "user_id": m.user_id, "role": m.role, "email": email}
            for m, email in result.all()
        ]

    async def add_member(self, user: User, org_id: uuid.UUID, member_data: OrgMemberCreate) -> dict:
        await self.get_organization(org_id)
        membership = await self.get_membership(org_id, user.id)
        if membership is None or membership.role not in MANAGING_ROLES:
            raise AuthorizationError("Only owners and managers can add members")

        result = await self.db.execute(select(User).where(User.email == member_data.email))
        new_user = result.scalar_one_or_none()
        if not new_user:
            raise NotFoundException("User", member_data.email)
        if await self.get_membership(org_id, new_user.id):
            raise DuplicateError("Member", member_data.email)

        member = OrgMember(org_id=org_id, user_id=new_user.id, role=member_data.role)
        self.db.add(member)
        log_action(
            self.db, action="ADD_MEMBER", user_id=user.id, org_id=org_id,
            entity="org_member", entity_id=new_user.id, data={"role": member_data.role},
        )
        await commit_or_rollback(self.db, "add member")
        return {"id": member.id, "org_id": org_id, "user_id": new_user.id,
                "role": member.role, "email": new_user.email}

    # --- artists -------------------------------------------------------

    async def create_artist(self, user: User, artist_data: ArtistCreate) -> Artist:
        await self.get_organization(artist_data.org_id)
        await self.ensure_member(user, artist_data.org_id, editing=True)
        artist = Artist(org_id=artist_data.org_id, name=artist_data.name, upc_prefix=artist_data.upc_prefix)
        self.db.add(artist)
        await self.db.flush()
        log_action(
            self.db, action="CREATE_ARTIST", user_id=user.id, org_id=artist.org_id,
            entity="artist", entity_id=artist.id, data={"name": artist.name},
        )
        await commit_or_rollback(self.db, "create artist")
        await self.db.refresh(artist)
        return artist

    async def list_artists(self, user: User, org_id: uuid.UUID) -> List[Artist]:
        await self.get_organization(org_id)
        await self.ensure_member(user, org_id)
        result = await self.db.execute(
            select(Artist).where(Artist.org_id == org_id).order_by(Artist.created_at, Artist.name)
        )
        return list(result.scalars().all())

    async def get_or_create_default_artist(self, org_id: uuid.UUID, performers: Optional[list]) -> Artist:
        result = await self.db.execute(
            select(Artist).where(Artist.org_id == org_id).order_by(Artist.created_at, Artist.id)
        )
        artist = result.scalars().first()
        if artist:
            return artist

        name = performers[0].name if performers else DEFAULT_ARTIST_NAME
        logger.debug(f"Creating default artist '{name}' for organization {org_id}")
        artist = Artist(org_id=org_id, name=name)
        self.db.add(artist)
        await self.db.flush()
        return artist

    # --- releases ------------------------------------------------------

    async def get_release(self, release_id: uuid.UUID) -> Release:
        release = await self.db.get(Release, release_id)
        if not release:
            raise NotFoundException("Release", str(release_id))
        return release

    async def get_release_details(self, release_id: uuid.UUID) -> Release:
        """The release with its artist, tracks, splits, QC items and delivery jobs loaded."""
        result = await self.db.execute(
            select(Release)
            .where(Release.id == release_id)
            .options(
                selectinload(Release.artist),
                selectinload(Release.tracks),
                selectinload(Release.split_shares),
                selectinload(Release.qc_items),
                selectinload(Release.delivery_jobs),
            )
            .execution_options(populate_existing=True)
        )
        release = result.scalar_one_or_none()
        if not release:
            raise NotFoundException("Release", str(release_id))
        return release

    async def get_release_for_read(self, user: User, release_id: uuid.UUID) -> Release:
        release = await self.get_release_details(release_id)
        await self.ensure_member(user, release.org_id)
        return release

    async def get_release_for_edit(self, user: User, release_id: uuid.UUID) -> Release:
        release = await self.get_release(release_id)
        await self.ensure_member(user, release.org_id, editing=True)
        if release.status not in EDITABLE_STATUSES:
            raise ValidationError.single(
                "status", f"Release cannot be edited while {release.status.value}"
            )
        return release

    async def list_releases_for_user(self, user: User, limit: int = 50) -> List[Release]:
        result = await self.db.execute(
            select(Release)
            .join(OrgMember, OrgMember.org_id == Release.org_id)
            .where(OrgMember.user_id == user.id)
            .order_by(Release.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_org_releases(self, user: User, org_id: uuid.UUID) -> List[Release]:
        await self.get_organization(org_id)
        await self.ensure_member(user, org_id)
        result = await self.db.execute(
            select(Release).where(Release.org_id == org_id).order_by(Release.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_release(self, user: User, release_data: ReleaseCreate) -> Release:
        """Create a release in DRAFT, filling in organization and artist when omitted."""
        if release_data.org_id:
            org = await self.get_organization(release_data.org_id)
            await self.ensure_member(user, org.id, editing=True)
        else:
            org = await self.get_or_create_default_organization(user)

        if release_data.artist_id:
            artist = await self.db.get(Artist, release_data.artist_id)
            if not artist or artist.org_id != org.id:
                raise NotFoundException("Artist", str(release_data.artist_id))
        else:
            artist = await self.get_or_create_default_artist(org.id, release_data.performers)

        if release_data.upc:
            await ensure_upc_unused(self.db, release_data.upc)

        fields = release_data.model_dump(exclude={"org_id", "artist_id"})
        release = Release(
            **fields,
            org_id=org.id,
            artist_id=artist.id,
            status=ReleaseStatus.DRAFT,
        )
        self.db.add(release)
        await self.db.flush()
        log_action(
            self.db, action="CREATE_RELEASE", user_id=user.id, org_id=org.id,
            entity="release", entity_id=release.id, data={"title": release.title},
        )
        await commit_or_rollback(self.db, "create release")
        await self.db.refresh(release)
        logger.info(f"Created release {release.id} '{release.title}' in organization {org.id}")
        return release

    async def update_release(self, user: User, release_id: uuid.UUID, release_data: ReleaseUpdate) -> Release:
        release = await self.get_release_for_edit(user, release_id)
        update_data = release_data.model_dump(exclude_unset=True)
        reject_cleared_fields(update_data, REQUIRED_RELEASE_FIELDS)

        if "upc" in update_data:
            check_upc_change(release, update_data["upc"])
            if update_data["upc"]:
                await ensure_upc_unused(self.db, update_data["upc"], release.id)

        for field, value in update_data.items():
            setattr(release, field, value)

        log_action(
            self.db, action="UPDATE_RELEASE", user_id=user.id, org_id=release.org_id,
            entity="release", entity_id=release.id,
            data=release_data.model_dump(mode="json", exclude_unset=True),
        )
        await commit_or_rollback(self.db, "update release")
        await self.db.refresh(release)
        return release

    async def attach_artwork(self, user: User, release_id: uuid.UUID, artwork: ArtworkAttach) -> Release:
        release = await self.get_release_for_edit(user, release_id)
        errors = validate_artwork(
            filename=artwork.original_name,
            content_type=artwork.content_type,
            size=artwork.size,
            width=artwork.width,
            height=artwork.height,
        )
        if errors:
            raise ValidationError(errors, message="Artwork does not meet the requirements")

        release.artwork_url = artwork.artwork_url
        release.artwork_original_name = artwork.original_name
        release.artwork_size = artwork.size
        release.artwork_width = artwork.width
        release.artwork_height = artwork.height
        log_action(
            self.db, action="ATTACH_ARTWORK", user_id=user.id, org_id=release.org_id,
            entity="release", entity_id=release.id, data={"artwork_url": artwork.artwork_url},
        )
        await commit_or_rollback(self.db, "attach artwork")
        await self.db.refresh(release)
        return release

    async def get_release_tracks(self, release_id: uuid.UUID) -> List[Track]:
        result = await self.db.execute(
            select(Track).where(Track.release_id == release_id).order_by(Track.track_index)
        )
        return list(result.scalars().all())
