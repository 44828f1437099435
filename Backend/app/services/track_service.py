import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException, ValidationError
from app.models.split_share import SplitShare
from app.models.track import Track, TrackStatus
from app.models.user import User
from app.schemas.split_share import SplitShareCreate
from app.schemas.track import TrackAudioAttach, TrackCreate, TrackUpdate
from app.services.audit import log_action
from app.services.catalog_service import CatalogService, reject_cleared_fields
from app.services.database import commit_or_rollback
from app.services.identifiers import generate_isrc
from app.services.release_validation import validate_audio

logger = logging.getLogger(__name__)


class TrackService:
    """Tracks and revenue splits. Both can only change while their release is editable."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.catalog = CatalogService(db_session)

    async def get_track(self, track_id: uuid.UUID) -> Track:
        track = await self.db.get(Track, track_id)
        if not track:
            raise NotFoundException("Track", str(track_id))
        return track

    async def get_track_for_read(self, user: User, track_id: uuid.UUID) -> Track:
        track = await self.get_track(track_id)
        release = await self.catalog.get_release(track.release_id)
        await self.catalog.ensure_member(user, release.org_id)
        return track

    async def _get_track_for_edit(self, user: User, track_id: uuid.UUID) -> Track:
        track = await self.get_track(track_id)
        await self.catalog.get_release_for_edit(user, track.release_id)
        return track

    async def list_tracks(self, user: User, release_id: uuid.UUID) -> List[Track]:
        release = await self.catalog.get_release(release_id)
        await self.catalog.ensure_member(user, release.org_id)
        return await self.catalog.get_release_tracks(release_id)

    async def create_track(self, user: User, track_data: TrackCreate) -> Track:
        """Appends the track at the end of the release; an ISRC is generated when none is given."""
        release = await self.catalog.get_release_for_edit(user, track_data.release_id)

        count = await self.db.scalar(
            select(func.count(Track.id)).where(Track.release_id == release.id)
        )
        fields = track_data.model_dump()
        if not fields.get("isrc"):
            fields["isrc"] = generate_isrc()

        track = Track(**fields, track_index=(count or 0) + 1, status=TrackStatus.DRAFT.value)
        self.db.add(track)
        await self.db.flush()
        log_action(
            self.db, action="CREATE_TRACK", user_id=user.id, org_id=release.org_id,
            entity="track", entity_id=track.id,
            data={"release_id": str(release.id), "title": track.title, "track_index": track.track_index},
        )
        await commit_or_rollback(self.db, "create track")
        await self.db.refresh(track)
        return track

    async def update_track(self, user: User, track_id: uuid.UUID, track_data: TrackUpdate) -> Track:
        track = await self._get_track_for_edit(user, track_id)
        update_data = track_data.model_dump(exclude_unset=True)
        reject_cleared_fields(update_data, ("title", "explicit"))

        for field, value in update_data.items():
            setattr(track, field, value)

        await commit_or_rollback(self.db, "update track")
        await self.db.refresh(track)
        return track

    async def attach_audio(self, user: User, track_id: uuid.UUID, audio: TrackAudioAttach) -> Track:
        track = await self._get_track_for_edit(user, track_id)
        errors = validate_audio(
            filename=audio.original_name,
            content_type=audio.content_type,
            size=audio.size,
        )
        if errors:
            raise ValidationError(errors, message="Audio file does not meet the requirements")

        track.audio_url = audio.audio_url
        track.audio_original_name = audio.original_name
        track.audio_size = audio.size
        if audio.duration is not None:
            track.duration = audio.duration
        track.status = TrackStatus.READY.value

        await commit_or_rollback(self.db, "attach audio")
        await self.db.refresh(track)
        return track

    async def delete_track(self, user: User, track_id: uuid.UUID) -> None:
        track = await self._get_track_for_edit(user, track_id)
        release = await self.catalog.get_release(track.release_id)

        await self.db.delete(track)
        await self.db.flush()

        # Close the gap so indexes stay 1..n
        remaining = await self.catalog.get_release_tracks(release.id)
        for position, remaining_track in enumerate(remaining, start=1):
            remaining_track.track_index = position

        log_action(
            self.db, action="DELETE_TRACK", user_id=user.id, org_id=release.org_id,
            entity="track", entity_id=track_id, data={"release_id": str(release.id)},
        )
        await commit_or_rollback(self.db, "delete track")

    async def reorder_tracks(self, user: User, release_id: uuid.UUID, track_ids: List[uuid.UUID]) -> List[Track]:
        release = await self.catalog.get_release_for_edit(user, release_id)
        tracks = await self.catalog.get_release_tracks(release.id)

        by_id = {t.id: t for t in tracks}
        if len(track_ids) != len(set(track_ids)) or set(track_ids) != set(by_id):
            raise ValidationError.single(
                "track_ids", "The new order must list every track of the release exactly once"
            )

        for position, track_id in enumerate(track_ids, start=1):
            by_id[track_id].track_index = position

        await commit_or_rollback(self.db, "reorder tracks")
        return await self.catalog.get_release_tracks(release.id)

    # --- splits --------------------------------------------------------

    async def create_split(self, user: User, split_data: SplitShareCreate) -> SplitShare:
        """
        Split rows may be added freely while the release is editable; the 100%
        rule is enforced when the release is submitted.
        """
        release_id = split_data.release_id
        if split_data.track_id is not None:
            track = await self.get_track(split_data.track_id)
            if release_id is not None and release_id != track.release_id:
                raise ValidationError.single("track_id", "Track does not belong to the given release")
            parent_release_id = track.release_id
        else:
            parent_release_id = release_id

        release = await self.catalog.get_release_for_edit(user, parent_release_id)

        result = await self.db.execute(select(User.id).where(User.email == split_data.email))
        collaborator_id = result.scalar_one_or_none()

        split = SplitShare(
            release_id=release_id,
            track_id=split_data.track_id,
            user_id=collaborator_id,
            email=split_data.email,
            percent=split_data.percent,
            role=split_data.role,
        )
        self.db.add(split)
        await self.db.flush()
        log_action(
            self.db, action="CREATE_SPLIT", user_id=user.id, org_id=release.org_id,
            entity="split_share", entity_id=split.id,
            data={"email": split.email, "percent": str(split.percent)},
        )
        await commit_or_rollback(self.db, "create split")
        await self.db.refresh(split)
        return split

    async def list_release_splits(self, user: User, release_id: uuid.UUID) -> List[SplitShare]:
        release = await self.catalog.get_release(release_id)
        await self.catalog.ensure_member(user, release.org_id)
        return await self.get_release_splits(release_id)

    async def get_release_splits(self, release_id: uuid.UUID) -> List[SplitShare]:
        """The splits that count towards the release total."""
        result = await self.db.execute(
            select(SplitShare).where(SplitShare.release_id == release_id).order_by(SplitShare.created_at)
        )
        return list(result.scalars().all())

    async def delete_split(self, user: User, split_id: uuid.UUID) -> None:
        split = await self.db.get(SplitShare, split_id)
        if not split:
            raise NotFoundException("Split", str(split_id))
        release_id = split.release_id
        if release_id is None:
            release_id = (await self.get_track(split.track_id)).release_id
        await self.catalog.get_release_for_edit(user, release_id)

        await self.db.delete(split)
        await commit_or_rollback(self.db, "delete split")
