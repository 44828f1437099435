import sys
import os
import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from app.core.security import create_access_token
from app.models.user import User, UserRole
from app.models.organization import Organization, OrgMember, OrgType, MemberRole
from app.models.artist import Artist
from app.models.release import Release, ReleaseStatus, ReleaseType
from app.models.track import Track, TrackStatus
from app.models.split_share import SplitShare
from app.models.report_row import ReportRow, ReportSource
from app.services.database import engine, init_models
from app.services.identifiers import generate_isrc, generate_upc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

async def create_demo_data():
    await init_models(engine)

    # Create async session
    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        # Create demo users
        admin = User(email="admin@example.com", first_name="Quality", last_name="Control", role=UserRole.ADMIN)
        artist_user = User(email="artist@example.com", first_name="Demo", last_name="Artist", role=UserRole.ARTIST)
        session.add_all([admin, artist_user])
        await session.flush()

        org = Organization(name="My Music", type=OrgType.ARTIST_ORG.value)
        session.add(org)
        await session.flush()
        session.add(OrgMember(org_id=org.id, user_id=artist_user.id, role=MemberRole.OWNER.value))

        artist = Artist(org_id=org.id, name="Demo Artist", upc_prefix="0860")
        session.add(artist)
        await session.flush()

        # One draft that is ready to submit and one live release with report data
        draft = Release(
            org_id=org.id,
            artist_id=artist.id,
            type=ReleaseType.SINGLE,
            title="Night Drive",
            primary_genre="Electronic",
            language="English",
            release_date=datetime.now(timezone.utc) + timedelta(days=14),
            territories=["WW"],
            artwork_url="https://example.com/artwork/night-drive.png",
            artwork_original_name="night-drive.png",
            artwork_size=4_200_000,
            artwork_width=3000,
            artwork_height=3000,
            status=ReleaseStatus.DRAFT,
        )
        live = Release(
            org_id=org.id,
            artist_id=artist.id,
            type=ReleaseType.EP,
            title="First Light",
            upc=generate_upc(artist.upc_prefix),
            primary_genre="Electronic",
            release_date=datetime.now(timezone.utc) - timedelta(days=60),
            territories=["WW"],
            artwork_url="https://example.com/artwork/first-light.png",
            status=ReleaseStatus.DELIVERED,
        )
        session.add_all([draft, live])
        await session.flush()

        session.add_all([
            Track(
                release_id=draft.id,
                title="Night Drive",
                isrc=generate_isrc(),
                track_index=1,
                audio_url="https://example.com/audio/night-drive.wav",
                audio_original_name="night-drive.wav",
                audio_size=52_000_000,
                duration=214,
                status=TrackStatus.READY.value,
            ),
            SplitShare(release_id=draft.id, user_id=artist_user.id, email=artist_user.email, percent=Decimal("100.00"), role="Artist"),
            Track(release_id=live.id, title="First Light", isrc=generate_isrc(), track_index=1,
                  audio_url="https://example.com/audio/first-light.wav", status=TrackStatus.DELIVERED.value),
        ])

        for source, units, cents in [(ReportSource.SPOTIFY, 12000, 3600), (ReportSource.APPLE, 4100, 2870)]:
            session.add(ReportRow(
                org_id=org.id, period="2025-01", source=source.value, territory="UA",
                upc=live.upc, units=units, revenue_cents=cents,
            ))

        await session.commit()
        print("Demo data created successfully!")
        print(f"Admin token:  {create_access_token(admin.id, expires_delta=timedelta(days=7))}")
        print(f"Artist token: {create_access_token(artist_user.id, expires_delta=timedelta(days=7))}")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_demo_data())
